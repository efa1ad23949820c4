"""애플리케이션 설정"""
from pathlib import Path
from typing import Dict, Optional

from pydantic_settings import BaseSettings

from clubsync import constants
from clubsync.errors import ConfigurationError


class Settings(BaseSettings):
    """환경변수 기반 설정"""

    # Google Sheets (원장)
    google_service_account_key: Optional[str] = None  # 서비스 계정 JSON (Base64)
    google_spreadsheet_id: Optional[str] = None

    # SQL 원장 미러 (설정 시 Google Sheets 대신 사용)
    ledger_database_url: Optional[str] = None

    # Notion
    notion_api_key: Optional[str] = None
    notion_version: str = constants.NOTION_API_VERSION
    notion_agent_ds_id: Optional[str] = None
    notion_player_ds_id: Optional[str] = None
    notion_weekly_summary_ds_id: Optional[str] = None
    notion_weekly_detail_ds_id: Optional[str] = None
    notion_weekly_total_ds_id: Optional[str] = None
    notion_summary_template_id: Optional[str] = None
    notion_public_site_url: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    report_dir: Path = Path("logs")

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def data_source_ids(self) -> Dict[str, Optional[str]]:
        """엔티티 타입 → Notion 데이터소스 ID"""
        return {
            constants.AGENT: self.notion_agent_ds_id,
            constants.PLAYER: self.notion_player_ds_id,
            constants.WEEKLY_SUMMARY: self.notion_weekly_summary_ds_id,
            constants.WEEKLY_DETAIL: self.notion_weekly_detail_ds_id,
            constants.WEEKLY_TOTAL: self.notion_weekly_total_ds_id,
        }

    def require_notion(self):
        """
        Notion 동기화에 필요한 설정 확인

        Raises:
            ConfigurationError: 누락된 환경변수가 있는 경우
        """
        missing = []
        if not self.notion_api_key:
            missing.append("NOTION_API_KEY")
        env_names = {
            constants.AGENT: "NOTION_AGENT_DS_ID",
            constants.PLAYER: "NOTION_PLAYER_DS_ID",
            constants.WEEKLY_SUMMARY: "NOTION_WEEKLY_SUMMARY_DS_ID",
            constants.WEEKLY_DETAIL: "NOTION_WEEKLY_DETAIL_DS_ID",
            constants.WEEKLY_TOTAL: "NOTION_WEEKLY_TOTAL_DS_ID",
        }
        for entity, ds_id in self.data_source_ids.items():
            if not ds_id:
                missing.append(env_names[entity])
        if missing:
            raise ConfigurationError(
                f"Notion 설정이 없습니다: {', '.join(missing)}", missing=missing
            )

    def require_ledger(self):
        """
        원장 접근에 필요한 설정 확인

        SQL 원장 URL이 있으면 Google 인증 정보는 필요 없음
        """
        if self.ledger_database_url:
            return
        missing = []
        if not self.google_service_account_key:
            missing.append("GOOGLE_SERVICE_ACCOUNT_KEY")
        if not self.google_spreadsheet_id:
            missing.append("GOOGLE_SPREADSHEET_ID")
        if missing:
            raise ConfigurationError(
                f"원장 설정이 없습니다: {', '.join(missing)}", missing=missing
            )
