"""
클라이언트 생성
===============
프로세스 시작 시 1회 생성해서 각 서비스에 넘긴다 (모듈 전역 싱글톤 없음)
"""
import logging

from clubsync.config import Settings

logger = logging.getLogger(__name__)


def create_notion_client(settings: Settings):
    """
    설정으로 Notion 클라이언트 생성

    Raises:
        ConfigurationError: Notion 설정 누락
    """
    # 순환 import 방지를 위해 지연 import
    from clubsync.api.notion_client import NotionClient

    settings.require_notion()
    return NotionClient(api_key=settings.notion_api_key, notion_version=settings.notion_version)


def create_ledger(settings: Settings):
    """
    설정으로 원장 생성

    LEDGER_DATABASE_URL 이 있으면 SQL 미러, 없으면 Google Sheets

    Raises:
        ConfigurationError: 원장 설정 누락
    """
    settings.require_ledger()

    if settings.ledger_database_url:
        from clubsync.database import create_engine_for_url
        from clubsync.services.sql_ledger import SqlLedger

        logger.info("원장: SQL 미러")
        return SqlLedger(create_engine_for_url(settings.ledger_database_url))

    from clubsync.api.sheets_ledger import GoogleSheetsLedger

    logger.info("원장: Google Sheets")
    return GoogleSheetsLedger.from_service_account(
        settings.google_service_account_key, settings.google_spreadsheet_id
    )
