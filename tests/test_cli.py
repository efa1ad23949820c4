"""
config.py / cli.py 테스트
"""
import pytest
import sys
from pathlib import Path

# 프로젝트 루트 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from clubsync import cli, constants
from clubsync.config import Settings
from clubsync.errors import ConfigurationError

ENV_NAMES = [
    "NOTION_API_KEY",
    "NOTION_AGENT_DS_ID",
    "NOTION_PLAYER_DS_ID",
    "NOTION_WEEKLY_SUMMARY_DS_ID",
    "NOTION_WEEKLY_DETAIL_DS_ID",
    "NOTION_WEEKLY_TOTAL_DS_ID",
    "GOOGLE_SERVICE_ACCOUNT_KEY",
    "GOOGLE_SPREADSHEET_ID",
    "LEDGER_DATABASE_URL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(cli, "setup_logging", lambda level="INFO": None)
    return tmp_path


class TestSettings:
    """환경변수 설정"""

    def test_missing_notion_settings(self, clean_env):
        settings = Settings(_env_file=None, notion_api_key="secret", notion_agent_ds_id="ds-a")

        with pytest.raises(ConfigurationError) as exc:
            settings.require_notion()
        assert exc.value.missing == [
            "NOTION_PLAYER_DS_ID",
            "NOTION_WEEKLY_SUMMARY_DS_ID",
            "NOTION_WEEKLY_DETAIL_DS_ID",
            "NOTION_WEEKLY_TOTAL_DS_ID",
        ]

    def test_data_source_ids(self, clean_env):
        settings = Settings(_env_file=None, notion_weekly_total_ds_id="ds-t")
        assert settings.data_source_ids[constants.WEEKLY_TOTAL] == "ds-t"
        assert settings.data_source_ids[constants.AGENT] is None

    def test_sql_ledger_needs_no_google(self, clean_env):
        Settings(_env_file=None, ledger_database_url="sqlite:///ledger.db").require_ledger()

    def test_missing_ledger_settings(self, clean_env):
        with pytest.raises(ConfigurationError) as exc:
            Settings(_env_file=None).require_ledger()
        assert exc.value.missing == ["GOOGLE_SERVICE_ACCOUNT_KEY", "GOOGLE_SPREADSHEET_ID"]

    def test_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("NOTION_API_KEY", "secret_env")
        assert Settings(_env_file=None).notion_api_key == "secret_env"


class TestMain:
    """명령행 진입점"""

    def test_migrate_without_settings(self, clean_env, caplog):
        assert cli.main(["migrate"]) == 1
        assert "NOTION_API_KEY" in caplog.text

    def test_sync_checks_all_settings_first(self, clean_env, caplog):
        assert cli.main(["sync", "--dry-run"]) == 1
        assert "NOTION_API_KEY" in caplog.text
        # Notion 설정 누락이 먼저 보고된다
        assert "GOOGLE_SPREADSHEET_ID" not in caplog.text

    def test_collect_unknown_week(self, clean_env, monkeypatch, caplog):
        monkeypatch.setenv("LEDGER_DATABASE_URL", f"sqlite:///{clean_env / 'ledger.db'}")
        from clubsync.database import create_engine_for_url
        from clubsync.services.sql_ledger import SqlLedger

        ledger = SqlLedger(create_engine_for_url(f"sqlite:///{clean_env / 'ledger.db'}"))
        ledger.append_rows(
            constants.WEEKLY_DATA_SHEET,
            [["2025-01-13〜2025-01-19"]],
            list(constants.WEEKLY_DATA_COLUMNS.values()),
            "2025-01-13〜2025-01-19",
        )
        ledger.engine.dispose()

        assert cli.main(["collect", "2024-12-30〜2025-01-05"]) == 1
        assert "2025-01-13〜2025-01-19" in caplog.text

    def test_parser(self):
        args = cli.build_parser().parse_args(["sync", "2025-01-13〜2025-01-19", "--dry-run"])
        assert args.command == "sync"
        assert args.week == "2025-01-13〜2025-01-19"
        assert args.dry_run is True
        assert args.collection_sheet == constants.COLLECTION_SHEET

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])
