"""
sql_ledger.py 테스트
====================
임시 SQLite 파일로 원장 읽기/쓰기 검증
"""
import pytest
import sys
import tempfile
from pathlib import Path

# 프로젝트 루트 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from clubsync import constants
from clubsync.database import get_engine_for_db
from clubsync.errors import NotFoundError
from clubsync.services.sql_ledger import SqlLedger

HEADERS = ["週期間", "プレーヤーID", "金額"]


class TestSqlLedger:
    """SqlLedger"""

    def setup_method(self):
        self.temp_db = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
        self.db_path = self.temp_db.name
        self.engine = get_engine_for_db(self.db_path)
        self.ledger = SqlLedger(self.engine)

    def teardown_method(self):
        """임시 DB 정리"""
        self.engine.dispose()
        self.temp_db.close()
        try:
            Path(self.db_path).unlink(missing_ok=True)
        except PermissionError:
            pass  # Windows 파일 잠금 무시

    def test_missing_sheet_lists_available(self):
        self.ledger.append_rows("集金データ", [], HEADERS, "")
        with pytest.raises(NotFoundError) as exc:
            self.ledger.read_all_rows("存在しない")
        assert exc.value.available == ["集金データ"]

    def test_append_and_read(self):
        result = self.ledger.append_rows(
            "S", [["2025-01-13〜2025-01-19", "P1", "100"]], HEADERS, "2025-01-13〜2025-01-19"
        )
        assert result == {"deleted": 0, "added": 1}
        assert self.ledger.read_all_rows("S") == [
            {"週期間": "2025-01-13〜2025-01-19", "プレーヤーID": "P1", "金額": "100"}
        ]

    def test_period_replaced_not_duplicated(self):
        week = "2025-01-13〜2025-01-19"
        self.ledger.append_rows("S", [[week, "P1", "1"], [week, "P2", "2"]], HEADERS, week)
        result = self.ledger.append_rows("S", [[week, "P1", "3"]], HEADERS, week)

        assert result == {"deleted": 2, "added": 1}
        rows = self.ledger.read_rows_for_period("S", week)
        assert [r["金額"] for r in rows] == ["3"]

    def test_other_periods_kept(self):
        self.ledger.append_rows("S", [["2025-01-06〜2025-01-12", "P1", "1"]], HEADERS, "2025-01-06〜2025-01-12")
        self.ledger.append_rows("S", [["2025-01-13〜2025-01-19", "P1", "2"]], HEADERS, "2025-01-13〜2025-01-19")

        assert self.ledger.list_week_periods("S") == ["2025-01-13〜2025-01-19", "2025-01-06〜2025-01-12"]
        assert len(self.ledger.read_all_rows("S")) == 2

    def test_fullwidth_tilde_normalized(self):
        self.ledger.append_rows("S", [["2025-01-13～2025-01-19", "P1", "1"]], HEADERS, "2025-01-13～2025-01-19")

        assert self.ledger.list_week_periods("S") == ["2025-01-13〜2025-01-19"]
        assert len(self.ledger.read_rows_for_period("S", "2025-01-13～2025-01-19")) == 1

    def test_stored_headers_win(self):
        self.ledger.append_rows("S", [], HEADERS, "")
        self.ledger.append_rows("S", [["2025-01-13〜2025-01-19", "P1", "1"]], ["X", "Y", "Z"], "2025-01-13〜2025-01-19")

        assert set(self.ledger.read_all_rows("S")[0]) == set(HEADERS)

    def test_short_row_padded(self):
        self.ledger.append_rows("S", [["2025-01-13〜2025-01-19", "P1"]], HEADERS, "2025-01-13〜2025-01-19")
        assert self.ledger.read_all_rows("S")[0]["金額"] == ""

    def test_master_sheet_overwritten(self):
        self.ledger.append_rows(constants.AGENT_MASTER_SHEET, [["A1", "Alpha"]], constants.AGENT_MASTER_HEADERS, "")
        self.ledger.append_rows(constants.AGENT_MASTER_SHEET, [["B1", "Bravo"]], constants.AGENT_MASTER_HEADERS, "")

        rows = self.ledger.read_all_rows(constants.AGENT_MASTER_SHEET)
        assert [r["エージェントID"] for r in rows] == ["B1"]
        assert self.ledger.list_week_periods(constants.AGENT_MASTER_SHEET) == []
