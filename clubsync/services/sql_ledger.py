"""
SQL 원장 미러
=============
Google Sheets 원장과 같은 인터페이스를 SQLAlchemy 테이블 2개로 제공
(오프라인 실행, 테스트용)

    ledger_headers(sheet PK, headers_json)
    ledger_rows(id PK, sheet, week_period, row_json)
"""
import json
import logging
from typing import Dict, List

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from clubsync import constants
from clubsync.errors import LedgerError, NotFoundError
from clubsync.services.transaction_manager import atomic_operation
from clubsync.utils.validators import normalize_period_text

logger = logging.getLogger(__name__)

Row = Dict[str, str]

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS ledger_headers (
        sheet VARCHAR(100) PRIMARY KEY,
        headers_json TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ledger_rows (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        sheet VARCHAR(100) NOT NULL,
        week_period VARCHAR(50) NOT NULL DEFAULT '',
        row_json TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_ledger_rows_sheet_period ON ledger_rows (sheet, week_period)",
]


class SqlLedger:
    """SQLAlchemy 기반 원장"""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.ensure_schema()

    def ensure_schema(self):
        try:
            with atomic_operation(self.engine) as conn:
                for ddl in SCHEMA:
                    conn.execute(text(ddl))
        except SQLAlchemyError as e:
            raise LedgerError("SQL_ERROR", f"원장 테이블 생성 실패: {e}")

    def _sheets(self) -> List[str]:
        with self.engine.connect() as conn:
            return [r[0] for r in conn.execute(text("SELECT sheet FROM ledger_headers ORDER BY sheet"))]

    def _require_sheet(self, sheet: str):
        sheets = self._sheets()
        if sheet not in sheets:
            raise NotFoundError(f"시트를 찾을 수 없습니다: {sheet}", available=sheets)

    def _select(self, sql: str, params: dict) -> List[Row]:
        try:
            with self.engine.connect() as conn:
                return [json.loads(r[0]) for r in conn.execute(text(sql), params)]
        except SQLAlchemyError as e:
            raise LedgerError("SQL_ERROR", f"원장 읽기 실패: {e}")

    # ─── 읽기 ───

    def list_week_periods(self, sheet: str) -> List[str]:
        """주기간 고유값 (내림차순)"""
        self._require_sheet(sheet)
        with self.engine.connect() as conn:
            rows = conn.execute(
                text("SELECT DISTINCT week_period FROM ledger_rows WHERE sheet = :sheet AND week_period != ''"),
                {"sheet": sheet},
            )
            return sorted((r[0] for r in rows), reverse=True)

    def read_rows_for_period(self, sheet: str, period: str) -> List[Row]:
        self._require_sheet(sheet)
        return self._select(
            "SELECT row_json FROM ledger_rows WHERE sheet = :sheet AND week_period = :period ORDER BY id",
            {"sheet": sheet, "period": normalize_period_text(period)},
        )

    def read_all_rows(self, sheet: str) -> List[Row]:
        self._require_sheet(sheet)
        return self._select(
            "SELECT row_json FROM ledger_rows WHERE sheet = :sheet ORDER BY id",
            {"sheet": sheet},
        )

    # ─── 쓰기 ───

    def append_rows(
        self,
        sheet: str,
        rows: List[List[str]],
        headers: List[str],
        week_period: str,
    ) -> Dict[str, int]:
        """
        주기간 기준 삭제 후 추가 (단일 트랜잭션)

        Returns:
            {"deleted": n, "added": m}
        """
        period = normalize_period_text(week_period)
        try:
            with atomic_operation(self.engine) as conn:
                stored = conn.execute(
                    text("SELECT headers_json FROM ledger_headers WHERE sheet = :sheet"),
                    {"sheet": sheet},
                ).fetchone()
                if stored:
                    live_headers = json.loads(stored[0])
                else:
                    live_headers = list(headers)
                    conn.execute(
                        text("INSERT INTO ledger_headers (sheet, headers_json) VALUES (:sheet, :headers)"),
                        {"sheet": sheet, "headers": json.dumps(live_headers, ensure_ascii=False)},
                    )

                deleted = conn.execute(
                    text("DELETE FROM ledger_rows WHERE sheet = :sheet AND week_period = :period"),
                    {"sheet": sheet, "period": period},
                ).rowcount

                for values in rows:
                    row = {h: str(values[i]) if i < len(values) else "" for i, h in enumerate(live_headers)}
                    conn.execute(
                        text(
                            "INSERT INTO ledger_rows (sheet, week_period, row_json) "
                            "VALUES (:sheet, :period, :row)"
                        ),
                        {
                            "sheet": sheet,
                            "period": normalize_period_text(row.get(constants.WEEK_PERIOD_HEADER)),
                            "row": json.dumps(row, ensure_ascii=False),
                        },
                    )
        except SQLAlchemyError as e:
            raise LedgerError("SQL_ERROR", f"{sheet} 쓰기 실패: {e}")

        logger.info(f"{sheet}: 기존 {deleted}행 삭제, {len(rows)}행 추가")
        return {"deleted": deleted, "added": len(rows)}
