"""SQL 원장 미러 엔진

LEDGER_DATABASE_URL 분기:
  - sqlite:///경로  → 파일 SQLite (WAL, busy_timeout 30초)
  - 그 밖의 URL     → SQLAlchemy 기본 엔진 (PostgreSQL 등)
"""
import logging
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

_logger = logging.getLogger(__name__)

SQLITE_BUSY_TIMEOUT_MS = 30000


def _enable_wal(engine: Engine):
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        try:
            cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
            cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()


def create_engine_for_url(url: str) -> Engine:
    """원장 URL → 엔진"""
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database:
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_MS / 1000},
            pool_pre_ping=True,
        )
        _enable_wal(engine)
        _logger.debug(f"SQL 원장: SQLite {parsed.database}")
        return engine

    # 비밀번호는 로그에 남기지 않음
    _logger.info(f"SQL 원장: {parsed.render_as_string(hide_password=True)}")
    return create_engine(url, pool_pre_ping=True)


def get_engine_for_db(db_path: str) -> Engine:
    """SQLite 파일 경로 → 엔진 (테스트/로컬 미러)"""
    return create_engine_for_url(f"sqlite:///{Path(db_path)}")
