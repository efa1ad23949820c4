"""
SQL 원장 트랜잭션
=================
주기간 단위 삭제 후 추가를 한 트랜잭션으로 묶는다.
중간에 실패하면 해당 주기간의 기존 행이 그대로 남는다.

사용법:
    with atomic_operation(engine) as conn:
        conn.execute(text("DELETE FROM ledger_rows WHERE ..."), params)
        conn.execute(text("INSERT INTO ledger_rows ..."), params)
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)


@contextmanager
def atomic_operation(engine: Engine) -> Iterator[Connection]:
    """
    커밋/롤백을 책임지는 연결

    블록이 예외 없이 끝나면 커밋, 예외가 나면 롤백 후 다시 던진다.
    """
    with engine.connect() as conn:
        trans = conn.begin()
        try:
            yield conn
        except Exception as e:
            trans.rollback()
            logger.warning(f"원장 트랜잭션 롤백: {type(e).__name__}: {e}")
            raise
        trans.commit()
