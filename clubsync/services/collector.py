"""
집금 데이터 생성 (collect)
==========================
週次データ 시트 1주분 → 에이전트별로 묶은 集金データ 시트

플레이어별 金額 = (収益 + レーキバック) 엔 환산
같은 주기간을 다시 실행하면 기존 행을 지우고 다시 쓴다.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from clubsync import constants
from clubsync.errors import NotFoundError
from clubsync.models.ledger import CollectionRow, PlayerMasterRow, WeeklyPlayerRow, attach_rakeback_rates
from clubsync.services import money
from clubsync.services.aggregator import AgentSummary, group_by_agent
from clubsync.utils.sync_logger import SyncLogger
from clubsync.utils.validators import normalize_period_text, parse_week_period

logger = logging.getLogger(__name__)


@dataclass
class CollectSheets:
    """collect 입출력 시트명"""
    source: str = constants.WEEKLY_DATA_SHEET
    target: str = constants.COLLECTION_SHEET
    players: str = constants.PLAYER_MASTER_SHEET


class Collector:
    """週次データ → 集金データ 변환기"""

    def __init__(self, ledger, sheets: Optional[CollectSheets] = None, report_dir=None):
        self.ledger = ledger
        self.sheets = sheets or CollectSheets()
        self.report_dir = report_dir

    def resolve_week(self, week: Optional[str] = None) -> str:
        periods = self.ledger.list_week_periods(self.sheets.source)
        if not periods:
            raise NotFoundError(f"{self.sheets.source} 시트에 데이터가 없습니다")
        if week is None:
            return periods[0]

        key = normalize_period_text(parse_week_period(week).key)
        if key not in periods:
            raise NotFoundError(f"지정한 주기간이 없습니다: {week}", available=periods)
        return key

    def _player_master(self) -> List[PlayerMasterRow]:
        try:
            rows = self.ledger.read_all_rows(self.sheets.players)
        except NotFoundError:
            logger.warning(f"플레이어 마스터 없음: {self.sheets.players} (레이크백 0)")
            return []
        return [r for r in (PlayerMasterRow.from_row(row) for row in rows) if r.player_id]

    def build(self, week_key: str) -> List[AgentSummary]:
        """
        1주분 집금 행 생성 (에이전트 정렬 순)

        Raises:
            NotFoundError: 해당 주기간 행이 없는 경우
        """
        weekly = [
            WeeklyPlayerRow.from_row(r)
            for r in self.ledger.read_rows_for_period(self.sheets.source, week_key)
        ]
        weekly = [w for w in weekly if w.player_id]
        if not weekly:
            raise NotFoundError(f"{week_key} 의 週次データ가 없습니다")

        rows = [
            CollectionRow(
                week_period=week_key,
                agent_name=w.agent_name,
                agent_id=w.agent_id,
                nickname=w.nickname,
                player_id=w.player_id,
                revenue_cents=w.revenue_cents,
                rake_cents=w.rake_cents,
                amount_yen=0,
            )
            for w in weekly
        ]
        attach_rakeback_rates(rows, self._player_master())
        for row in rows:
            row.amount_yen = money.cents_to_yen(row.revenue_cents + row.rakeback_cents)

        # 피레이트는 collect 결과에 쓰이지 않음 (정렬/그룹만)
        summaries = group_by_agent(rows, {})
        for summary in summaries:
            for row in summary.members:
                row.agent_name = summary.agent_name
        return summaries

    def run(self, week: Optional[str] = None, dry_run: bool = False) -> Dict[str, int]:
        """
        collect 실행

        Returns:
            {"rows": n, "deleted": d, "added": a}
        """
        week_key = self.resolve_week(week)
        logger.info(f"대상 주기간: {week_key}")
        run_log = SyncLogger("collect", week_period=week_key, log_dir=self.report_dir, dry_run=dry_run)

        summaries = self.build(week_key)
        sheet_rows = [row.to_sheet_row() for s in summaries for row in s.members]
        logger.info(f"플레이어 {len(sheet_rows)}명, 에이전트 {len(summaries)}그룹")

        if dry_run:
            logger.info("=== Dry-run 모드 ===")
            for summary in summaries:
                logger.info(f"【{summary.agent_name}】({summary.agent_id or 'ID 없음'})")
                for row in summary.members:
                    logger.info(
                        f"    {row.nickname} ({row.player_id}): "
                        f"{money.from_cents(row.revenue_cents)}pt / {row.amount_yen}円"
                    )
            run_log.end_sync()
            return {"rows": len(sheet_rows), "deleted": 0, "added": 0}

        result = self.ledger.append_rows(
            self.sheets.target, sheet_rows, constants.COLLECTION_HEADERS, week_key
        )
        run_log.log_archive("collection_row", result["deleted"])
        run_log.log_upsert("collection_row", created=True, count=result["added"])
        run_log.end_sync()
        return {"rows": len(sheet_rows), **result}
