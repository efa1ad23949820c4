"""
주간 집금 Notion 동기화
=======================
집금 시트 1주분을 에이전트별로 집계해 Notion에 upsert/아카이브

처리 순서 (앞 단계가 끝나야 다음 단계):
    1. 대상 주기간 결정 (미지정 시 집금 시트의 최신)
    2. 집금 / 에이전트 마스터 / 플레이어 마스터 로드
    3. 에이전트별 집계 (피레이트: Notion → 원장 → 0.70)
    4. エージェントDB upsert (直接 제외)
    5. プレイヤーDB upsert (플레이어 마스터 전체)
    6. 週次集金 upsert
    7. 이번 실행에 없는 에이전트의 週次集金 아카이브
    8. 週次集金個別 upsert
    9. 週次集金 별로 이번 실행에 없는 週次集金個別 아카이브
    10. 週次集金 → 週次集金個別 역관계 연결
    11. 週次トータル upsert
    12. 공유 링크 출력

실패 시 완료된 단계는 되돌리지 않는다. 모든 단계가 upsert/아카이브이므로
같은 명령을 다시 실행하면 올바른 상태로 수렴한다.

주의: 같은 주기간을 두 프로세스가 동시에 동기화하면 중복 레코드가 생길 수 있다.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from clubsync import constants
from clubsync.constants import SummaryProps
from clubsync.errors import NotFoundError
from clubsync.models import (
    Agent,
    Player,
    WeeklySummary,
    WeeklyDetail,
    WeeklyTotal,
    AgentMasterRow,
    CollectionRow,
    PlayerMasterRow,
    attach_rakeback_rates,
)
from clubsync.models import properties as p
from clubsync.models.weekly_detail import detail_player_id
from clubsync.models.weekly_summary import summary_agent_page_id
from clubsync.services import money
from clubsync.services.aggregator import AgentSummary, WeeklyTotals, group_by_agent, resolve_fee_rates
from clubsync.services.upsert import find_by_key, iterate_pages, upsert
from clubsync.utils.sync_logger import SyncLogger, SyncResult
from clubsync.utils.validators import WeekPeriod, normalize_period_text, parse_week_period

logger = logging.getLogger(__name__)

DEFAULT_SHARE_BASE_URL = "https://www.notion.so"


@dataclass
class SyncSheets:
    """동기화 입력 시트명"""
    collection: str = constants.COLLECTION_SHEET
    agents: str = constants.AGENT_MASTER_SHEET
    players: str = constants.PLAYER_MASTER_SHEET


@dataclass
class WeekBatch:
    """1주분 입력과 집계 결과"""
    week: WeekPeriod
    rows: List[CollectionRow]
    agent_master: Dict[str, AgentMasterRow]
    player_master: List[PlayerMasterRow]
    store_agents: Dict[str, Agent] = field(default_factory=dict)
    summaries: List[AgentSummary] = field(default_factory=list)
    totals: WeeklyTotals = field(default_factory=WeeklyTotals)


def share_url(page_id: str, base_url: Optional[str] = None) -> str:
    """페이지 ID → 공유 URL (하이픈 제거)"""
    base = (base_url or DEFAULT_SHARE_BASE_URL).rstrip("/")
    return f"{base}/{page_id.replace('-', '')}"


class Reconciler:
    """
    주간 집금 동기화기

    Args:
        client: NotionClient 호환 객체
        ledger: 원장 (GoogleSheetsLedger / SqlLedger)
        data_source_ids: 엔티티 키 → 데이터소스 ID
        sheets: 입력 시트명
        template_id: 週次集金 신규 생성 시 템플릿
        public_site_url: 공유 링크 기준 URL
        report_dir: 실행 리포트 저장 디렉토리
        page_size: 목록 조회 페이지 크기
    """

    def __init__(
        self,
        client,
        ledger,
        data_source_ids: Dict[str, str],
        sheets: Optional[SyncSheets] = None,
        template_id: Optional[str] = None,
        public_site_url: Optional[str] = None,
        report_dir: Optional[Path] = None,
        page_size: int = constants.NOTION_PAGE_SIZE,
    ):
        self.client = client
        self.ledger = ledger
        self.ds = data_source_ids
        self.sheets = sheets or SyncSheets()
        self.template_id = template_id
        self.public_site_url = public_site_url
        self.report_dir = report_dir
        self.page_size = page_size

        self.run_log: Optional[SyncLogger] = None
        # 실행 중 생성/조회한 페이지 ID
        self.agent_pages: Dict[str, str] = {}
        self.player_pages: Dict[Tuple[str, str], str] = {}
        self.summary_pages: Dict[str, str] = {}
        self.detail_pages: Dict[str, List[str]] = {}

    # ─── 1~3: 준비 ───

    def resolve_week(self, week: Optional[str] = None) -> WeekPeriod:
        """대상 주기간 결정"""
        periods = self.ledger.list_week_periods(self.sheets.collection)
        if not periods:
            raise NotFoundError(f"{self.sheets.collection} 시트에 데이터가 없습니다")

        if week is None:
            return parse_week_period(periods[0])

        target = parse_week_period(week)
        if normalize_period_text(target.key) not in periods:
            raise NotFoundError(f"지정한 주기간이 없습니다: {week}", available=periods)
        return target

    def _read_master(self, sheet: str) -> List[Dict[str, str]]:
        try:
            return self.ledger.read_all_rows(sheet)
        except NotFoundError:
            logger.warning(f"마스터 시트 없음: {sheet} (기본값 사용)")
            return []

    def load(self, week: WeekPeriod) -> WeekBatch:
        """집금 / 마스터 로드"""
        raw_rows = self.ledger.read_rows_for_period(self.sheets.collection, week.key)
        rows = [CollectionRow.from_row(r) for r in raw_rows]
        rows = [r for r in rows if r.player_id]
        if not rows:
            raise NotFoundError(f"{week} 의 집금 데이터가 없습니다")

        agents = [AgentMasterRow.from_row(r) for r in self._read_master(self.sheets.agents)]
        players = [PlayerMasterRow.from_row(r) for r in self._read_master(self.sheets.players)]
        players = [pl for pl in players if pl.player_id]
        attach_rakeback_rates(rows, players)

        logger.info(f"집금 {len(rows)}행, 에이전트 마스터 {len(agents)}건, 플레이어 마스터 {len(players)}건")
        return WeekBatch(
            week=week,
            rows=rows,
            agent_master={a.agent_id: a for a in agents if a.agent_id},
            player_master=players,
        )

    def load_store_agents(self) -> Dict[str, Agent]:
        """エージェントDB 전체 (agent_id → Agent)"""
        agents = {}
        for page in iterate_pages(self.client, self.ds[constants.AGENT], page_size=self.page_size):
            agent = Agent.from_page(page)
            if agent.agent_id:
                agents.setdefault(agent.agent_id, agent)
        return agents

    def aggregate(self, batch: WeekBatch):
        batch.store_agents = self.load_store_agents()
        store_rates: Dict[str, Optional[Decimal]] = {
            agent_id: agent.fee_rate for agent_id, agent in batch.store_agents.items()
        }
        rates = resolve_fee_rates(store_rates, batch.agent_master.values())
        batch.summaries = group_by_agent(batch.rows, rates)
        batch.totals = WeeklyTotals.from_summaries(batch.summaries)

    # ─── 4~11: 쓰기 ───

    def _remark_for(self, batch: WeekBatch, agent_id: str) -> str:
        master = batch.agent_master.get(agent_id)
        if master and master.remark:
            return master.remark
        stored = batch.store_agents.get(agent_id)
        return stored.remark if stored else ""

    def upsert_agents(self, batch: WeekBatch):
        for summary in batch.summaries:
            if summary.is_direct:
                continue
            master = batch.agent_master.get(summary.agent_id)
            agent = Agent(
                agent_id=summary.agent_id,
                name=summary.agent_name,
                remark=master.remark if master else "",
                super_agent_name=master.super_agent_name if master else "",
                fee_rate=summary.fee_rate,
            )
            props = agent.to_properties()
            if master is None:
                # 마스터에 없으면 기존 보조 필드는 유지
                props.pop(constants.AgentProps.REMARK)
                props.pop(constants.AgentProps.SUPER_AGENT)

            result = upsert(self.client, self.ds[constants.AGENT], Agent.key_filter(agent.agent_id), props)
            self.agent_pages[agent.agent_id] = result.id
            self.run_log.log_upsert(constants.AGENT, result.created)

    def _agent_page_for(self, agent_id: str, batch: WeekBatch) -> Optional[str]:
        """
        플레이어가 연결될 에이전트 페이지

        스토어에 없고 에이전트 마스터에만 있으면 마스터 값으로 생성한다.
        어느 쪽에도 없으면 None.
        """
        if agent_id in self.agent_pages:
            return self.agent_pages[agent_id]
        page = find_by_key(self.client, self.ds[constants.AGENT], Agent.key_filter(agent_id))
        if page:
            self.agent_pages[agent_id] = page["id"]
            return page["id"]

        master = batch.agent_master.get(agent_id)
        if master is None:
            return None
        agent = Agent(
            agent_id=agent_id,
            name=master.agent_name or agent_id,
            remark=master.remark,
            super_agent_name=master.super_agent_name,
            fee_rate=master.fee_rate,
        )
        result = upsert(self.client, self.ds[constants.AGENT], Agent.key_filter(agent_id), agent.to_properties())
        self.agent_pages[agent_id] = result.id
        self.run_log.log_upsert(constants.AGENT, result.created)
        return result.id

    def upsert_players(self, batch: WeekBatch):
        for row in batch.player_master:
            agent_page = None
            if row.agent_id:
                agent_page = self._agent_page_for(row.agent_id, batch)
                if agent_page is None:
                    logger.warning(f"에이전트 미등록으로 플레이어 건너뜀: {row.player_id} (에이전트 {row.agent_id})")
                    self.run_log.log_skip(constants.PLAYER, f"에이전트 미등록: {row.agent_id}", row.player_id)
                    continue

            player = Player(
                player_id=row.player_id,
                nickname=row.nickname,
                agent_page_id=agent_page,
                country=row.country,
                remark=row.remark,
                rakeback_rate=row.rakeback_rate,
            )
            result = upsert(
                self.client,
                self.ds[constants.PLAYER],
                Player.key_filter(row.player_id, agent_page),
                player.to_properties(),
            )
            self.player_pages[row.key] = result.id
            self.run_log.log_upsert(constants.PLAYER, result.created)

    def upsert_summaries(self, batch: WeekBatch):
        for summary in batch.summaries:
            if summary.is_direct:
                continue
            record = WeeklySummary(
                week=batch.week,
                agent_page_id=self.agent_pages[summary.agent_id],
                display_name=self._remark_for(batch, summary.agent_id) or summary.agent_name,
                player_count=summary.player_count,
                agent_reward_yen=summary.agent_reward_yen,
                settlement_yen=summary.settlement_yen,
            )
            result = upsert(
                self.client,
                self.ds[constants.WEEKLY_SUMMARY],
                WeeklySummary.key_filter(batch.week, record.agent_page_id),
                record.to_properties(),
                template_id=self.template_id,
            )
            self.summary_pages[summary.agent_id] = result.id
            self.run_log.log_upsert(constants.WEEKLY_SUMMARY, result.created)

    def archive_orphan_summaries(self, batch: WeekBatch) -> int:
        live_agents = {p.normalize_page_id(self.agent_pages[a]) for a in self.summary_pages}
        # 아카이브 전에 전체 목록을 끝까지 읽는다
        pages = list(iterate_pages(
            self.client,
            self.ds[constants.WEEKLY_SUMMARY],
            WeeklySummary.week_filter(batch.week),
            page_size=self.page_size,
        ))

        archived = 0
        for page in pages:
            agent_page = summary_agent_page_id(page)
            if agent_page and p.normalize_page_id(agent_page) in live_agents:
                continue
            self.client.archive_page(page["id"])
            archived += 1
            logger.info(f"週次集金 아카이브: {p.read_title(page.get('properties', {}), SummaryProps.TITLE)}")
        if archived:
            self.run_log.log_archive(constants.WEEKLY_SUMMARY, archived)
        return archived

    def _player_page_for(self, row: CollectionRow) -> Optional[str]:
        key = (row.player_id, row.agent_id)
        if key in self.player_pages:
            return self.player_pages[key]
        agent_page = self.agent_pages.get(row.agent_id) if row.agent_id else None
        page = find_by_key(
            self.client, self.ds[constants.PLAYER], Player.key_filter(row.player_id, agent_page)
        )
        if page is None:
            logger.debug(f"플레이어 페이지 없음: {row.player_id} (관계 미설정)")
            return None
        self.player_pages[key] = page["id"]
        return page["id"]

    def upsert_details(self, batch: WeekBatch):
        for summary in batch.summaries:
            if summary.is_direct:
                continue
            summary_page = self.summary_pages[summary.agent_id]
            ids: List[str] = []
            for row in summary.members:
                detail = WeeklyDetail(
                    summary_page_id=summary_page,
                    player_id=row.player_id,
                    nickname=row.nickname,
                    revenue_yen=money.cents_to_yen(row.revenue_cents),
                    rake_yen=money.cents_to_yen(row.rake_cents),
                    rakeback_rate=row.rakeback_rate,
                    rakeback_yen=money.cents_to_yen(row.rakeback_cents),
                    settlement_yen=row.amount_yen,
                    player_page_id=self._player_page_for(row),
                )
                result = upsert(
                    self.client,
                    self.ds[constants.WEEKLY_DETAIL],
                    WeeklyDetail.key_filter(summary_page, row.player_id),
                    detail.to_properties(),
                )
                if result.id not in ids:
                    ids.append(result.id)
                self.run_log.log_upsert(constants.WEEKLY_DETAIL, result.created)
            self.detail_pages[summary.agent_id] = ids

    def archive_orphan_details(self, batch: WeekBatch) -> int:
        archived = 0
        for summary in batch.summaries:
            if summary.is_direct:
                continue
            summary_page = self.summary_pages[summary.agent_id]
            current = {row.player_id for row in summary.members}
            pages = list(iterate_pages(
                self.client,
                self.ds[constants.WEEKLY_DETAIL],
                WeeklyDetail.summary_filter(summary_page),
                page_size=self.page_size,
            ))
            for page in pages:
                if detail_player_id(page) in current:
                    continue
                self.client.archive_page(page["id"])
                archived += 1
        if archived:
            self.run_log.log_archive(constants.WEEKLY_DETAIL, archived)
        return archived

    def wire_detail_relations(self):
        for agent_id, summary_page in self.summary_pages.items():
            self.client.update_page(
                summary_page,
                properties={SummaryProps.DETAILS: p.build_relation(self.detail_pages.get(agent_id, []))},
            )

    def upsert_total(self, batch: WeekBatch):
        totals = batch.totals
        record = WeeklyTotal(
            week=batch.week,
            total_rake_yen=money.cents_to_yen(totals.total_rake_cents),
            total_rakeback_yen=money.cents_to_yen(totals.total_rakeback_cents),
            total_agent_fee_yen=money.cents_to_yen(totals.total_agent_fee_cents),
            summary_page_ids=list(self.summary_pages.values()),
        )
        result = upsert(
            self.client,
            self.ds[constants.WEEKLY_TOTAL],
            WeeklyTotal.key_filter(batch.week),
            record.to_properties(),
        )
        self.run_log.log_upsert(constants.WEEKLY_TOTAL, result.created)
        logger.info(
            f"週次トータル: レーキ {record.total_rake_yen}円, レーキバック {record.total_rakeback_yen}円, "
            f"エージェントフィー {record.total_agent_fee_yen}円, ハウス利益 {record.house_profit_yen}円"
        )

    def emit_links(self, batch: WeekBatch):
        for summary in batch.summaries:
            page_id = self.summary_pages.get(summary.agent_id)
            if not page_id:
                continue
            url = share_url(page_id, self.public_site_url)
            self.run_log.log_link(summary.agent_name, url)
            logger.info(f"  {summary.agent_name}: {url}")

    # ─── dry-run 출력 ───

    def log_plan(self, batch: WeekBatch):
        logger.info("=== Dry-run 모드 (Notion에 쓰지 않음) ===")
        for summary in batch.summaries:
            label = "直接" if summary.is_direct else f"{summary.agent_name} ({summary.agent_id})"
            logger.info(
                f"【{label}】 플레이어 {summary.player_count}명, "
                f"レーキ {money.from_cents(summary.total_rake_cents)}pt, "
                f"レーキバック {money.from_cents(summary.total_rakeback_cents)}pt, "
                f"報酬 {summary.agent_reward}pt, 精算 {summary.settlement_yen}円"
            )
            for row in summary.members:
                mark = " (本人)" if row.is_agent_self else ""
                logger.info(
                    f"    {row.nickname} ({row.player_id}){mark}: "
                    f"レーキ {money.from_cents(row.rake_cents)}pt, 金額 {row.amount_yen}円"
                )
        totals = batch.totals
        logger.info(
            f"週次トータル: レーキ {money.cents_to_yen(totals.total_rake_cents)}円, "
            f"レーキバック {money.cents_to_yen(totals.total_rakeback_cents)}円, "
            f"エージェントフィー {money.cents_to_yen(totals.total_agent_fee_cents)}円, "
            f"ハウス利益 {money.cents_to_yen(totals.house_profit_cents)}円"
        )
        logger.info(f"プレイヤーマスター {len(batch.player_master)}件 upsert 예정")

    # ─── 전체 ───

    def run(self, week: Optional[str] = None, dry_run: bool = False) -> SyncResult:
        """
        1주분 동기화 실행

        Args:
            week: 주기간 ("YYYY-MM-DD〜YYYY-MM-DD"), None이면 최신
            dry_run: True면 1~3단계와 계획 출력만

        Returns:
            SyncResult

        Raises:
            NotFoundError: 주기간/집금 데이터 없음
            ValidationError: 주기간 형식 오류
            StoreOperationError: Notion/원장 호출 실패
        """
        self.agent_pages, self.player_pages = {}, {}
        self.summary_pages, self.detail_pages = {}, {}

        target = self.resolve_week(week)
        logger.info(f"대상 주기간: {target}")
        self.run_log = SyncLogger("sync", week_period=target.key, log_dir=self.report_dir, dry_run=dry_run)

        batch = self.load(target)
        self.aggregate(batch)
        logger.info(f"에이전트 {len(batch.summaries)}그룹")

        if dry_run:
            self.log_plan(batch)
            return self.run_log.end_sync()

        self.upsert_agents(batch)
        self.upsert_players(batch)
        self.upsert_summaries(batch)
        self.archive_orphan_summaries(batch)
        self.upsert_details(batch)
        self.archive_orphan_details(batch)
        self.wire_detail_relations()
        self.upsert_total(batch)
        self.emit_links(batch)

        return self.run_log.end_sync()
