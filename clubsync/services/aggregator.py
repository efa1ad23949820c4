"""
에이전트 집계 서비스
====================
집금 행을 에이전트별로 묶어 레이크/레이크백 합계, 에이전트 보수, 정산 금액 계산

규칙:
    - agent_id가 비어 있으면 "直接" 그룹 (에이전트 레코드 없음, 보수 0)
    - 에이전트 본인 행(player_id == agent_id)은 레이크/레이크백 합계에서 제외,
      플레이어 목록과 金額 합계에는 포함
    - 보수 = ceil(레이크합계 × 피레이트 - 레이크백합계) (센트)
    - 정산 = 金額 합계 - 보수 (엔)
    - 표시명 일본어 정렬, "直接"은 항상 마지막

사용법:
    rates = resolve_fee_rates(store_rates, agent_master_rows)
    summaries = group_by_agent(collection_rows, rates)
    totals = WeeklyTotals.from_summaries(summaries)
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from clubsync import constants
from clubsync.models.ledger import AgentMasterRow, CollectionRow
from clubsync.services import money
from clubsync.utils.collation import ja_sort_key

logger = logging.getLogger(__name__)


@dataclass
class AgentSummary:
    """에이전트 1명(또는 直接 그룹)의 주간 집계"""
    agent_id: str
    agent_name: str
    fee_rate: Decimal
    members: List[CollectionRow] = field(default_factory=list)
    total_rake_cents: int = 0
    total_rakeback_cents: int = 0
    total_amount_yen: int = 0
    agent_reward_cents: int = 0

    @property
    def is_direct(self) -> bool:
        return self.agent_id == constants.DIRECT_AGENT_KEY

    @property
    def player_count(self) -> int:
        return len(self.members)

    @property
    def agent_reward(self) -> Decimal:
        """에이전트 보수 (포인트)"""
        return money.from_cents(self.agent_reward_cents)

    @property
    def agent_reward_yen(self) -> int:
        return money.cents_to_yen(self.agent_reward_cents)

    @property
    def settlement_yen(self) -> int:
        """클럽이 에이전트에게 정산할 순액 (엔)"""
        return self.total_amount_yen - self.agent_reward_yen

    def add(self, row: CollectionRow):
        self.members.append(row)
        self.total_amount_yen += row.amount_yen
        if row.is_agent_self:
            return
        self.total_rake_cents += row.rake_cents
        self.total_rakeback_cents += row.rakeback_cents

    def finalize(self):
        """보수 확정 (멤버 추가가 끝난 뒤 1회)"""
        if self.is_direct:
            self.agent_reward_cents = 0
            return
        self.agent_reward_cents = money.agent_reward_cents(
            self.total_rake_cents, self.total_rakeback_cents, self.fee_rate
        )


@dataclass
class WeeklyTotals:
    """하우스 주간 합계 (센트 = 엔)"""
    total_rake_cents: int = 0
    total_rakeback_cents: int = 0
    total_agent_fee_cents: int = 0

    @property
    def house_profit_cents(self) -> int:
        return self.total_rake_cents - self.total_rakeback_cents - self.total_agent_fee_cents

    @classmethod
    def from_summaries(cls, summaries: Iterable[AgentSummary]) -> "WeeklyTotals":
        totals = cls()
        for summary in summaries:
            totals.total_rake_cents += summary.total_rake_cents
            totals.total_rakeback_cents += summary.total_rakeback_cents
            totals.total_agent_fee_cents += summary.agent_reward_cents
        return totals


def resolve_fee_rates(
    store_rates: Dict[str, Optional[Decimal]],
    ledger_agents: Iterable[AgentMasterRow],
) -> Dict[str, Decimal]:
    """
    에이전트별 피레이트 결정

    우선순위: Notion 기존 값 → 원장 마스터 값 → 기본값 0.70
    (기본값 적용은 group_by_agent에서 맵에 없는 에이전트에 대해)
    """
    rates: Dict[str, Decimal] = {}
    for agent in ledger_agents:
        if agent.agent_id and agent.fee_rate is not None:
            rates[agent.agent_id] = agent.fee_rate
    for agent_id, rate in store_rates.items():
        if agent_id and rate is not None:
            rates[agent_id] = rate
    return rates


def _sort_key(summary: AgentSummary):
    # 直接 그룹은 이름과 관계없이 마지막
    return (1 if summary.is_direct else 0, ja_sort_key(summary.agent_name))


def group_by_agent(
    rows: Iterable[CollectionRow],
    fee_rates: Dict[str, Decimal],
    default_fee_rate: Decimal = constants.DEFAULT_FEE_RATE,
) -> List[AgentSummary]:
    """
    집금 행을 에이전트별로 집계

    Args:
        rows: 한 주의 집금 행 (rakeback_rate 조인 완료)
        fee_rates: agent_id → 피레이트 (resolve_fee_rates 결과)
        default_fee_rate: 맵에 없는 에이전트의 피레이트

    Returns:
        정렬된 AgentSummary 목록 (부수효과 없음)
    """
    groups: Dict[str, AgentSummary] = {}

    for row in rows:
        key = row.agent_id or constants.DIRECT_AGENT_KEY
        summary = groups.get(key)
        if summary is None:
            if key == constants.DIRECT_AGENT_KEY:
                summary = AgentSummary(
                    agent_id=key,
                    agent_name=constants.DIRECT_AGENT_NAME,
                    fee_rate=Decimal("0"),
                )
            else:
                summary = AgentSummary(
                    agent_id=key,
                    agent_name=row.agent_name or key,
                    fee_rate=fee_rates.get(key, default_fee_rate),
                )
            groups[key] = summary
        summary.add(row)

    result = list(groups.values())
    for summary in result:
        summary.finalize()

    result.sort(key=_sort_key)
    logger.debug(f"에이전트 집계: {len(result)}그룹")
    return result
