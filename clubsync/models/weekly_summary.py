"""週次集金DB 레코드"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from clubsync.constants import SummaryProps
from clubsync.models import properties as p
from clubsync.utils.validators import WeekPeriod


@dataclass
class WeeklySummary:
    """
    에이전트별 주간 집금 (자연키: 주기간 시작일 + 에이전트 페이지)

    레이크/레이크백 합계는 상세의 rollup으로 Notion이 계산한다.
    금액은 엔 단위 정수.
    """
    week: WeekPeriod
    agent_page_id: str
    display_name: str
    player_count: int
    agent_reward_yen: int
    settlement_yen: int
    page_id: Optional[str] = None

    @property
    def title(self) -> str:
        return f"{self.week.key} - {self.display_name}"

    @staticmethod
    def key_filter(week: WeekPeriod, agent_page_id: str) -> Dict[str, Any]:
        return p.all_of(
            p.date_equals(SummaryProps.WEEK, week.start),
            p.relation_contains(SummaryProps.AGENT, agent_page_id),
        )

    @staticmethod
    def week_filter(week: WeekPeriod) -> Dict[str, Any]:
        return p.date_equals(SummaryProps.WEEK, week.start)

    def to_properties(self) -> Dict[str, Any]:
        return {
            SummaryProps.TITLE: p.build_title(self.title),
            SummaryProps.WEEK: p.build_date(self.week.start, self.week.end),
            SummaryProps.AGENT: p.build_relation([self.agent_page_id]),
            SummaryProps.PLAYER_COUNT: p.build_number(self.player_count),
            SummaryProps.AGENT_REWARD: p.build_number(self.agent_reward_yen),
            SummaryProps.SETTLEMENT: p.build_number(self.settlement_yen),
        }


def summary_agent_page_id(page: Dict[str, Any]) -> Optional[str]:
    """기존 週次集金 페이지의 에이전트 페이지 ID"""
    ids = p.read_relation_ids(page.get("properties", {}), SummaryProps.AGENT)
    return ids[0] if ids else None
