"""週次トータルDB 레코드"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from clubsync.constants import TotalProps
from clubsync.models import properties as p
from clubsync.utils.validators import WeekPeriod


@dataclass
class WeeklyTotal:
    """하우스 주간 합계 (자연키: 주기간). 아카이브하지 않음"""
    week: WeekPeriod
    total_rake_yen: int
    total_rakeback_yen: int
    total_agent_fee_yen: int
    summary_page_ids: List[str] = field(default_factory=list)
    page_id: Optional[str] = None

    @property
    def house_profit_yen(self) -> int:
        return self.total_rake_yen - self.total_rakeback_yen - self.total_agent_fee_yen

    @staticmethod
    def key_filter(week: WeekPeriod) -> Dict[str, Any]:
        return p.date_equals(TotalProps.WEEK, week.start)

    def to_properties(self) -> Dict[str, Any]:
        return {
            TotalProps.TITLE: p.build_title(self.week.key),
            TotalProps.WEEK: p.build_date(self.week.start, self.week.end),
            TotalProps.TOTAL_RAKE: p.build_number(self.total_rake_yen),
            TotalProps.TOTAL_RAKEBACK: p.build_number(self.total_rakeback_yen),
            TotalProps.TOTAL_AGENT_FEE: p.build_number(self.total_agent_fee_yen),
            TotalProps.HOUSE_PROFIT: p.build_number(self.house_profit_yen),
            # 빈 목록도 기록 (아카이브된 週次集金 연결 해제)
            TotalProps.SUMMARIES: p.build_relation(self.summary_page_ids),
        }
