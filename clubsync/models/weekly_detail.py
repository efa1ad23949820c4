"""週次集金個別DB 레코드"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from clubsync.constants import DetailProps
from clubsync.models import properties as p


@dataclass
class WeeklyDetail:
    """
    플레이어별 주간 집금 상세 (자연키: 週次集金 페이지 + player_id)

    금액은 엔 단위 정수
    """
    summary_page_id: str
    player_id: str
    nickname: str
    revenue_yen: int
    rake_yen: int
    rakeback_rate: Decimal
    rakeback_yen: int
    settlement_yen: int
    player_page_id: Optional[str] = None
    page_id: Optional[str] = None

    @staticmethod
    def key_filter(summary_page_id: str, player_id: str) -> Dict[str, Any]:
        return p.all_of(
            p.relation_contains(DetailProps.SUMMARY, summary_page_id),
            p.text_equals(DetailProps.PLAYER_ID, player_id),
        )

    @staticmethod
    def summary_filter(summary_page_id: str) -> Dict[str, Any]:
        return p.relation_contains(DetailProps.SUMMARY, summary_page_id)

    def to_properties(self) -> Dict[str, Any]:
        props = {
            DetailProps.NICKNAME: p.build_title(self.nickname),
            DetailProps.SUMMARY: p.build_relation([self.summary_page_id]),
            DetailProps.PLAYER_ID: p.build_rich_text(self.player_id),
            DetailProps.REVENUE: p.build_number(self.revenue_yen),
            DetailProps.RAKE: p.build_number(self.rake_yen),
            DetailProps.RAKEBACK_RATE: p.build_number(self.rakeback_rate),
            DetailProps.RAKEBACK: p.build_number(self.rakeback_yen),
            DetailProps.SETTLEMENT: p.build_number(self.settlement_yen),
        }
        # 플레이어를 찾지 못한 경우 기존 관계는 건드리지 않음
        if self.player_page_id:
            props[DetailProps.PLAYER] = p.build_relation([self.player_page_id])
        return props


def detail_player_id(page: Dict[str, Any]) -> str:
    """기존 週次集金個別 페이지의 player_id"""
    return p.read_text(page.get("properties", {}), DetailProps.PLAYER_ID)
