"""プレイヤーDB 레코드"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from clubsync.constants import PlayerProps, DEFAULT_RAKEBACK_RATE
from clubsync.models import properties as p


@dataclass
class Player:
    """
    플레이어 (자연키: player_id + 에이전트 페이지)

    같은 사람이 여러 에이전트 아래에 있으면 에이전트마다 별도 레코드
    """
    player_id: str
    nickname: str
    agent_page_id: Optional[str] = None
    country: str = ""
    remark: str = ""
    rakeback_rate: Decimal = DEFAULT_RAKEBACK_RATE
    page_id: Optional[str] = None

    @staticmethod
    def key_filter(player_id: str, agent_page_id: Optional[str]) -> Dict[str, Any]:
        if agent_page_id:
            agent_cond = p.relation_contains(PlayerProps.AGENT, agent_page_id)
        else:
            agent_cond = p.relation_is_empty(PlayerProps.AGENT)
        return p.all_of(p.text_equals(PlayerProps.PLAYER_ID, player_id), agent_cond)

    def to_properties(self) -> Dict[str, Any]:
        return {
            PlayerProps.NICKNAME: p.build_title(self.nickname),
            PlayerProps.PLAYER_ID: p.build_rich_text(self.player_id),
            PlayerProps.AGENT: p.build_relation([self.agent_page_id] if self.agent_page_id else []),
            PlayerProps.COUNTRY: p.build_rich_text(self.country),
            PlayerProps.REMARK: p.build_rich_text(self.remark),
            PlayerProps.RAKEBACK_RATE: p.build_number(self.rakeback_rate),
        }

    @classmethod
    def from_page(cls, page: Dict[str, Any]) -> "Player":
        props = page.get("properties", {})
        agents = p.read_relation_ids(props, PlayerProps.AGENT)
        rate = p.read_number(props, PlayerProps.RAKEBACK_RATE)
        return cls(
            player_id=p.read_text(props, PlayerProps.PLAYER_ID),
            nickname=p.read_title(props, PlayerProps.NICKNAME),
            agent_page_id=agents[0] if agents else None,
            country=p.read_text(props, PlayerProps.COUNTRY),
            remark=p.read_text(props, PlayerProps.REMARK),
            rakeback_rate=rate if rate is not None else DEFAULT_RAKEBACK_RATE,
            page_id=page.get("id"),
        )
