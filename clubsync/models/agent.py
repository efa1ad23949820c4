"""エージェントDB 레코드"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from clubsync.constants import AgentProps
from clubsync.models import properties as p


@dataclass
class Agent:
    """
    에이전트 (자연키: agent_id)

    동기화 중 처음 보는 agent_id면 생성, 삭제하지 않음
    """
    agent_id: str
    name: str
    remark: str = ""
    super_agent_name: str = ""
    fee_rate: Optional[Decimal] = None
    page_id: Optional[str] = None

    @staticmethod
    def key_filter(agent_id: str) -> Dict[str, Any]:
        return p.text_equals(AgentProps.AGENT_ID, agent_id)

    def to_properties(self) -> Dict[str, Any]:
        return {
            AgentProps.NAME: p.build_title(self.name),
            AgentProps.AGENT_ID: p.build_rich_text(self.agent_id),
            AgentProps.REMARK: p.build_rich_text(self.remark),
            AgentProps.SUPER_AGENT: p.build_rich_text(self.super_agent_name),
            AgentProps.FEE_RATE: p.build_number(self.fee_rate),
        }

    @classmethod
    def from_page(cls, page: Dict[str, Any]) -> "Agent":
        props = page.get("properties", {})
        return cls(
            agent_id=p.read_text(props, AgentProps.AGENT_ID),
            name=p.read_title(props, AgentProps.NAME),
            remark=p.read_text(props, AgentProps.REMARK),
            super_agent_name=p.read_text(props, AgentProps.SUPER_AGENT),
            fee_rate=p.read_number(props, AgentProps.FEE_RATE),
            page_id=page.get("id"),
        )
