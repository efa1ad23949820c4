"""원장 행 / Notion 레코드 모델"""
from clubsync.models.agent import Agent
from clubsync.models.player import Player
from clubsync.models.weekly_summary import WeeklySummary
from clubsync.models.weekly_detail import WeeklyDetail
from clubsync.models.weekly_total import WeeklyTotal
from clubsync.models.ledger import (
    WeeklyPlayerRow,
    CollectionRow,
    AgentMasterRow,
    PlayerMasterRow,
    attach_rakeback_rates,
)

__all__ = [
    "Agent",
    "Player",
    "WeeklySummary",
    "WeeklyDetail",
    "WeeklyTotal",
    "WeeklyPlayerRow",
    "CollectionRow",
    "AgentMasterRow",
    "PlayerMasterRow",
    "attach_rakeback_rates",
]
