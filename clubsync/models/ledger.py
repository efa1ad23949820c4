"""
원장(Google Sheets) 행 모델
==========================
시트 행(헤더 → 문자열 딕셔너리)을 타입이 있는 레코드로 변환

금액 단위:
    収益 / レーキ / レーキバック : 포인트 → 정수 센트
    金額                        : 엔 → 정수 (센트와 같은 스케일)
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from clubsync import constants
from clubsync.services import money
from clubsync.utils.validators import parse_decimal, parse_rate

Row = Dict[str, str]


def _cell(row: Row, column: str) -> str:
    value = row.get(column)
    return "" if value is None else str(value).strip()


def _points_to_cents(row: Row, column: str) -> int:
    return money.to_cents(parse_decimal(_cell(row, column), field=column))


def _format_points(cents: int) -> str:
    """센트 → 원장 표기 포인트 ("12.5", "-3")"""
    value = money.from_cents(cents).normalize()
    return format(value, "f")


@dataclass
class WeeklyPlayerRow:
    """週次データ 시트의 플레이어 1행"""
    week_period: str
    club_id: str
    nickname: str
    player_id: str
    remark: str
    agent_name: str
    agent_id: str
    country: str
    revenue_cents: int
    rake_cents: int

    @classmethod
    def from_row(cls, row: Row) -> "WeeklyPlayerRow":
        cols = constants.WEEKLY_DATA_COLUMNS
        return cls(
            week_period=_cell(row, cols["week_period"]),
            club_id=_cell(row, cols["club_id"]),
            nickname=_cell(row, cols["nickname"]),
            player_id=_cell(row, cols["player_id"]),
            remark=_cell(row, cols["remark"]),
            agent_name=_cell(row, cols["agent_name"]),
            agent_id=_cell(row, cols["agent_id"]),
            country=_cell(row, cols["country"]),
            revenue_cents=_points_to_cents(row, cols["revenue"]),
            rake_cents=_points_to_cents(row, cols["rake"]),
        )


@dataclass
class CollectionRow:
    """
    集金データ 시트의 플레이어 1행 (집계기 입력)

    rakeback_rate는 플레이어 마스터에서 (player_id, agent_id)로 조인한 값
    """
    week_period: str
    agent_name: str
    agent_id: str
    nickname: str
    player_id: str
    revenue_cents: int
    rake_cents: int
    amount_yen: int
    rakeback_rate: Decimal = constants.DEFAULT_RAKEBACK_RATE

    @property
    def rakeback_cents(self) -> int:
        return money.rakeback_cents(self.rake_cents, self.rakeback_rate)

    @property
    def is_direct(self) -> bool:
        return not self.agent_id

    @property
    def is_agent_self(self) -> bool:
        """에이전트 본인 행 (player_id == agent_id)"""
        return bool(self.agent_id) and self.player_id == self.agent_id

    @classmethod
    def from_row(cls, row: Row) -> "CollectionRow":
        return cls(
            week_period=_cell(row, "週期間"),
            agent_name=_cell(row, "エージェント名"),
            agent_id=_cell(row, "エージェントID"),
            nickname=_cell(row, "プレーヤーニックネーム"),
            player_id=_cell(row, "プレーヤーID"),
            revenue_cents=_points_to_cents(row, "収益"),
            rake_cents=_points_to_cents(row, "レーキ"),
            amount_yen=money.round_whole(parse_decimal(_cell(row, "金額"), field="金額")),
            rakeback_rate=parse_rate(
                _cell(row, "レーキバックレート"), "レーキバックレート", constants.DEFAULT_RAKEBACK_RATE
            ),
        )

    def to_sheet_row(self) -> List[str]:
        """COLLECTION_HEADERS 순서의 셀 값"""
        return [
            self.week_period,
            self.agent_name,
            self.agent_id,
            self.nickname,
            self.player_id,
            _format_points(self.revenue_cents),
            _format_points(self.rake_cents),
            format(self.rakeback_rate.normalize(), "f"),
            _format_points(self.rakeback_cents),
            str(self.amount_yen),
        ]


@dataclass
class AgentMasterRow:
    """エージェント 마스터 시트 1행"""
    agent_id: str
    agent_name: str
    remark: str = ""
    super_agent_id: str = ""
    super_agent_name: str = ""
    fee_rate: Optional[Decimal] = None  # 빈 셀은 None (기본값 적용은 집계 단계)

    @classmethod
    def from_row(cls, row: Row) -> "AgentMasterRow":
        raw_rate = _cell(row, "フィーレート")
        return cls(
            agent_id=_cell(row, "エージェントID"),
            agent_name=_cell(row, "エージェント名"),
            remark=_cell(row, "リマーク"),
            super_agent_id=_cell(row, "Super Agent ID"),
            super_agent_name=_cell(row, "Super Agent"),
            fee_rate=parse_rate(raw_rate, "フィーレート", constants.DEFAULT_FEE_RATE) if raw_rate else None,
        )


@dataclass
class PlayerMasterRow:
    """プレイヤー 마스터 시트 1행"""
    player_id: str
    nickname: str
    agent_id: str = ""
    agent_name: str = ""
    country: str = ""
    remark: str = ""
    rakeback_rate: Decimal = constants.DEFAULT_RAKEBACK_RATE

    @property
    def key(self):
        return (self.player_id, self.agent_id)

    @classmethod
    def from_row(cls, row: Row) -> "PlayerMasterRow":
        return cls(
            player_id=_cell(row, "プレーヤーID"),
            nickname=_cell(row, "ニックネーム"),
            agent_id=_cell(row, "エージェントID"),
            agent_name=_cell(row, "エージェント名"),
            country=_cell(row, "国/地域"),
            remark=_cell(row, "リマーク"),
            rakeback_rate=parse_rate(
                _cell(row, "レーキバックレート"), "レーキバックレート", constants.DEFAULT_RAKEBACK_RATE
            ),
        )


def attach_rakeback_rates(rows: List[CollectionRow], players: List[PlayerMasterRow]) -> List[CollectionRow]:
    """
    집금 행에 플레이어 마스터의 레이크백 레이트를 (player_id, agent_id)로 조인

    마스터에 없으면 0
    """
    rates = {p.key: p.rakeback_rate for p in players if p.player_id}
    for row in rows:
        row.rakeback_rate = rates.get((row.player_id, row.agent_id), constants.DEFAULT_RAKEBACK_RATE)
    return rows
