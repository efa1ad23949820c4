"""
Notion 데이터소스 스키마 선언
=============================
엔티티별 프로퍼티를 종류(제목/텍스트/숫자/날짜/체크박스/관계/롤업)로 선언하고
API 요청 정의로 변환

관계 대상은 엔티티 키로 선언하고, 실제 데이터소스 ID는 실행 시 주입한다.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from clubsync import constants
from clubsync.constants import AgentProps, PlayerProps, SummaryProps, DetailProps, TotalProps


@dataclass(frozen=True)
class Title:
    pass


@dataclass(frozen=True)
class RichText:
    pass


@dataclass(frozen=True)
class Number:
    format: str = "number"


@dataclass(frozen=True)
class Date:
    pass


@dataclass(frozen=True)
class Checkbox:
    pass


@dataclass(frozen=True)
class SingleRelation:
    """단방향 관계"""
    target: str


@dataclass(frozen=True)
class DualRelation:
    """양방향 관계 (대상 쪽에 synced_name 역관계가 생긴다)"""
    target: str
    synced_name: str


@dataclass(frozen=True)
class Rollup:
    """
    롤업

    relation 이름은 선언하지 않는다. child 엔티티를 가리키는 실제 관계를
    라이브 스키마에서 찾아 쓴다.
    """
    child: str
    rollup_property: str
    function: str = "sum"


PropertyKind = Union[Title, RichText, Number, Date, Checkbox, SingleRelation, DualRelation, Rollup]

RELATION_KINDS = (SingleRelation, DualRelation)


@dataclass
class EntitySchema:
    """엔티티 1종의 선언 스키마 (선언 순서 유지)"""
    entity: str
    properties: Dict[str, PropertyKind] = field(default_factory=dict)

    @property
    def title_name(self) -> Optional[str]:
        for name, kind in self.properties.items():
            if isinstance(kind, Title):
                return name
        return None

    def plain_properties(self) -> Dict[str, PropertyKind]:
        """제목/롤업을 제외한 프로퍼티"""
        return {
            name: kind for name, kind in self.properties.items()
            if not isinstance(kind, (Title, Rollup))
        }

    def rollups(self) -> Dict[str, Rollup]:
        return {name: kind for name, kind in self.properties.items() if isinstance(kind, Rollup)}


def live_type(kind: PropertyKind) -> str:
    """선언 종류 → 라이브 스키마의 type 문자열"""
    if isinstance(kind, Title):
        return "title"
    if isinstance(kind, RichText):
        return "rich_text"
    if isinstance(kind, Number):
        return "number"
    if isinstance(kind, Date):
        return "date"
    if isinstance(kind, Checkbox):
        return "checkbox"
    if isinstance(kind, RELATION_KINDS):
        return "relation"
    if isinstance(kind, Rollup):
        return "rollup"
    raise TypeError(f"알 수 없는 프로퍼티 종류: {kind!r}")


def relation_mode(kind: PropertyKind) -> str:
    """관계 종류 → single_property / dual_property"""
    if isinstance(kind, DualRelation):
        return "dual_property"
    if isinstance(kind, SingleRelation):
        return "single_property"
    raise TypeError(f"관계 프로퍼티가 아닙니다: {kind!r}")


def to_definition(
    kind: PropertyKind,
    data_source_ids: Dict[str, str],
    relation_name: Optional[str] = None,
) -> Dict:
    """
    선언 → data_sources.update 요청 정의

    Args:
        data_source_ids: 엔티티 키 → 데이터소스 ID (관계 대상)
        relation_name: 롤업이 참조할 관계 프로퍼티명
    """
    if isinstance(kind, Title):
        return {"title": {}}
    if isinstance(kind, RichText):
        return {"rich_text": {}}
    if isinstance(kind, Number):
        return {"number": {"format": kind.format}}
    if isinstance(kind, Date):
        return {"date": {}}
    if isinstance(kind, Checkbox):
        return {"checkbox": {}}
    if isinstance(kind, SingleRelation):
        return {
            "relation": {
                "data_source_id": data_source_ids[kind.target],
                "type": "single_property",
                "single_property": {},
            }
        }
    if isinstance(kind, DualRelation):
        return {
            "relation": {
                "data_source_id": data_source_ids[kind.target],
                "type": "dual_property",
                "dual_property": {"synced_property_name": kind.synced_name},
            }
        }
    if isinstance(kind, Rollup):
        if not relation_name:
            raise ValueError("롤업에는 관계 프로퍼티명이 필요합니다")
        return {
            "rollup": {
                "relation_property_name": relation_name,
                "rollup_property_name": kind.rollup_property,
                "function": kind.function,
            }
        }
    raise TypeError(f"알 수 없는 프로퍼티 종류: {kind!r}")


AGENT_SCHEMA = EntitySchema(constants.AGENT, {
    AgentProps.NAME: Title(),
    AgentProps.AGENT_ID: RichText(),
    AgentProps.REMARK: RichText(),
    AgentProps.SUPER_AGENT: RichText(),
    AgentProps.FEE_RATE: Number("percent"),
})

PLAYER_SCHEMA = EntitySchema(constants.PLAYER, {
    PlayerProps.NICKNAME: Title(),
    PlayerProps.PLAYER_ID: RichText(),
    PlayerProps.AGENT: SingleRelation(constants.AGENT),
    PlayerProps.COUNTRY: RichText(),
    PlayerProps.REMARK: RichText(),
    PlayerProps.RAKEBACK_RATE: Number("percent"),
})

WEEKLY_SUMMARY_SCHEMA = EntitySchema(constants.WEEKLY_SUMMARY, {
    SummaryProps.TITLE: Title(),
    SummaryProps.WEEK: Date(),
    SummaryProps.AGENT: SingleRelation(constants.AGENT),
    SummaryProps.PLAYER_COUNT: Number("number"),
    SummaryProps.AGENT_REWARD: Number("yen"),
    SummaryProps.SETTLEMENT: Number("yen"),
    SummaryProps.SETTLED: Checkbox(),
    SummaryProps.RAKE_SUM: Rollup(constants.WEEKLY_DETAIL, DetailProps.RAKE),
    SummaryProps.RAKEBACK_SUM: Rollup(constants.WEEKLY_DETAIL, DetailProps.RAKEBACK),
    SummaryProps.REVENUE_SUM: Rollup(constants.WEEKLY_DETAIL, DetailProps.REVENUE),
    SummaryProps.SETTLEMENT_SUM: Rollup(constants.WEEKLY_DETAIL, DetailProps.SETTLEMENT),
})

WEEKLY_DETAIL_SCHEMA = EntitySchema(constants.WEEKLY_DETAIL, {
    DetailProps.NICKNAME: Title(),
    DetailProps.SUMMARY: DualRelation(constants.WEEKLY_SUMMARY, SummaryProps.DETAILS),
    DetailProps.PLAYER: SingleRelation(constants.PLAYER),
    DetailProps.PLAYER_ID: RichText(),
    DetailProps.REVENUE: Number("yen"),
    DetailProps.RAKE: Number("yen"),
    DetailProps.RAKEBACK_RATE: Number("percent"),
    DetailProps.RAKEBACK: Number("yen"),
    DetailProps.SETTLEMENT: Number("yen"),
})

WEEKLY_TOTAL_SCHEMA = EntitySchema(constants.WEEKLY_TOTAL, {
    TotalProps.TITLE: Title(),
    TotalProps.WEEK: Date(),
    TotalProps.TOTAL_RAKE: Number("yen"),
    TotalProps.TOTAL_RAKEBACK: Number("yen"),
    TotalProps.TOTAL_AGENT_FEE: Number("yen"),
    TotalProps.HOUSE_PROFIT: Number("yen"),
    TotalProps.SUMMARIES: DualRelation(constants.WEEKLY_SUMMARY, SummaryProps.TOTAL),
})

# 관계 대상이 먼저 오도록 정렬
SCHEMAS: List[EntitySchema] = [
    AGENT_SCHEMA,
    PLAYER_SCHEMA,
    WEEKLY_SUMMARY_SCHEMA,
    WEEKLY_DETAIL_SCHEMA,
    WEEKLY_TOTAL_SCHEMA,
]
