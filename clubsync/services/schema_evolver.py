"""
Notion 스키마 마이그레이션
==========================
선언 스키마(services/schema.py)에 맞게 데이터소스 프로퍼티를 추가/정리

규칙:
    - 없는 프로퍼티는 선언 타입으로 추가 (관계는 실제 데이터소스 ID로 연결)
    - 제목 프로퍼티 이름이 다르면 그 자리에서 이름 변경 (같은 이름의 일반 프로퍼티는 먼저 <이름>_old 로)
    - 타입이 다르거나 관계 대상이 다르면 기존 것을 <이름>_old 로 바꾼 뒤 새로 생성
    - 롤업은 라이브 스키마에서 child 엔티티를 가리키는 관계를 찾아 연결
    - 두 번 실행해도 두 번째는 변경 없음

사용법:
    evolver = NotionSchemaEvolver(client, settings.data_source_ids)
    result = evolver.ensure_schema()
    for change in result.changes:
        print(change)
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from clubsync import constants
from clubsync.errors import NotFoundError
from clubsync.models.properties import normalize_page_id
from clubsync.services.schema import (
    SCHEMAS,
    DualRelation,
    EntitySchema,
    PropertyKind,
    RELATION_KINDS,
    live_type,
    relation_mode,
    to_definition,
)

logger = logging.getLogger(__name__)

OLD_SUFFIX = "_old"


@dataclass
class SchemaChange:
    """스키마 변경 1건"""
    entity: str
    action: str  # add / rename / rename_title / recreate
    property: str
    detail: str = ""

    def __str__(self) -> str:
        label = constants.ENTITY_LABELS.get(self.entity, self.entity)
        suffix = f" ({self.detail})" if self.detail else ""
        return f"{label}: {self.action} {self.property}{suffix}"


@dataclass
class MigrationResult:
    """마이그레이션 결과"""
    dry_run: bool
    changes: List[SchemaChange] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def for_entity(self, entity: str) -> List[SchemaChange]:
        return [c for c in self.changes if c.entity == entity]


class NotionSchemaEvolver:
    """Notion 데이터소스 스키마 마이그레이션 헬퍼"""

    def __init__(
        self,
        client,
        data_source_ids: Dict[str, str],
        schemas: Optional[List[EntitySchema]] = None,
        dry_run: bool = False,
    ):
        self.client = client
        self.data_source_ids = data_source_ids
        self.schemas = schemas if schemas is not None else SCHEMAS
        self.dry_run = dry_run

    def get_live_properties(self, entity: str) -> Dict[str, Dict[str, Any]]:
        """데이터소스의 현재 프로퍼티 정의"""
        response = self.client.retrieve_data_source(self.data_source_ids[entity])
        return response.get("properties", {})

    def _apply(self, entity: str, edits: Dict[str, Any]):
        if not edits or self.dry_run:
            return
        self.client.update_data_source(self.data_source_ids[entity], edits)

    # ─── 판정 ───

    def _drift_reason(self, kind: PropertyKind, live: Dict[str, Any]) -> Optional[str]:
        """기존 프로퍼티가 선언과 맞지 않는 이유 (맞으면 None)"""
        expected = live_type(kind)
        actual = live.get("type")
        if actual != expected:
            return f"타입 {actual} → {expected}"

        if isinstance(kind, RELATION_KINDS):
            relation = live.get("relation") or {}
            target = normalize_page_id(relation.get("data_source_id", ""))
            declared = normalize_page_id(self.data_source_ids[kind.target])
            if target != declared:
                return "관계 대상 불일치"
            mode = relation.get("type")
            if mode and mode != relation_mode(kind):
                return f"관계 종류 {mode} → {relation_mode(kind)}"
        return None

    @staticmethod
    def _free_old_name(name: str, live: Dict[str, Any]) -> str:
        candidate = f"{name}{OLD_SUFFIX}"
        n = 2
        while candidate in live:
            candidate = f"{name}{OLD_SUFFIX}{n}"
            n += 1
        return candidate

    # ─── 1단계: 제목 + 일반 프로퍼티 ───

    def ensure_properties(self, schema: EntitySchema, result: MigrationResult):
        live = self.get_live_properties(schema.entity)

        declared_title = schema.title_name
        live_title = next((n for n, p in live.items() if p.get("type") == "title"), None)
        if declared_title and live_title and declared_title != live_title:
            if declared_title in live:
                # 같은 이름의 일반 프로퍼티가 있으면 먼저 비켜 둔다
                old_name = self._free_old_name(declared_title, live)
                self._apply(schema.entity, {declared_title: {"name": old_name}})
                result.changes.append(
                    SchemaChange(schema.entity, "rename", declared_title, f"제목과 이름 충돌, 기존 → {old_name}")
                )
                live[old_name] = live.pop(declared_title)

            # 제목은 추가할 수 없으므로 이름만 변경
            self._apply(schema.entity, {live_title: {"name": declared_title}})
            result.changes.append(
                SchemaChange(schema.entity, "rename_title", declared_title, f"{live_title} → {declared_title}")
            )
            live[declared_title] = live.pop(live_title)

        renames: Dict[str, Any] = {}
        adds: Dict[str, Any] = {}
        for name, kind in schema.plain_properties().items():
            definition = to_definition(kind, self.data_source_ids)
            existing = live.get(name)
            if existing is None:
                adds[name] = definition
                result.changes.append(SchemaChange(schema.entity, "add", name, live_type(kind)))
                continue

            reason = self._drift_reason(kind, existing)
            if reason:
                old_name = self._free_old_name(name, live)
                renames[name] = {"name": old_name}
                adds[name] = definition
                result.changes.append(
                    SchemaChange(schema.entity, "recreate", name, f"{reason}, 기존 → {old_name}")
                )

        # 이름 변경이 먼저 반영돼야 같은 이름으로 생성 가능
        self._apply(schema.entity, renames)
        self._apply(schema.entity, adds)

    # ─── 2단계: 롤업 ───

    def resolve_relation_name(self, entity: str, child: str, live: Dict[str, Any]) -> str:
        """
        entity 쪽에서 child 데이터소스를 가리키는 관계 프로퍼티명

        child 스키마의 DualRelation 역관계 이름이 있으면 우선
        """
        child_ds = normalize_page_id(self.data_source_ids[child])
        candidates = [
            name for name, prop in live.items()
            if prop.get("type") == "relation"
            and normalize_page_id((prop.get("relation") or {}).get("data_source_id", "")) == child_ds
        ]

        expected = self._synced_name(entity, child)
        if expected and expected in candidates:
            return expected
        if candidates:
            return sorted(candidates)[0]
        if self.dry_run and expected:
            # dry-run에서는 1단계 관계가 아직 생성되지 않았을 수 있음
            return expected
        raise NotFoundError(
            f"{constants.ENTITY_LABELS.get(entity, entity)}에 "
            f"{constants.ENTITY_LABELS.get(child, child)}로의 관계가 없습니다",
            available=sorted(live),
        )

    def _synced_name(self, entity: str, child: str) -> Optional[str]:
        for schema in self.schemas:
            if schema.entity != child:
                continue
            for kind in schema.properties.values():
                if isinstance(kind, DualRelation) and kind.target == entity:
                    return kind.synced_name
        return None

    def ensure_rollups(self, schema: EntitySchema, result: MigrationResult):
        rollups = schema.rollups()
        if not rollups:
            return
        live = self.get_live_properties(schema.entity)

        renames: Dict[str, Any] = {}
        adds: Dict[str, Any] = {}
        relation_names: Dict[str, str] = {}
        for name, kind in rollups.items():
            if kind.child not in relation_names:
                relation_names[kind.child] = self.resolve_relation_name(schema.entity, kind.child, live)
            definition = to_definition(kind, self.data_source_ids, relation_names[kind.child])

            existing = live.get(name)
            if existing is None:
                adds[name] = definition
                result.changes.append(
                    SchemaChange(schema.entity, "add", name, f"rollup {relation_names[kind.child]}.{kind.rollup_property}")
                )
            elif existing.get("type") != "rollup":
                old_name = self._free_old_name(name, live)
                renames[name] = {"name": old_name}
                adds[name] = definition
                result.changes.append(
                    SchemaChange(schema.entity, "recreate", name, f"타입 {existing.get('type')} → rollup, 기존 → {old_name}")
                )

        self._apply(schema.entity, renames)
        self._apply(schema.entity, adds)

    # ─── 전체 ───

    def ensure_schema(self) -> MigrationResult:
        """
        전체 스키마 확인/갱신

        1단계에서 모든 엔티티의 일반 프로퍼티(관계 포함)를 맞춘 뒤
        2단계에서 롤업을 만든다 (롤업은 dual relation 역관계가 필요)

        Returns:
            MigrationResult
        """
        result = MigrationResult(dry_run=self.dry_run)

        for schema in self.schemas:
            logger.info(f"{constants.ENTITY_LABELS.get(schema.entity, schema.entity)} 스키마 확인")
            self.ensure_properties(schema, result)

        for schema in self.schemas:
            self.ensure_rollups(schema, result)

        for change in result.changes:
            logger.info(f"  {'(dry-run) ' if self.dry_run else ''}{change}")
        if not result.changed:
            logger.info("스키마는 최신입니다")
        return result
