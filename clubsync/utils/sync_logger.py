"""
동기화 로거 모듈
================
Notion 동기화 1회 실행의 엔티티별 생성/갱신/아카이브 기록, JSON 리포트 생성

사용법:
    run_log = SyncLogger("sync", week_period="2025-01-13〜2025-01-19")
    run_log.log_upsert("agent", created=True)
    run_log.log_archive("weekly_summary")
    run_log.log_skip("player", reason="에이전트 미등록", item_id="P1")
    report = run_log.end_sync()
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, asdict

logger = logging.getLogger(__name__)

# 기본 로그 디렉토리
DEFAULT_LOG_DIR = Path("logs")

COUNTER_KEYS = ("created", "updated", "archived", "skipped")


@dataclass
class SyncSkip:
    """건너뛴 항목 (실패가 아닌 정상 스킵)"""
    timestamp: str
    entity: str
    reason: str
    item_id: Optional[str] = None


@dataclass
class SyncResult:
    """동기화 결과 요약"""
    sync_type: str
    week_period: Optional[str]
    dry_run: bool
    started_at: str
    ended_at: str
    duration_seconds: float
    entities: Dict[str, Dict[str, int]]
    skips: List[Dict]
    links: Dict[str, str]

    @property
    def total_created(self) -> int:
        return sum(c.get("created", 0) for c in self.entities.values())

    @property
    def total_changed(self) -> int:
        """생성 + 갱신 + 아카이브 건수"""
        return sum(
            c.get("created", 0) + c.get("updated", 0) + c.get("archived", 0)
            for c in self.entities.values()
        )


class SyncLogger:
    """
    동기화 로거

    Attributes:
        sync_type: 동기화 유형 (sync, migrate, collect)
        log_dir: 리포트 저장 디렉토리
    """

    def __init__(
        self,
        sync_type: str,
        week_period: Optional[str] = None,
        log_dir: Optional[Path] = None,
        dry_run: bool = False,
        max_skips: int = 1000,
    ):
        self.sync_type = sync_type
        self.week_period = week_period
        self.log_dir = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
        self.dry_run = dry_run
        self.max_skips = max_skips

        self.started_at = datetime.now()
        self.ended_at: Optional[datetime] = None

        # 엔티티별 통계
        self._entities: Dict[str, Dict[str, int]] = {}
        self._skips: List[SyncSkip] = []
        # 주간 집금 공유 링크 (표시명 → URL)
        self._links: Dict[str, str] = {}

    def _counter(self, entity: str) -> Dict[str, int]:
        if entity not in self._entities:
            self._entities[entity] = {key: 0 for key in COUNTER_KEYS}
        return self._entities[entity]

    def log_upsert(self, entity: str, created: bool, count: int = 1):
        """생성/갱신 기록"""
        self._counter(entity)["created" if created else "updated"] += count

    def log_archive(self, entity: str, count: int = 1):
        """아카이브 기록"""
        self._counter(entity)["archived"] += count

    def log_skip(self, entity: str, reason: str, item_id: Optional[str] = None):
        """스킵 기록"""
        self._counter(entity)["skipped"] += 1
        if len(self._skips) < self.max_skips:
            self._skips.append(SyncSkip(
                timestamp=datetime.now().isoformat(),
                entity=entity,
                reason=str(reason)[:500],
                item_id=str(item_id) if item_id else None,
            ))

    def log_link(self, label: str, url: str):
        """공유 링크 기록"""
        self._links[label] = url

    def counts(self, entity: str) -> Dict[str, int]:
        """엔티티별 현재 통계"""
        return dict(self._counter(entity))

    def end_sync(self, save_report: bool = True) -> SyncResult:
        """
        실행 종료: 엔티티별 통계 로그, 리포트 저장 (dry-run 제외)

        Returns:
            SyncResult
        """
        self.ended_at = datetime.now()
        elapsed = (self.ended_at - self.started_at).total_seconds()

        result = SyncResult(
            sync_type=self.sync_type,
            week_period=self.week_period,
            dry_run=self.dry_run,
            started_at=self.started_at.isoformat(timespec="seconds"),
            ended_at=self.ended_at.isoformat(timespec="seconds"),
            duration_seconds=round(elapsed, 2),
            entities={entity: dict(c) for entity, c in self._entities.items()},
            skips=[asdict(s) for s in self._skips],
            links=dict(self._links),
        )

        for entity, c in self._entities.items():
            logger.info(
                f"[{self.sync_type}] {entity}: 생성 {c['created']} / 갱신 {c['updated']} / "
                f"아카이브 {c['archived']} / 스킵 {c['skipped']}"
            )
        logger.info(f"[{self.sync_type}] 완료 ({elapsed:.1f}초)")

        if save_report and not self.dry_run:
            write_report(result, self.log_dir)
        return result


def report_path(result: SyncResult, log_dir: Path) -> Path:
    """sync_20250120_093000.json 형식"""
    stamp = datetime.fromisoformat(result.started_at).strftime("%Y%m%d_%H%M%S")
    return Path(log_dir) / f"{result.sync_type}_{stamp}.json"


def write_report(result: SyncResult, log_dir: Path) -> Optional[Path]:
    """
    리포트 JSON 저장

    저장 실패는 동기화 결과를 바꾸지 않으므로 로그만 남긴다.
    """
    path = report_path(result, log_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(result), ensure_ascii=False, indent=2), encoding="utf-8")
    except OSError as e:
        logger.error(f"리포트 저장 실패 ({path}): {e}")
        return None
    logger.info(f"리포트: {path}")
    return path


def load_sync_report(path: Path) -> Optional[SyncResult]:
    """저장된 리포트 읽기 (없거나 깨졌으면 None)"""
    try:
        return SyncResult(**json.loads(Path(path).read_text(encoding="utf-8")))
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"리포트 읽기 실패 ({path}): {e}")
        return None


def list_sync_reports(log_dir: Path = DEFAULT_LOG_DIR, sync_type: Optional[str] = None, limit: int = 10) -> List[Path]:
    """최근 리포트 (파일명 역순)"""
    prefix = f"{sync_type}_" if sync_type else ""
    reports = sorted(Path(log_dir).glob(f"{prefix}*.json"), key=lambda p: p.name, reverse=True)
    return reports[:limit]
