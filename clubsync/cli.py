"""
clubsync 명령행
===============

사용법:
    python -m clubsync collect                       # 최신 주기간 週次データ → 集金データ
    python -m clubsync collect "2025-01-13〜2025-01-19" --dry-run
    python -m clubsync migrate --dry-run             # Notion 스키마 변경 계획만 출력
    python -m clubsync sync                          # 최신 주기간 集金データ → Notion
    python -m clubsync sync "2025-01-13〜2025-01-19" --collection-sheet 集金データ
"""
import sys
import argparse
import logging
from typing import List, Optional

from dotenv import load_dotenv

from clubsync import __version__, constants
from clubsync.config import Settings
from clubsync.errors import ClubSyncError, ConfigurationError, NotFoundError

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("clubsync")


def setup_logging(level: str = "INFO"):
    """진행 로그는 stdout, 오류는 stderr"""
    out = logging.StreamHandler(sys.stdout)
    out.addFilter(lambda record: record.levelno < logging.ERROR)
    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.ERROR)
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, handlers=[out, err], force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clubsync", description="XPoker 클럽 주간 정산 동기화")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    collect = sub.add_parser("collect", help="週次データ → 集金データ 생성")
    collect.add_argument("week", nargs="?", default=None, help='주기간 (예: "2025-01-13〜2025-01-19"), 생략 시 최신')
    collect.add_argument("--source-sheet", default=constants.WEEKLY_DATA_SHEET, help="읽을 시트명")
    collect.add_argument("--target-sheet", default=constants.COLLECTION_SHEET, help="쓸 시트명")
    collect.add_argument("--player-sheet", default=constants.PLAYER_MASTER_SHEET, help="플레이어 마스터 시트명")
    collect.add_argument("--dry-run", action="store_true", help="시트에 쓰지 않고 결과만 출력")

    migrate = sub.add_parser("migrate", help="Notion 데이터소스 스키마 생성/갱신")
    migrate.add_argument("--dry-run", action="store_true", help="변경 계획만 출력")

    sync = sub.add_parser("sync", help="集金データ → Notion 동기화")
    sync.add_argument("week", nargs="?", default=None, help="주기간, 생략 시 최신")
    sync.add_argument("--collection-sheet", default=constants.COLLECTION_SHEET, help="집금 시트명")
    sync.add_argument("--agent-sheet", default=constants.AGENT_MASTER_SHEET, help="에이전트 마스터 시트명")
    sync.add_argument("--player-sheet", default=constants.PLAYER_MASTER_SHEET, help="플레이어 마스터 시트명")
    sync.add_argument("--dry-run", action="store_true", help="Notion에 쓰지 않고 계획만 출력")

    return parser


def run_collect(args, settings: Settings) -> int:
    from clubsync.services.client_factory import create_ledger
    from clubsync.services.collector import Collector, CollectSheets

    collector = Collector(
        create_ledger(settings),
        CollectSheets(source=args.source_sheet, target=args.target_sheet, players=args.player_sheet),
        report_dir=settings.report_dir,
    )
    result = collector.run(args.week, dry_run=args.dry_run)
    if not args.dry_run:
        logger.info(f"{args.target_sheet}: 기존 {result['deleted']}행 삭제, {result['added']}행 추가")
    return 0


def run_migrate(args, settings: Settings) -> int:
    from clubsync.services.client_factory import create_notion_client
    from clubsync.services.schema_evolver import NotionSchemaEvolver

    client = create_notion_client(settings)
    evolver = NotionSchemaEvolver(client, settings.data_source_ids, dry_run=args.dry_run)
    result = evolver.ensure_schema()
    if args.dry_run:
        logger.info(f"=== Dry-run 모드: 변경 예정 {len(result.changes)}건, 실제 변경 없음 ===")
    else:
        logger.info(f"스키마 갱신 완료: {len(result.changes)}건")
    return 0


def run_sync(args, settings: Settings) -> int:
    from clubsync.services.client_factory import create_ledger, create_notion_client
    from clubsync.services.reconciler import Reconciler, SyncSheets

    # 설정 누락은 I/O 전에 모두 확인
    settings.require_notion()
    settings.require_ledger()

    reconciler = Reconciler(
        create_notion_client(settings),
        create_ledger(settings),
        settings.data_source_ids,
        sheets=SyncSheets(
            collection=args.collection_sheet, agents=args.agent_sheet, players=args.player_sheet
        ),
        template_id=settings.notion_summary_template_id,
        public_site_url=settings.notion_public_site_url,
        report_dir=settings.report_dir,
    )
    result = reconciler.run(args.week, dry_run=args.dry_run)
    if not args.dry_run:
        logger.info(f"Notion 동기화 완료: 생성/변경 {result.total_changed}건")
    return 0


COMMANDS = {
    "collect": run_collect,
    "migrate": run_migrate,
    "sync": run_sync,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv()
    settings = Settings()
    setup_logging(settings.log_level)

    try:
        return COMMANDS[args.command](args, settings)
    except ConfigurationError as e:
        logger.error(e.message)
        for name in e.missing:
            logger.error(f"  - {name}")
        return 1
    except NotFoundError as e:
        logger.error(e.message)
        if e.available:
            logger.error("사용 가능한 값:")
            for value in e.available:
                logger.error(f"  - {value}")
        return 1
    except ClubSyncError as e:
        logger.error(str(e))
        return 1
