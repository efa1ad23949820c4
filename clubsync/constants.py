"""비즈니스 상수 - 매직넘버/컬럼명 중앙 관리"""
from decimal import Decimal

# 정산 규칙
DEFAULT_FEE_RATE = Decimal("0.70")       # 에이전트 피레이트 기본값 (Notion → 원장 → 기본값 순)
DEFAULT_RAKEBACK_RATE = Decimal("0")     # 플레이어 마스터에 없으면 레이크백 없음
POINT_TO_YEN = 100                       # 원장 포인트 1 = 100엔 (= 내부 정수 1센트당 1엔)

# "직접" 그룹 (에이전트 없는 플레이어)
DIRECT_AGENT_KEY = ""
DIRECT_AGENT_NAME = "直接"

# 주기간 구분자: 〜(U+301C) 또는 ～(U+FF5E)
WEEK_PERIOD_SEPARATORS = ("〜", "～")
WEEK_PERIOD_JOINER = "〜"

# ──── 원장(Google Sheets) 시트명 기본값 ────
WEEKLY_DATA_SHEET = "週次データ"
COLLECTION_SHEET = "集金データ"
AGENT_MASTER_SHEET = "エージェント"
PLAYER_MASTER_SHEET = "プレイヤー"

WEEK_PERIOD_HEADER = "週期間"

# 주간 데이터 (import 결과) - collect 입력
WEEKLY_DATA_COLUMNS = {
    "week_period": "週期間",
    "club_id": "クラブID",
    "nickname": "ニックネーム",
    "player_id": "プレーヤーID",
    "remark": "リマーク",
    "agent_name": "エージェント",
    "agent_id": "エージェントID",
    "country": "国/地域",
    "revenue": "プレーヤー収益_合計",
    "rake": "クラブレーキ_合計",
}

# 집금 데이터 - collect 출력 / sync 입력
COLLECTION_HEADERS = [
    "週期間",
    "エージェント名",
    "エージェントID",
    "プレーヤーニックネーム",
    "プレーヤーID",
    "収益",
    "レーキ",
    "レーキバックレート",
    "レーキバック",
    "金額",
]

AGENT_MASTER_HEADERS = [
    "エージェントID",
    "エージェント名",
    "リマーク",
    "Super Agent ID",
    "Super Agent",
    "フィーレート",
]

PLAYER_MASTER_HEADERS = [
    "プレーヤーID",
    "ニックネーム",
    "エージェントID",
    "エージェント名",
    "国/地域",
    "リマーク",
    "レーキバックレート",
]

# ──── Notion ────
NOTION_API_BASE_URL = "https://api.notion.com"
NOTION_API_VERSION = "2025-09-03"
NOTION_RATE_LIMIT_INTERVAL = 0.34  # 평균 3 req/sec
NOTION_PAGE_SIZE = 100             # query 최대 page_size

# 엔티티 타입 키 (데이터소스 ID 매핑용)
AGENT = "agent"
PLAYER = "player"
WEEKLY_SUMMARY = "weekly_summary"
WEEKLY_DETAIL = "weekly_detail"
WEEKLY_TOTAL = "weekly_total"

ENTITY_LABELS = {
    AGENT: "エージェントDB",
    PLAYER: "プレイヤーDB",
    WEEKLY_SUMMARY: "週次集金DB",
    WEEKLY_DETAIL: "週次集金個別DB",
    WEEKLY_TOTAL: "週次トータルDB",
}


class AgentProps:
    """エージェントDB 프로퍼티명"""
    NAME = "エージェント名"
    AGENT_ID = "エージェントID"
    REMARK = "リマーク"
    SUPER_AGENT = "Super Agent"
    FEE_RATE = "フィーレート"


class PlayerProps:
    """プレイヤーDB 프로퍼티명"""
    NICKNAME = "ニックネーム"
    PLAYER_ID = "プレイヤーID"
    AGENT = "エージェント"
    COUNTRY = "国/地域"
    REMARK = "リマーク"
    RAKEBACK_RATE = "レーキバックレート"


class SummaryProps:
    """週次集金DB 프로퍼티명"""
    TITLE = "タイトル"
    WEEK = "週期間"
    AGENT = "エージェント"
    PLAYER_COUNT = "プレイヤー数"
    AGENT_REWARD = "エージェント報酬"
    SETTLEMENT = "対ハウス精算金額"
    SETTLED = "精算済み"
    DETAILS = "週次集金個別"       # 週次集金個別DB 쪽 dual relation의 역방향
    TOTAL = "週次トータル"         # 週次トータルDB 쪽 dual relation의 역방향
    RAKE_SUM = "レーキ合計"
    RAKEBACK_SUM = "レーキバック合計"
    REVENUE_SUM = "成績合計"
    SETTLEMENT_SUM = "精算金額合計"


class DetailProps:
    """週次集金個別DB 프로퍼티명"""
    NICKNAME = "プレイヤー名"
    SUMMARY = "週次集金"
    PLAYER = "プレイヤー"
    PLAYER_ID = "プレイヤーID"
    REVENUE = "成績"
    RAKE = "レーキ"
    RAKEBACK_RATE = "レーキバックレート"
    RAKEBACK = "レーキバック"
    SETTLEMENT = "精算金額"


class TotalProps:
    """週次トータルDB 프로퍼티명"""
    TITLE = "タイトル"
    WEEK = "週期間"
    TOTAL_RAKE = "総レーキ"
    TOTAL_RAKEBACK = "総レーキバック"
    TOTAL_AGENT_FEE = "総エージェントフィー"
    HOUSE_PROFIT = "ハウス利益"
    SUMMARIES = "週次集金"
