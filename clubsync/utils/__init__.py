"""유틸리티 모듈"""

from .retry import retry_on_exception, RetryConfig
from .sync_logger import SyncLogger, SyncResult
from .validators import WeekPeriod, parse_week_period, parse_decimal, parse_rate, normalize_period_text
from .collation import ja_sort_key

__all__ = [
    "retry_on_exception",
    "RetryConfig",
    "SyncLogger",
    "SyncResult",
    "WeekPeriod",
    "parse_week_period",
    "parse_decimal",
    "parse_rate",
    "normalize_period_text",
    "ja_sort_key",
]
