"""
재시도 모듈
===========
원장(Google Sheets) 호출의 일시 오류 재시도

재시도 대상:
    - 연결 끊김 / 타임아웃
    - HTTP 429, 5xx (googleapiclient HttpError는 e.resp.status, 그 외 e.status_code)

Notion 클라이언트는 Retry-After 헤더를 따르므로 자체 재시도 루프를 쓴다.

사용법:
    @retry_on_exception(max_attempts=3, base_delay=2.0)
    def execute(request):
        return request.execute()
"""
import time
import random
import logging
import functools
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple, Type

import requests

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS: Tuple[Type[Exception], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    ConnectionError,
    TimeoutError,
)
TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryConfig:
    """재시도 정책"""
    max_attempts: int = 3
    base_delay: float = 1.0   # 초
    max_delay: float = 30.0
    jitter: bool = True

    def delay_for(self, attempt: int) -> float:
        """attempt번째 실패 후 대기 시간 (2배씩 증가, ±25% 지터, 최소 0.1초)"""
        delay = min(self.base_delay * 2 ** (attempt - 1), self.max_delay)
        if self.jitter:
            delay += delay * random.uniform(-0.25, 0.25)
        return max(0.1, delay)


def http_status(exc: Exception) -> Optional[int]:
    """예외에 붙은 HTTP 상태 코드 (없으면 None)"""
    resp = getattr(exc, "resp", None)
    status = getattr(resp, "status", None) if resp is not None else getattr(exc, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def is_retryable(exc: Exception) -> bool:
    """일시 오류인지 판별"""
    if isinstance(exc, TRANSIENT_ERRORS):
        return True
    return http_status(exc) in TRANSIENT_STATUSES


def retry_on_exception(
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    config: Optional[RetryConfig] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
):
    """
    재시도 데코레이터

    Args:
        max_attempts: 최대 시도 횟수 (config 값을 덮어씀)
        base_delay: 첫 대기 시간 (초)
        config: RetryConfig (없으면 기본값)
        on_retry: 재시도 직전 콜백 (exception, attempt)

    일시 오류가 아니거나 시도 횟수를 다 쓰면 마지막 예외를 그대로 던진다.
    """
    policy = config or RetryConfig()
    if max_attempts is not None:
        policy = replace(policy, max_attempts=max_attempts)
    if base_delay is not None:
        policy = replace(policy, base_delay=base_delay)

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if attempt >= policy.max_attempts or not is_retryable(e):
                        if attempt > 1:
                            logger.error(f"{func.__name__}: {attempt}회 시도 후 실패: {e}")
                        raise
                    delay = policy.delay_for(attempt)
                    logger.warning(
                        f"{func.__name__}: {type(e).__name__} ({e}), "
                        f"{delay:.1f}초 후 재시도 [{attempt}/{policy.max_attempts}]"
                    )
                    if on_retry:
                        on_retry(e, attempt)
                    time.sleep(delay)
                    attempt += 1

        return wrapper
    return decorator
