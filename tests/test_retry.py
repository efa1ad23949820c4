"""
retry.py 테스트
"""
import pytest
import sys
from pathlib import Path

import requests

# 프로젝트 루트 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from clubsync.utils.retry import RetryConfig, http_status, is_retryable, retry_on_exception


class StatusError(Exception):
    def __init__(self, status_code):
        self.status_code = status_code
        super().__init__(f"status {status_code}")


class TestIsRetryable:
    """재시도 대상 판별"""

    def test_network_errors(self):
        assert is_retryable(requests.exceptions.ConnectionError())
        assert is_retryable(TimeoutError())

    def test_status_codes(self):
        assert is_retryable(StatusError(429))
        assert is_retryable(StatusError(503))
        assert not is_retryable(StatusError(404))

    def test_other_errors(self):
        assert not is_retryable(ValueError("bad"))


class TestRetryDecorator:
    """retry_on_exception"""

    @pytest.fixture(autouse=True)
    def no_sleep(self, monkeypatch):
        self.sleeps = []
        monkeypatch.setattr("clubsync.utils.retry.time.sleep", lambda s: self.sleeps.append(s))

    def test_succeeds_after_retries(self):
        calls = []

        @retry_on_exception(max_attempts=3, base_delay=1.0)
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise StatusError(502)
            return "ok"

        assert flaky() == "ok"
        assert len(calls) == 3
        assert len(self.sleeps) == 2

    def test_gives_up(self):
        @retry_on_exception(max_attempts=2, base_delay=0.1)
        def always_down():
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            always_down()
        assert len(self.sleeps) == 1

    def test_non_retryable_raised_immediately(self):
        @retry_on_exception(max_attempts=5)
        def broken():
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            broken()
        assert self.sleeps == []

    def test_on_retry_callback(self):
        seen = []
        attempts = []

        @retry_on_exception(config=RetryConfig(max_attempts=2, jitter=False), on_retry=lambda e, n: seen.append(n))
        def once():
            attempts.append(1)
            if len(attempts) == 1:
                raise TimeoutError()
            return True

        assert once() is True
        assert seen == [1]
        assert self.sleeps == [1.0]


class TestRetryConfig:

    def test_exponential_without_jitter(self):
        config = RetryConfig(base_delay=1.0, jitter=False)
        assert config.delay_for(1) == 1.0
        assert config.delay_for(3) == 4.0

    def test_capped(self):
        assert RetryConfig(jitter=False).delay_for(10) == 30.0

    def test_minimum(self):
        assert RetryConfig(base_delay=0.01, jitter=False).delay_for(1) == 0.1

    def test_jitter_range(self):
        assert 1.5 <= RetryConfig(base_delay=2.0).delay_for(1) <= 2.5


class TestHttpStatus:

    def test_status_code_attribute(self):
        assert http_status(StatusError(503)) == 503

    def test_no_status(self):
        assert http_status(ValueError()) is None
