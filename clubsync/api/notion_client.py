"""
Notion API 클라이언트 (data source 버전)
========================================
Bearer 인증, Rate Limit(평균 3/sec) 준수, 429/5xx 재시도

사용법:
    client = NotionClient(api_key="secret_...")
    page = client.query_data_source(ds_id, filter={"property": "エージェントID", "rich_text": {"equals": "A1"}})
    created = client.create_page(ds_id, properties={...})
    client.archive_page(created["id"])
"""
import time
import logging
from typing import Optional, Dict, Any

import requests

from clubsync import constants
from clubsync.errors import NotionAPIError
from clubsync.utils.retry import TRANSIENT_STATUSES, RetryConfig

logger = logging.getLogger(__name__)

# Retry-After 상한 (초)
MAX_RETRY_AFTER = 30.0


class NotionClient:
    """Notion REST API 클라이언트"""

    BASE_URL = constants.NOTION_API_BASE_URL
    RATE_LIMIT_INTERVAL = constants.NOTION_RATE_LIMIT_INTERVAL

    DATA_SOURCES_PATH = "/v1/data_sources"
    PAGES_PATH = "/v1/pages"

    def __init__(
        self,
        api_key: str,
        notion_version: str = constants.NOTION_API_VERSION,
        session: Optional[requests.Session] = None,
        retry: Optional[RetryConfig] = None,
    ):
        self.api_key = api_key
        self.notion_version = notion_version
        self.retry = retry or RetryConfig(max_attempts=3, base_delay=1.0)
        self._session = session or requests.Session()
        self._next_slot = 0.0

    def _throttle(self):
        """요청 간 최소 간격 유지"""
        wait = self._next_slot - time.monotonic()
        if wait > 0:
            time.sleep(wait)
        self._next_slot = time.monotonic() + self.RATE_LIMIT_INTERVAL

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Notion-Version": self.notion_version,
            "Content-Type": "application/json",
        }

    @staticmethod
    def _error_from(response) -> NotionAPIError:
        """실패 응답 → NotionAPIError (본문의 code / message 우선)"""
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return NotionAPIError(
            body.get("code") or str(response.status_code),
            body.get("message") or response.text,
            response.status_code,
        )

    def _send(self, method: str, url: str, data: Optional[Dict], timeout: int):
        """1회 전송 → (응답 또는 연결 예외, Retry-After 헤더)"""
        try:
            response = self._session.request(
                method=method, url=url, headers=self._headers(), json=data, timeout=timeout
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            return e, None
        except requests.RequestException as e:
            raise NotionAPIError("NETWORK_ERROR", f"요청 실패: {e}")
        return response, response.headers.get("Retry-After")

    def _request(
        self,
        method: str,
        path: str,
        data: Optional[Dict] = None,
        timeout: int = 30,
    ) -> Dict[str, Any]:
        """
        API 호출 (연결 오류 / 429 / 5xx 재시도)

        Raises:
            NotionAPIError: 2xx가 아닌 응답, 재시도 소진
        """
        url = f"{self.BASE_URL}{path}"
        attempts = self.retry.max_attempts

        for attempt in range(1, attempts + 1):
            self._throttle()
            logger.debug(f"Notion {method} {path} [{attempt}/{attempts}]")
            result, retry_after = self._send(method, url, data, timeout)

            if isinstance(result, Exception):
                if attempt == attempts:
                    raise NotionAPIError("NETWORK_ERROR", f"연결 오류: {result}")
                reason = f"연결 오류 {type(result).__name__}"
            elif result.status_code in TRANSIENT_STATUSES and attempt < attempts:
                reason = f"HTTP {result.status_code}"
            elif 200 <= result.status_code < 300:
                try:
                    return result.json()
                except ValueError:
                    raise NotionAPIError("INVALID_JSON", result.text, result.status_code)
            else:
                raise self._error_from(result)

            delay = self._calculate_retry_delay(attempt, retry_after)
            logger.warning(f"Notion {reason}, {delay:.1f}초 후 재시도 [{attempt}/{attempts}]")
            time.sleep(delay)

        raise NotionAPIError("MAX_RETRIES", "최대 재시도 횟수 초과")

    def _calculate_retry_delay(self, attempt: int, retry_after: Optional[str]) -> float:
        """Retry-After 헤더가 있으면 그 값, 없으면 지수 백오프"""
        if retry_after:
            try:
                return min(float(retry_after), MAX_RETRY_AFTER)
            except ValueError:
                logger.debug(f"Retry-After 해석 불가: {retry_after}")
        return self.retry.delay_for(attempt)

    # ─────────────────────────────────────────────
    # 데이터소스
    # ─────────────────────────────────────────────

    def query_data_source(
        self,
        data_source_id: str,
        filter: Optional[Dict[str, Any]] = None,
        start_cursor: Optional[str] = None,
        page_size: int = constants.NOTION_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """
        데이터소스 쿼리 (1페이지)

        Returns:
            {"results": [...], "has_more": bool, "next_cursor": str | None}
        """
        body: Dict[str, Any] = {"page_size": page_size}
        if filter:
            body["filter"] = filter
        if start_cursor:
            body["start_cursor"] = start_cursor
        return self._request("POST", f"{self.DATA_SOURCES_PATH}/{data_source_id}/query", body)

    def retrieve_data_source(self, data_source_id: str) -> Dict[str, Any]:
        """데이터소스 스키마 조회 (properties 포함)"""
        return self._request("GET", f"{self.DATA_SOURCES_PATH}/{data_source_id}")

    def update_data_source(self, data_source_id: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        """
        데이터소스 프로퍼티 편집

        값이 {"name": "새이름"}이면 이름 변경, 타입 정의면 추가
        """
        return self._request(
            "PATCH", f"{self.DATA_SOURCES_PATH}/{data_source_id}", {"properties": properties}
        )

    # ─────────────────────────────────────────────
    # 페이지
    # ─────────────────────────────────────────────

    def create_page(
        self,
        data_source_id: str,
        properties: Dict[str, Any],
        template_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        데이터소스에 페이지 생성

        Args:
            template_id: 생성 시 적용할 템플릿 페이지 ID
        """
        body: Dict[str, Any] = {
            "parent": {"type": "data_source_id", "data_source_id": data_source_id},
            "properties": properties,
        }
        if template_id:
            body["template"] = {"type": "template_id", "template_id": template_id}
        return self._request("POST", self.PAGES_PATH, body)

    def update_page(
        self,
        page_id: str,
        properties: Optional[Dict[str, Any]] = None,
        archived: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """페이지 프로퍼티 갱신 / 아카이브 플래그 변경"""
        body: Dict[str, Any] = {}
        if properties is not None:
            body["properties"] = properties
        if archived is not None:
            body["archived"] = archived
        return self._request("PATCH", f"{self.PAGES_PATH}/{page_id}", body)

    def archive_page(self, page_id: str) -> Dict[str, Any]:
        """페이지 아카이브 (소프트 삭제)"""
        logger.debug(f"페이지 아카이브: {page_id}")
        return self.update_page(page_id, archived=True)
