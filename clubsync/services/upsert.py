"""
자연키 기반 upsert
==================
자연키 필터로 데이터소스를 조회해 있으면 갱신, 없으면 생성

동시 실행 주의:
    조회 → 쓰기는 원자적이지 않다. 같은 주기간에 대해 두 프로세스가 동시에
    동기화하면 중복 레코드가 생길 수 있다 (프로세스 간 잠금 없음).
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from clubsync import constants

logger = logging.getLogger(__name__)


@dataclass
class UpsertResult:
    """upsert 결과"""
    id: str
    created: bool


def iterate_pages(
    client,
    data_source_id: str,
    filter: Optional[Dict[str, Any]] = None,
    page_size: int = constants.NOTION_PAGE_SIZE,
) -> Iterator[Dict[str, Any]]:
    """
    쿼리 결과 전체 순회 (next_cursor 소진까지)

    Yields:
        페이지 객체
    """
    cursor = None
    while True:
        response = client.query_data_source(
            data_source_id, filter=filter, start_cursor=cursor, page_size=page_size
        )
        for page in response.get("results", []):
            yield page
        if not response.get("has_more") or not response.get("next_cursor"):
            break
        cursor = response["next_cursor"]


def find_by_key(client, data_source_id: str, key_filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """자연키로 살아 있는 페이지 1건 조회 (없으면 None)"""
    response = client.query_data_source(data_source_id, filter=key_filter, page_size=1)
    results = response.get("results", [])
    return results[0] if results else None


def upsert(
    client,
    data_source_id: str,
    key_filter: Dict[str, Any],
    properties: Dict[str, Any],
    template_id: Optional[str] = None,
) -> UpsertResult:
    """
    자연키로 조회 후 갱신 또는 생성

    Args:
        client: NotionClient 호환 객체
        data_source_id: 대상 데이터소스
        key_filter: 자연키 정확 일치 필터
        properties: 기록할 프로퍼티
        template_id: 신규 생성 시에만 적용할 템플릿

    Returns:
        UpsertResult
    """
    existing = find_by_key(client, data_source_id, key_filter)
    if existing:
        client.update_page(existing["id"], properties=properties)
        return UpsertResult(id=existing["id"], created=False)

    page = client.create_page(data_source_id, properties, template_id=template_id)
    logger.debug(f"페이지 생성: {page['id']}")
    return UpsertResult(id=page["id"], created=True)
