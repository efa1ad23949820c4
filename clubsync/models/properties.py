"""
Notion 프로퍼티 와이어 포맷 변환
================================
pages.create / pages.update 요청 값 생성(build_*)과
페이지 응답에서 값 읽기(read_*)

읽기 함수는 프로퍼티가 없거나 비어 있으면 기본값을 돌려준다.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

Properties = Dict[str, Any]


# ─── 요청 값 생성 ───

def build_title(content: str) -> Dict[str, Any]:
    return {"title": [{"text": {"content": content or ""}}]}


def build_rich_text(content: str) -> Dict[str, Any]:
    if not content:
        return {"rich_text": []}
    return {"rich_text": [{"text": {"content": content}}]}


def build_number(value) -> Dict[str, Any]:
    if value is None:
        return {"number": None}
    if isinstance(value, Decimal):
        # JSON 직렬화 가능한 값으로 (정수면 int)
        value = int(value) if value == value.to_integral_value() else float(value)
    return {"number": value}


def build_date(start: str, end: Optional[str] = None) -> Dict[str, Any]:
    return {"date": {"start": start, "end": end}}


def build_relation(page_ids: List[str]) -> Dict[str, Any]:
    return {"relation": [{"id": page_id} for page_id in page_ids]}


def build_checkbox(checked: bool) -> Dict[str, Any]:
    return {"checkbox": bool(checked)}


# ─── 응답 값 읽기 ───

def _plain_text(items: Optional[List[Dict[str, Any]]]) -> str:
    if not items:
        return ""
    parts = []
    for item in items:
        if "plain_text" in item:
            parts.append(item["plain_text"])
        else:
            parts.append(item.get("text", {}).get("content", ""))
    return "".join(parts)


def read_title(props: Properties, name: str) -> str:
    return _plain_text((props.get(name) or {}).get("title"))


def read_text(props: Properties, name: str) -> str:
    return _plain_text((props.get(name) or {}).get("rich_text"))


def read_number(props: Properties, name: str) -> Optional[Decimal]:
    value = (props.get(name) or {}).get("number")
    if value is None:
        return None
    return Decimal(str(value))


def read_relation_ids(props: Properties, name: str) -> List[str]:
    return [item["id"] for item in (props.get(name) or {}).get("relation") or [] if "id" in item]


def read_date_start(props: Properties, name: str) -> Optional[str]:
    date = (props.get(name) or {}).get("date")
    return date.get("start") if date else None


def normalize_page_id(page_id: str) -> str:
    """비교용 페이지 ID (하이픈 제거, 소문자)"""
    return (page_id or "").replace("-", "").lower()


# ─── 자연키 조회용 필터 ───

def text_equals(name: str, value: str) -> Dict[str, Any]:
    return {"property": name, "rich_text": {"equals": value}}


def date_equals(name: str, start: str) -> Dict[str, Any]:
    return {"property": name, "date": {"equals": start}}


def relation_contains(name: str, page_id: str) -> Dict[str, Any]:
    return {"property": name, "relation": {"contains": page_id}}


def relation_is_empty(name: str) -> Dict[str, Any]:
    return {"property": name, "relation": {"is_empty": True}}


def all_of(*conditions: Dict[str, Any]) -> Dict[str, Any]:
    if len(conditions) == 1:
        return conditions[0]
    return {"and": list(conditions)}
