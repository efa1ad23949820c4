"""
입력 검증 모듈
==============
주기간 문자열, 원장 숫자 셀 검증

사용법:
    period = parse_week_period("2025-01-13〜2025-01-19")
    period.start  # "2025-01-13"
    rate = parse_decimal("0.15", field="レーキバックレート")
"""
import re
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from clubsync import constants
from clubsync.errors import ValidationError

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
SEPARATOR_PATTERN = re.compile("[" + "".join(constants.WEEK_PERIOD_SEPARATORS) + "]")


@dataclass(frozen=True)
class WeekPeriod:
    """주기간 (start〜end, YYYY-MM-DD)"""
    start: str
    end: str

    @property
    def key(self) -> str:
        """원장/Notion에서 쓰는 정규화된 문자열"""
        return f"{self.start}{constants.WEEK_PERIOD_JOINER}{self.end}"

    def __str__(self) -> str:
        return self.key


def _parse_iso_date(value: str, raw: str) -> date:
    if not DATE_PATTERN.match(value):
        raise ValidationError(f"주기간의 날짜 형식이 올바르지 않습니다 (YYYY-MM-DD): {raw}")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"존재하지 않는 날짜입니다: {raw}") from e


def parse_week_period(raw: str) -> WeekPeriod:
    """
    주기간 문자열 파싱

    Args:
        raw: "2025-01-13〜2025-01-19" (〜 또는 ～)

    Returns:
        WeekPeriod

    Raises:
        ValidationError: 형식 오류, 시작일 > 종료일
    """
    if not raw or not str(raw).strip():
        raise ValidationError("주기간이 비어 있습니다")

    parts = SEPARATOR_PATTERN.split(str(raw).strip())
    if len(parts) != 2:
        raise ValidationError(f"주기간 형식이 올바르지 않습니다: {raw}")

    start, end = parts[0].strip(), parts[1].strip()
    start_date = _parse_iso_date(start, raw)
    end_date = _parse_iso_date(end, raw)
    if start_date > end_date:
        raise ValidationError(f"주기간의 시작일이 종료일보다 늦습니다: {raw}")

    return WeekPeriod(start=start, end=end)


def parse_decimal(value: Any, field: str = "value", default: Optional[Decimal] = None) -> Decimal:
    """
    원장 셀 값을 Decimal로 변환

    빈 셀은 default (None이면 0), 쉼표 구분자는 제거

    Raises:
        ValidationError: 숫자가 아닌 경우
    """
    if value is None or str(value).strip() == "":
        return default if default is not None else Decimal("0")

    text = str(value).strip().replace(",", "")
    # 퍼센트 표기 ("15%")
    if text.endswith("%"):
        try:
            return Decimal(text[:-1].strip()) / 100
        except InvalidOperation as e:
            raise ValidationError(f"{field}: 숫자가 아닙니다: {value}") from e
    try:
        result = Decimal(text)
    except InvalidOperation as e:
        raise ValidationError(f"{field}: 숫자가 아닙니다: {value}") from e
    if not result.is_finite():
        raise ValidationError(f"{field}: 숫자가 아닙니다: {value}")
    return result


def parse_rate(value: Any, field: str, default: Decimal) -> Decimal:
    """
    비율(0~1) 파싱

    빈 셀은 default. 범위를 벗어나면 ValidationError
    """
    rate = parse_decimal(value, field=field, default=default)
    if rate < 0 or rate > 1:
        raise ValidationError(f"{field}: 0〜1 범위가 아닙니다: {value}")
    return rate


def normalize_period_text(raw: Any) -> str:
    """원장 셀의 주기간 문자열 비교용 정규화 (～ → 〜, 공백 제거)"""
    text = "" if raw is None else str(raw).strip()
    for sep in constants.WEEK_PERIOD_SEPARATORS:
        text = text.replace(sep, constants.WEEK_PERIOD_JOINER)
    return text.replace(" ", "")
