"""
고정소수점 금액 계산
====================
모든 파생 금액은 정수 센트(포인트의 1/100 = 1엔)로 계산한다.
float 반올림은 사용하지 않는다.

반올림 규칙:
    to_cents   : ROUND_HALF_UP (0.5는 0에서 먼 쪽으로)
    레이크백    : 올림 (플레이어에게 유리하게)
    에이전트 보수: 올림
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from clubsync.constants import POINT_TO_YEN

Number = Union[Decimal, int, str]

CENTS_PER_UNIT = 100


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # float는 repr 문자열 경유로만 받는다 (이진 오차 방지)
        return Decimal(repr(value))
    return Decimal(str(value))


def to_cents(amount: Number) -> int:
    """
    금액(포인트) → 정수 센트

    Example:
        to_cents(Decimal("12.345")) -> 1235
        to_cents(Decimal("-0.005")) -> -1
    """
    scaled = _to_decimal(amount) * CENTS_PER_UNIT
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    """정수 센트 → 금액(포인트)"""
    return Decimal(cents) / CENTS_PER_UNIT


def round_whole(amount: Number) -> int:
    """이미 최소 단위(엔)인 값의 정수화 (ROUND_HALF_UP)"""
    return int(_to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def ceil_cents(value: Number) -> int:
    """센트 단위 값의 올림"""
    return int(math.ceil(_to_decimal(value)))


def rakeback_cents(rake_cents: int, rate: Number) -> int:
    """
    레이크백 = ceil(레이크 × 레이트)

    Example:
        rakeback_cents(333, Decimal("0.15")) -> 50  (49.95 → 50)
    """
    return ceil_cents(Decimal(rake_cents) * _to_decimal(rate))


def agent_reward_cents(total_rake_cents: int, total_rakeback_cents: int, fee_rate: Number) -> int:
    """
    에이전트 보수 = ceil(레이크합계 × 피레이트 - 레이크백합계)

    음수 가능 (레이크백 부담이 피 배분보다 큰 경우)
    """
    return ceil_cents(Decimal(total_rake_cents) * _to_decimal(fee_rate) - total_rakeback_cents)


def cents_to_yen(cents: int) -> int:
    """센트(포인트/100) → 엔. 포인트 1 = 100엔이므로 값 그대로"""
    return cents * POINT_TO_YEN // CENTS_PER_UNIT


def yen_to_points(yen: int) -> Decimal:
    """엔 → 포인트 (표시용)"""
    return Decimal(yen) / POINT_TO_YEN
