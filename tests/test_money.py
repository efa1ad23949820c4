"""
money.py 테스트
===============
정수 센트 변환, 레이크백/보수 올림 규칙
"""
import sys
from decimal import Decimal
from pathlib import Path

# 프로젝트 루트 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from clubsync.services import money


class TestToCents:
    """포인트 → 센트 (ROUND_HALF_UP)"""

    def test_exact(self):
        assert money.to_cents(Decimal("12.34")) == 1234

    def test_half_up(self):
        assert money.to_cents(Decimal("12.345")) == 1235
        assert money.to_cents(Decimal("0.005")) == 1

    def test_negative_half_away_from_zero(self):
        assert money.to_cents(Decimal("-0.005")) == -1

    def test_string_and_int(self):
        assert money.to_cents("3") == 300
        assert money.to_cents(7) == 700

    def test_float_uses_repr(self):
        # 0.1 + 0.2 같은 이진 오차가 센트에 새지 않음
        assert money.to_cents(1.15) == 115

    def test_from_cents(self):
        assert money.from_cents(1235) == Decimal("12.35")


class TestRakeback:
    """레이크백은 플레이어에게 유리하게 올림"""

    def test_ceil_not_round_down(self):
        assert money.rakeback_cents(333, Decimal("0.15")) == 50

    def test_exact_product(self):
        assert money.rakeback_cents(1000, Decimal("0.1")) == 100

    def test_zero_rate(self):
        assert money.rakeback_cents(12345, Decimal("0")) == 0


class TestAgentReward:
    """보수 = ceil(레이크 × 피레이트 - 레이크백)"""

    def test_scenario(self):
        assert money.agent_reward_cents(100000, 10000, Decimal("0.7")) == 60000

    def test_ceil_fraction(self):
        # 333 × 0.7 = 233.1 → 234
        assert money.agent_reward_cents(333, 0, Decimal("0.7")) == 234

    def test_negative_when_rakeback_exceeds_share(self):
        assert money.agent_reward_cents(1000, 900, Decimal("0.7")) == -200

    def test_negative_ceil_towards_zero(self):
        # 10 × 0.15 - 2 = -0.5 → 0
        assert money.agent_reward_cents(10, 2, Decimal("0.15")) == 0


class TestUnits:
    def test_cents_equal_yen(self):
        assert money.cents_to_yen(12345) == 12345

    def test_yen_to_points(self):
        assert money.yen_to_points(60000) == Decimal("600")

    def test_round_whole(self):
        assert money.round_whole(Decimal("1500.5")) == 1501
        assert money.round_whole("-20") == -20
