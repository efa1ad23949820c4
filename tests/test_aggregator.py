"""
aggregator.py 테스트
====================
에이전트별 그룹핑, 본인 행 제외, 정렬, 피레이트 우선순위
"""
import sys
from decimal import Decimal
from pathlib import Path

# 프로젝트 루트 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from clubsync.models.ledger import AgentMasterRow, CollectionRow
from clubsync.services.aggregator import WeeklyTotals, group_by_agent, resolve_fee_rates
from clubsync.utils.collation import ja_sort_key

WEEK = "2025-01-13〜2025-01-19"


def make_row(agent_id, player_id, rake_points=0, rate="0", agent_name=None, amount_yen=0, revenue_points=0):
    return CollectionRow(
        week_period=WEEK,
        agent_name=agent_name if agent_name is not None else agent_id,
        agent_id=agent_id,
        nickname=f"nick-{player_id}",
        player_id=player_id,
        revenue_cents=revenue_points * 100,
        rake_cents=rake_points * 100,
        amount_yen=amount_yen,
        rakeback_rate=Decimal(rate),
    )


class TestGroupByAgent:
    """group_by_agent 테스트"""

    def test_scenario(self):
        """A1 하위 P1 + A1 본인 행"""
        rows = [
            make_row("A1", "P1", rake_points=1000, rate="0.1"),
            make_row("A1", "A1", rake_points=0),
        ]
        [summary] = group_by_agent(rows, {"A1": Decimal("0.7")})

        assert summary.total_rake_cents == 100000       # 1000pt
        assert summary.total_rakeback_cents == 10000    # ceil(1000 × 0.1) = 100pt
        assert summary.agent_reward == Decimal("600")
        assert summary.player_count == 2

    def test_self_row_excluded_from_rake(self):
        """본인 행만 있는 에이전트는 레이크/레이크백 0"""
        rows = [make_row("A1", "A1", rake_points=500, rate="0.3", amount_yen=7000)]
        [summary] = group_by_agent(rows, {"A1": Decimal("0.7")})

        assert summary.total_rake_cents == 0
        assert summary.total_rakeback_cents == 0
        assert summary.agent_reward_cents == 0
        # 金額 합계와 플레이어 목록에는 포함
        assert summary.total_amount_yen == 7000
        assert summary.player_count == 1

    def test_settlement_subtracts_reward(self):
        rows = [
            make_row("A1", "P1", rake_points=1000, rate="0.1", amount_yen=15000),
            make_row("A1", "A1", amount_yen=0),
        ]
        [summary] = group_by_agent(rows, {"A1": Decimal("0.7")})
        assert summary.agent_reward_yen == 60000
        assert summary.settlement_yen == 15000 - 60000

    def test_sort_order_direct_last(self):
        rows = [
            make_row("B1", "P1", agent_name="Bravo"),
            make_row("A1", "P2", agent_name="Alpha"),
            make_row("", "P3", agent_name=""),
        ]
        names = [s.agent_name for s in group_by_agent(rows, {})]
        assert names == ["Alpha", "Bravo", "直接"]

    def test_direct_sorted_last_regardless_of_name(self):
        rows = [
            make_row("", "P1", agent_name="あああ"),
            make_row("Z9", "P2", agent_name="ん"),
        ]
        summaries = group_by_agent(rows, {})
        assert summaries[-1].is_direct

    def test_direct_group_has_no_reward(self):
        rows = [make_row("", "P1", rake_points=100, rate="0.2")]
        [summary] = group_by_agent(rows, {})
        assert summary.is_direct
        assert summary.fee_rate == Decimal("0")
        assert summary.agent_reward_cents == 0
        # 하우스 합계를 위해 레이크/레이크백은 집계
        assert summary.total_rake_cents == 10000
        assert summary.total_rakeback_cents == 2000

    def test_default_fee_rate(self):
        rows = [make_row("A1", "P1", rake_points=100)]
        [summary] = group_by_agent(rows, {})
        assert summary.fee_rate == Decimal("0.70")
        assert summary.agent_reward_cents == 7000

    def test_agent_name_falls_back_to_id(self):
        rows = [make_row("A1", "P1", agent_name="")]
        [summary] = group_by_agent(rows, {})
        assert summary.agent_name == "A1"


class TestFeeRates:
    """피레이트 우선순위: Notion → 원장 → 기본값"""

    def test_store_wins_over_ledger(self):
        ledger = [AgentMasterRow(agent_id="A1", agent_name="Alpha", fee_rate=Decimal("0.6"))]
        rates = resolve_fee_rates({"A1": Decimal("0.5")}, ledger)
        assert rates["A1"] == Decimal("0.5")

    def test_ledger_used_when_store_missing(self):
        ledger = [AgentMasterRow(agent_id="A1", agent_name="Alpha", fee_rate=Decimal("0.6"))]
        rates = resolve_fee_rates({"A1": None}, ledger)
        assert rates["A1"] == Decimal("0.6")

    def test_blank_everywhere_not_in_map(self):
        ledger = [AgentMasterRow(agent_id="A1", agent_name="Alpha", fee_rate=None)]
        assert resolve_fee_rates({}, ledger) == {}


class TestWeeklyTotals:
    def test_house_profit(self):
        rows = [
            make_row("A1", "P1", rake_points=1000, rate="0.1"),
            make_row("A1", "A1"),
            make_row("", "P9", rake_points=300),
        ]
        totals = WeeklyTotals.from_summaries(group_by_agent(rows, {"A1": Decimal("0.7")}))
        assert totals.total_rake_cents == 130000
        assert totals.total_rakeback_cents == 10000
        assert totals.total_agent_fee_cents == 60000
        assert totals.house_profit_cents == 130000 - 10000 - 60000


class TestJaSortKey:
    def test_katakana_and_hiragana_interleave(self):
        names = ["いろは", "アルファ", "うさぎ"]
        assert sorted(names, key=ja_sort_key) == ["アルファ", "いろは", "うさぎ"]

    def test_fullwidth_latin_normalized(self):
        assert sorted(["Ｂravo", "alpha"], key=ja_sort_key) == ["alpha", "Ｂravo"]

    def test_voiced_kana_equal_to_base_at_first_level(self):
        assert sorted(["かz", "がa"], key=ja_sort_key) == ["がa", "かz"]
        assert sorted(["ハマ", "パイ"], key=ja_sort_key) == ["パイ", "ハマ"]

    def test_voiced_after_unvoiced_on_tie(self):
        assert sorted(["がき", "かき"], key=ja_sort_key) == ["かき", "がき"]

    def test_small_kana_equal_to_full_size(self):
        # きゃ는 1차에서 きや로 취급, 동률이면 작은 가나가 앞
        assert sorted(["きゆ", "きゃく"], key=ja_sort_key) == ["きゃく", "きゆ"]
        assert sorted(["きやく", "きゃく"], key=ja_sort_key) == ["きゃく", "きやく"]
