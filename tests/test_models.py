"""
models 테스트
=============
원장 행 파싱, Notion 프로퍼티 변환, 자연키 필터
"""
import pytest
import sys
from decimal import Decimal
from pathlib import Path

# 프로젝트 루트 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from clubsync.constants import AgentProps, DetailProps, PlayerProps, SummaryProps, TotalProps
from clubsync.errors import ValidationError
from clubsync.models import (
    Agent,
    AgentMasterRow,
    CollectionRow,
    Player,
    PlayerMasterRow,
    WeeklyDetail,
    WeeklySummary,
    WeeklyTotal,
    attach_rakeback_rates,
)
from clubsync.models import properties as p
from clubsync.utils.validators import parse_week_period

WEEK = parse_week_period("2025-01-13〜2025-01-19")


class TestLedgerRows:
    """원장 행 → 레코드"""

    def test_collection_row(self):
        row = CollectionRow.from_row({
            "週期間": "2025-01-13〜2025-01-19",
            "エージェント名": "Alpha",
            "エージェントID": "A1",
            "プレーヤーニックネーム": "taro",
            "プレーヤーID": "P1",
            "収益": "-12.5",
            "レーキ": "3.33",
            "金額": "-1250",
        })
        assert row.revenue_cents == -1250
        assert row.rake_cents == 333
        assert row.amount_yen == -1250
        assert row.rakeback_rate == Decimal("0")
        assert not row.is_direct
        assert not row.is_agent_self

    def test_collection_row_bad_number(self):
        with pytest.raises(ValidationError, match="レーキ"):
            CollectionRow.from_row({"プレーヤーID": "P1", "レーキ": "x"})

    def test_to_sheet_row(self):
        row = CollectionRow(
            week_period="W", agent_name="Alpha", agent_id="A1", nickname="taro", player_id="P1",
            revenue_cents=5000, rake_cents=100000, amount_yen=15000, rakeback_rate=Decimal("0.1"),
        )
        assert row.to_sheet_row() == ["W", "Alpha", "A1", "taro", "P1", "50", "1000", "0.1", "100", "15000"]

    def test_agent_master_blank_fee(self):
        agent = AgentMasterRow.from_row({"エージェントID": "A1", "エージェント名": "Alpha", "フィーレート": ""})
        assert agent.fee_rate is None

    def test_attach_rakeback_rates_by_pair(self):
        rows = [
            CollectionRow("W", "Alpha", "A1", "taro", "P1", 0, 1000, 0),
            CollectionRow("W", "Bravo", "B1", "taro", "P1", 0, 1000, 0),
        ]
        players = [PlayerMasterRow(player_id="P1", nickname="taro", agent_id="A1", rakeback_rate=Decimal("0.2"))]
        attach_rakeback_rates(rows, players)
        assert rows[0].rakeback_rate == Decimal("0.2")
        # 같은 플레이어라도 다른 에이전트 아래면 별도
        assert rows[1].rakeback_rate == Decimal("0")


class TestStoreRecords:
    """Notion 레코드 ↔ 프로퍼티"""

    def test_agent_roundtrip(self):
        agent = Agent(agent_id="A1", name="Alpha", remark="アルファ", fee_rate=Decimal("0.70"))
        props = agent.to_properties()
        assert props[AgentProps.FEE_RATE] == {"number": 0.7}

        loaded = Agent.from_page({"id": "pg1", "properties": props})
        assert loaded.agent_id == "A1"
        assert loaded.remark == "アルファ"
        assert loaded.fee_rate == Decimal("0.7")
        assert loaded.page_id == "pg1"

    def test_player_key_without_agent(self):
        flt = Player.key_filter("P1", None)
        assert flt == {"and": [
            {"property": PlayerProps.PLAYER_ID, "rich_text": {"equals": "P1"}},
            {"property": PlayerProps.AGENT, "relation": {"is_empty": True}},
        ]}

    def test_player_relation_empty_without_agent(self):
        props = Player(player_id="P1", nickname="taro").to_properties()
        assert props[PlayerProps.AGENT] == {"relation": []}

    def test_summary_title_and_key(self):
        summary = WeeklySummary(
            week=WEEK, agent_page_id="ag1", display_name="アルファ",
            player_count=2, agent_reward_yen=60000, settlement_yen=-45000,
        )
        props = summary.to_properties()
        assert p.read_title(props, SummaryProps.TITLE) == "2025-01-13〜2025-01-19 - アルファ"
        assert props[SummaryProps.WEEK] == {"date": {"start": "2025-01-13", "end": "2025-01-19"}}
        assert WeeklySummary.key_filter(WEEK, "ag1")["and"][0] == {
            "property": SummaryProps.WEEK, "date": {"equals": "2025-01-13"}
        }

    def test_detail_player_relation_optional(self):
        detail = WeeklyDetail(
            summary_page_id="s1", player_id="P1", nickname="taro", revenue_yen=5000, rake_yen=100000,
            rakeback_rate=Decimal("0.1"), rakeback_yen=10000, settlement_yen=15000,
        )
        assert DetailProps.PLAYER not in detail.to_properties()
        detail.player_page_id = "pl1"
        assert detail.to_properties()[DetailProps.PLAYER] == {"relation": [{"id": "pl1"}]}

    def test_total_house_profit(self):
        total = WeeklyTotal(week=WEEK, total_rake_yen=150000, total_rakeback_yen=10000, total_agent_fee_yen=74000)
        assert total.house_profit_yen == 66000
        assert total.to_properties()[TotalProps.HOUSE_PROFIT] == {"number": 66000}

    def test_total_without_summaries_clears_relation(self):
        total = WeeklyTotal(week=WEEK, total_rake_yen=300, total_rakeback_yen=0, total_agent_fee_yen=0)
        assert total.to_properties()[TotalProps.SUMMARIES] == {"relation": []}


class TestPropertyHelpers:
    def test_read_missing_properties(self):
        assert p.read_text({}, "x") == ""
        assert p.read_number({}, "x") is None
        assert p.read_relation_ids({}, "x") == []
        assert p.read_date_start({}, "x") is None

    def test_plain_text_preferred(self):
        props = {"t": {"title": [{"plain_text": "abc", "text": {"content": "zzz"}}]}}
        assert p.read_title(props, "t") == "abc"

    def test_normalize_page_id(self):
        assert p.normalize_page_id("ABC-def-1") == "abcdef1"

    def test_all_of_single(self):
        cond = p.text_equals("x", "1")
        assert p.all_of(cond) is cond
