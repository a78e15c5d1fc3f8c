"""Property-based tests for summary metrics and the win/loss split.

**Feature: trade-journal**
"""

from datetime import datetime

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.analytics import (
    most_frequent_label,
    split_from_overall_stats,
    split_from_trades,
    summarize_trades,
    win_loss_split,
)
from tradejournal.models import EMOTIONS, NO_EMOTION, OverallStats, Trade


def trade_strategy():
    """Generate valid Trade objects for testing."""
    return st.builds(
        Trade,
        id=st.none(),
        entry_time=st.one_of(
            st.none(),
            st.datetimes(min_value=datetime(2020, 1, 1), max_value=datetime(2025, 12, 31)),
        ),
        pnl_net=st.one_of(
            st.just(0.0),
            st.floats(min_value=-10000.0, max_value=10000.0, allow_nan=False, allow_infinity=False),
        ),
        rules_followed=st.booleans(),
        emotion=st.one_of(st.none(), st.sampled_from(EMOTIONS)),
    )


class TestSummaryTotals:
    """
    **Feature: trade-journal, Property 1: Total Correctness**

    *For any* set of trades, pnl_total equals the sum of pnl_net and the
    win rate partitions trades into pnl > 0 versus the rest.
    """

    @given(trades=st.lists(trade_strategy(), min_size=0, max_size=50))
    @settings(max_examples=100)
    def test_pnl_total_equals_sum(self, trades: list[Trade]):
        result = summarize_trades(trades)

        expected = sum(t.pnl_net for t in trades)
        assert abs(result.pnl_total - expected) < 0.01
        assert result.total_trades == len(trades)

    @given(trades=st.lists(trade_strategy(), min_size=1, max_size=50))
    @settings(max_examples=100)
    def test_win_rate_partition(self, trades: list[Trade]):
        result = summarize_trades(trades)

        wins = sum(1 for t in trades if t.pnl_net > 0)
        assert abs(result.win_rate - wins / len(trades) * 100) < 1e-9
        assert 0 <= result.win_rate <= 100

    @given(trades=st.lists(trade_strategy(), min_size=1, max_size=50))
    @settings(max_examples=100)
    def test_rule_compliance_rate(self, trades: list[Trade]):
        result = summarize_trades(trades)

        followed = sum(1 for t in trades if t.rules_followed)
        assert abs(result.rule_compliance_rate - followed / len(trades) * 100) < 1e-9

    @given(trades=st.lists(trade_strategy(), min_size=0, max_size=50))
    @settings(max_examples=50)
    def test_untimed_trades_counted(self, trades: list[Trade]):
        result = summarize_trades(trades)

        assert result.untimed_trades == sum(1 for t in trades if t.entry_time is None)


class TestEmptySummary:
    """
    **Feature: trade-journal, Property 2: Empty Safety**
    """

    def test_empty_trades_returns_zeros(self):
        result = summarize_trades([])

        assert result.total_trades == 0
        assert result.pnl_total == 0.0
        assert result.win_rate == 0.0
        assert result.rule_compliance_rate == 0.0
        assert result.most_frequent_emotion == NO_EMOTION
        assert result.untimed_trades == 0


class TestMostFrequentEmotion:
    """
    **Feature: trade-journal, Property 3: Most Frequent Emotion**

    Ties resolve to the label encountered first.
    """

    def test_highest_count_wins(self):
        trades = [
            Trade(emotion="Fear"),
            Trade(emotion="Patience"),
            Trade(emotion="Patience"),
            Trade(emotion=None),
        ]
        assert summarize_trades(trades).most_frequent_emotion == "Patience"

    def test_tie_goes_to_first_encountered(self):
        trades = [
            Trade(emotion="Fear"),
            Trade(emotion="Patience"),
            Trade(emotion="Patience"),
            Trade(emotion="Fear"),
        ]
        assert summarize_trades(trades).most_frequent_emotion == "Fear"

    def test_no_emotions_gives_sentinel(self):
        trades = [Trade(pnl_net=10), Trade(pnl_net=-5, emotion="  ")]
        assert summarize_trades(trades).most_frequent_emotion == NO_EMOTION

    @given(labels=st.lists(st.sampled_from(EMOTIONS), min_size=1, max_size=30))
    @settings(max_examples=100)
    def test_result_has_maximal_count(self, labels: list[str]):
        result = most_frequent_label(labels, NO_EMOTION)

        top = max(labels.count(label) for label in labels)
        assert labels.count(result) == top
        # Earliest label among those with the top count
        assert result == next(label for label in labels if labels.count(label) == top)


class TestScenario:
    """Three trades over two days."""

    def test_three_trade_summary(self):
        trades = [
            Trade(pnl_net=100, entry_time=datetime(2024, 3, 4, 10, 0)),
            Trade(pnl_net=-40, entry_time=datetime(2024, 3, 4, 14, 0)),
            Trade(pnl_net=60, entry_time=datetime(2024, 3, 5, 9, 0)),
        ]
        result = summarize_trades(trades)

        assert result.total_trades == 3
        assert result.pnl_total == pytest.approx(120)
        assert round(result.win_rate, 1) == 66.7

    def test_string_pnl_is_coerced(self):
        trades = [Trade(pnl_net="100.5"), Trade(pnl_net="oops"), Trade(pnl_net="-0.5")]
        result = summarize_trades(trades)

        assert result.pnl_total == pytest.approx(100.0)
        assert result.total_trades == 3


class TestWinLossSplit:
    """
    **Feature: trade-journal, Property 4: Win/Loss/Breakeven Split**
    """

    @given(trades=st.lists(trade_strategy(), min_size=0, max_size=50))
    @settings(max_examples=100)
    def test_counts_partition_trades(self, trades: list[Trade]):
        split = split_from_trades(trades)

        assert split.total == len(trades)
        assert split.wins == sum(1 for t in trades if t.pnl_net > 0)
        assert split.losses == sum(1 for t in trades if t.pnl_net < 0)
        assert split.breakeven == sum(1 for t in trades if t.pnl_net == 0)

    @given(trades=st.lists(trade_strategy(), min_size=0, max_size=50))
    @settings(max_examples=100)
    def test_split_agrees_with_summary(self, trades: list[Trade]):
        assert split_from_trades(trades).win_rate == summarize_trades(trades).win_rate

    def test_no_trades_state_is_distinguishable(self):
        empty = win_loss_split(0, 0, 0)
        all_losses = win_loss_split(0, 3, 0)

        assert empty.win_rate == 0.0
        assert not empty.has_trades
        assert all_losses.win_rate == 0.0
        assert all_losses.has_trades

    def test_single_breakeven_trade(self):
        split = split_from_trades([Trade(pnl_net=0)])

        assert split.win_rate == 0.0
        assert split.breakeven == 1
        assert split.has_trades

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            win_loss_split(1, -1, 0)

    def test_from_overall_stats(self):
        stats = OverallStats(winning_trades=3, losing_trades=1, breakeven_trades=0)
        split = split_from_overall_stats(stats)

        assert split.win_rate == pytest.approx(75.0)
        assert split.total == 4
