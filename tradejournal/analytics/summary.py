"""Headline dashboard metrics."""

from typing import Iterable, Optional

from tradejournal.analytics.coerce import count_untimed
from tradejournal.models import NO_EMOTION, SummaryMetrics, Trade


def percentage(part: int, whole: int) -> float:
    """Return part/whole as a percentage, 0.0 when whole is 0."""
    return (part / whole) * 100 if whole > 0 else 0.0


def most_frequent_label(labels: Iterable[Optional[str]], sentinel: str) -> str:
    """Return the most frequent non-empty label.

    Ties go to the label encountered first. Returns ``sentinel`` when there
    are no labels.
    """
    counts: dict[str, int] = {}
    for label in labels:
        if label:
            counts[label] = counts.get(label, 0) + 1

    best = sentinel
    best_count = 0
    for label, count in counts.items():
        if count > best_count:
            best, best_count = label, count
    return best


def summarize_trades(trades: Iterable[Trade]) -> SummaryMetrics:
    """Calculate headline metrics from a list of trades.

    Args:
        trades: Trades in any order.

    Returns:
        SummaryMetrics. An empty list yields zeros and the "-" emotion.
    """
    trades = list(trades)
    total_trades = len(trades)

    pnl_total = 0.0
    winning_trades = 0
    rules_complied = 0
    for trade in trades:
        pnl_total += trade.pnl_net
        if trade.pnl_net > 0:
            winning_trades += 1
        if trade.rules_followed:
            rules_complied += 1

    return SummaryMetrics(
        total_trades=total_trades,
        pnl_total=pnl_total,
        win_rate=percentage(winning_trades, total_trades),
        rule_compliance_rate=percentage(rules_complied, total_trades),
        most_frequent_emotion=most_frequent_label(
            (t.emotion for t in trades), NO_EMOTION
        ),
        untimed_trades=count_untimed(trades),
    )
