"""Per-day aggregates for the P&L calendar heatmap."""

from collections import defaultdict
from typing import Iterable

from tradejournal.analytics.summary import percentage
from tradejournal.models import CalendarDay, Trade


def calendar_days(trades: Iterable[Trade]) -> list[CalendarDay]:
    """Group trades by UTC entry date.

    Args:
        trades: Trades in any order. Untimed trades are skipped.

    Returns:
        One CalendarDay per traded date, ascending by date.
    """
    daily = defaultdict(lambda: {"pnl": 0.0, "rules_followed": 0, "total": 0})
    for trade in trades:
        if trade.entry_time is None:
            continue
        day = daily[trade.entry_time.date()]
        day["pnl"] += trade.pnl_net
        day["total"] += 1
        if trade.rules_followed:
            day["rules_followed"] += 1

    return [
        CalendarDay(
            date=day_date,
            pnl=data["pnl"],
            rules_followed_pct=percentage(data["rules_followed"], data["total"]),
            trade_count=data["total"],
        )
        for day_date, data in sorted(daily.items())
    ]
