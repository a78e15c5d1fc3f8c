"""Cumulative P&L (equity curve) series."""

import logging
from typing import Iterable

from tradejournal.analytics.coerce import sort_by_entry
from tradejournal.models import EquityPoint, Trade

logger = logging.getLogger(__name__)


def build_equity_curve(trades: Iterable[Trade]) -> list[EquityPoint]:
    """Build the running P&L series ordered by entry time.

    One point per timed trade. The running sum depends only on trade order,
    not on the gaps between entries. Trades without an entry time are left
    out; use ``count_untimed`` to reconcile against totals.

    Args:
        trades: Trades in any order.

    Returns:
        List of EquityPoint, empty for empty input.
    """
    trades = list(trades)
    ordered = sort_by_entry(trades)
    if len(ordered) != len(trades):
        logger.debug("Equity curve skipped %d untimed trades", len(trades) - len(ordered))

    points = []
    running_pnl = 0.0
    for trade in ordered:
        running_pnl += trade.pnl_net
        points.append(
            EquityPoint(
                trade_id=trade.id,
                timestamp=trade.entry_time,
                date=trade.entry_time.date(),
                cumulative_pnl=running_pnl,
            )
        )
    return points
