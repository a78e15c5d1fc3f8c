"""Hour-of-day P&L histogram.

Hours are always taken from the UTC entry timestamp, so a trade lands in the
same bucket whatever timezone it was logged from.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable

from tradejournal.models import HourlyPnl, Trade
from tradejournal.utils import coerce_number

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def _dense(buckets: list[float]) -> list[HourlyPnl]:
    return [HourlyPnl(hour=hour, pnl=pnl) for hour, pnl in enumerate(buckets)]


def hourly_pnl_from_trades(trades: Iterable[Trade]) -> list[HourlyPnl]:
    """Sum P&L by UTC entry hour.

    Args:
        trades: Trades in any order. Untimed trades are skipped.

    Returns:
        Exactly 24 HourlyPnl entries, hour 0 first.
    """
    buckets = [0.0] * HOURS_PER_DAY
    for trade in trades:
        if trade.entry_time is None:
            continue
        buckets[trade.entry_time.hour] += trade.pnl_net
    return _dense(buckets)


def hourly_pnl_from_buckets(rows: Iterable[Any]) -> list[HourlyPnl]:
    """Expand sparse per-hour totals into the dense 24-bucket form.

    Accepts ``(hour, pnl)`` pairs or mappings with an ``hour`` key and a
    ``total_pnl`` (or ``pnl``) key, the shape returned by the store's
    ``get_pnl_by_hour`` shortcut.

    Args:
        rows: Sparse per-hour totals.

    Returns:
        Exactly 24 HourlyPnl entries, hour 0 first. Fractional hours and hours
        outside 0-23 are ignored; repeated hours are summed.
    """
    buckets = [0.0] * HOURS_PER_DAY
    for row in rows:
        if isinstance(row, Mapping):
            hour = row.get("hour")
            pnl = row.get("total_pnl", row.get("pnl"))
        else:
            hour, pnl = row

        if isinstance(hour, float) and not hour.is_integer():
            logger.warning("Ignoring hourly bucket with fractional hour %r", hour)
            continue
        try:
            hour = int(hour)
        except (TypeError, ValueError):
            logger.warning("Ignoring hourly bucket with invalid hour %r", hour)
            continue
        if not 0 <= hour < HOURS_PER_DAY:
            logger.warning("Ignoring hourly bucket for out-of-range hour %d", hour)
            continue

        buckets[hour] += coerce_number(pnl)
    return _dense(buckets)
