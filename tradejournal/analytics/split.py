"""Win / loss / breakeven split for the win-rate donut."""

from typing import Iterable

from tradejournal.analytics.summary import percentage
from tradejournal.models import OverallStats, Trade, WinLossSplit


def win_loss_split(wins: int, losses: int, breakeven: int) -> WinLossSplit:
    """Build a split from independently supplied counts.

    Raises:
        ValueError: If any count is negative.
    """
    if min(wins, losses, breakeven) < 0:
        raise ValueError(
            f"Counts must be non-negative, got wins={wins} losses={losses} breakeven={breakeven}"
        )
    total = wins + losses + breakeven
    return WinLossSplit(
        wins=wins,
        losses=losses,
        breakeven=breakeven,
        win_rate=percentage(wins, total),
    )


def split_from_trades(trades: Iterable[Trade]) -> WinLossSplit:
    """Count wins (pnl > 0), losses (pnl < 0) and breakeven trades (pnl == 0)."""
    wins = losses = breakeven = 0
    for trade in trades:
        if trade.pnl_net > 0:
            wins += 1
        elif trade.pnl_net < 0:
            losses += 1
        else:
            breakeven += 1
    return win_loss_split(wins, losses, breakeven)


def split_from_overall_stats(stats: OverallStats) -> WinLossSplit:
    """Adapt the store-side overall statistics to a split."""
    return win_loss_split(
        stats.winning_trades, stats.losing_trades, stats.breakeven_trades
    )
