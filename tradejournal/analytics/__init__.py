"""Trade-performance aggregation engine.

Pure functions turning trade lists into dashboard and report view models.
"""

from tradejournal.analytics.calendar import calendar_days
from tradejournal.analytics.coerce import (
    RejectedRecord,
    count_untimed,
    sort_by_entry,
    timed_trades,
    validate_trades,
)
from tradejournal.analytics.equity import build_equity_curve
from tradejournal.analytics.hourly import hourly_pnl_from_buckets, hourly_pnl_from_trades
from tradejournal.analytics.split import (
    split_from_overall_stats,
    split_from_trades,
    win_loss_split,
)
from tradejournal.analytics.strategy import (
    build_strategy_report,
    current_streak,
    most_broken_identifier,
    most_broken_source,
    radar_metrics,
    rule_compliance,
    strategy_stats,
)
from tradejournal.analytics.summary import most_frequent_label, summarize_trades

__all__ = [
    "RejectedRecord",
    "build_equity_curve",
    "build_strategy_report",
    "calendar_days",
    "count_untimed",
    "current_streak",
    "hourly_pnl_from_buckets",
    "hourly_pnl_from_trades",
    "most_broken_identifier",
    "most_broken_source",
    "most_frequent_label",
    "radar_metrics",
    "rule_compliance",
    "sort_by_entry",
    "split_from_overall_stats",
    "split_from_trades",
    "strategy_stats",
    "summarize_trades",
    "timed_trades",
    "validate_trades",
    "win_loss_split",
]
