"""Data models for the trade journal."""

from tradejournal.models.trade import EMOTIONS, Trade
from tradejournal.models.strategy import Account, Rule, Strategy
from tradejournal.models.metrics import (
    NO_EMOTION,
    NO_RULE,
    CalendarDay,
    EquityPoint,
    HourlyPnl,
    OverallStats,
    RadarMetric,
    RuleCompliance,
    StrategyReport,
    StrategyStats,
    SummaryMetrics,
    WinLossSplit,
)

__all__ = [
    "EMOTIONS",
    "NO_EMOTION",
    "NO_RULE",
    "Trade",
    "Strategy",
    "Rule",
    "Account",
    "SummaryMetrics",
    "EquityPoint",
    "HourlyPnl",
    "WinLossSplit",
    "OverallStats",
    "StrategyStats",
    "RuleCompliance",
    "CalendarDay",
    "RadarMetric",
    "StrategyReport",
]
