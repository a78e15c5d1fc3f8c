"""Derived view models produced by the aggregation engine."""

from datetime import date as date_type
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

NO_EMOTION = "-"
NO_RULE = "N/A"


class SummaryMetrics(BaseModel):
    """Headline dashboard metrics."""

    total_trades: int = Field(..., ge=0, description="Number of trades")
    pnl_total: float = Field(..., description="Sum of net P&L")
    win_rate: float = Field(..., ge=0, le=100, description="Win rate percentage")
    rule_compliance_rate: float = Field(
        ..., ge=0, le=100, description="Percentage of trades with rules followed"
    )
    most_frequent_emotion: str = Field(
        default=NO_EMOTION, description="Most frequent emotion label"
    )
    untimed_trades: int = Field(
        default=0, ge=0, description="Trades without an entry timestamp"
    )

    model_config = {"frozen": True}


class EquityPoint(BaseModel):
    """One point of the cumulative P&L curve."""

    trade_id: Optional[int] = Field(default=None, description="Trade that closed this point")
    timestamp: datetime = Field(..., description="Trade entry timestamp (UTC)")
    date: date_type = Field(..., description="UTC calendar date of entry")
    cumulative_pnl: float = Field(..., description="Running P&L through this trade")

    model_config = {"frozen": True}


class HourlyPnl(BaseModel):
    """P&L summed over one UTC hour of the day."""

    hour: int = Field(..., ge=0, le=23, description="Hour of day (UTC)")
    pnl: float = Field(default=0.0, description="Summed P&L")

    model_config = {"frozen": True}


class WinLossSplit(BaseModel):
    """Win / loss / breakeven counts."""

    wins: int = Field(..., ge=0)
    losses: int = Field(..., ge=0)
    breakeven: int = Field(..., ge=0)
    win_rate: float = Field(..., ge=0, le=100, description="Win rate percentage")

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.breakeven

    @property
    def has_trades(self) -> bool:
        """False for the "no trades" state, which renders differently from 0%."""
        return self.total > 0


class OverallStats(BaseModel):
    """Shape of the store-side overall statistics shortcut."""

    winning_trades: int = Field(default=0, ge=0)
    losing_trades: int = Field(default=0, ge=0)
    breakeven_trades: int = Field(default=0, ge=0)
    most_frequent_emotion: Optional[str] = Field(default=None)

    model_config = {"frozen": True}


class StrategyStats(BaseModel):
    """Headline metrics for a single strategy."""

    realized_win_pct: float = Field(..., ge=0, le=100)
    rules_followed_win_pct: float = Field(..., ge=0, le=100)
    current_streak: int = Field(..., ge=0)
    most_broken_rule: str = Field(default=NO_RULE)
    most_broken_is_rule: bool = Field(
        default=False, description="most_broken_rule is a rule id, not a strategy id"
    )

    model_config = {"frozen": True}


class RuleCompliance(BaseModel):
    """Compliance figures for one rule."""

    rule_id: Optional[int] = Field(default=None)
    rule_text: str = Field(...)
    broken_count: int = Field(..., ge=0)
    total_trades: int = Field(..., ge=0)
    compliance_pct: float = Field(..., ge=0, le=100)

    model_config = {"frozen": True}


class CalendarDay(BaseModel):
    """Aggregates for one calendar day of trading."""

    date: date_type = Field(..., description="UTC entry date")
    pnl: float = Field(..., description="Summed P&L")
    rules_followed_pct: float = Field(..., ge=0, le=100)
    trade_count: int = Field(..., ge=0)

    model_config = {"frozen": True}


class RadarMetric(BaseModel):
    """A named raw value for the comparative radar chart."""

    name: str
    value: float

    model_config = {"frozen": True}


class StrategyReport(BaseModel):
    """Everything shown on a strategy report."""

    strategy_name: str
    stats: StrategyStats
    equity_curve: list[EquityPoint]
    radar: list[RadarMetric]
    rule_compliance: list[RuleCompliance]
    calendar: list[CalendarDay]
    untimed_trades: int = Field(default=0, ge=0)

    model_config = {"frozen": True}
