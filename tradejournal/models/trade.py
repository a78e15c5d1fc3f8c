"""Trade data model."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tradejournal.utils import coerce_number, to_utc

# Emotion labels offered when logging a trade.
EMOTIONS = [
    "Confidence",
    "Patience",
    "Euphoria",
    "Neutral",
    "Anxiety",
    "Fear",
    "Frustration",
    "Revenge",
]


class Trade(BaseModel):
    """Represents a journaled trade with its outcome and context."""

    id: Optional[int] = Field(default=None, description="Database ID")
    entry_time: Optional[datetime] = Field(
        default=None, alias="entryTime", description="Entry timestamp (UTC)"
    )
    exit_time: Optional[datetime] = Field(
        default=None, alias="exitTime", description="Exit timestamp (UTC)"
    )
    pnl_net: float = Field(default=0.0, alias="pnlNet", description="Net P&L")
    pair: Optional[str] = Field(default=None, description="Instrument symbol")
    risk_amount: Optional[float] = Field(
        default=None, alias="riskAmount", description="Amount risked"
    )
    rules_followed: bool = Field(
        default=True, alias="rulesFollowed", description="No strategy rule broken"
    )
    emotion: Optional[str] = Field(default=None, description="Emotional state label")
    trade_type: Literal["buy", "sell"] = Field(
        default="buy", alias="tradeType", description="Trade direction"
    )
    setup_rating: Optional[str] = Field(
        default=None, alias="setupRating", description="Setup quality rating"
    )
    pre_trade_notes: Optional[str] = Field(
        default=None, alias="preTradeNotes", description="Notes before entry"
    )
    post_trade_notes: Optional[str] = Field(
        default=None, alias="postTradeNotes", description="Notes after exit"
    )
    strategy_id: Optional[int] = Field(
        default=None, alias="strategyId", description="Associated strategy ID"
    )
    account_id: Optional[int] = Field(
        default=None, alias="accountId", description="Associated account ID"
    )

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("entry_time", "exit_time", mode="before")
    @classmethod
    def _blank_timestamp_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("entry_time", "exit_time")
    @classmethod
    def _normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value) if value is not None else None

    @field_validator("pnl_net", mode="before")
    @classmethod
    def _coerce_pnl(cls, value) -> float:
        return coerce_number(value)

    @field_validator("risk_amount", mode="before")
    @classmethod
    def _coerce_risk(cls, value) -> Optional[float]:
        risk = coerce_number(value, default=None)
        if risk is None or risk <= 0:
            return None
        return risk

    @field_validator("pair", "emotion", "setup_rating", "pre_trade_notes", "post_trade_notes", mode="before")
    @classmethod
    def _blank_text_is_missing(cls, value):
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("pair")
    @classmethod
    def _upper_pair(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value

    @field_validator("trade_type", mode="before")
    @classmethod
    def _lower_trade_type(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _exit_not_before_entry(self) -> "Trade":
        if self.entry_time and self.exit_time and self.exit_time < self.entry_time:
            raise ValueError("exit_time must not precede entry_time")
        return self

    @property
    def is_timed(self) -> bool:
        """Whether the trade can be placed on a time axis."""
        return self.entry_time is not None
