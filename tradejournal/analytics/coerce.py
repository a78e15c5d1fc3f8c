"""Record validation and time-axis partitioning for trade collections."""

import logging
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, Field, ValidationError

from tradejournal.models import Trade
from tradejournal.utils import coerce_number, to_utc

logger = logging.getLogger(__name__)

__all__ = [
    "RejectedRecord",
    "coerce_number",
    "count_untimed",
    "sort_by_entry",
    "timed_trades",
    "to_utc",
    "validate_trades",
]


class RejectedRecord(BaseModel):
    """A raw record that could not be turned into a Trade."""

    index: int = Field(..., ge=0, description="Position in the input batch")
    errors: list[str] = Field(default_factory=list, description="Validation messages")

    model_config = {"frozen": True}


def validate_trades(
    records: Iterable[Mapping[str, Any]],
) -> tuple[list[Trade], list[RejectedRecord]]:
    """Build Trade models from raw mappings.

    Records that fail validation (for example an unparseable timestamp) are
    reported back instead of aborting the whole batch. Records with a missing
    timestamp are kept; they are excluded later from time-keyed outputs.

    Args:
        records: Raw trade mappings (snake_case or camelCase keys).

    Returns:
        Tuple of (valid trades, rejected records).
    """
    trades: list[Trade] = []
    rejected: list[RejectedRecord] = []

    for index, record in enumerate(records):
        try:
            trades.append(Trade.model_validate(record))
        except ValidationError as e:
            messages = [
                f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
                for err in e.errors()
            ]
            rejected.append(RejectedRecord(index=index, errors=messages))

    logger.debug("Validated %d trade records, rejected %d", len(trades), len(rejected))
    return trades, rejected


def timed_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Trades that carry an entry timestamp, in input order."""
    return [t for t in trades if t.entry_time is not None]


def count_untimed(trades: Iterable[Trade]) -> int:
    """Number of trades excluded from hourly, calendar and equity outputs."""
    return sum(1 for t in trades if t.entry_time is None)


def sort_by_entry(trades: Iterable[Trade]) -> list[Trade]:
    """Timed trades sorted ascending by entry time; ties keep input order."""
    return sorted(timed_trades(trades), key=lambda t: t.entry_time)
