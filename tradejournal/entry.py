"""Trade entry: turn journal-form inputs into a validated Trade.

The form records a trade date plus separate entry and exit clock times in
the trader's own timezone. Both are combined with the date, the exit is
moved to the next day when it would otherwise precede the entry (a trade
held over midnight), and everything is stored in UTC.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

import pytz

from tradejournal.models import Trade
from tradejournal.utils import coerce_number

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def parse_clock_time(value: str) -> time:
    """Parse an ``HH:MM`` or ``HH:MM:SS`` string.

    Raises:
        ValueError: If the string matches neither format.
    """
    text = (value or "").strip()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time '{value}'. Use HH:MM or HH:MM:SS")


def combine_entry_exit(
    trade_date: date,
    entry_time: str,
    exit_time: str,
    tz_name: str = "UTC",
) -> tuple[datetime, datetime]:
    """Combine a trade date with entry/exit clock times.

    Args:
        trade_date: Calendar date the trade was entered.
        entry_time: Entry clock time.
        exit_time: Exit clock time.
        tz_name: Timezone the clock times are expressed in.

    Returns:
        Tuple of (entry, exit) as aware UTC datetimes, exit >= entry.

    Raises:
        ValueError: On malformed times or an unknown timezone.
    """
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone '{tz_name}'")

    entry_naive = datetime.combine(trade_date, parse_clock_time(entry_time))
    exit_naive = datetime.combine(trade_date, parse_clock_time(exit_time))
    if exit_naive < entry_naive:
        exit_naive += timedelta(days=1)

    entry_local = tz.localize(entry_naive)
    exit_local = tz.localize(exit_naive)
    return entry_local.astimezone(pytz.utc), exit_local.astimezone(pytz.utc)


def build_trade(
    trade_date: date,
    entry_time: str,
    exit_time: str,
    pair: str,
    pnl: str,
    risk: Optional[str] = None,
    emotion: Optional[str] = None,
    trade_type: str = "buy",
    strategy_id: Optional[int] = None,
    account_id: Optional[int] = None,
    broken_rule_ids: Iterable[int] = (),
    setup_rating: Optional[str] = None,
    pre_trade_notes: Optional[str] = None,
    post_trade_notes: Optional[str] = None,
    tz_name: str = "UTC",
) -> Trade:
    """Build a Trade from form-style inputs.

    P&L text that is not numeric is recorded as 0; risk text that is not
    numeric is left empty. ``rules_followed`` is true when no rule id is
    marked as broken.

    Raises:
        ValueError: On malformed times or an unknown timezone.
        pydantic.ValidationError: If the resulting trade is invalid.
    """
    entry_utc, exit_utc = combine_entry_exit(trade_date, entry_time, exit_time, tz_name)

    return Trade(
        entry_time=entry_utc,
        exit_time=exit_utc,
        pair=pair,
        pnl_net=coerce_number(pnl),
        risk_amount=coerce_number(risk, default=None),
        emotion=emotion,
        trade_type=trade_type,
        rules_followed=not list(broken_rule_ids),
        setup_rating=setup_rating,
        pre_trade_notes=pre_trade_notes,
        post_trade_notes=post_trade_notes,
        strategy_id=strategy_id,
        account_id=account_id,
    )
