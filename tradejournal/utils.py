"""Value coercion helpers shared by models and analytics."""

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")

_MINUS_SIGNS = ("−", "–", "—")


def coerce_number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Coerce a loosely typed amount to a float.

    Accepts numbers and strings as typed into a journal or exported by a
    broker: thousands separators, currency symbols, accounting-style
    parentheses and trailing minus signs.

    Args:
        value: Raw value (number, string, None).
        default: Value returned when nothing numeric can be extracted.

    Returns:
        The parsed float, or ``default``. Never NaN or infinite.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else default

    text = str(value).strip()
    if not text:
        return default

    try:
        number = float(text)
        return number if math.isfinite(number) else default
    except ValueError:
        pass

    negative = text.startswith("(") and text.endswith(")")
    text = text.strip("()")
    for sign in _MINUS_SIGNS:
        text = text.replace(sign, "-")
    text = text.replace(",", "").replace("$", "").strip()

    if text.endswith("-"):
        negative = True
        text = text[:-1].strip()
    if text.startswith("-"):
        negative = True

    match = _NUMBER_RE.search(text)
    if not match:
        return default

    number = float(match.group(0))
    return -number if negative else number


def to_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
