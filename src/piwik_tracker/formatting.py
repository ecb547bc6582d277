"""
Wire-level value formatting for tracking requests.

The collector parses numbers with a "." decimal separator and timestamps as
integer unix seconds, no matter where the tracker runs. Everything here is a
pure function so request composition stays reproducible in tests.
"""

import json
import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from urllib.parse import quote

from .errors import InvalidArgumentError

TWO_PLACES = Decimal("0.01")
LOCAL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _to_decimal(value: float) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidArgumentError(f"Expected a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidArgumentError(f"Cannot format non-finite value {value!r}")
    # repr() gives the shortest round-tripping form, so 1000.4 stays 1000.4
    return Decimal(repr(value)) if isinstance(value, float) else Decimal(value)


def _trim(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def format_monetary(value: float) -> str:
    """Format a money amount with at most two decimals.

    Trailing zeros are dropped: 1000.40 -> "1000.4", 45763756.0 -> "45763756".
    """
    amount = _to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return _trim(f"{amount:f}")


def format_number(value: float) -> str:
    """Format an arbitrary number without exponent or locale separators."""
    return _trim(f"{_to_decimal(value).normalize():f}")


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def format_unix_timestamp(instant: datetime) -> str:
    """Seconds since 1970-01-01T00:00:00Z, truncated toward zero."""
    return str(int(_as_utc(instant).timestamp()))


def to_unix_seconds(instant: datetime) -> int:
    return int(_as_utc(instant).timestamp())


def from_unix_seconds(seconds: int | float | str) -> datetime:
    return datetime.fromtimestamp(int(float(seconds)), tz=timezone.utc)


def format_local_datetime(instant: datetime) -> str:
    """Render the instant's own clock fields, no timezone conversion."""
    return instant.strftime(LOCAL_DATETIME_FORMAT)


def percent_encode(value: Any) -> str:
    """Percent-encode a query component (space becomes %20)."""
    return quote(str(value), safe="")


def to_json(value: Any) -> str:
    """Compact JSON as the collector and piwik.js produce it."""
    return json.dumps(value, separators=(",", ":"))
