"""Query parameter parsing shared by framework adapters.

Times are RFC 3339 with an explicit offset; durations use the
``1h30m`` / ``90s`` / ``250ms`` notation.
"""

import re
from datetime import datetime, timedelta

from tierscope.core.errors import InvalidTimeRangeError
from tierscope.core.models import TimeRange

DEFAULT_MAX_WINDOW = timedelta(days=30)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}


def parse_timestamp(name: str, raw: str | None) -> datetime:
    """Parse a required RFC 3339 timestamp parameter.

    Args:
        name: Parameter name, used in error messages.
        raw: Raw parameter value.

    Raises:
        InvalidTimeRangeError: If missing, malformed, or without an offset.
    """
    if not raw:
        raise InvalidTimeRangeError(f"{name} is required")
    try:
        value = datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidTimeRangeError(f"invalid {name} time format, use RFC3339") from None
    if value.tzinfo is None:
        raise InvalidTimeRangeError(f"{name} must include a timezone offset")
    return value


def parse_window(
    start: str | None,
    end: str | None,
    max_window: timedelta | None = DEFAULT_MAX_WINDOW,
    prefix: str = "",
) -> TimeRange:
    """Parse and validate a start/end pair.

    Args:
        start: Raw start parameter.
        end: Raw end parameter.
        max_window: Longest accepted window; None disables the check.
        prefix: Parameter name prefix (e.g. "period1_") for error messages.

    Raises:
        InvalidTimeRangeError: If either bound is invalid, end precedes start,
            or the window exceeds ``max_window``.
    """
    start_time = parse_timestamp(f"{prefix}start", start)
    end_time = parse_timestamp(f"{prefix}end", end)
    if end_time < start_time:
        raise InvalidTimeRangeError("end time must be after start time")
    if max_window is not None and end_time - start_time > max_window:
        raise InvalidTimeRangeError(
            f"time range cannot exceed {max_window.days} days"
        )
    return TimeRange(start_time, end_time)


def parse_duration(raw: str) -> timedelta:
    """Parse a duration such as ``1h``, ``30m``, ``1h30m`` or ``90s``.

    Raises:
        InvalidTimeRangeError: If the value is empty, malformed, or zero.
    """
    text = raw.strip()
    parts = _DURATION_PART.findall(text)
    if not parts or "".join(number + unit for number, unit in parts) != text:
        raise InvalidTimeRangeError("invalid duration format")
    total = sum((_DURATION_UNITS[unit] * float(number) for number, unit in parts), timedelta())
    if total <= timedelta():
        raise InvalidTimeRangeError("duration must be positive")
    return total
