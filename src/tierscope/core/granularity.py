"""Granularity resolution for tiered queries."""

from datetime import datetime, timedelta

from tierscope.core.errors import InvalidGranularityError
from tierscope.core.models import Granularity

# Inclusive upper bound of the window length served by each tier, finest first.
RESOLUTION_POLICY: tuple[tuple[timedelta, Granularity], ...] = (
    (timedelta(hours=1), Granularity.ONE_MINUTE),
    (timedelta(hours=3), Granularity.FIVE_MINUTES),
    (timedelta(hours=24), Granularity.TEN_MINUTES),
)


def resolve_granularity(start: datetime, end: datetime) -> Granularity:
    """Pick the tier for a window so the result stays around 60-180 points.

    Args:
        start: Window start.
        end: Window end.

    Returns:
        ONE_MINUTE up to 1h, FIVE_MINUTES up to 3h, TEN_MINUTES up to 24h,
        ONE_HOUR beyond. Boundaries go to the finer tier.
    """
    duration = end - start
    for limit, granularity in RESOLUTION_POLICY:
        if duration <= limit:
            return granularity
    return Granularity.ONE_HOUR


def parse_granularity(
    value: Granularity | str, server_id: str | None = None
) -> Granularity:
    """Validate an explicit granularity.

    Accepts a Granularity member, its value ("1m", "5m", "10m", "1h") or its
    member name (case-insensitive). ``server_id`` only labels the error.

    Raises:
        InvalidGranularityError: If the value names no known tier.
    """
    if isinstance(value, Granularity):
        return value
    if isinstance(value, str):
        try:
            return Granularity(value)
        except ValueError:
            pass
        try:
            return Granularity[value.upper()]
        except KeyError:
            pass
    raise InvalidGranularityError(value, server_id)
