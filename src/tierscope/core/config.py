"""Configuration for the tier query gateway."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from tierscope.core.errors import ConfigurationError
from tierscope.core.models import Granularity

DEFAULT_TIER_SOURCES: Mapping[Granularity, str] = MappingProxyType(
    {
        Granularity.ONE_MINUTE: "metrics_1m_avg",
        Granularity.FIVE_MINUTES: "metrics_5m_avg",
        Granularity.TEN_MINUTES: "metrics_10m_avg",
        Granularity.ONE_HOUR: "metrics_1h_avg",
    }
)

DEFAULT_ROW_CAP = 10_000
DEFAULT_FALLBACK_LIMIT = 100

FALLBACK_MESSAGE = "Showing available data (requested period had no data)"
NO_DATA_MESSAGE = "No data found in specified range"

# Source names are interpolated into SQL by database adapters.
_SOURCE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class TierQueryConfig:
    """Settings for TierQueryGateway.

    Attributes:
        tier_sources: Table or view name holding each tier's rollups.
        row_cap: Maximum points returned by a single range query.
        fallback_enabled: When a window has no rows, return the most recent
            rows of the tier instead of an empty result.
        fallback_limit: Maximum points returned by the fallback.
    """

    tier_sources: Mapping[Granularity, str] = field(
        default_factory=lambda: dict(DEFAULT_TIER_SOURCES)
    )
    row_cap: int = DEFAULT_ROW_CAP
    fallback_enabled: bool = True
    fallback_limit: int = DEFAULT_FALLBACK_LIMIT

    def __post_init__(self) -> None:
        missing = [g.value for g in Granularity if g not in self.tier_sources]
        if missing:
            raise ConfigurationError(f"no source configured for tiers: {missing}")
        for granularity, source in self.tier_sources.items():
            if not _SOURCE_NAME.match(source):
                raise ConfigurationError(
                    f"invalid source name for {granularity.value}: {source!r}"
                )
        if self.row_cap <= 0:
            raise ConfigurationError("row_cap must be positive")
        if self.fallback_limit <= 0:
            raise ConfigurationError("fallback_limit must be positive")

    def source_for(self, granularity: Granularity) -> str:
        """Return the source name for a tier."""
        return self.tier_sources[granularity]
