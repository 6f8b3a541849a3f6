"""Merging of per-tier storage statistics."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

from tierscope.core.models import Granularity, MetricsSummary, TierStats


def merge_tier_stats(
    stats: Mapping[Granularity, TierStats],
    tiers_missing: Iterable[Granularity] = (),
    now: datetime | None = None,
) -> MetricsSummary:
    """Merge the stats of the tiers that answered into one summary.

    Records are summed. Servers are merged with max, not summed: every tier
    covers the same servers, so summing would count a server once per tier.
    """
    return MetricsSummary(
        granularity_stats=dict(stats),
        total_records=sum(s.total_records for s in stats.values()),
        unique_servers=max((s.unique_servers for s in stats.values()), default=0),
        tiers_missing=list(tiers_missing),
        last_updated=now or datetime.now(UTC),
    )
