"""Core domain models for tiered metrics queries."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class Granularity(str, Enum):
    """Resolution tier of precomputed rollup data.

    Members are declared finest-first; ``coarseness`` orders them so that
    ``ONE_HOUR > TEN_MINUTES > FIVE_MINUTES > ONE_MINUTE``.
    """

    ONE_MINUTE = "1m"
    FIVE_MINUTES = "5m"
    TEN_MINUTES = "10m"
    ONE_HOUR = "1h"

    @property
    def coarseness(self) -> int:
        """Position in the finest-to-coarsest ordering (0 is finest)."""
        return list(Granularity).index(self)


@dataclass(frozen=True)
class TimeRange:
    """A query window.

    Attributes:
        start: Inclusive lower bound.
        end: Inclusive upper bound. Callers keep ``end`` after ``start``;
             a zero-length range simply matches nothing.
    """

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class RollupPoint:
    """One pre-aggregated bucket read from a tier.

    Attributes:
        timestamp: Bucket start.
        cpu_avg, cpu_max, cpu_min: CPU usage percent.
        memory_avg, memory_max, memory_min: Memory usage percent.
        disk_avg, disk_max, disk_min: Disk usage percent. ``disk_min`` is
            None for tiers that do not track it.
        network_avg, network_max, network_min: Network throughput.
            ``network_min`` is None for tiers that do not track it.
        temperature_avg, temperature_max: CPU temperature in Celsius.
        load_avg, load_max: 1-minute load average.
        sample_count: Number of raw samples folded into this bucket.
    """

    timestamp: datetime
    cpu_avg: float = 0.0
    cpu_max: float = 0.0
    cpu_min: float = 0.0
    memory_avg: float = 0.0
    memory_max: float = 0.0
    memory_min: float = 0.0
    disk_avg: float = 0.0
    disk_max: float = 0.0
    disk_min: float | None = None
    network_avg: float = 0.0
    network_max: float = 0.0
    network_min: float | None = None
    temperature_avg: float = 0.0
    temperature_max: float = 0.0
    load_avg: float = 0.0
    load_max: float = 0.0
    sample_count: int = 0


@dataclass(frozen=True)
class HeatmapPoint:
    """Lightweight projection of a RollupPoint for heatmap rendering."""

    timestamp: datetime
    cpu_avg: float
    memory_avg: float
    disk_avg: float
    cpu_max: float
    memory_max: float
    disk_max: float
    sample_count: int


@dataclass(frozen=True)
class MetricAverages:
    """Average of each point's ``*_avg`` field over a point collection."""

    cpu: float = 0.0
    memory: float = 0.0
    disk: float = 0.0
    network: float = 0.0
    temperature: float = 0.0
    load: float = 0.0


@dataclass(frozen=True)
class MetricChanges:
    """Percentage change per metric between two MetricAverages."""

    cpu: float = 0.0
    memory: float = 0.0
    disk: float = 0.0
    network: float = 0.0
    temperature: float = 0.0
    load: float = 0.0


@dataclass(frozen=True)
class TieredQueryResult:
    """Points read from one tier for one server and window.

    Attributes:
        server_id: Server the points belong to.
        start: Requested window start.
        end: Requested window end.
        granularity: Tier the points were read from.
        points: Points ordered by timestamp ascending.
        total_points: Number of points returned, always ``len(points)``.
        message: Set when no data matched or when data outside the
                 requested window was substituted.
        truncated: True when more rows matched than the row cap allowed.
    """

    server_id: str
    start: datetime
    end: datetime
    granularity: Granularity
    points: list[RollupPoint] = field(default_factory=list)
    total_points: int = 0
    message: str | None = None
    truncated: bool = False


@dataclass(frozen=True)
class TimePeriod:
    """One side of a comparison with the tier it resolved to."""

    start: datetime
    end: datetime
    granularity: Granularity


@dataclass(frozen=True)
class MetricsComparison:
    """Period-over-period comparison of averaged metrics."""

    server_id: str
    period1: TimePeriod
    period2: TimePeriod
    averages1: MetricAverages
    averages2: MetricAverages
    changes: MetricChanges
    points1: list[RollupPoint] = field(default_factory=list)
    points2: list[RollupPoint] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardView:
    """Denormalized dashboard payload for a single server.

    ``message`` is None for a complete view. Otherwise it repeats the
    24-hour series' message (substituted or missing data) and names a
    best-effort component that could not be loaded, joined by "; ".
    """

    server_id: str
    current: RollupPoint
    granularity: Granularity
    points_24h: list[RollupPoint]
    trends: MetricChanges
    heatmap: list[HeatmapPoint]
    last_updated: datetime
    message: str | None = None


@dataclass(frozen=True)
class TierStats:
    """Storage statistics for one tier."""

    total_records: int = 0
    unique_servers: int = 0
    earliest_record: datetime | None = None
    latest_record: datetime | None = None
    storage_size: str | None = None


@dataclass(frozen=True)
class MetricsSummary:
    """Merged statistics across all tiers.

    Attributes:
        granularity_stats: Stats of every tier that answered.
        total_records: Sum of ``total_records`` over present tiers.
        unique_servers: Max of ``unique_servers`` over present tiers.
        tiers_missing: Tiers whose stats could not be read.
        last_updated: When the summary was built.
    """

    granularity_stats: dict[Granularity, TierStats]
    total_records: int
    unique_servers: int
    tiers_missing: list[Granularity]
    last_updated: datetime
