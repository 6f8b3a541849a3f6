"""tierscope: tiered rollup queries, trends and dashboards for server metrics.

Example:
    ```python
    from tierscope import InMemoryRollupStore, TierQueryGateway, TieredMetricsService

    store = InMemoryRollupStore()
    service = TieredMetricsService(TierQueryGateway(store))
    result = await service.query("srv-1", start, end)
    ```
"""

from tierscope.adapters.async_utils import run_sync
from tierscope.adapters.storage import InMemoryRollupStore, SQLiteRollupStore
from tierscope.core.alerts import evaluate_alerts
from tierscope.core.analysis import (
    calculate_averages,
    calculate_trend,
    compare_periods,
    percent_change,
)
from tierscope.core.config import TierQueryConfig
from tierscope.core.errors import (
    ConfigurationError,
    InvalidGranularityError,
    InvalidTimeRangeError,
    NoCurrentDataError,
    StoreUnavailableError,
    TierScopeError,
)
from tierscope.core.gateway import TierQueryGateway
from tierscope.core.granularity import parse_granularity, resolve_granularity
from tierscope.core.heatmap import build_heatmap
from tierscope.core.models import (
    DashboardView,
    Granularity,
    HeatmapPoint,
    MetricAverages,
    MetricChanges,
    MetricsComparison,
    MetricsSummary,
    RollupPoint,
    TieredQueryResult,
    TierStats,
    TimePeriod,
    TimeRange,
)
from tierscope.core.ports import RollupStorePort
from tierscope.core.service import TieredMetricsService
from tierscope.core.stats import merge_tier_stats

__all__ = [
    "ConfigurationError",
    "DashboardView",
    "Granularity",
    "HeatmapPoint",
    "InMemoryRollupStore",
    "InvalidGranularityError",
    "InvalidTimeRangeError",
    "MetricAverages",
    "MetricChanges",
    "MetricsComparison",
    "MetricsSummary",
    "NoCurrentDataError",
    "RollupPoint",
    "RollupStorePort",
    "SQLiteRollupStore",
    "StoreUnavailableError",
    "TierQueryConfig",
    "TierQueryGateway",
    "TierScopeError",
    "TierStats",
    "TieredMetricsService",
    "TieredQueryResult",
    "TimePeriod",
    "TimeRange",
    "build_heatmap",
    "calculate_averages",
    "calculate_trend",
    "compare_periods",
    "evaluate_alerts",
    "merge_tier_stats",
    "parse_granularity",
    "percent_change",
    "resolve_granularity",
    "run_sync",
]
