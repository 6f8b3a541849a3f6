"""Tiered metrics operations exposed to the service layer."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from tierscope.core.analysis import calculate_trend, compare_periods
from tierscope.core.errors import NoCurrentDataError
from tierscope.core.gateway import TierQueryGateway
from tierscope.core.granularity import parse_granularity
from tierscope.core.heatmap import build_heatmap
from tierscope.core.models import (
    DashboardView,
    Granularity,
    HeatmapPoint,
    MetricsComparison,
    MetricsSummary,
    TieredQueryResult,
    TierStats,
    TimePeriod,
    TimeRange,
)
from tierscope.core.stats import merge_tier_stats

logger = logging.getLogger(__name__)

DASHBOARD_WINDOW = timedelta(hours=24)
REALTIME_MAX_WINDOW = timedelta(hours=1)
HEATMAP_UNAVAILABLE = "Heatmap unavailable"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TieredMetricsService:
    """Query, trend, comparison, dashboard, heatmap and summary operations.

    Stateless apart from the gateway; every call is independent and safe to
    run concurrently.

    Args:
        gateway: TierQueryGateway bound to a rollup store.
        clock: Returns the current time. Tests pass a fixed clock.
    """

    def __init__(
        self,
        gateway: TierQueryGateway,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._gateway = gateway
        self._clock = clock

    async def query(
        self,
        server_id: str,
        start: datetime,
        end: datetime,
        granularity: Granularity | str | None = None,
    ) -> TieredQueryResult:
        """Points for a window, resolving the tier from its length unless given."""
        result = await self._gateway.query(server_id, start, end, granularity)
        logger.info(
            "Retrieved tiered metrics",
            extra={
                "server_id": server_id,
                "granularity": result.granularity.value,
                "data_points": result.total_points,
                "duration_s": (end - start).total_seconds(),
            },
        )
        return result

    async def get_realtime(
        self, server_id: str, duration: timedelta = REALTIME_MAX_WINDOW
    ) -> TieredQueryResult:
        """The last ``duration`` (at most one hour) at one-minute resolution."""
        duration = min(duration, REALTIME_MAX_WINDOW)
        end = self._clock()
        return await self._gateway.query(
            server_id, end - duration, end, Granularity.ONE_MINUTE
        )

    async def get_historical(
        self,
        server_id: str,
        start: datetime,
        end: datetime,
        granularity: Granularity | str,
    ) -> TieredQueryResult:
        """Points for a window at an explicitly chosen tier.

        Raises:
            InvalidGranularityError: If ``granularity`` names no known tier.
        """
        tier = parse_granularity(granularity, server_id)
        return await self.query(server_id, start, end, tier)

    async def get_heatmap(
        self, server_id: str, start: datetime, end: datetime
    ) -> list[HeatmapPoint]:
        """Heatmap projection of the tier resolved for the window."""
        result = await self._gateway.query(server_id, start, end, allow_fallback=False)
        return build_heatmap(result.points)

    async def compare(
        self, server_id: str, period1: TimeRange, period2: TimeRange
    ) -> MetricsComparison:
        """Compare averaged metrics of two windows.

        Each window resolves its own tier, and the comparison carries both.
        The empty-window fallback is never used here.
        """
        first = await self._gateway.query(
            server_id, period1.start, period1.end, allow_fallback=False
        )
        second = await self._gateway.query(
            server_id, period2.start, period2.end, allow_fallback=False
        )
        averages1, averages2, changes = compare_periods(first.points, second.points)
        return MetricsComparison(
            server_id=server_id,
            period1=TimePeriod(period1.start, period1.end, first.granularity),
            period2=TimePeriod(period2.start, period2.end, second.granularity),
            averages1=averages1,
            averages2=averages2,
            changes=changes,
            points1=first.points,
            points2=second.points,
        )

    async def build_dashboard(self, server_id: str) -> DashboardView:
        """Current reading, last 24 hours, trend and heatmap in one view.

        The current reading and the 24-hour series are required. The heatmap
        is best-effort: if it fails, the view is returned without one. The
        view's ``message`` carries the 24-hour series' message (e.g. when
        recent data was substituted for an empty window) and notes a missing
        heatmap; both are joined when they apply together.

        Raises:
            NoCurrentDataError: If the server has no one-minute data.
            StoreUnavailableError: If a required read fails.
        """
        current = await self._gateway.latest(server_id, Granularity.ONE_MINUTE)
        if current is None:
            raise NoCurrentDataError(server_id)

        end = self._clock()
        start = end - DASHBOARD_WINDOW
        window = await self._gateway.query(server_id, start, end)
        trends = calculate_trend(window.points)

        notes = [window.message] if window.message else []
        try:
            heatmap = await self.get_heatmap(server_id, start, end)
        except Exception:
            logger.warning(
                "Failed to get heatmap data", exc_info=True, extra={"server_id": server_id}
            )
            heatmap = []
            notes.append(HEATMAP_UNAVAILABLE)

        return DashboardView(
            server_id=server_id,
            current=current,
            granularity=window.granularity,
            points_24h=window.points,
            trends=trends,
            heatmap=heatmap,
            last_updated=self._clock(),
            message="; ".join(notes) or None,
        )

    async def summarize(self) -> MetricsSummary:
        """Merge storage statistics of all tiers.

        A tier whose stats cannot be read is logged and listed in
        ``tiers_missing``; the others are still summarized.
        """
        store = self._gateway.store
        present: dict[Granularity, TierStats] = {}
        missing: list[Granularity] = []
        for granularity in Granularity:
            source = self._gateway.config.source_for(granularity)
            try:
                present[granularity] = await store.tier_stats(source)
            except Exception:
                logger.warning(
                    "Failed to get tier stats",
                    exc_info=True,
                    extra={"granularity": granularity.value, "source": source},
                )
                missing.append(granularity)
        return merge_tier_stats(present, missing, now=self._clock())
