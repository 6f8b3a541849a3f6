"""Bounded range queries against the rollup tiers."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from tierscope.core.config import (
    FALLBACK_MESSAGE,
    NO_DATA_MESSAGE,
    TierQueryConfig,
)
from tierscope.core.errors import StoreUnavailableError, TierScopeError
from tierscope.core.granularity import parse_granularity, resolve_granularity
from tierscope.core.models import Granularity, RollupPoint, TieredQueryResult
from tierscope.core.ports import RollupStorePort

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_call(operation: str, server_id: str | None = None) -> AsyncIterator[None]:
    """Translate store failures into StoreUnavailableError.

    Cancellation is a BaseException and passes through untouched, as do
    errors the core raised itself.
    """
    try:
        yield
    except TierScopeError:
        raise
    except Exception as exc:
        raise StoreUnavailableError(operation, server_id) from exc


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class TierQueryGateway:
    """Issues bounded, ordered range queries against one tier per call.

    Args:
        store: Adapter implementing RollupStorePort.
        config: Tier-to-source mapping, row cap and fallback policy.
    """

    def __init__(
        self, store: RollupStorePort, config: TierQueryConfig | None = None
    ) -> None:
        self._store = store
        self._config = config or TierQueryConfig()

    @property
    def config(self) -> TierQueryConfig:
        return self._config

    @property
    def store(self) -> RollupStorePort:
        return self._store

    async def query(
        self,
        server_id: str,
        start: datetime,
        end: datetime,
        granularity: Granularity | str | None = None,
        allow_fallback: bool | None = None,
    ) -> TieredQueryResult:
        """Read one server's points for a window from a single tier.

        Args:
            server_id: Server to query.
            start: Window start (inclusive).
            end: Window end (inclusive).
            granularity: Tier to read. Resolved from the window length when None.
            allow_fallback: Overrides ``config.fallback_enabled`` for this call.

        Returns:
            TieredQueryResult with at most ``config.row_cap`` oldest-first
            points. When the window is empty and the fallback is enabled, the
            tier's most recent points are returned with a message saying so.

        Raises:
            InvalidGranularityError: If ``granularity`` names no known tier.
            StoreUnavailableError: If the store fails.
        """
        if granularity is None:
            tier = resolve_granularity(start, end)
        else:
            tier = parse_granularity(granularity, server_id)
        source = self._config.source_for(tier)
        fallback = (
            self._config.fallback_enabled if allow_fallback is None else allow_fallback
        )
        log_fields = {"server_id": server_id, "granularity": tier.value, "source": source}

        # An empty window matches nothing and never triggers the fallback.
        if end <= start:
            return await self._empty_result(server_id, start, end, tier, fallback=False)

        started = time.perf_counter()
        async with store_call("count_range", server_id):
            count = await self._store.count_range(source, server_id, start, end)
        logger.debug(
            "Data count check completed",
            extra={**log_fields, "count": count, "check_ms": _elapsed_ms(started)},
        )

        if count == 0:
            return await self._empty_result(server_id, start, end, tier, fallback)

        started = time.perf_counter()
        async with store_call("query_range", server_id):
            points = await self._store.query_range(
                source, server_id, start, end, self._config.row_cap
            )
        logger.debug(
            "Range query completed",
            extra={**log_fields, "data_points": len(points), "query_ms": _elapsed_ms(started)},
        )
        # Rows counted but gone by the time they were read.
        if not points:
            return await self._empty_result(server_id, start, end, tier, fallback)
        return TieredQueryResult(
            server_id=server_id,
            start=start,
            end=end,
            granularity=tier,
            points=points,
            total_points=len(points),
            truncated=count > len(points),
        )

    async def _empty_result(
        self,
        server_id: str,
        start: datetime,
        end: datetime,
        tier: Granularity,
        fallback: bool,
    ) -> TieredQueryResult:
        points: list[RollupPoint] = []
        if fallback:
            async with store_call("recent", server_id):
                points = await self._store.recent(
                    self._config.source_for(tier), server_id, self._config.fallback_limit
                )
        if points:
            logger.info(
                "Requested period had no data, substituting recent points",
                extra={
                    "server_id": server_id,
                    "granularity": tier.value,
                    "data_points": len(points),
                },
            )
            message = FALLBACK_MESSAGE
        else:
            logger.debug(
                "No data found, returning empty response",
                extra={"server_id": server_id, "granularity": tier.value},
            )
            message = NO_DATA_MESSAGE
        return TieredQueryResult(
            server_id=server_id,
            start=start,
            end=end,
            granularity=tier,
            points=points,
            total_points=len(points),
            message=message,
        )

    async def latest(
        self, server_id: str, granularity: Granularity = Granularity.ONE_MINUTE
    ) -> RollupPoint | None:
        """Return the most recent point of a tier for a server."""
        async with store_call("latest", server_id):
            return await self._store.latest(self._config.source_for(granularity), server_id)
