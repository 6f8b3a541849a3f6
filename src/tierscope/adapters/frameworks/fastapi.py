"""FastAPI adapter exposing tiered metrics endpoints."""

import logging
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse

from tierscope.adapters.frameworks.query_params import (
    DEFAULT_MAX_WINDOW,
    parse_duration,
    parse_window,
)
from tierscope.adapters.storage.sqlite import SQLiteRollupStore
from tierscope.core.encoding import to_jsonable
from tierscope.core.errors import (
    InvalidGranularityError,
    InvalidTimeRangeError,
    NoCurrentDataError,
)
from tierscope.core.gateway import TierQueryGateway
from tierscope.core.service import REALTIME_MAX_WINDOW, TieredMetricsService
from tierscope.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _error(status: int, message: str, server_id: str | None = None) -> JSONResponse:
    content = {"error": message}
    if server_id is not None:
        content["server_id"] = server_id
    return JSONResponse(status_code=status, content=content)


async def _respond(
    operation: Awaitable[Any], failure_message: str, server_id: str | None = None
) -> JSONResponse:
    """Await a service call and encode its result or its failure.

    Args:
        operation: Pending service coroutine.
        failure_message: Body of the 500 response if the call fails.
        server_id: Server the call targets, echoed in error bodies and logs.
    """
    try:
        result = await operation
    except NoCurrentDataError as exc:
        return _error(404, str(exc), server_id)
    except InvalidGranularityError as exc:
        return _error(400, str(exc), server_id)
    except Exception:
        logger.exception(failure_message, extra={"server_id": server_id})
        return _error(500, failure_message, server_id)
    return JSONResponse(content=to_jsonable(result))


def create_tiered_metrics_router(
    service: TieredMetricsService,
    max_window: timedelta | None = DEFAULT_MAX_WINDOW,
) -> APIRouter:
    """Create a FastAPI router with the tiered metrics endpoints.

    Args:
        service: TieredMetricsService bound to a rollup store.
        max_window: Longest start/end window accepted by ranged endpoints.
                    None disables the limit.

    Returns:
        APIRouter with metrics, realtime, historical, dashboard, comparison,
        heatmap and summary endpoints configured.
    """
    router = APIRouter()

    @router.get("/servers/{server_id}/metrics")
    async def get_metrics(
        server_id: str, start: str | None = None, end: str | None = None
    ) -> JSONResponse:
        """Metrics for a window at automatically selected granularity."""
        try:
            window = parse_window(start, end, max_window)
        except InvalidTimeRangeError as exc:
            return _error(400, str(exc))
        return await _respond(
            service.query(server_id, window.start, window.end),
            "Failed to retrieve metrics",
            server_id,
        )

    @router.get("/servers/{server_id}/metrics/realtime")
    async def get_realtime(server_id: str, duration: str = "1h") -> JSONResponse:
        """The last ``duration`` (at most one hour) at one-minute granularity."""
        try:
            window = parse_duration(duration)
        except InvalidTimeRangeError as exc:
            return _error(400, str(exc))
        return await _respond(
            service.get_realtime(server_id, min(window, REALTIME_MAX_WINDOW)),
            "Failed to retrieve real-time metrics",
            server_id,
        )

    @router.get("/servers/{server_id}/metrics/historical")
    async def get_historical(
        server_id: str,
        start: str | None = None,
        end: str | None = None,
        granularity: str | None = None,
    ) -> JSONResponse:
        """Metrics at an explicit granularity, or automatic when omitted."""
        try:
            window = parse_window(start, end, max_window)
        except InvalidTimeRangeError as exc:
            return _error(400, str(exc))
        if granularity:
            operation = service.get_historical(
                server_id, window.start, window.end, granularity
            )
        else:
            operation = service.query(server_id, window.start, window.end)
        return await _respond(
            operation, "Failed to retrieve historical metrics", server_id
        )

    @router.get("/servers/{server_id}/metrics/dashboard")
    async def get_dashboard(server_id: str) -> JSONResponse:
        """Current status, 24-hour series, trends and heatmap."""
        return await _respond(
            service.build_dashboard(server_id),
            "Failed to retrieve dashboard metrics",
            server_id,
        )

    @router.get("/servers/{server_id}/metrics/comparison")
    async def get_comparison(
        server_id: str,
        period1_start: str | None = None,
        period1_end: str | None = None,
        period2_start: str | None = None,
        period2_end: str | None = None,
    ) -> JSONResponse:
        """Compare averaged metrics between two windows."""
        try:
            period1 = parse_window(period1_start, period1_end, max_window, "period1_")
            period2 = parse_window(period2_start, period2_end, max_window, "period2_")
        except InvalidTimeRangeError as exc:
            return _error(400, str(exc))
        return await _respond(
            service.compare(server_id, period1, period2),
            "Failed to retrieve metrics comparison",
            server_id,
        )

    @router.get("/servers/{server_id}/metrics/heatmap")
    async def get_heatmap(
        server_id: str, start: str | None = None, end: str | None = None
    ) -> JSONResponse:
        """Heatmap points for a window."""
        try:
            window = parse_window(start, end, max_window)
        except InvalidTimeRangeError as exc:
            return _error(400, str(exc))
        return await _respond(
            service.get_heatmap(server_id, window.start, window.end),
            "Failed to retrieve heatmap data",
            server_id,
        )

    @router.get("/metrics/summary")
    async def get_summary() -> JSONResponse:
        """Storage statistics merged across tiers."""
        return await _respond(
            service.summarize(), "Failed to retrieve metrics summary"
        )

    return router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build a FastAPI application serving a SQLite rollup store.

    Args:
        settings: Deployment settings; read from the environment when None.
    """
    settings = settings or get_settings()
    store = SQLiteRollupStore(settings.db_path)
    service = TieredMetricsService(TierQueryGateway(store, settings.query_config()))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await store.close()

    app = FastAPI(title="tierscope", lifespan=lifespan)
    app.include_router(create_tiered_metrics_router(service, settings.max_window))
    return app
