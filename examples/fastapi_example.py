"""Example FastAPI application serving seeded rollup data.

Run with:
    uvicorn examples.fastapi_example:app --reload

Endpoints:
    /servers/demo/metrics?start=<rfc3339>&end=<rfc3339>  - auto granularity
    /servers/demo/metrics/realtime?duration=30m           - last 30 minutes, 1m
    /servers/demo/metrics/historical?...&granularity=1h   - explicit granularity
    /servers/demo/metrics/dashboard                        - current, 24h, trends
    /servers/demo/metrics/comparison?period1_start=...     - two-window compare
    /servers/demo/metrics/heatmap?start=...&end=...        - heatmap cells
    /metrics/summary                                       - per-tier statistics

Seeding:
    Two days of synthetic rollups for server "demo" are written to every tier
    at startup, so each endpoint has data to show.
"""

import logging
import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta

from fastapi import FastAPI

from tierscope.adapters.frameworks.fastapi import create_tiered_metrics_router
from tierscope.adapters.storage.in_memory import InMemoryRollupStore
from tierscope.core.config import DEFAULT_TIER_SOURCES
from tierscope.core.gateway import TierQueryGateway
from tierscope.core.models import Granularity, RollupPoint
from tierscope.core.service import TieredMetricsService

logging.basicConfig(level=logging.INFO)

SEED_WINDOW = timedelta(days=2)
BUCKETS = {
    Granularity.ONE_MINUTE: timedelta(minutes=1),
    Granularity.FIVE_MINUTES: timedelta(minutes=5),
    Granularity.TEN_MINUTES: timedelta(minutes=10),
    Granularity.ONE_HOUR: timedelta(hours=1),
}

store = InMemoryRollupStore()
service = TieredMetricsService(TierQueryGateway(store))


def synthetic_point(timestamp: datetime) -> RollupPoint:
    """Daily CPU wave between 20% and 80%, steady memory and disk."""
    phase = timestamp.timestamp() / 86400 * 2 * math.pi
    cpu = 50 + 30 * math.sin(phase)
    return RollupPoint(
        timestamp=timestamp,
        cpu_avg=cpu,
        cpu_max=cpu + 10,
        cpu_min=max(cpu - 10, 0.0),
        memory_avg=62.0,
        memory_max=70.0,
        memory_min=55.0,
        disk_avg=71.5,
        disk_max=71.6,
        network_avg=12.0,
        network_max=40.0,
        temperature_avg=48.0 + cpu / 10,
        temperature_max=55.0 + cpu / 10,
        load_avg=cpu / 40,
        load_max=cpu / 25,
        sample_count=60,
    )


async def seed(now: datetime) -> None:
    for granularity, step in BUCKETS.items():
        count = int(SEED_WINDOW / step)
        start = now - step * count
        points = [synthetic_point(start + step * i) for i in range(count)]
        await store.write_many(DEFAULT_TIER_SOURCES[granularity], "demo", points)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    now = datetime.now(UTC).replace(second=0, microsecond=0)
    await seed(now)
    yield


# Create FastAPI app
app = FastAPI(title="Tiered Metrics Example", lifespan=lifespan)

# Mount tiered metrics endpoints
app.include_router(create_tiered_metrics_router(service))
