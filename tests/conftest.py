"""Shared test fixtures for all test modules."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

try:
    import httpx
except ImportError:
    httpx = None

from tierscope.adapters.storage.in_memory import InMemoryRollupStore
from tierscope.core.config import TierQueryConfig
from tierscope.core.gateway import TierQueryGateway
from tierscope.core.models import RollupPoint
from tierscope.core.service import TieredMetricsService

# Fixed "now" used by clock-dependent operations in tests.
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """The fixed current time seen by the service under test."""
    return NOW


@pytest.fixture
def rollup_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for SQLite rollup store tests."""
    return str(tmp_path / "rollups.db")


@pytest.fixture
def make_point() -> Callable[..., RollupPoint]:
    """Factory fixture for RollupPoints with uniform metric values.

    Usage:
        point = make_point(NOW, cpu=40.0)
    """

    def _point(
        timestamp: datetime,
        cpu: float = 10.0,
        memory: float = 20.0,
        disk: float = 30.0,
        network: float = 5.0,
        temperature: float = 45.0,
        load: float = 0.5,
        sample_count: int = 60,
    ) -> RollupPoint:
        return RollupPoint(
            timestamp=timestamp,
            cpu_avg=cpu,
            cpu_max=cpu + 5,
            cpu_min=max(cpu - 5, 0.0),
            memory_avg=memory,
            memory_max=memory + 5,
            memory_min=max(memory - 5, 0.0),
            disk_avg=disk,
            disk_max=disk + 1,
            network_avg=network,
            network_max=network * 2,
            temperature_avg=temperature,
            temperature_max=temperature + 3,
            load_avg=load,
            load_max=load * 2,
            sample_count=sample_count,
        )

    return _point


@pytest.fixture
def make_series(
    make_point: Callable[..., RollupPoint],
) -> Callable[..., list[RollupPoint]]:
    """Factory fixture for evenly spaced points.

    Usage:
        points = make_series(start, timedelta(minutes=1), cpu=[10, 20, 30])
    """

    def _series(
        start: datetime, step: timedelta, cpu: list[float]
    ) -> list[RollupPoint]:
        return [make_point(start + step * i, cpu=value) for i, value in enumerate(cpu)]

    return _series


@pytest.fixture
def store() -> InMemoryRollupStore:
    """Fixture providing an empty in-memory rollup store."""
    return InMemoryRollupStore()


@pytest.fixture
def query_config() -> TierQueryConfig:
    """Default gateway configuration."""
    return TierQueryConfig()


@pytest.fixture
def gateway(store: InMemoryRollupStore, query_config: TierQueryConfig) -> TierQueryGateway:
    """Gateway over the in-memory store."""
    return TierQueryGateway(store, query_config)


@pytest.fixture
def service(gateway: TierQueryGateway, now: datetime) -> TieredMetricsService:
    """Service over the in-memory gateway with a fixed clock."""
    return TieredMetricsService(gateway, clock=lambda: now)


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/endpoint")
    """
    if httpx is None:
        pytest.skip("httpx not installed")

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
