"""BDD step definitions for tiered metrics features."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from tierscope.adapters.storage.in_memory import InMemoryRollupStore
from tierscope.core.analysis import calculate_trend
from tierscope.core.config import DEFAULT_TIER_SOURCES
from tierscope.core.errors import NoCurrentDataError
from tierscope.core.gateway import TierQueryGateway
from tierscope.core.models import (
    DashboardView,
    Granularity,
    MetricsSummary,
    RollupPoint,
    TieredQueryResult,
)
from tierscope.core.service import TieredMetricsService

_STEP = {
    Granularity.ONE_MINUTE: timedelta(minutes=1),
    Granularity.FIVE_MINUTES: timedelta(minutes=5),
    Granularity.TEN_MINUTES: timedelta(minutes=10),
    Granularity.ONE_HOUR: timedelta(hours=1),
}


@dataclass
class TieredScenarioContext:
    """Shared state between steps in a tiered metrics scenario."""

    store: InMemoryRollupStore = field(default_factory=InMemoryRollupStore)
    now: datetime | None = None
    result: TieredQueryResult | None = None
    dashboard: DashboardView | None = None
    summary: MetricsSummary | None = None
    exception_raised: Exception | None = None

    @property
    def service(self) -> TieredMetricsService:
        now = self.now
        return TieredMetricsService(TierQueryGateway(self.store), clock=lambda: now)


def run_async(coro: Any) -> Any:
    """Run a coroutine synchronously."""
    return asyncio.run(coro)


def _point(timestamp: datetime, cpu: float) -> RollupPoint:
    return RollupPoint(timestamp=timestamp, cpu_avg=cpu, cpu_max=cpu, cpu_min=cpu, sample_count=1)


@pytest.fixture
def ctx() -> TieredScenarioContext:
    """Fresh scenario context for each test."""
    return TieredScenarioContext()


# === Background Steps ===
@given("an in-memory rollup store")
def step_store(ctx: TieredScenarioContext) -> None:
    ctx.store = InMemoryRollupStore()


@given(parsers.parse('the current time is "{now}"'))
def step_now(ctx: TieredScenarioContext, now: str) -> None:
    ctx.now = datetime.fromisoformat(now)


# === Data Steps ===
@given(
    parsers.parse(
        'server "{server_id}" has {tier} rollups from "{start}" with cpu {values}'
    )
)
def step_rollups(
    ctx: TieredScenarioContext, server_id: str, tier: str, start: str, values: str
) -> None:
    granularity = Granularity(tier)
    first = datetime.fromisoformat(start)
    points = [
        _point(first + _STEP[granularity] * i, float(v))
        for i, v in enumerate(values.split(","))
    ]
    run_async(
        ctx.store.write_many(DEFAULT_TIER_SOURCES[granularity], server_id, points)
    )


@given(
    parsers.parse("{records:d} rollups spread over {servers:d} servers in the {tier} tier")
)
def step_fleet(ctx: TieredScenarioContext, records: int, servers: int, tier: str) -> None:
    """Write records round-robin across servers, one bucket step apart."""
    granularity = Granularity(tier)
    source = DEFAULT_TIER_SOURCES[granularity]
    for i in range(records):
        point = _point(ctx.now - _STEP[granularity] * i, 10.0)
        run_async(ctx.store.write(source, f"srv-{i % servers}", point))


# === Action Steps ===
@when(parsers.parse('the real-time metrics of "{server_id}" are requested'))
def when_realtime(ctx: TieredScenarioContext, server_id: str) -> None:
    ctx.result = run_async(ctx.service.get_realtime(server_id))


@when(
    parsers.parse('metrics of "{server_id}" are queried for the last {hours:d} hours')
)
def when_query(ctx: TieredScenarioContext, server_id: str, hours: int) -> None:
    start = ctx.now - timedelta(hours=hours)
    ctx.result = run_async(ctx.service.query(server_id, start, ctx.now))


@when(parsers.parse('the dashboard of "{server_id}" is built'))
def when_dashboard(ctx: TieredScenarioContext, server_id: str) -> None:
    try:
        ctx.dashboard = run_async(ctx.service.build_dashboard(server_id))
    except NoCurrentDataError as e:
        ctx.exception_raised = e


@when("the summary is requested")
def when_summary(ctx: TieredScenarioContext) -> None:
    ctx.summary = run_async(ctx.service.summarize())


# === Assertion Steps ===
@then(parsers.parse('the result has granularity "{granularity}" and {n:d} points'))
def then_result_shape(ctx: TieredScenarioContext, granularity: str, n: int) -> None:
    assert ctx.result is not None
    assert ctx.result.granularity.value == granularity
    assert ctx.result.total_points == n
    assert len(ctx.result.points) == n


@then(parsers.parse("the cpu trend of the result is {percent:d} percent"))
def then_result_trend(ctx: TieredScenarioContext, percent: int) -> None:
    assert calculate_trend(ctx.result.points).cpu == pytest.approx(percent)


@then(parsers.parse('the result message is "{message}"'))
def then_result_message(ctx: TieredScenarioContext, message: str) -> None:
    assert ctx.result.message == message


@then(parsers.parse("the dashboard shows current cpu {cpu:d}"))
def then_dashboard_current(ctx: TieredScenarioContext, cpu: int) -> None:
    assert ctx.dashboard.current.cpu_avg == cpu


@then(parsers.parse('the dashboard has granularity "{granularity}" and {n:d} points'))
def then_dashboard_shape(ctx: TieredScenarioContext, granularity: str, n: int) -> None:
    assert ctx.dashboard.granularity.value == granularity
    assert len(ctx.dashboard.points_24h) == n


@then(parsers.parse("the dashboard cpu trend is {percent:d} percent"))
def then_dashboard_trend(ctx: TieredScenarioContext, percent: int) -> None:
    assert ctx.dashboard.trends.cpu == pytest.approx(percent)


@then(parsers.parse("the dashboard heatmap has {n:d} cells"))
def then_dashboard_heatmap(ctx: TieredScenarioContext, n: int) -> None:
    assert len(ctx.dashboard.heatmap) == n
    assert ctx.dashboard.message is None


@then("the dashboard fails because no current data exists")
def then_dashboard_missing(ctx: TieredScenarioContext) -> None:
    assert ctx.dashboard is None
    assert isinstance(ctx.exception_raised, NoCurrentDataError)


@then(parsers.parse("the summary reports {records:d} records across {servers:d} servers"))
def then_summary(ctx: TieredScenarioContext, records: int, servers: int) -> None:
    assert ctx.summary.total_records == records
    assert ctx.summary.unique_servers == servers
    assert ctx.summary.tiers_missing == []
