"""In-memory rollup store adapter."""

from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import datetime

from tierscope.core.models import RollupPoint, TierStats


class InMemoryRollupStore:
    """In-memory implementation of RollupStorePort.

    Holds points per source and server. Suitable for testing and examples
    where a database is not available. ``calls`` counts invocations of each
    read method.
    """

    def __init__(self) -> None:
        self._points: dict[str, dict[str, list[RollupPoint]]] = defaultdict(
            lambda: defaultdict(list)
        )
        self.calls: Counter[str] = Counter()

    async def write(self, source: str, server_id: str, point: RollupPoint) -> None:
        """Add a point to a tier."""
        self._points[source][server_id].append(point)

    async def write_many(
        self, source: str, server_id: str, points: Iterable[RollupPoint]
    ) -> None:
        """Add several points to a tier."""
        self._points[source][server_id].extend(points)

    def _sorted(self, source: str, server_id: str) -> list[RollupPoint]:
        if source not in self._points or server_id not in self._points[source]:
            return []
        return sorted(self._points[source][server_id], key=lambda p: p.timestamp)

    def _in_range(
        self, source: str, server_id: str, start: datetime, end: datetime
    ) -> list[RollupPoint]:
        return [p for p in self._sorted(source, server_id) if start <= p.timestamp <= end]

    async def query_range(
        self,
        source: str,
        server_id: str,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[RollupPoint]:
        """Return up to ``limit`` oldest points in the window, ascending."""
        self.calls["query_range"] += 1
        return self._in_range(source, server_id, start, end)[:limit]

    async def count_range(
        self, source: str, server_id: str, start: datetime, end: datetime
    ) -> int:
        """Count points in the window."""
        self.calls["count_range"] += 1
        return len(self._in_range(source, server_id, start, end))

    async def latest(self, source: str, server_id: str) -> RollupPoint | None:
        """Return the most recent point, or None."""
        self.calls["latest"] += 1
        points = self._sorted(source, server_id)
        return points[-1] if points else None

    async def recent(self, source: str, server_id: str, limit: int) -> list[RollupPoint]:
        """Return the ``limit`` most recent points, ascending."""
        self.calls["recent"] += 1
        return self._sorted(source, server_id)[-limit:]

    async def tier_stats(self, source: str) -> TierStats:
        """Record and server counts for one source."""
        self.calls["tier_stats"] += 1
        servers = {sid: pts for sid, pts in self._points.get(source, {}).items() if pts}
        timestamps = [p.timestamp for pts in servers.values() for p in pts]
        return TierStats(
            total_records=len(timestamps),
            unique_servers=len(servers),
            earliest_record=min(timestamps, default=None),
            latest_record=max(timestamps, default=None),
        )
