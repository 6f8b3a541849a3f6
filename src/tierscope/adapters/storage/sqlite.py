"""SQLite rollup store adapter."""

import asyncio
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import aiosqlite

from tierscope.core.config import DEFAULT_TIER_SOURCES
from tierscope.core.models import RollupPoint, TierStats

_TIER_SCHEMA = """
CREATE TABLE IF NOT EXISTS {source} (
    bucket REAL NOT NULL,
    server_id TEXT NOT NULL,
    avg_cpu REAL, max_cpu REAL, min_cpu REAL,
    avg_memory REAL, max_memory REAL, min_memory REAL,
    avg_disk REAL, max_disk REAL, min_disk REAL,
    avg_network REAL, max_network REAL, min_network REAL,
    avg_cpu_temp REAL, max_cpu_temp REAL,
    avg_load_1m REAL, max_load_1m REAL,
    sample_count INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (server_id, bucket)
);
CREATE INDEX IF NOT EXISTS idx_{source}_bucket ON {source}(bucket);
"""

_COLUMNS = """
bucket,
avg_cpu, max_cpu, min_cpu,
avg_memory, max_memory, min_memory,
avg_disk, max_disk, min_disk,
avg_network, max_network, min_network,
avg_cpu_temp, max_cpu_temp,
avg_load_1m, max_load_1m,
sample_count
"""

_UPSERT = """
INSERT OR REPLACE INTO {source} (server_id, """ + _COLUMNS + """)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_SELECT_RANGE = (
    "SELECT " + _COLUMNS + """ FROM {source}
WHERE server_id = ? AND bucket BETWEEN ? AND ?
ORDER BY bucket ASC
LIMIT ?
"""
)

_COUNT_RANGE = """
SELECT COUNT(*) FROM {source}
WHERE server_id = ? AND bucket BETWEEN ? AND ?
"""

_SELECT_RECENT = (
    "SELECT " + _COLUMNS + """ FROM {source}
WHERE server_id = ?
ORDER BY bucket DESC
LIMIT ?
"""
)

_TIER_STATS = """
SELECT COUNT(*), COUNT(DISTINCT server_id), MIN(bucket), MAX(bucket)
FROM {source}
"""


def _to_epoch(value: datetime) -> float:
    return value.timestamp()


def _from_epoch(value: float) -> datetime:
    return datetime.fromtimestamp(value, UTC)


def _or_zero(value: float | None) -> float:
    return 0.0 if value is None else float(value)


def _to_row(server_id: str, point: RollupPoint) -> tuple[Any, ...]:
    return (
        server_id,
        _to_epoch(point.timestamp),
        point.cpu_avg,
        point.cpu_max,
        point.cpu_min,
        point.memory_avg,
        point.memory_max,
        point.memory_min,
        point.disk_avg,
        point.disk_max,
        point.disk_min,
        point.network_avg,
        point.network_max,
        point.network_min,
        point.temperature_avg,
        point.temperature_max,
        point.load_avg,
        point.load_max,
        point.sample_count,
    )


def _from_row(row: Sequence[Any]) -> RollupPoint:
    """Build a RollupPoint; NULL aggregates read as 0 except optional mins."""
    return RollupPoint(
        timestamp=_from_epoch(row[0]),
        cpu_avg=_or_zero(row[1]),
        cpu_max=_or_zero(row[2]),
        cpu_min=_or_zero(row[3]),
        memory_avg=_or_zero(row[4]),
        memory_max=_or_zero(row[5]),
        memory_min=_or_zero(row[6]),
        disk_avg=_or_zero(row[7]),
        disk_max=_or_zero(row[8]),
        disk_min=row[9],
        network_avg=_or_zero(row[10]),
        network_max=_or_zero(row[11]),
        network_min=row[12],
        temperature_avg=_or_zero(row[13]),
        temperature_max=_or_zero(row[14]),
        load_avg=_or_zero(row[15]),
        load_max=_or_zero(row[16]),
        sample_count=int(row[17] or 0),
    )


class SQLiteRollupStore:
    """SQLite implementation of RollupStorePort.

    Each tier lives in its own table named after its source. Tables are
    created on first use. File databases use WAL mode and a fresh aiosqlite
    connection per call, so concurrent queries do not share a cursor. For
    :memory: databases a single persistent connection is kept, since SQLite
    in-memory databases are connection-scoped.

    ``write`` and ``write_many`` load rollup rows; the query core never
    calls them.

    Args:
        db_path: Database file path or ":memory:".
        sources: Table names of the tiers. Only these may be queried.
    """

    def __init__(
        self,
        db_path: str,
        sources: Iterable[str] = DEFAULT_TIER_SOURCES.values(),
    ) -> None:
        self._db_path = db_path
        self._sources = frozenset(sources)
        self._schema = "".join(
            _TIER_SCHEMA.format(source=source) for source in sorted(self._sources)
        )
        self._initialized = False
        self._init_lock: asyncio.Lock | None = None
        self._memory_conn: aiosqlite.Connection | None = None

    @property
    def _in_memory(self) -> bool:
        return self._db_path == ":memory:"

    def _lock(self) -> asyncio.Lock:
        # Created lazily so the store can be built outside a running loop.
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    async def _ensure_schema(self) -> None:
        if self._initialized:
            return
        async with self._lock():
            if self._initialized:
                return
            if self._in_memory:
                self._memory_conn = await aiosqlite.connect(":memory:")
                await self._memory_conn.executescript(self._schema)
            else:
                async with aiosqlite.connect(self._db_path) as db:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.executescript(self._schema)
            self._initialized = True

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[aiosqlite.Connection]:
        await self._ensure_schema()
        if self._in_memory:
            if self._memory_conn is None:
                raise RuntimeError("Memory database connection not initialized")
            yield self._memory_conn
            return
        db = await aiosqlite.connect(self._db_path)
        try:
            yield db
        finally:
            await db.close()

    def _table(self, source: str) -> str:
        if source not in self._sources:
            raise ValueError(f"unknown rollup source: {source!r}")
        return source

    async def write(self, source: str, server_id: str, point: RollupPoint) -> None:
        """Insert or replace one rollup row."""
        await self.write_many(source, server_id, [point])

    async def write_many(
        self, source: str, server_id: str, points: Iterable[RollupPoint]
    ) -> None:
        """Insert or replace several rollup rows in one transaction."""
        query = _UPSERT.format(source=self._table(source))
        async with self._connection() as db:
            await db.executemany(query, [_to_row(server_id, p) for p in points])
            await db.commit()

    async def query_range(
        self,
        source: str,
        server_id: str,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[RollupPoint]:
        """Return up to ``limit`` oldest points in the window, ascending."""
        query = _SELECT_RANGE.format(source=self._table(source))
        params = (server_id, _to_epoch(start), _to_epoch(end), limit)
        async with self._connection() as db:
            async with db.execute(query, params) as cursor:
                return [_from_row(row) async for row in cursor]

    async def count_range(
        self, source: str, server_id: str, start: datetime, end: datetime
    ) -> int:
        """Count points in the window."""
        query = _COUNT_RANGE.format(source=self._table(source))
        params = (server_id, _to_epoch(start), _to_epoch(end))
        async with self._connection() as db:
            async with db.execute(query, params) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    async def latest(self, source: str, server_id: str) -> RollupPoint | None:
        """Return the most recent point, or None."""
        points = await self.recent(source, server_id, 1)
        return points[0] if points else None

    async def recent(self, source: str, server_id: str, limit: int) -> list[RollupPoint]:
        """Return the ``limit`` most recent points, ascending."""
        query = _SELECT_RECENT.format(source=self._table(source))
        async with self._connection() as db:
            async with db.execute(query, (server_id, limit)) as cursor:
                newest_first = [_from_row(row) async for row in cursor]
        return newest_first[::-1]

    async def tier_stats(self, source: str) -> TierStats:
        """Record and server counts with the earliest and latest bucket."""
        query = _TIER_STATS.format(source=self._table(source))
        async with self._connection() as db:
            async with db.execute(query) as cursor:
                row = await cursor.fetchone()
        if row is None:
            return TierStats()
        return TierStats(
            total_records=row[0],
            unique_servers=row[1],
            earliest_record=_from_epoch(row[2]) if row[2] is not None else None,
            latest_record=_from_epoch(row[3]) if row[3] is not None else None,
        )

    async def close(self) -> None:
        """Close the persistent connection (for :memory: databases)."""
        if self._memory_conn is not None:
            await self._memory_conn.close()
            self._memory_conn = None
            self._initialized = False
