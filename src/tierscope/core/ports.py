"""Port interface for rollup storage adapters.

The core depends only on this protocol. Adapters read precomputed rollup
tiers; none of these methods write, and the core never writes.
Examples: InMemoryRollupStore, SQLiteRollupStore.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from tierscope.core.models import RollupPoint, TierStats


@runtime_checkable
class RollupStorePort(Protocol):
    """Read-only access to the rollup tiers.

    ``source`` is the tier's table or view name as configured in
    TierQueryConfig.tier_sources.
    """

    async def query_range(
        self,
        source: str,
        server_id: str,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[RollupPoint]:
        """Return up to ``limit`` points with start <= timestamp <= end.

        Points are ordered by timestamp ascending, so a limited result holds
        the oldest matching points.
        """
        ...

    async def count_range(
        self, source: str, server_id: str, start: datetime, end: datetime
    ) -> int:
        """Return the number of points with start <= timestamp <= end."""
        ...

    async def latest(self, source: str, server_id: str) -> RollupPoint | None:
        """Return the most recent point for a server, or None."""
        ...

    async def recent(self, source: str, server_id: str, limit: int) -> list[RollupPoint]:
        """Return the ``limit`` most recent points, ordered ascending."""
        ...

    async def tier_stats(self, source: str) -> TierStats:
        """Return record/server counts and bounds for one tier."""
        ...
