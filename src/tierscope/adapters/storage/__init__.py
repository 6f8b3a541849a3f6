"""Storage adapters implementing RollupStorePort."""

from tierscope.adapters.storage.in_memory import InMemoryRollupStore
from tierscope.adapters.storage.sqlite import SQLiteRollupStore

__all__ = [
    "InMemoryRollupStore",
    "SQLiteRollupStore",
]
