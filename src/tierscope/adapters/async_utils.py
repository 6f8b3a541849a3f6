"""Helpers for calling tierscope coroutines from synchronous code."""

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
    """Run a coroutine to completion in a new event loop.

    Args:
        coro: Coroutine to run, e.g. ``service.query(...)``.
        timeout: Seconds before the coroutine is cancelled. None waits
                 indefinitely.

    Returns:
        The coroutine's result.

    Raises:
        TimeoutError: If ``timeout`` elapsed first.
        RuntimeError: If called from a thread with a running event loop.
    """
    if timeout is None:
        return asyncio.run(coro)

    async def _bounded() -> T:
        async with asyncio.timeout(timeout):
            return await coro

    return asyncio.run(_bounded())
