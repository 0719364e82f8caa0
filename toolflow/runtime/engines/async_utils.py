"""
async_utils.py - Async-to-sync bridging utilities.

Lets the sequential FlowEngine drive ToolServices whose execute() is a
coroutine function.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
from typing import Any, Awaitable, Coroutine, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_async_safely(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine to completion from synchronous code.

    Creates a new event loop when none is running. If called from inside a
    running loop, a warning is logged and the coroutine runs on a fresh
    loop in a worker thread; the caller still blocks until it finishes.

    Args:
        coro: The coroutine to run.

    Returns:
        The result of the coroutine.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    logger.warning("run_async_safely called from async context. Consider using await directly.")
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(asyncio.run, coro)
        return future.result()


async def _await(awaitable: Awaitable[T]) -> T:
    return await awaitable


def resolve_maybe_awaitable(value: Union[T, Awaitable[T]]) -> T:
    """Return value unchanged, or wait for it if it is awaitable."""
    if inspect.iscoroutine(value):
        return run_async_safely(value)
    if inspect.isawaitable(value):
        return run_async_safely(_await(value))
    return value
