"""
Bridging between the async core and synchronous entry points.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


def dual(func: Callable[..., Awaitable[T]]) -> Callable[..., Any]:
    """
    Make an async function callable from both sync and async code.

    Without a running event loop the coroutine is run to completion with
    ``asyncio.run``; inside one, the coroutine is returned for the caller to
    await.

    Usage:
        @dual
        async def run_pass(settings):
            ...

        run_pass(settings)          # Lambda handler, CLI
        await run_pass(settings)    # async callers
    """
    if not inspect.iscoroutinefunction(func):
        raise TypeError("@dual can only be applied to async def functions")

    @functools.wraps(func)
    def sync_or_async_call(*args: Any, **kwargs: Any) -> Any:
        coro = func(*args, **kwargs)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        return coro

    return sync_or_async_call
