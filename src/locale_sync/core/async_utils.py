"""Async utilities for bridging blocking HTTP and file I/O into the sync engine."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)

    Example:
        client = RemoteClient(options)
        languages = await run_sync(client.list_languages)
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def gather_all(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Run awaitables concurrently and wait for all of them.

    Results come back in input order. On the first failure the remaining
    tasks are cancelled and the original exception is re-raised, so a
    fan-out group never continues past a failed sibling.

    Args:
        aws: Coroutines or futures to run concurrently.

    Returns:
        List of results in the same order as the input.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.debug("Cancelled %d pending task(s)", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
        raise
