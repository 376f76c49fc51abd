"""
Request pacing for the issue mover.

GitHub's secondary rate limits punish bursts of content-creating requests, so
issues and comments are moved strictly one at a time with a fixed pause in
front of each.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Final, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_REQUEST_DELAY: Final[float] = 0.5

T = TypeVar("T")


async def pause(seconds: float = DEFAULT_REQUEST_DELAY) -> None:
    """Suspend the calling coroutine without blocking the event loop."""
    await asyncio.sleep(seconds)


async def run_sequentially(
    items: Iterable[T],
    step: Callable[[T], Awaitable[object]],
    *,
    delay: float = DEFAULT_REQUEST_DELAY,
) -> int:
    """Run ``step`` on each item, one at a time, pausing before each.

    The items are queued up front and drained by a single worker, so at most
    one step is in flight. The first exception stops the drain and
    propagates; remaining items are left unprocessed.

    Returns:
        Number of items processed
    """
    queue: asyncio.Queue[T] = asyncio.Queue()
    for item in items:
        queue.put_nowait(item)

    logger.debug(f"Draining {queue.qsize()} queued items with {delay}s between each")

    processed = 0
    while not queue.empty():
        item = queue.get_nowait()
        await pause(delay)
        await step(item)
        queue.task_done()
        processed += 1
    return processed
