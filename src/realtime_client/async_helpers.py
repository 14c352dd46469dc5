"""Utility helpers for scheduling asyncio coroutines safely."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Set, Union

CoroutineFactory = Callable[[], Coroutine[Any, Any, Any]]

logger = logging.getLogger(__name__)

# Strong references so fire-and-forget tasks are not garbage collected mid-flight.
_BACKGROUND_TASKS: Set["asyncio.Task[Any]"] = set()


def safely_schedule_coroutine(
    coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory],
) -> Optional[asyncio.Task[Any]]:
    """
    Schedule the provided coroutine as a fire-and-forget task.

    Accept either a coroutine object or a zero-argument callable that returns a
    coroutine, which prevents creating the coroutine unless scheduling actually
    happens. Without a running loop the coroutine is run to completion instead.
    Failures of the scheduled task are logged.
    """
    coro = _resolve_coroutine(coro_or_factory)

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(coro)
        return None

    task = loop.create_task(coro)
    _BACKGROUND_TASKS.add(task)
    task.add_done_callback(_log_task_failure)
    return task


def _log_task_failure(task: "asyncio.Task[Any]") -> None:
    _BACKGROUND_TASKS.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background task failed: {exc}", exc_info=exc)


def _resolve_coroutine(
    coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory],
) -> Coroutine[Any, Any, Any]:
    """Turn the input into a coroutine object for scheduling."""
    if asyncio.iscoroutine(coro_or_factory):
        return coro_or_factory

    if callable(coro_or_factory):
        result = coro_or_factory()
        if not asyncio.iscoroutine(result):
            raise TypeError("Callable passed to safely_schedule_coroutine must return a coroutine")
        return result

    raise TypeError("safely_schedule_coroutine expects a coroutine or a callable returning one")
