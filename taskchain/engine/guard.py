"""Invocation guard.

Runs one handler call and races it against a timeout. Whichever settles first
decides the outcome; a handler that loses the race is cancelled and its late
result (or exception) is dropped without being reported.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Optional

from loguru import logger

from taskchain.config import TIMEOUTS
from taskchain.engine.errors import HandlerTimeoutError
from taskchain.engine.handlers import TaskHandler


def normalize_timeout(timeout: Optional[float]) -> Optional[float]:
    """Map None/0 to "no timeout"; reject negative values and values above the configured maximum."""
    if timeout is None:
        return None
    timeout = float(timeout)
    if timeout < 0:
        raise ValueError(f"timeout must be >= 0 seconds, got {timeout}")
    if timeout > TIMEOUTS.MAX_HANDLER:
        raise ValueError(f"timeout must be <= {TIMEOUTS.MAX_HANDLER} seconds, got {timeout}")
    return timeout or None


def _discard_late_outcome(task: "asyncio.Future[Any]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Discarding late handler failure after timeout: {type(exc).__name__}: {exc}")


async def _call_in_thread(handler: TaskHandler, context: Any, argument: Any) -> Any:
    result = await asyncio.to_thread(handler, context, argument)
    if inspect.isawaitable(result):
        result = await result
    return result


async def invoke_handler(
    handler: TaskHandler,
    context: Any,
    argument: Any,
    timeout: Optional[float] = None,
    *,
    phase: Optional[str] = None,
) -> Any:
    """
    Invoke ``handler(context, argument)`` with an optional timeout in seconds.

    Without a timeout the handler runs inline. With one, coroutine handlers are
    raced directly and synchronous handlers run on a worker thread, so either
    form gives up after at most ``timeout`` seconds. A thread that loses the
    race is abandoned, not stopped.

    Raises:
        HandlerTimeoutError: The timer fired before the handler settled.
        Exception: Whatever the handler raised, unmodified.
    """
    limit = normalize_timeout(timeout)

    if limit is None:
        result = handler(context, argument)
        if inspect.isawaitable(result):
            return await result
        return result

    if inspect.iscoroutinefunction(handler.fn):
        work = handler(context, argument)
    else:
        work = _call_in_thread(handler, context, argument)

    task = asyncio.ensure_future(work)
    try:
        done, _pending = await asyncio.wait({task}, timeout=limit)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.add_done_callback(_discard_late_outcome)
    task.cancel()
    logger.error(f"Handler {handler.name} in phase {phase} timed out after {limit}s")
    raise HandlerTimeoutError(limit, phase)
