"""Bounded-latency execution of a single check.

:func:`with_timeout` races a check against a timer.  It guarantees the
caller gets an answer within the timeout; it does not guarantee the work
stops.  On timeout the check's coroutine is cancelled at its next
suspension point, but file I/O already handed to a worker thread keeps
running until it finishes and its result is discarded.  Callers needing
true cancellation must add it at the I/O layer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from acceptance_engine.errors import ExecutionTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0


async def with_timeout(
    run: Callable[[], Awaitable[T]],
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    label: str = "plugin",
) -> T:
    """Await ``run()`` for at most *timeout* seconds.

    Parameters
    ----------
    run:
        Zero-argument callable returning the awaitable to supervise.
    timeout:
        Allowed duration in seconds.
    label:
        Name reported in the timeout error (usually the plugin id).

    Returns
    -------
    T
        Whatever ``run()`` produced, if it settled first.

    Raises
    ------
    ExecutionTimeoutError
        If the timer fired first.
    Exception
        Any exception raised by ``run()``, unchanged.
    """
    task = asyncio.ensure_future(run())
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        # Re-raises the check's own exception, TimeoutError included.
        return task.result()

    task.cancel()
    logger.warning("Check '%s' exceeded %.3fs; discarding its result.", label, timeout)
    raise ExecutionTimeoutError(label, timeout)
