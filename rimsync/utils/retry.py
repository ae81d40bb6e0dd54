"""
A bounded retry combinator for async operations.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from rich.markup import escape

log = logging.getLogger(__name__)

T = TypeVar("T")


async def retry(
    attempts: int,
    op: Callable[[], Awaitable[T]],
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    on_retry: Callable[[int, BaseException], None] | None = None,
    delay: float = 0.0,
) -> T:
    """
    Awaits op() up to `attempts` times and returns the first successful result.

    Args:
        attempts: Total number of attempts, including the first one.
        op: Zero-argument coroutine factory; called afresh for every attempt.
        retry_on: Exception types that trigger another attempt. Anything else
            propagates immediately.
        on_retry: Called with (attempt number, exception) after each failed
            attempt that will be retried.
        delay: Seconds to wait between attempts.

    Raises:
        The exception of the final attempt once all attempts are used up.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return await op()
        except retry_on as e:
            if attempt == attempts:
                raise
            log.debug(f"Attempt {attempt}/{attempts} failed: {escape(str(e))}")
            if on_retry:
                on_retry(attempt, e)
            if delay > 0:
                await asyncio.sleep(delay)

    raise AssertionError("unreachable")
