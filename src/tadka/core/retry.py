"""
Tadka - Bounded retry with exponential backoff.

An explicit loop with an attempt counter. The sleep primitive is injectable so
tests run without real timers.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tadka.core.result import ErrorKind, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    *,
    retries: int = 3,
    delay: float = 1.0,
    backoff_factor: float = 2.0,
    timeout: float | None = None,
    sleep: Sleep = asyncio.sleep,
    label: str = "operation",
) -> Result[T]:
    """
    Run `fn` until it succeeds or `retries` extra attempts are used up.

    Args:
        fn: Zero-argument coroutine factory; called once per attempt
        retries: Extra attempts after the first one (total = retries + 1)
        delay: Wait before the first retry, in seconds
        backoff_factor: Multiplier applied to the delay after every retry
        timeout: Per-attempt timeout in seconds (None = no timeout)
        sleep: Delay primitive, asyncio.sleep by default
        label: Name used in log lines

    Returns:
        Result.success(value) or Result.failure(TIMEOUT | TRANSIENT)
    """
    attempt = 0
    current_delay = delay

    while True:
        attempt += 1
        try:
            if timeout is not None:
                value = await asyncio.wait_for(fn(), timeout=timeout)
            else:
                value = await fn()
            return Result.success(value, attempts=attempt)
        except asyncio.TimeoutError:
            kind = ErrorKind.TIMEOUT
            detail = f"timed out after {timeout}s"
        except Exception as e:
            kind = ErrorKind.TRANSIENT
            detail = f"{type(e).__name__}: {e}"

        if attempt > retries:
            logger.warning(f"[Retry] {label} failed after {attempt} attempts: {detail}")
            return Result.failure(kind, detail, attempts=attempt)

        logger.warning(
            f"[Retry] {label} failed ({detail}). "
            f"Retrying in {current_delay:.2f}s ({retries - attempt + 1} left)"
        )
        await sleep(current_delay)
        current_delay *= backoff_factor
