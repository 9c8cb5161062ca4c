"""Retry with exponential backoff for flaky async calls."""
import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shared.config import MAX_RETRIES, RETRY_DELAY_SECONDS

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "Operation failed, retrying",
        attempt=retry_state.attempt_number,
        delay_seconds=retry_state.next_action.sleep,
        error=str(retry_state.outcome.exception()),
    )


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = MAX_RETRIES,
    initial_delay: float = RETRY_DELAY_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await ``operation()`` until it succeeds or ``max_retries`` retries are used.

    The wait before the first retry is ``initial_delay`` seconds and doubles
    after every failure. Once retries are exhausted the last error is re-raised
    unchanged.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        max_retries: Retries after the initial attempt
        initial_delay: Seconds to wait before the first retry
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        Whatever ``operation`` returns on its first successful attempt
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=initial_delay),
        retry=retry_if_exception_type(Exception),
        before_sleep=_log_retry,
        reraise=True,
        sleep=sleep,
    )
    async for attempt in retrying:
        with attempt:
            result = await operation()
    return result
