"""
Retry and timeout helpers for cross-context delivery.

Delivery to the page-side executor may fail while a document is being
replaced. Such failures are retried after a fixed settle delay, with a
hook that runs before each retry to re-establish the executor.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Total attempts, so 2 means one retry
        delay_ms: Settle delay before each retry
        retry_on: Exception types that trigger a retry
        on_retry: Hook (sync or async) called with the attempt number and
            error before each retry
        sleep: Awaitable sleep used for the settle delay
    """
    max_attempts: int = 2
    delay_ms: int = 1000
    retry_on: Tuple[Type[Exception], ...] = (Exception,)
    on_retry: Optional[Callable[[int, Exception], Any]] = None
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep


async def retry_async(
    func: Callable[..., Awaitable[T]],
    config: RetryConfig,
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Await ``func`` until it succeeds or the attempts run out.

    Raises:
        The error from the final attempt; errors outside ``retry_on``
        propagate immediately
    """
    attempt = 1
    while True:
        try:
            return await func(*args, **kwargs)
        except config.retry_on as e:
            if attempt >= config.max_attempts:
                raise
            logger.warning(f"Attempt {attempt}/{config.max_attempts} failed ({e}), retrying")

            if config.on_retry:
                hook = config.on_retry(attempt, e)
                if inspect.isawaitable(hook):
                    await hook

            await config.sleep(config.delay_ms / 1000)
            attempt += 1


async def with_timeout(
    awaitable: Awaitable[T],
    timeout_seconds: float,
    error_message: str = "Operation timed out",
) -> T:
    """
    Await with a deadline.

    Raises:
        asyncio.TimeoutError carrying ``error_message``
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        raise asyncio.TimeoutError(error_message) from None
