"""
Retry utilities.

Bounded exponential backoff for async calls that raise RetryableError.
"""

import asyncio
import functools
from typing import Awaitable, Callable, TypeVar

from shared.errors import RetryableError
from shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def retry_with_backoff(
    max_attempts: int = 3,
    base_delay: float = 2.0
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Retry an async function on RetryableError with linear-exponential backoff.

    Only RetryableError (and subclasses) trigger a retry; anything else
    propagates immediately. After max_attempts the last error is re-raised.

    Args:
        max_attempts: Total attempts including the first call
        base_delay: Delay before the second attempt, doubled for each further one

    Returns:
        Decorator
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except RetryableError as e:
                    if attempt == max_attempts:
                        logger.warning(
                            f"{func.__name__} failed after {max_attempts} attempts",
                            extra={"error": str(e)}
                        )
                        raise
                    delay = base_delay * (2 ** (attempt - 1))
                    logger.info(
                        f"{func.__name__} attempt {attempt}/{max_attempts} failed, retrying in {delay:.1f}s",
                        extra={"error": str(e)}
                    )
                    await asyncio.sleep(delay)
            raise RuntimeError("unreachable")

        return wrapper

    return decorator
