"""
Retry mechanism for resilient operations.
"""

import asyncio
from typing import Any, Optional, Callable, Awaitable

from shared.logging import get_logger


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self,
                 max_attempts: int = 2,
                 base_delay: float = 0.5,
                 exponential_base: float = 2.0):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.exponential_base = exponential_base


class RetryError(Exception):
    """Exception raised when all retry attempts are exhausted."""
    def __init__(self, message: str, last_exception: Exception, attempts: int):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


async def retry_async(operation: Callable[[], Awaitable[Any]],
                      exceptions: tuple = (Exception,),
                      config: Optional[RetryConfig] = None,
                      *,
                      name: str = "operation",
                      sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep) -> Any:
    """Run ``operation`` until it succeeds or the attempt budget is spent.

    Only ``exceptions`` trigger another attempt; anything else propagates
    untouched. Backoff is applied before the 2nd..Nth attempt, never before
    the first.
    """
    if config is None:
        config = RetryConfig()

    logger = get_logger(f"trivsel.retry.{name}")
    max_attempts = max(1, config.max_attempts)

    for attempt in range(1, max_attempts + 1):
        try:
            result = await operation()

            if attempt > 1:
                logger.info("Retry succeeded", attempt=attempt, operation=name)

            return result

        except exceptions as e:
            if attempt == max_attempts:
                logger.error(
                    "All retry attempts exhausted",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    operation=name,
                    error=str(e)
                )
                raise RetryError(
                    f"{name} failed after {max_attempts} attempts",
                    last_exception=e,
                    attempts=max_attempts
                ) from e

            delay = _calculate_delay(attempt, config)

            logger.warning(
                "Retry attempt failed, waiting before next attempt",
                attempt=attempt,
                delay=delay,
                operation=name,
                error=str(e)
            )

            await sleep(delay)

    raise AssertionError("unreachable")


def _calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Exponential delay after the given (1-based) failed attempt, no jitter."""
    return config.base_delay * (config.exponential_base ** (attempt - 1))
