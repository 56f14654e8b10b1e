"""Bounded retry with exponential backoff for AI provider calls."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings: attempt count, first delay (seconds) and backoff multiplier."""

    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def retrying(
        self,
        is_retryable: Callable[[BaseException], bool],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> AsyncRetrying:
        """Build the tenacity controller for one call: base_delay, then base_delay * multiplier, ..."""
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay, exp_base=self.multiplier),
            retry=retry_if_exception(is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=sleep,
            reraise=True,
        )

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        is_retryable: Callable[[BaseException], bool],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        description: str = "operation",
    ) -> T:
        """Run an async operation, retrying retryable failures with backoff.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt.
            is_retryable: Decides whether an exception is transient.
            sleep: Awaitable sleep used between attempts.
            description: Label used in log messages.

        Returns:
            The operation's result.

        Raises:
            Exception: The last error when it is not retryable or attempts are exhausted.
        """
        retrying = self.retrying(is_retryable, sleep)
        try:
            return await retrying(operation)
        except Exception as e:
            attempts = retrying.statistics.get("attempt_number", 1)
            logger.error(f"{description} failed after {attempts} attempt(s): {e}")
            raise
