"""Bounded retry for rate-limited provider calls.

Only ``RateLimited`` is retried. The wait is the provider-advised delay plus
a fixed margin when one is known, otherwise ``base_delay * 2**attempt``
capped at ``max_delay``. Any other exception propagates on the first try.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from horoscope_cache.config import settings
from horoscope_cache.exceptions import RateLimited, RetriesExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3


class RetryPolicy:
    """Retry wrapper for async operations that may be rate limited.

    Example:
        ```python
        policy = RetryPolicy(max_attempts=3, base_delay=2.0)
        raw = await policy.run(lambda: client.generate(sign, period))
        ```
    """

    def __init__(
        self,
        max_attempts: int | None = None,
        base_delay: float | None = None,
        margin: float | None = None,
        max_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the retry policy.

        Args:
            max_attempts: Total attempts including the first. Defaults to settings.
            base_delay: Base of the exponential schedule in seconds.
            margin: Seconds added to a provider-advised delay.
            max_delay: Upper bound of the exponential schedule.
            sleep: Awaitable sleep function (injected in tests).
        """
        self._max_attempts = settings.retry_max_attempts if max_attempts is None else max_attempts
        self._base_delay = settings.retry_base_delay if base_delay is None else base_delay
        self._margin = settings.retry_margin if margin is None else margin
        self._max_delay = settings.retry_max_delay if max_delay is None else max_delay
        self._sleep = sleep

        if self._max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def create(cls, max_attempts: int | None = None) -> "RetryPolicy":
        """Factory method to create RetryPolicy from settings."""
        return cls(max_attempts=max_attempts)

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def delay_for(self, error: RateLimited, attempt: int) -> float:
        """Compute the wait before the next attempt.

        Args:
            error: The rate-limit error raised by the failed attempt
            attempt: Zero-based index of the failed attempt

        Returns:
            Seconds to sleep
        """
        if error.advice_seconds is not None:
            return error.advice_seconds + self._margin
        return min(self._base_delay * 2**attempt, self._max_delay)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run an operation, retrying on RateLimited.

        Args:
            operation: Zero-argument callable returning a fresh awaitable per attempt

        Returns:
            The operation's result

        Raises:
            RetriesExhausted: If every attempt was rate limited
        """
        attempt = 0
        while True:
            try:
                return await operation()
            except RateLimited as e:
                if attempt + 1 >= self._max_attempts:
                    raise RetriesExhausted(e, self._max_attempts) from e
                delay = self.delay_for(e, attempt)
                logger.warning(
                    "Rate limited (attempt %d/%d), retrying in %.1fs: %s",
                    attempt + 1,
                    self._max_attempts,
                    delay,
                    e,
                )
                await self._sleep(delay)
                attempt += 1


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float | None = None,
) -> T:
    """Run an operation under a one-off RetryPolicy."""
    return await RetryPolicy(max_attempts=max_attempts, base_delay=base_delay).run(operation)
