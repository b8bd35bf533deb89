"""
Tests for the rate-limit retry policy.
"""

import pytest

from horoscope_cache.exceptions import ProviderError, RateLimited, RetriesExhausted
from horoscope_cache.services import RetryPolicy, with_retry


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FlakyOperation:
    """Raises the queued errors in order, then returns a value."""

    def __init__(self, *errors: Exception, result: str = "ok") -> None:
        self.errors = list(errors)
        self.result = result
        self.attempts = 0

    async def __call__(self) -> str:
        self.attempts += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.mark.asyncio
async def test_success_on_first_attempt():
    """No error means no sleep and a single attempt."""
    sleep = SleepRecorder()
    operation = FlakyOperation()

    result = await RetryPolicy(max_attempts=3, sleep=sleep).run(operation)

    assert result == "ok"
    assert operation.attempts == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_advised_delay_plus_margin():
    """A provider-advised delay of 5s waits 5s plus the margin."""
    sleep = SleepRecorder()
    operation = FlakyOperation(RateLimited("quota", advice_seconds=5.0))

    result = await RetryPolicy(max_attempts=3, margin=1.0, sleep=sleep).run(operation)

    assert result == "ok"
    assert operation.attempts == 2
    assert sleep.delays == [6.0]
    assert sleep.delays[0] >= 5.0 + 1.0


@pytest.mark.asyncio
async def test_exhausted_after_exactly_max_attempts():
    """Persistent rate limiting fails after max_attempts with no trailing sleep."""
    sleep = SleepRecorder()
    errors = [RateLimited("quota", advice_seconds=5.0) for _ in range(5)]
    operation = FlakyOperation(*errors)

    with pytest.raises(RetriesExhausted) as exc_info:
        await RetryPolicy(max_attempts=3, margin=1.0, sleep=sleep).run(operation)

    assert operation.attempts == 3
    assert sleep.delays == [6.0, 6.0]
    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.last_error, RateLimited)
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_exponential_backoff_without_advice():
    """Without advice the wait doubles from base_delay, capped at max_delay."""
    sleep = SleepRecorder()
    operation = FlakyOperation(*[RateLimited("quota") for _ in range(4)])

    await RetryPolicy(max_attempts=5, base_delay=2.0, max_delay=5.0, sleep=sleep).run(operation)

    assert sleep.delays == [2.0, 4.0, 5.0, 5.0]
    assert operation.attempts == 5


@pytest.mark.asyncio
async def test_other_errors_propagate_immediately():
    """Non rate-limit errors are not retried."""
    sleep = SleepRecorder()
    operation = FlakyOperation(ProviderError("invalid API key"))

    with pytest.raises(ProviderError):
        await RetryPolicy(max_attempts=3, sleep=sleep).run(operation)

    assert operation.attempts == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_single_attempt_policy():
    """max_attempts=1 means no retry at all."""
    operation = FlakyOperation(RateLimited("quota"))

    with pytest.raises(RetriesExhausted):
        await RetryPolicy(max_attempts=1, sleep=SleepRecorder()).run(operation)

    assert operation.attempts == 1


@pytest.mark.asyncio
async def test_exhausted_chains_final_attempt_error():
    """The exhaustion error wraps and chains the error of the final attempt."""
    final = RateLimited("final quota")
    operation = FlakyOperation(RateLimited("first quota"), final)

    with pytest.raises(RetriesExhausted) as exc_info:
        await RetryPolicy(max_attempts=2, base_delay=0.0, sleep=SleepRecorder()).run(operation)

    assert exc_info.value.last_error is final
    assert exc_info.value.__cause__ is final
    assert "final quota" in exc_info.value.message


def test_invalid_max_attempts():
    """A policy needs at least one attempt."""
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


@pytest.mark.asyncio
async def test_with_retry_helper():
    """The helper retries with a one-off policy."""
    operation = FlakyOperation(RateLimited("quota"))

    result = await with_retry(operation, max_attempts=2, base_delay=0.0)

    assert result == "ok"
    assert operation.attempts == 2
