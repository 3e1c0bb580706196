"""Unit tests for RetryExecutor."""

from __future__ import annotations

import asyncio
import random

import pytest

from orbit.tasks.core import ProviderError, RateLimitError, ResponseFormatError, RetryPolicy
from orbit.tasks.runtime import RetryExecutor, is_retryable


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def failing_then(errors: list[BaseException], result: object = "ok"):
    """Build a call that raises each error in turn, then returns ``result``."""
    calls = {"count": 0}

    async def call():
        calls["count"] += 1
        if errors:
            raise errors.pop(0)
        return result

    return call, calls


class TestIsRetryable:
    """Test retryability classification."""

    def test_classification(self):
        assert is_retryable(RateLimitError("slow down"))
        assert is_retryable(ProviderError("boom", status_code=502))
        assert not is_retryable(ProviderError("missing", status_code=404))
        assert not is_retryable(ResponseFormatError("bad", status_code=500))
        assert not is_retryable(RuntimeError("local bug"))


class TestComputeDelay:
    """Test backoff computation."""

    def test_exponential_without_jitter(self):
        executor = RetryExecutor(RetryPolicy(initial_backoff=1.0, multiplier=2.0, jitter_factor=0))
        assert executor.compute_delay(1) == 1.0
        assert executor.compute_delay(2) == 2.0
        assert executor.compute_delay(3) == 4.0

    def test_capped_by_max_backoff(self):
        executor = RetryExecutor(
            RetryPolicy(initial_backoff=10.0, multiplier=10.0, jitter_factor=0, max_backoff=30.0)
        )
        assert executor.compute_delay(3) == 30.0

    def test_jitter_bounds(self):
        executor = RetryExecutor(
            RetryPolicy(initial_backoff=1.0, jitter_factor=0.1), rng=random.Random(7)
        )
        for _ in range(20):
            delay = executor.compute_delay(1)
            assert 1.0 <= delay < 1.1

    def test_retry_after_overrides_backoff(self):
        executor = RetryExecutor(RetryPolicy(initial_backoff=1.0, max_backoff=5.0))
        assert executor.compute_delay(1, RateLimitError("x", retry_after=2)) == 2.0
        # Server-requested delays are honored verbatim, even above max_backoff
        assert executor.compute_delay(1, RateLimitError("x", retry_after=60)) == 60.0

    def test_retry_after_zero_is_honored(self):
        executor = RetryExecutor(RetryPolicy(initial_backoff=1.0))
        assert executor.compute_delay(1, ProviderError("x", status_code=503, retry_after=0)) == 0.0


class TestRetryExecutor:
    """Test RetryExecutor.execute()."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        sleep = RecordingSleep()
        executor = RetryExecutor(sleep=sleep)
        call, calls = failing_then([])

        assert await executor.execute(call) == "ok"
        assert calls["count"] == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_rate_limit_with_retry_after_then_success(self):
        """429 with Retry-After: 2 waits exactly 2 seconds."""
        sleep = RecordingSleep()
        executor = RetryExecutor(RetryPolicy(max_attempts=3), sleep=sleep)
        call, calls = failing_then([RateLimitError("slow down", retry_after=2)])

        assert await executor.execute(call) == "ok"
        assert calls["count"] == 2
        assert sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_server_error_backoff_sequence(self):
        sleep = RecordingSleep()
        executor = RetryExecutor(
            RetryPolicy(max_attempts=3, initial_backoff=1.0, multiplier=2.0, jitter_factor=0),
            sleep=sleep,
        )
        call, calls = failing_then(
            [ProviderError("a", status_code=500), ProviderError("b", status_code=503)]
        )

        assert await executor.execute(call) == "ok"
        assert calls["count"] == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        """404 is raised after exactly one call."""
        sleep = RecordingSleep()
        executor = RetryExecutor(sleep=sleep)
        error = ProviderError("not found", status_code=404)
        call, calls = failing_then([error])

        with pytest.raises(ProviderError) as exc_info:
            await executor.execute(call)

        assert exc_info.value is error
        assert calls["count"] == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_non_provider_error_not_retried(self):
        executor = RetryExecutor(sleep=RecordingSleep())
        call, calls = failing_then([RuntimeError("bug")])

        with pytest.raises(RuntimeError):
            await executor.execute(call)
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_last_error_unchanged(self):
        sleep = RecordingSleep()
        executor = RetryExecutor(RetryPolicy(max_attempts=3, jitter_factor=0), sleep=sleep)
        errors = [ProviderError(f"fail {i}", status_code=503) for i in range(3)]
        last = errors[-1]
        call, calls = failing_then(list(errors))

        with pytest.raises(ProviderError) as exc_info:
            await executor.execute(call)

        assert exc_info.value is last
        assert exc_info.value.status_code == 503
        assert calls["count"] == 3
        assert len(sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_single_attempt_policy(self):
        executor = RetryExecutor(RetryPolicy(max_attempts=1), sleep=RecordingSleep())
        call, calls = failing_then([RateLimitError("slow down")])

        with pytest.raises(RateLimitError):
            await executor.execute(call)
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_deadline_stops_retrying(self):
        sleep = RecordingSleep()
        executor = RetryExecutor(
            RetryPolicy(max_attempts=5, initial_backoff=10.0, jitter_factor=0), sleep=sleep
        )
        call, calls = failing_then([ProviderError("down", status_code=503)])
        deadline = asyncio.get_running_loop().time() + 1.0

        with pytest.raises(ProviderError):
            await executor.execute(call, deadline=deadline)
        assert calls["count"] == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_cancellation_during_backoff(self):
        """Cancelling while waiting stops without further attempts."""
        executor = RetryExecutor(RetryPolicy(max_attempts=3, initial_backoff=10.0, jitter_factor=0))
        call, calls = failing_then([ProviderError("down", status_code=503)])

        task = asyncio.create_task(executor.execute(call))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls["count"] == 1
