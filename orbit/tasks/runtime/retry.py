"""Retry wrapper for single upstream calls.

Architecture:
    RetryExecutor wraps one network call with retry-on-failure semantics. It
    knows nothing about pagination or caching; the paginated fetcher and the
    resource accessors hand it zero-argument coroutine functions.

Design Decisions:
    - Only ProviderError with status 429 or 5xx is retried
    - Retry-After (integer seconds) overrides computed backoff
    - Exponential backoff with jitter prevents synchronized retries
    - The final error is re-raised as the same object, never wrapped
    - Waits use asyncio.sleep so they never block other tasks and
      cancellation is observed between attempts
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from ..core.config import RetryPolicy
from ..core.exceptions import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryState:
    """Progress of one retried call; discarded when execute() returns."""

    attempt: int = 0
    last_error: BaseException | None = None


def is_retryable(error: BaseException) -> bool:
    """Whether an error should trigger another attempt."""
    return isinstance(error, ProviderError) and error.is_retryable


class RetryExecutor:
    """Executes a call, retrying retryable upstream failures."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize retry executor.

        Args:
            policy: Retry configuration (defaults to RetryPolicy())
            sleep: Awaitable sleep used between attempts (default: asyncio.sleep)
            rng: Random source for jitter
        """
        self._policy = policy or RetryPolicy()
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def compute_delay(self, attempt: int, error: BaseException | None = None) -> float:
        """Delay in seconds before the attempt following ``attempt``.

        Args:
            attempt: One-based number of the attempt that just failed
            error: The failure, consulted for a Retry-After value

        Returns:
            Delay in seconds
        """
        retry_after = getattr(error, "retry_after", None)
        if isinstance(retry_after, int) and not isinstance(retry_after, bool) and retry_after >= 0:
            return float(retry_after)

        policy = self._policy
        backoff = policy.initial_backoff * policy.multiplier ** (attempt - 1)
        jitter = self._rng.random() * backoff * policy.jitter_factor
        return min(backoff + jitter, policy.max_backoff)

    async def execute(
        self,
        call: Callable[[], Awaitable[T]],
        *,
        deadline: float | None = None,
        operation: str = "request",
    ) -> T:
        """Run ``call`` until it succeeds or retries are exhausted.

        Args:
            call: Zero-argument coroutine function performing one request
            deadline: Optional event-loop time after which no further
                attempt is scheduled
            operation: Label used in log records

        Returns:
            Whatever ``call`` returns

        Raises:
            Exception: The last error raised by ``call``, unchanged
        """
        state = RetryState()
        max_attempts = self._policy.max_attempts

        while True:
            state.attempt += 1
            try:
                return await call()
            except Exception as e:
                state.last_error = e
                status = getattr(e, "status_code", None)

                if not is_retryable(e):
                    logger.warning(
                        "request_not_retryable",
                        extra={
                            "operation": operation,
                            "attempt": state.attempt,
                            "max_attempts": max_attempts,
                            "status": status,
                            "error_type": type(e).__name__,
                            "error_message": str(e),
                        },
                    )
                    raise

                if state.attempt >= max_attempts:
                    logger.warning(
                        "request_retries_exhausted",
                        extra={
                            "operation": operation,
                            "attempt": state.attempt,
                            "max_attempts": max_attempts,
                            "status": status,
                            "error_message": str(e),
                        },
                    )
                    raise

                delay = self.compute_delay(state.attempt, e)
                if deadline is not None:
                    loop = asyncio.get_running_loop()
                    if loop.time() + delay > deadline:
                        logger.warning(
                            "request_deadline_exceeded",
                            extra={
                                "operation": operation,
                                "attempt": state.attempt,
                                "delay_ms": round(delay * 1000),
                                "status": status,
                            },
                        )
                        raise

                logger.info(
                    "request_retry_scheduled",
                    extra={
                        "operation": operation,
                        "attempt": state.attempt,
                        "max_attempts": max_attempts,
                        "delay_ms": round(delay * 1000),
                        "status": status,
                        "error_message": str(e),
                    },
                )

            await self._sleep(delay)
