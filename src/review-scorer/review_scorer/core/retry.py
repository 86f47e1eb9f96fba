"""RetryPolicy — bounded retry with exponential backoff for async operations."""

import asyncio
from collections.abc import Awaitable, Callable

from review_scorer.core.errors import ReviewScorerError

type RetryCallback = Callable[[int, ReviewScorerError, float], None]


class RetryPolicy:
    """Runs an async operation up to max_attempts times.

    Only retriable ReviewScorerErrors trigger another attempt. Anything else,
    and the last retriable error once attempts are exhausted, propagates to the
    caller unchanged.
    """

    def __init__(
        self,
        max_attempts: int,
        initial_backoff_seconds: float,
        backoff_multiplier: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._max_attempts = max_attempts
        self._initial_backoff_seconds = float(initial_backoff_seconds)
        self._backoff_multiplier = float(backoff_multiplier)
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def backoff_schedule(self) -> list[float]:
        """Delays slept between consecutive attempts (one fewer than max_attempts)."""
        delays: list[float] = []
        backoff = self._initial_backoff_seconds
        for _ in range(self._max_attempts - 1):
            delays.append(backoff)
            backoff *= self._backoff_multiplier
        return delays

    async def run[T](
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: RetryCallback | None = None,
    ) -> T:
        """Await operation(), retrying retriable failures per the backoff schedule.

        on_retry is called with (attempt, error, backoff_seconds) before each sleep.
        """
        schedule = self.backoff_schedule()
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await operation()
            except ReviewScorerError as exc:
                if not exc.retriable or attempt == self._max_attempts:
                    raise
                backoff = schedule[attempt - 1]
                if on_retry is not None:
                    on_retry(attempt, exc, backoff)
            await self._sleep(backoff)
        # Unreachable: the loop either returns or raises on the final attempt.
        raise AssertionError("retry loop exited without a result")
