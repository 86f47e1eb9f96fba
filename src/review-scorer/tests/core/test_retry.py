"""Tests for RetryPolicy."""

import pytest

from review_scorer.core.errors import ReviewScorerError
from review_scorer.core.retry import RetryPolicy


class _RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _make_policy(
    max_attempts: int = 3,
    initial_backoff_seconds: float = 1.0,
    backoff_multiplier: float = 2.0,
) -> tuple[RetryPolicy, _RecordingSleep]:
    sleep = _RecordingSleep()
    policy = RetryPolicy(
        max_attempts=max_attempts,
        initial_backoff_seconds=initial_backoff_seconds,
        backoff_multiplier=backoff_multiplier,
        sleep=sleep,
    )
    return policy, sleep


class _Flaky:
    """Fails with the given errors in order, then returns 'ok'."""

    def __init__(self, errors: list[Exception]) -> None:
        self._errors = list(errors)
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self._errors:
            raise self._errors.pop(0)
        return "ok"


class TestBackoffSchedule:
    def test_exponential_schedule(self) -> None:
        policy, _ = _make_policy(max_attempts=4, initial_backoff_seconds=0.5)

        assert policy.backoff_schedule() == [0.5, 1.0, 2.0]

    def test_single_attempt_has_no_delays(self) -> None:
        policy, _ = _make_policy(max_attempts=1)

        assert policy.backoff_schedule() == []

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0, initial_backoff_seconds=1, backoff_multiplier=1)


class TestRun:
    """run() retries only retriable ReviewScorerErrors."""

    async def test_success_on_first_attempt(self) -> None:
        policy, sleep = _make_policy()
        operation = _Flaky(errors=[])

        assert await policy.run(operation) == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    async def test_retriable_error_is_retried(self) -> None:
        policy, sleep = _make_policy()
        operation = _Flaky(errors=[ReviewScorerError("Failed to call", retriable=True)])

        assert await policy.run(operation) == "ok"
        assert operation.calls == 2
        assert sleep.delays == [1.0]

    async def test_non_retriable_error_propagates_immediately(self) -> None:
        policy, sleep = _make_policy()
        operation = _Flaky(errors=[ReviewScorerError("Failed to auth", retriable=False)])

        with pytest.raises(ReviewScorerError, match="auth"):
            await policy.run(operation)
        assert operation.calls == 1
        assert sleep.delays == []

    async def test_last_error_raised_after_exhaustion(self) -> None:
        policy, sleep = _make_policy(max_attempts=2)
        operation = _Flaky(
            errors=[
                ReviewScorerError("Failed first", retriable=True),
                ReviewScorerError("Failed second", retriable=True),
            ]
        )

        with pytest.raises(ReviewScorerError, match="second"):
            await policy.run(operation)
        assert operation.calls == 2
        assert sleep.delays == [1.0]

    async def test_foreign_exceptions_are_not_retried(self) -> None:
        policy, _ = _make_policy()
        operation = _Flaky(errors=[ValueError("boom")])

        with pytest.raises(ValueError):
            await policy.run(operation)
        assert operation.calls == 1

    async def test_on_retry_called_before_each_sleep(self) -> None:
        policy, _ = _make_policy(max_attempts=3)
        operation = _Flaky(
            errors=[
                ReviewScorerError("Failed a", retriable=True),
                ReviewScorerError("Failed b", retriable=True),
            ]
        )
        calls: list[tuple[int, str, float]] = []

        await policy.run(
            operation, on_retry=lambda attempt, exc, backoff: calls.append((attempt, str(exc), backoff))
        )

        assert calls == [(1, "Failed a", 1.0), (2, "Failed b", 2.0)]
