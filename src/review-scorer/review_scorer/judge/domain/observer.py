"""JudgeObserver port — domain events emitted during judge invocations."""

from typing import Protocol


class JudgeObserver(Protocol):
    """Observer port for judge domain events.

    Implementations may log to structlog or record for tests.
    """

    def judge_scoring_started(self, judge: str, review_id: str, model: str) -> None: ...

    def judge_scoring_completed(
        self, judge: str, review_id: str, duration_ms: int, rejected: bool
    ) -> None: ...

    def judge_scoring_failed(self, judge: str, review_id: str, reason: str) -> None: ...

    def judge_score_clamped(
        self, judge: str, review_id: str, bucket: str, raw_score: int, score: int
    ) -> None: ...

    def judge_high_temperature_warned(self, judge: str, temperature: float) -> None: ...
