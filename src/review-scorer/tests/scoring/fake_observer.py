"""FakeScoringObserver — records panel and pipeline events for assertion in tests."""

from dataclasses import dataclass


@dataclass(frozen=True)
class JudgeRetryEvent:
    review_id: str
    judge: str
    attempt: int
    reason: str
    backoff_seconds: float


@dataclass(frozen=True)
class JudgeFailedEvent:
    review_id: str
    judge: str
    reason: str


@dataclass(frozen=True)
class ReviewScoredEvent:
    review_id: str
    score_source: str
    final_score: float
    needs_review: bool


@dataclass(frozen=True)
class ReviewRejectedEvent:
    review_id: str
    rejection_reason: str


@dataclass(frozen=True)
class ReviewUnscoredEvent:
    review_id: str
    status: str
    reason: str


class FakeScoringObserver:
    """Records all emitted scoring events as typed frozen dataclasses."""

    def __init__(self) -> None:
        self.retries: list[JudgeRetryEvent] = []
        self.judge_failures: list[JudgeFailedEvent] = []
        self.scored: list[ReviewScoredEvent] = []
        self.rejected: list[ReviewRejectedEvent] = []
        self.unscored: list[ReviewUnscoredEvent] = []

    def panel_judge_retry(
        self,
        review_id: str,
        judge: str,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None:
        self.retries.append(
            JudgeRetryEvent(
                review_id=review_id,
                judge=judge,
                attempt=attempt,
                reason=reason,
                backoff_seconds=backoff_seconds,
            )
        )

    def panel_judge_failed(self, review_id: str, judge: str, reason: str) -> None:
        self.judge_failures.append(
            JudgeFailedEvent(review_id=review_id, judge=judge, reason=reason)
        )

    def review_scored(
        self,
        review_id: str,
        score_source: str,
        final_score: float,
        needs_review: bool,
    ) -> None:
        self.scored.append(
            ReviewScoredEvent(
                review_id=review_id,
                score_source=score_source,
                final_score=final_score,
                needs_review=needs_review,
            )
        )

    def review_rejected(self, review_id: str, rejection_reason: str) -> None:
        self.rejected.append(
            ReviewRejectedEvent(review_id=review_id, rejection_reason=rejection_reason)
        )

    def review_unscored(self, review_id: str, status: str, reason: str) -> None:
        self.unscored.append(
            ReviewUnscoredEvent(review_id=review_id, status=status, reason=reason)
        )
