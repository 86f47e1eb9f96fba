"""Structlog implementation of the ScoringObserver port."""

import structlog


class StructlogScoringObserver:
    """Delegates scoring domain events to structlog.

    Satisfies the ScoringObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def panel_judge_retry(
        self,
        review_id: str,
        judge: str,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None:
        self._log.warning(
            "panel.judge_retry",
            review_id=review_id,
            judge=judge,
            attempt=attempt,
            reason=reason,
            backoff_seconds=backoff_seconds,
        )

    def panel_judge_failed(self, review_id: str, judge: str, reason: str) -> None:
        self._log.error(
            "panel.judge_failed", review_id=review_id, judge=judge, reason=reason
        )

    def review_scored(
        self,
        review_id: str,
        score_source: str,
        final_score: float,
        needs_review: bool,
    ) -> None:
        self._log.info(
            "review.scored",
            review_id=review_id,
            score_source=score_source,
            final_score=final_score,
            needs_review=needs_review,
        )

    def review_rejected(self, review_id: str, rejection_reason: str) -> None:
        self._log.info(
            "review.rejected", review_id=review_id, rejection_reason=rejection_reason
        )

    def review_unscored(self, review_id: str, status: str, reason: str) -> None:
        self._log.warning(
            "review.unscored", review_id=review_id, status=status, reason=reason
        )
