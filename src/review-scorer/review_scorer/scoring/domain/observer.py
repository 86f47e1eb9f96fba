"""ScoringObserver port — per-review events from the judge panel and the pipeline."""

from typing import Protocol


class ScoringObserver(Protocol):
    def panel_judge_retry(
        self,
        review_id: str,
        judge: str,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None: ...

    def panel_judge_failed(self, review_id: str, judge: str, reason: str) -> None: ...

    def review_scored(
        self,
        review_id: str,
        score_source: str,
        final_score: float,
        needs_review: bool,
    ) -> None: ...

    def review_rejected(self, review_id: str, rejection_reason: str) -> None: ...

    def review_unscored(self, review_id: str, status: str, reason: str) -> None: ...
