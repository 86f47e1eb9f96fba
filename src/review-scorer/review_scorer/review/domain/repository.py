"""ReviewRepository protocol — the port to the per-review record store."""

from typing import Protocol

from review_scorer.judge.domain.result import RejectionReason
from review_scorer.review.domain.record import ReviewKey, ReviewRecord
from review_scorer.review.domain.scored import ScoredReview
from review_scorer.review.domain.selector import CorpusSelector


class ReviewRepository(Protocol):
    """Port for reading and writing review records.

    The store has per-review granularity; the caller is assumed to hold
    exclusive write access to a record while it is being scored.
    """

    def select(self, selector: CorpusSelector, prompt_version: str) -> list[ReviewKey]:
        """Keys of matching reviews, in a stable order."""
        ...

    def load(self, key: ReviewKey) -> ReviewRecord: ...

    def save_scored(self, record: ReviewRecord, scored: ScoredReview) -> None:
        """Persist a new score, keeping the one it replaces for rollback."""
        ...

    def mark_rejected(
        self,
        record: ReviewRecord,
        reason: RejectionReason,
        note: str,
        prompt_version: str,
    ) -> None:
        """Flag the review and drop its score; the dropped score stays available to rollback."""
        ...

    def mark_needs_rescore(self, record: ReviewRecord, reason: str) -> None: ...

    def mark_unscorable(
        self, record: ReviewRecord, reason: str, prompt_version: str
    ) -> None: ...

    def rollback(self, key: ReviewKey) -> ScoredReview | None:
        """Restore the score that preceded the current one; None if there is none."""
        ...
