"""Per-review scoring outcome as produced by the pipeline."""

from enum import StrEnum

from pydantic import BaseModel

from review_scorer.review.domain.record import ReviewRecord
from review_scorer.review.domain.scored import ScoredReview
from review_scorer.scoring.domain.ensemble import EnsembleResult


class ReviewStatus(StrEnum):
    SCORED = "scored"
    REJECTED = "rejected"
    NEEDS_RESCORE = "needs_rescore"
    UNSCORABLE = "unscorable"


class JudgeFailure(BaseModel, frozen=True):
    """A judge that produced no result after its retries (error, timeout or bad output)."""

    judge: str
    reason: str


class ReviewOutcome(BaseModel, frozen=True):
    record: ReviewRecord
    status: ReviewStatus
    scored: ScoredReview | None = None
    ensemble: EnsembleResult | None = None
    failures: list[JudgeFailure] = []
    judges_attempted: int = 0
    reason: str | None = None

    @property
    def review_id(self) -> str:
        return self.record.review_id
