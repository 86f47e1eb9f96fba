"""ScoredReview — the persisted, provenance-carrying score for one review."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from review_scorer.judge.domain.bucket import Bucket
from review_scorer.judge.domain.result import Confidence
from review_scorer.review.domain.thumb import ThumbDirection
from review_scorer.scoring.domain.ensemble import EnsembleResult
from review_scorer.scoring.domain.explicit import ExplicitRating, RatingFormat


class ScoreSource(StrEnum):
    """Which layer of the scoring hierarchy produced final_score."""

    EXPLICIT_STARS = "explicit-stars"
    EXPLICIT_OUT_OF = "explicit-outOf"
    EXPLICIT_SLASH = "explicit-slash"
    EXPLICIT_LETTER_GRADE = "explicit-letterGrade"
    HUMAN_OVERRIDE = "humanOverride"
    ENSEMBLE_HIGH_CONFIDENCE = "ensemble-high-confidence"
    THUMB_OVERRIDE = "thumb-override"
    ENSEMBLE_LOW_CONFIDENCE = "ensemble-low-confidence"
    THUMB_ONLY = "thumb-only"

    @classmethod
    def for_explicit(cls, rating_format: RatingFormat) -> "ScoreSource":
        return cls(f"explicit-{rating_format.value}")

    @property
    def is_explicit(self) -> bool:
        return self.value.startswith("explicit-")


class ScoredReview(BaseModel, frozen=True):
    final_score: float = Field(ge=0, le=100)
    final_bucket: Bucket
    score_source: ScoreSource
    confidence: Confidence
    needs_review: bool = False
    review_reasons: list[str] = []
    prompt_version: str = Field(min_length=1)
    scored_at: datetime | None = None
    previous_score: float | None = None
    previous_version: str | None = None
    explicit_rating: ExplicitRating | None = None
    thumb: ThumbDirection | None = None
    ensemble: EnsembleResult | None = None
