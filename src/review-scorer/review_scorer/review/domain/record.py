"""ReviewRecord and its aggregator signals — one critic's review of one production."""

import re
from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from review_scorer.judge.domain.result import RejectionReason
from review_scorer.review.domain.outlet import OutletTier, outlet_tier
from review_scorer.review.domain.scored import ScoredReview
from review_scorer.review.domain.thumb import ThumbDirection

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


class ContentTier(StrEnum):
    """Text completeness as classified by the acquisition pipeline."""

    COMPLETE = "complete"
    TRUNCATED = "truncated"
    EXCERPT = "excerpt"
    STUB = "stub"
    INVALID = "invalid"


class AggregatorExcerpts(BaseModel, frozen=True):
    dtli: str | None = None
    bww: str | None = None
    show_score: str | None = None
    nyc_theatre: str | None = None

    def labelled(self) -> list[tuple[str, str]]:
        """Non-empty excerpts as (source label, text), in aggregator priority order."""
        pairs = [
            ("Show Score", self.show_score),
            ("DTLI", self.dtli),
            ("BWW", self.bww),
            ("NYC Theatre", self.nyc_theatre),
        ]
        return [(label, text.strip()) for label, text in pairs if text and text.strip()]


class AggregatorThumbs(BaseModel, frozen=True):
    """Editorial thumbs from aggregators. Field order is tie-break priority."""

    dtli: ThumbDirection | None = None
    bww: ThumbDirection | None = None

    def present(self) -> list[tuple[str, ThumbDirection]]:
        pairs = [("Did They Like It", self.dtli), ("BroadwayWorld", self.bww)]
        return [(label, thumb) for label, thumb in pairs if thumb is not None]

    def consensus(self) -> ThumbDirection | None:
        """Majority direction across aggregators; ties go to the higher-priority aggregator."""
        thumbs = [thumb for _, thumb in self.present()]
        if not thumbs:
            return None
        best = max(thumbs.count(thumb) for thumb in thumbs)
        return next(thumb for thumb in thumbs if thumbs.count(thumb) == best)


class HumanOverride(BaseModel, frozen=True):
    """Editor-assigned score. Persists across rescoring runs until explicitly cleared."""

    score: float = Field(ge=0, le=100)
    reason: str = ""
    set_by: str = ""
    set_at: datetime | None = None


class QualityFlags(BaseModel, frozen=True):
    mismatched_show: bool = False
    needs_reacquisition: bool = False
    needs_rescore: bool = False
    rejection_reason: RejectionReason | None = None
    # Prompt version under which the review was rejected or found unscorable.
    rejected_version: str | None = None
    note: str | None = None


class ReviewKey(BaseModel, frozen=True):
    show_id: str = Field(min_length=1)
    outlet_id: str = Field(min_length=1)
    critic_name: str

    @property
    def critic_slug(self) -> str:
        return _SLUG_PATTERN.sub("-", self.critic_name.lower()).strip("-") or "unknown"

    @property
    def review_id(self) -> str:
        return f"{self.show_id}/{self.outlet_id.lower()}--{self.critic_slug}"


class ReviewRecord(BaseModel, frozen=True):
    key: ReviewKey
    show_title: str | None = None
    outlet: str | None = None
    publish_date: date | None = None
    full_text: str | None = None
    excerpts: AggregatorExcerpts = Field(default_factory=AggregatorExcerpts)
    thumbs: AggregatorThumbs = Field(default_factory=AggregatorThumbs)
    original_rating: str | None = None
    content_tier: ContentTier = ContentTier.COMPLETE
    human_override: HumanOverride | None = None
    quality_flags: QualityFlags = Field(default_factory=QualityFlags)
    scored: ScoredReview | None = None

    @property
    def review_id(self) -> str:
        return self.key.review_id

    @property
    def outlet_tier(self) -> OutletTier:
        return outlet_tier(self.key.outlet_id)

    def has_extractable_text(self) -> bool:
        if self.full_text and self.full_text.strip():
            return True
        return bool(self.excerpts.labelled())

    def is_scoreable(self) -> bool:
        """False for invalid content or records with no text at all; such records are never scored."""
        return self.content_tier != ContentTier.INVALID and self.has_extractable_text()
