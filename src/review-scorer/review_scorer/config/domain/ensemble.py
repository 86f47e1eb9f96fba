"""Ensemble reconciliation thresholds."""

from pydantic import BaseModel, Field


class EnsembleConfig(BaseModel, frozen=True):
    # Max pairwise spread tolerated when all judges share a bucket.
    unanimous_spread_threshold: float = Field(default=15.0, ge=0)
    # Spread at or under which agreeing judges count as tightly agreed (high confidence).
    tight_agreement_spread: float = Field(default=5.0, ge=0)
    # Bucket steps between dissenter and majority that flag a review.
    dissent_review_distance: int = Field(default=1, ge=1, le=4)
    # Number of independent judge rejections that reject a review outright.
    rejection_quorum: int = Field(default=2, ge=1)
