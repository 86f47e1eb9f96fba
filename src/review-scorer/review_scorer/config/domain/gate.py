"""Validation gate thresholds evaluated after each rescored batch."""

from pydantic import BaseModel, Field


class GateConfig(BaseModel, frozen=True):
    agreement_floor: float = Field(default=0.55, ge=0.0, le=1.0)
    spread_ceiling: float = Field(default=12.0, ge=0.0)
    needs_review_ceiling: float = Field(default=0.5, ge=0.0, le=1.0)
    failure_ceiling: float = Field(default=0.25, ge=0.0, le=1.0)
    # Batches with fewer gate-eligible reviews than this are not gated.
    min_reviews_for_gate: int = Field(default=1, ge=1)
