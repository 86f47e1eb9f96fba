"""ScoringPayload — the structured input every judge receives for one review."""

from enum import StrEnum

from pydantic import BaseModel


class TextQuality(StrEnum):
    COMPLETE = "complete"
    TRUNCATED = "truncated"
    EXCERPT_ONLY = "excerpt-only"


class ScoringPayload(BaseModel, frozen=True):
    review_id: str
    text: str
    context: str
    text_quality: TextQuality
    includes_aggregator_context: bool
