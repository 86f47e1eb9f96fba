"""ModelJudgeResult — one judge's opinion of one review."""

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator

from review_scorer.judge.domain.bucket import Bucket


class Confidence(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    @classmethod
    def from_rank(cls, rank: int) -> "Confidence":
        for confidence, value in _CONFIDENCE_RANK.items():
            if value == rank:
                return confidence
        raise ValueError(f"no confidence with rank {rank}")


_CONFIDENCE_RANK: dict[Confidence, int] = {
    Confidence.LOW: 0,
    Confidence.MEDIUM: 1,
    Confidence.HIGH: 2,
}


class RejectionReason(StrEnum):
    WRONG_SHOW = "wrong_show"
    WRONG_PRODUCTION = "wrong_production"
    NOT_A_REVIEW = "not_a_review"
    GARBAGE_TEXT = "garbage_text"


class ModelJudgeResult(BaseModel, frozen=True):
    """A judge's scored verdict, or its deliberate refusal to score.

    A scored result carries bucket, score and confidence. A rejection carries
    rejected=True and a rejection_reason and nothing else. clamped records that
    the provider's score fell outside its bucket and was pulled back in.
    """

    judge: str
    model: str
    bucket: Bucket | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    confidence: Confidence | None = None
    rationale: str = ""
    verdict: str = ""
    key_quote: str = ""
    rejected: bool = False
    rejection_reason: RejectionReason | None = None
    clamped: bool = False

    @model_validator(mode="after")
    def _check_shape(self) -> "ModelJudgeResult":
        if self.rejected:
            if self.rejection_reason is None:
                raise ValueError("a rejection must carry a rejection_reason")
            if self.bucket is not None or self.score is not None:
                raise ValueError("a rejection must not carry a bucket or score")
        else:
            if self.bucket is None or self.score is None or self.confidence is None:
                raise ValueError("a scored result needs bucket, score and confidence")
            if self.rejection_reason is not None:
                raise ValueError("only rejections carry a rejection_reason")
        return self
