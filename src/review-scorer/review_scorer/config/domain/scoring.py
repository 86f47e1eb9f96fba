"""Scoring tables: bucket ranges, letter grades and aggregator thumb scores."""

import re

from pydantic import BaseModel, Field, field_validator

from review_scorer.judge.domain.bucket import BucketTable
from review_scorer.review.domain.thumb import ThumbDirection

_GRADE_PATTERN = re.compile(r"^[A-DF][+-]?$")

DEFAULT_LETTER_GRADES: dict[str, int] = {
    "A+": 97,
    "A": 93,
    "A-": 90,
    "B+": 87,
    "B": 83,
    "B-": 78,
    "C+": 72,
    "C": 65,
    "C-": 58,
    "D+": 40,
    "D": 35,
    "D-": 30,
    "F": 20,
}

DEFAULT_THUMB_SCORES: dict[ThumbDirection, int] = {
    ThumbDirection.UP: 80,
    ThumbDirection.MEH: 60,
    ThumbDirection.DOWN: 35,
}


class ScoringConfig(BaseModel, frozen=True):
    buckets: BucketTable = Field(default_factory=BucketTable)
    letter_grades: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_LETTER_GRADES)
    )
    thumb_scores: dict[ThumbDirection, int] = Field(
        default_factory=lambda: dict(DEFAULT_THUMB_SCORES)
    )
    # Full text shorter than this cannot support more than low confidence.
    min_confident_text_length: int = Field(default=100, ge=0)

    @field_validator("letter_grades")
    @classmethod
    def _check_letter_grades(cls, value: dict[str, int]) -> dict[str, int]:
        bad_keys = [grade for grade in value if not _GRADE_PATTERN.match(grade)]
        if bad_keys:
            raise ValueError(f"invalid letter grades: {', '.join(sorted(bad_keys))}")
        bad_scores = [grade for grade, score in value.items() if not 0 <= score <= 100]
        if bad_scores:
            raise ValueError(
                f"letter grade scores must be 0-100: {', '.join(sorted(bad_scores))}"
            )
        return value

    @field_validator("thumb_scores")
    @classmethod
    def _check_thumb_scores(
        cls, value: dict[ThumbDirection, int]
    ) -> dict[ThumbDirection, int]:
        missing = [d.value for d in ThumbDirection if d not in value]
        if missing:
            raise ValueError(f"missing thumb scores for: {', '.join(missing)}")
        return value
