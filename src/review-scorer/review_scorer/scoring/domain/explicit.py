"""Explicit-Rating Extractor — finds a critic's own printed rating in review text.

Formats are tried in priority order and the first format that matches wins:
star glyphs, "X out of Y", "X/Y", then letter grades. Letter grades only count
when anchored to grading language ("grade: B+", "gives it an A"), never as a
bare capital letter.
"""

import math
import re
from enum import StrEnum

from pydantic import BaseModel, Field

# Denominators accepted for numeric ratings. Anything else ("9/11", "3/15") is
# far more likely to be a date or a count than a rating.
_RATING_SCALES: frozenset[int] = frozenset({4, 5, 10, 100})

_STAR_RUN = re.compile(r"(?P<full>★*)(?P<half>½?)(?P<empty>☆*)")
_OUT_OF = re.compile(
    r"(?<![\d.])(\d+(?:\.\d+)?)\s+out\s+of\s+(\d+)(?!\d|\.\d)", re.IGNORECASE
)
_SLASH = re.compile(r"(?<![\d/.])(\d+(?:\.\d+)?)\s*/\s*(\d+)(?![\d/]|\.\d)")
_GRADE_SUFFIX = r"([A-DF])([+\-−]?)(?![\w+\-−])"
_LETTER_GRADE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?i:\b(?:grade|graded|rating))\s*(?:[:\-–]|is|of)?\s*(?i:an?\s+)?"
        + _GRADE_SUFFIX
    ),
    re.compile(
        r"(?i:\b(?:gives?|giving|gave|earns?|earned|earning|deserves?|gets?|got))"
        r"\s+(?i:(?:it|this|the\s+(?:show|production|musical|play|revival))\s+)?"
        r"(?i:an?)\s+" + _GRADE_SUFFIX
    ),
)

# Whole-field forms seen in an aggregator's rating column ("B+", "3.5 stars", "****").
_BARE_GRADE = re.compile(r"([A-DF])([+\-−]?)", re.IGNORECASE)
_STAR_WORD = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:stars?|★)(?:\s+out\s+of\s+(\d+))?", re.IGNORECASE
)
_STAR_TALLY = re.compile(r"[★*]+")


class RatingFormat(StrEnum):
    STARS = "stars"
    OUT_OF = "outOf"
    SLASH = "slash"
    LETTER_GRADE = "letterGrade"


class ExplicitRating(BaseModel, frozen=True):
    format: RatingFormat
    raw: str
    score: int = Field(ge=0, le=100)
    numerator: float | None = None
    denominator: float | None = None
    grade: str | None = None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _scaled(numerator: float, denominator: float) -> int:
    return max(0, min(100, _round_half_up(numerator / denominator * 100)))


class ExplicitRatingExtractor:
    """Extracts the first explicit rating from raw review text."""

    def __init__(self, letter_grades: dict[str, int]) -> None:
        self._letter_grades = letter_grades

    def extract(self, raw_text: str | None) -> ExplicitRating | None:
        if not raw_text:
            return None
        for finder in (
            self._stars,
            self._out_of,
            self._slash,
            self._letter_grade,
        ):
            rating = finder(raw_text)
            if rating is not None:
                return rating
        return None

    def parse_rating(self, rating: str | None) -> ExplicitRating | None:
        """Convert a standalone rating field ("4/5", "B+", "3.5 stars") to a rating.

        Unlike extract, the whole value is the rating, so a bare letter grade
        or a single star counts.
        """
        value = (rating or "").strip()
        if not value:
            return None

        if _STAR_TALLY.fullmatch(value):
            if len(value) > 5:
                return None
            return ExplicitRating(
                format=RatingFormat.STARS,
                raw=value,
                score=_scaled(len(value), 5),
                numerator=float(len(value)),
                denominator=5.0,
            )

        match = _STAR_WORD.fullmatch(value)
        if match:
            stars = float(match.group(1))
            total = int(match.group(2) or 5)
            if total not in _RATING_SCALES or stars > total:
                return None
            return ExplicitRating(
                format=RatingFormat.STARS,
                raw=value,
                score=_scaled(stars, total),
                numerator=stars,
                denominator=float(total),
            )

        match = _BARE_GRADE.fullmatch(value)
        if match:
            grade = match.group(1).upper() + match.group(2).replace("−", "-")
            score = self._letter_grades.get(grade)
            if score is None:
                return None
            return ExplicitRating(
                format=RatingFormat.LETTER_GRADE, raw=value, score=score, grade=grade
            )

        return self.extract(value)

    def _stars(self, text: str) -> ExplicitRating | None:
        for match in _STAR_RUN.finditer(text):
            full = len(match.group("full"))
            half = 1 if match.group("half") else 0
            empty = len(match.group("empty"))
            if full == 0 and not (half and empty):
                continue
            # A lone glyph is decoration ("★ Critic's Pick"), not a rating.
            if full + half + empty < 2:
                continue
            # A bare run of filled stars is read as out of five.
            total = full + half + empty if empty else 5
            earned = full + 0.5 * half
            if earned > total or total > 10:
                continue
            return ExplicitRating(
                format=RatingFormat.STARS,
                raw=match.group(0),
                score=_scaled(earned, total),
                numerator=earned,
                denominator=float(total),
            )
        return None

    def _out_of(self, text: str) -> ExplicitRating | None:
        return _first_fraction(_OUT_OF, text, RatingFormat.OUT_OF)

    def _slash(self, text: str) -> ExplicitRating | None:
        return _first_fraction(_SLASH, text, RatingFormat.SLASH)

    def _letter_grade(self, text: str) -> ExplicitRating | None:
        for pattern in _LETTER_GRADE_PATTERNS:
            for match in pattern.finditer(text):
                grade = match.group(1) + match.group(2).replace("−", "-")
                score = self._letter_grades.get(grade)
                if score is None:
                    continue
                return ExplicitRating(
                    format=RatingFormat.LETTER_GRADE,
                    raw=match.group(0),
                    score=score,
                    grade=grade,
                )
        return None


def _first_fraction(
    pattern: re.Pattern[str], text: str, rating_format: RatingFormat
) -> ExplicitRating | None:
    for match in pattern.finditer(text):
        numerator = float(match.group(1))
        denominator = int(match.group(2))
        if denominator not in _RATING_SCALES or numerator > denominator:
            continue
        return ExplicitRating(
            format=rating_format,
            raw=match.group(0),
            score=_scaled(numerator, denominator),
            numerator=numerator,
            denominator=float(denominator),
        )
    return None
