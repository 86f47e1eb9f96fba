"""Ground-truth report — the judges' scores against ratings the critics printed themselves.

A review whose outlet published a rating ("4/5", "B+", "3.5 stars") carries a
reference score that no human had to supply. Pairing it with the ensemble's
own score (not the final score, which the explicit rating may have set) shows
how far the judges drift from the critics.
"""

from pydantic import BaseModel, Field

from review_scorer.calibration.domain.stats import (
    CalibrationPair,
    CalibrationStats,
    ErrorSummary,
    calibration_stats,
    judged_verdict,
    summarize,
)
from review_scorer.judge.domain.bucket import BucketTable
from review_scorer.judge.domain.result import Confidence
from review_scorer.review.domain.record import ReviewRecord
from review_scorer.scoring.domain.explicit import ExplicitRatingExtractor, RatingFormat

_BIAS_WARNING_POINTS = 5.0
_BUCKET_ACCURACY_FLOOR = 0.6
# A rating format needs this many reviews before its error is compared to the overall.
_MIN_FORMAT_REVIEWS = 3


class GroundTruthPair(BaseModel, frozen=True):
    review_id: str
    show_id: str
    original_rating: str
    rating_format: RatingFormat
    pair: CalibrationPair


class GroundTruthReport(BaseModel, frozen=True):
    rated: int
    unparsed: int
    unjudged: int
    stats: CalibrationStats
    by_format: dict[str, ErrorSummary]
    largest_errors: list[GroundTruthPair] = Field(default_factory=list)

    def recommendations(self) -> list[str]:
        """Prompt-tuning hints for systematic bias, poor bucket accuracy or a weak rating format."""
        stats = self.stats
        if stats.count == 0:
            return []
        hints: list[str] = []
        if stats.mean_bias > _BIAS_WARNING_POINTS:
            hints.append(
                f"judges score {stats.mean_bias:.1f} points above printed ratings;"
                " add lower-scoring examples to the prompt"
            )
        elif stats.mean_bias < -_BIAS_WARNING_POINTS:
            hints.append(
                f"judges score {-stats.mean_bias:.1f} points below printed ratings;"
                " add higher-scoring examples to the prompt"
            )
        if stats.bucket_accuracy < _BUCKET_ACCURACY_FLOOR:
            hints.append(
                f"bucket accuracy is only {stats.bucket_accuracy:.0%};"
                " review the bucket anchor definitions"
            )
        for rating_format, summary in self.by_format.items():
            if (
                summary.count >= _MIN_FORMAT_REVIEWS
                and summary.mae > stats.mae + _BIAS_WARNING_POINTS
            ):
                hints.append(
                    f"{rating_format} ratings err by {summary.mae:.1f} points"
                    f" against {stats.mae:.1f} overall"
                )
        return hints


def ground_truth_pair(
    record: ReviewRecord, extractor: ExplicitRatingExtractor
) -> GroundTruthPair | None:
    """None when the record has no convertible rating or no judged score."""
    rating = extractor.parse_rating(record.original_rating)
    verdict = judged_verdict(record)
    if rating is None or verdict is None:
        return None
    assert record.original_rating is not None
    assert verdict.final_score is not None and verdict.final_bucket is not None
    return GroundTruthPair(
        review_id=record.review_id,
        show_id=record.key.show_id,
        original_rating=record.original_rating,
        rating_format=rating.format,
        pair=CalibrationPair(
            reference_score=float(rating.score),
            ensemble_score=verdict.final_score,
            ensemble_bucket=verdict.final_bucket,
            confidence=verdict.confidence or Confidence.LOW,
            tier=record.outlet_tier,
            outlet=record.outlet or record.key.outlet_id,
        ),
    )


def ground_truth_report(
    records: list[ReviewRecord],
    extractor: ExplicitRatingExtractor,
    buckets: BucketTable,
    largest: int = 5,
) -> GroundTruthReport:
    """Compare every judged record that carries a printed rating.

    rated counts records with any original rating; unparsed are those whose
    rating could not be converted; unjudged have a rating but no ensemble score.
    """
    rated = [r for r in records if r.original_rating]
    unparsed = [r for r in rated if extractor.parse_rating(r.original_rating) is None]

    pairs: list[GroundTruthPair] = []
    for record in rated:
        pair = ground_truth_pair(record, extractor)
        if pair is not None:
            pairs.append(pair)

    by_format: dict[str, ErrorSummary] = {}
    for rating_format in RatingFormat:
        members = [p.pair for p in pairs if p.rating_format == rating_format]
        if members:
            by_format[rating_format.value] = summarize(members)

    return GroundTruthReport(
        rated=len(rated),
        unparsed=len(unparsed),
        unjudged=len(rated) - len(unparsed) - len(pairs),
        stats=calibration_stats([p.pair for p in pairs], buckets),
        by_format=by_format,
        largest_errors=sorted(pairs, key=lambda p: -abs(p.pair.delta))[:largest],
    )
