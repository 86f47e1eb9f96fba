"""Calibration statistics — how far ensemble scores sit from human reference scores."""

import math

from pydantic import BaseModel

from review_scorer.judge.domain.bucket import Bucket, BucketTable
from review_scorer.judge.domain.result import Confidence
from review_scorer.review.domain.outlet import OutletTier
from review_scorer.review.domain.record import ReviewRecord
from review_scorer.scoring.domain.ensemble import EnsembleResult


class CalibrationPair(BaseModel, frozen=True):
    reference_score: float
    ensemble_score: float
    ensemble_bucket: Bucket
    confidence: Confidence
    tier: OutletTier
    outlet: str

    @property
    def delta(self) -> float:
        """Signed error; positive means the ensemble scored higher than the reference."""
        return self.ensemble_score - self.reference_score


class ErrorSummary(BaseModel, frozen=True):
    count: int = 0
    mae: float = 0.0
    mean_bias: float = 0.0


class CalibrationStats(BaseModel, frozen=True):
    count: int
    mae: float
    rmse: float
    mean_bias: float
    std_dev: float
    bucket_accuracy: float
    by_confidence: dict[str, ErrorSummary]
    by_tier: dict[int, ErrorSummary]
    # Only outlets with at least two calibrated reviews.
    outlet_bias: dict[str, ErrorSummary]


def calibration_stats(pairs: list[CalibrationPair], buckets: BucketTable) -> CalibrationStats:
    """Error statistics over pairs; all figures are 0 when pairs is empty."""
    count = len(pairs)
    deltas = [p.delta for p in pairs]
    mean_bias = sum(deltas) / count if count else 0.0
    variance = sum((d - mean_bias) ** 2 for d in deltas) / count if count else 0.0
    bucket_hits = sum(
        1 for p in pairs if buckets.bucket_for(p.reference_score) == p.ensemble_bucket
    )

    by_outlet: dict[str, list[CalibrationPair]] = {}
    for pair in pairs:
        by_outlet.setdefault(pair.outlet, []).append(pair)

    return CalibrationStats(
        count=count,
        mae=_mean([abs(d) for d in deltas]),
        rmse=math.sqrt(_mean([d * d for d in deltas])),
        mean_bias=mean_bias,
        std_dev=math.sqrt(variance),
        bucket_accuracy=bucket_hits / count if count else 0.0,
        by_confidence={
            c.value: summarize([p for p in pairs if p.confidence == c]) for c in Confidence
        },
        by_tier={tier: summarize([p for p in pairs if p.tier == tier]) for tier in (1, 2, 3)},
        outlet_bias={
            outlet: summarize(members)
            for outlet, members in sorted(by_outlet.items())
            if len(members) >= 2
        },
    )


def judged_verdict(record: ReviewRecord) -> EnsembleResult | None:
    """The judges' own scored verdict on record, whatever layer set its final score."""
    if record.scored is None or record.scored.ensemble is None:
        return None
    ensemble = record.scored.ensemble
    return ensemble if ensemble.is_scored and ensemble.final_bucket is not None else None


def summarize(pairs: list[CalibrationPair]) -> ErrorSummary:
    if not pairs:
        return ErrorSummary()
    return ErrorSummary(
        count=len(pairs),
        mae=_mean([abs(p.delta) for p in pairs]),
        mean_bias=_mean([p.delta for p in pairs]),
    )


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0
