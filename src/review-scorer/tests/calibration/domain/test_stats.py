"""Tests for calibration_stats."""

import pytest

from review_scorer.calibration.domain.stats import CalibrationPair, calibration_stats
from review_scorer.judge.domain.bucket import Bucket, BucketTable
from review_scorer.judge.domain.result import Confidence
from review_scorer.review.domain.outlet import OutletTier


def _make_pair(
    reference: float,
    ensemble: float,
    bucket: Bucket,
    confidence: Confidence = Confidence.HIGH,
    tier: OutletTier = 1,
    outlet: str = "NYT",
) -> CalibrationPair:
    return CalibrationPair(
        reference_score=reference,
        ensemble_score=ensemble,
        ensemble_bucket=bucket,
        confidence=confidence,
        tier=tier,
        outlet=outlet,
    )


class TestCalibrationStats:
    def test_error_figures(self) -> None:
        pairs = [
            _make_pair(70, 80, Bucket.POSITIVE),
            _make_pair(60, 50, Bucket.NEGATIVE, Confidence.LOW, tier=3, outlet="Blog"),
        ]

        stats = calibration_stats(pairs, BucketTable())

        assert stats.count == 2
        assert stats.mae == pytest.approx(10.0)
        assert stats.rmse == pytest.approx(10.0)
        assert stats.mean_bias == pytest.approx(0.0)
        assert stats.std_dev == pytest.approx(10.0)

    def test_bucket_accuracy_uses_reference_bucket(self) -> None:
        pairs = [
            _make_pair(70, 80, Bucket.POSITIVE),
            _make_pair(60, 50, Bucket.NEGATIVE),
        ]

        stats = calibration_stats(pairs, BucketTable())

        assert stats.bucket_accuracy == pytest.approx(0.5)

    def test_positive_bias_means_ensemble_scores_high(self) -> None:
        pairs = [_make_pair(60, 66, Bucket.MIXED), _make_pair(40, 44, Bucket.NEGATIVE)]

        stats = calibration_stats(pairs, BucketTable())

        assert stats.mean_bias == pytest.approx(5.0)

    def test_breakdowns_cover_every_confidence_and_tier(self) -> None:
        pairs = [_make_pair(70, 74, Bucket.POSITIVE, Confidence.MEDIUM, tier=2)]

        stats = calibration_stats(pairs, BucketTable())

        assert set(stats.by_confidence) == {"high", "medium", "low"}
        assert stats.by_confidence["medium"].count == 1
        assert stats.by_confidence["high"].count == 0
        assert set(stats.by_tier) == {1, 2, 3}
        assert stats.by_tier[2].mae == pytest.approx(4.0)

    def test_outlet_bias_needs_two_reviews(self) -> None:
        pairs = [
            _make_pair(70, 76, Bucket.POSITIVE, outlet="NYT"),
            _make_pair(80, 84, Bucket.POSITIVE, outlet="NYT"),
            _make_pair(50, 40, Bucket.PAN, outlet="Blog"),
        ]

        stats = calibration_stats(pairs, BucketTable())

        assert list(stats.outlet_bias) == ["NYT"]
        assert stats.outlet_bias["NYT"].mean_bias == pytest.approx(5.0)

    def test_empty_input_gives_zeros(self) -> None:
        stats = calibration_stats([], BucketTable())

        assert stats.count == 0
        assert stats.mae == 0.0
        assert stats.rmse == 0.0
        assert stats.bucket_accuracy == 0.0
        assert stats.outlet_bias == {}
