"""Tests for the batch validation gate."""

from review_scorer.config.domain.gate import GateConfig
from review_scorer.rescore.domain.gate import GateBreach, evaluate_gate
from review_scorer.rescore.domain.metrics import BatchMetrics

_CONFIG = GateConfig(
    agreement_floor=0.6,
    spread_ceiling=10.0,
    needs_review_ceiling=0.3,
    failure_ceiling=0.2,
    min_reviews_for_gate=5,
)


def _make_metrics(
    reviews: int = 50,
    agreement_rate: float | None = 0.9,
    mean_agreeing_spread: float | None = 4.0,
    needs_review_rate: float | None = 0.1,
    failure_rate: float | None = 0.0,
) -> BatchMetrics:
    return BatchMetrics(
        reviews=reviews,
        multi_judge_reviews=reviews,
        agreement_rate=agreement_rate,
        mean_agreeing_spread=mean_agreeing_spread,
        needs_review_rate=needs_review_rate,
        failure_rate=failure_rate,
        judge_calls=reviews * 3,
        judge_failures=0,
        by_status={},
        by_source={},
    )


class TestEvaluateGate:
    def test_healthy_batch_passes(self) -> None:
        verdict = evaluate_gate(_make_metrics(), _CONFIG)

        assert verdict.passed
        assert verdict.gated

    def test_each_threshold_breach(self) -> None:
        metrics = _make_metrics(
            agreement_rate=0.4,
            mean_agreeing_spread=14.0,
            needs_review_rate=0.5,
            failure_rate=0.25,
        )

        verdict = evaluate_gate(metrics, _CONFIG)

        assert not verdict.passed
        assert [b.metric for b in verdict.breaches] == [
            "agreement_rate",
            "mean_agreeing_spread",
            "needs_review_rate",
            "failure_rate",
        ]

    def test_values_on_the_threshold_pass(self) -> None:
        metrics = _make_metrics(
            agreement_rate=0.6,
            mean_agreeing_spread=10.0,
            needs_review_rate=0.3,
            failure_rate=0.2,
        )

        assert evaluate_gate(metrics, _CONFIG).passed

    def test_missing_rates_are_not_judged(self) -> None:
        metrics = _make_metrics(
            agreement_rate=None,
            mean_agreeing_spread=None,
            needs_review_rate=None,
            failure_rate=None,
        )

        assert evaluate_gate(metrics, _CONFIG).passed

    def test_small_batch_is_ungated(self) -> None:
        verdict = evaluate_gate(_make_metrics(reviews=4, agreement_rate=0.0), _CONFIG)

        assert verdict.passed
        assert verdict.gated is False


class TestGateBreach:
    def test_describe(self) -> None:
        breach = GateBreach(metric="agreement_rate", value=0.4, threshold=0.55)

        assert breach.describe() == "agreement_rate=0.400 (threshold 0.550)"
