"""Validation gate — decides whether a scored batch may be committed."""

from pydantic import BaseModel

from review_scorer.config.domain.gate import GateConfig
from review_scorer.rescore.domain.metrics import BatchMetrics


class GateBreach(BaseModel, frozen=True):
    metric: str
    value: float
    threshold: float

    def describe(self) -> str:
        return f"{self.metric}={self.value:.3f} (threshold {self.threshold:.3f})"


class GateVerdict(BaseModel, frozen=True):
    breaches: list[GateBreach] = []
    gated: bool = True

    @property
    def passed(self) -> bool:
        return not self.breaches


def evaluate_gate(metrics: BatchMetrics, config: GateConfig) -> GateVerdict:
    """Compare batch metrics to the configured thresholds.

    Batches with fewer reviews than min_reviews_for_gate pass ungated.
    """
    if metrics.reviews < config.min_reviews_for_gate:
        return GateVerdict(gated=False)

    breaches: list[GateBreach] = []
    if metrics.agreement_rate is not None and metrics.agreement_rate < config.agreement_floor:
        breaches.append(
            GateBreach(
                metric="agreement_rate",
                value=metrics.agreement_rate,
                threshold=config.agreement_floor,
            )
        )
    if (
        metrics.mean_agreeing_spread is not None
        and metrics.mean_agreeing_spread > config.spread_ceiling
    ):
        breaches.append(
            GateBreach(
                metric="mean_agreeing_spread",
                value=metrics.mean_agreeing_spread,
                threshold=config.spread_ceiling,
            )
        )
    if (
        metrics.needs_review_rate is not None
        and metrics.needs_review_rate > config.needs_review_ceiling
    ):
        breaches.append(
            GateBreach(
                metric="needs_review_rate",
                value=metrics.needs_review_rate,
                threshold=config.needs_review_ceiling,
            )
        )
    if metrics.failure_rate is not None and metrics.failure_rate > config.failure_ceiling:
        breaches.append(
            GateBreach(
                metric="failure_rate",
                value=metrics.failure_rate,
                threshold=config.failure_ceiling,
            )
        )
    return GateVerdict(breaches=breaches)
