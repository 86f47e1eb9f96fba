"""Aggregate metrics computed over one scored batch."""

from collections import Counter

from pydantic import BaseModel

from review_scorer.scoring.domain.outcome import ReviewOutcome, ReviewStatus


class BatchMetrics(BaseModel, frozen=True):
    """Batch-level health signals fed to the validation gate.

    A rate is None when its denominator is empty (e.g. no review in the batch
    had two or more scoring judges); the gate does not judge a missing rate.
    """

    reviews: int
    multi_judge_reviews: int
    agreement_rate: float | None
    mean_agreeing_spread: float | None
    needs_review_rate: float | None
    failure_rate: float | None
    judge_calls: int
    judge_failures: int
    by_status: dict[str, int]
    by_source: dict[str, int]


def compute_metrics(outcomes: list[ReviewOutcome]) -> BatchMetrics:
    """Compute BatchMetrics for a batch of outcomes.

    - agreement_rate: reviews whose judges reached a bucket agreement, over
      reviews with at least two scoring judges;
    - mean_agreeing_spread: mean score spread among agreeing judges;
    - needs_review_rate: scored reviews flagged for review, over scored reviews;
    - failure_rate: failed judge calls over attempted judge calls.
    """
    multi_judge = [
        o.ensemble
        for o in outcomes
        if o.ensemble is not None and o.ensemble.scoring_judges >= 2
    ]
    spreads = [e.agreeing_spread for e in multi_judge if e.agreeing_spread is not None]
    scored = [o.scored for o in outcomes if o.scored is not None]
    judge_calls = sum(o.judges_attempted for o in outcomes)
    judge_failures = sum(len(o.failures) for o in outcomes)

    by_status = Counter(o.status.value for o in outcomes)
    by_source = Counter(s.score_source.value for s in scored)

    return BatchMetrics(
        reviews=len(outcomes),
        multi_judge_reviews=len(multi_judge),
        agreement_rate=_rate(len(spreads), len(multi_judge)),
        mean_agreeing_spread=sum(spreads) / len(spreads) if spreads else None,
        needs_review_rate=_rate(sum(1 for s in scored if s.needs_review), len(scored)),
        failure_rate=_rate(judge_failures, judge_calls),
        judge_calls=judge_calls,
        judge_failures=judge_failures,
        by_status={status.value: by_status.get(status.value, 0) for status in ReviewStatus},
        by_source=dict(sorted(by_source.items())),
    )


def _rate(numerator: int, denominator: int) -> float | None:
    if denominator == 0:
        return None
    return numerator / denominator
