"""Ensemble Reconciler — folds every judge's result into one consensus verdict.

Voting, with graceful degradation as judges fail:

- all judges share a bucket: unanimous, median score, flagged only when the
  spread exceeds the unanimous spread threshold;
- a strict majority shares a bucket: majority, mean of the agreeing scores,
  dissenters kept in the audit trail but excluded from the score, flagged when a
  dissenter is at least the configured number of bucket steps away;
- no majority: no-consensus, mean of all scores with the bucket derived from
  that mean, always flagged;
- two usable judges: degraded-2-model, mean of both;
- one usable judge: degraded-1-model, used verbatim and always flagged;
- none: no score, needs_rescore.

A quorum of independent rejections rejects the review outright, whatever the
remaining judges said. The reconciler is a pure function of its inputs.
"""

import statistics
from collections import Counter
from enum import StrEnum

from pydantic import BaseModel

from review_scorer.config.domain.ensemble import EnsembleConfig
from review_scorer.judge.domain.bucket import (
    BUCKET_ORDER,
    Bucket,
    BucketTable,
    bucket_distance,
)
from review_scorer.judge.domain.result import (
    Confidence,
    ModelJudgeResult,
    RejectionReason,
)


class AgreementLevel(StrEnum):
    UNANIMOUS = "unanimous"
    MAJORITY = "majority"
    NO_CONSENSUS = "no-consensus"
    DEGRADED_2_MODEL = "degraded-2-model"
    DEGRADED_1_MODEL = "degraded-1-model"
    NO_JUDGES = "no-judges"
    REJECTED = "rejected"


class EnsembleResult(BaseModel, frozen=True):
    """Consensus across judges for one review.

    model_results always holds every judge result that was reconciled,
    including dissenters, rejections and discarded out-of-range results.
    """

    agreement_level: AgreementLevel
    final_bucket: Bucket | None = None
    final_score: float | None = None
    confidence: Confidence | None = None
    needs_review: bool = False
    needs_rescore: bool = False
    rejection_reason: RejectionReason | None = None
    agreeing_spread: float | None = None
    scoring_judges: int = 0
    review_reasons: list[str] = []
    model_results: list[ModelJudgeResult] = []

    @property
    def is_scored(self) -> bool:
        return self.final_score is not None

    @property
    def is_rejected(self) -> bool:
        return self.agreement_level == AgreementLevel.REJECTED


def reconcile(
    results: list[ModelJudgeResult],
    config: EnsembleConfig,
    buckets: BucketTable,
) -> EnsembleResult:
    rejections = [r for r in results if r.rejected]
    if len(rejections) >= config.rejection_quorum:
        reason = _consensus_rejection_reason(rejections)
        return EnsembleResult(
            agreement_level=AgreementLevel.REJECTED,
            rejection_reason=reason,
            review_reasons=[
                f"{len(rejections)} of {len(results)} judges rejected the review ({reason})"
            ],
            model_results=list(results),
        )

    notes = [
        f"{r.judge} rejected the review ({r.rejection_reason}); scored without it"
        for r in rejections
    ]
    usable: list[ModelJudgeResult] = []
    for result in results:
        if result.rejected:
            continue
        assert result.bucket is not None and result.score is not None
        if not buckets.contains(result.bucket, result.score):
            notes.append(
                f"{result.judge} score {result.score} is outside the {result.bucket} "
                "range; discarded"
            )
            continue
        usable.append(result)

    if not usable:
        return EnsembleResult(
            agreement_level=AgreementLevel.NO_JUDGES,
            needs_rescore=True,
            review_reasons=notes + ["no judge produced a usable score"],
            model_results=list(results),
        )
    if len(usable) == 1:
        verdict = _single_judge(usable[0])
    elif len(usable) == 2:
        verdict = _two_judges(usable, config, buckets)
    else:
        verdict = _panel(usable, config, buckets)

    return verdict.model_copy(
        update={
            "review_reasons": notes + verdict.review_reasons,
            "model_results": list(results),
            "scoring_judges": len(usable),
        }
    )


def _single_judge(result: ModelJudgeResult) -> EnsembleResult:
    return EnsembleResult(
        agreement_level=AgreementLevel.DEGRADED_1_MODEL,
        final_bucket=result.bucket,
        final_score=_score(result),
        confidence=Confidence.LOW,
        needs_review=True,
        review_reasons=[f"only {result.judge} produced a usable score"],
    )


def _two_judges(
    usable: list[ModelJudgeResult], config: EnsembleConfig, buckets: BucketTable
) -> EnsembleResult:
    first, second = usable
    scores = [_score(first), _score(second)]
    mean = statistics.fmean(scores)
    if first.bucket == second.bucket:
        spread = abs(scores[0] - scores[1])
        reasons = ["one judge failed; two-judge fallback"]
        if spread > config.unanimous_spread_threshold:
            reasons.append(f"score spread {spread:g} exceeds {config.unanimous_spread_threshold:g}")
        return EnsembleResult(
            agreement_level=AgreementLevel.DEGRADED_2_MODEL,
            final_bucket=first.bucket,
            final_score=mean,
            confidence=_cap(_spread_confidence(spread, config), usable),
            needs_review=spread > config.unanimous_spread_threshold,
            agreeing_spread=spread,
            review_reasons=reasons,
        )

    assert first.bucket is not None and second.bucket is not None
    distance = bucket_distance(first.bucket, second.bucket)
    needs_review = distance >= config.dissent_review_distance
    reasons = [
        f"two-judge bucket disagreement: {first.judge}={first.bucket}, "
        f"{second.judge}={second.bucket}"
    ]
    return EnsembleResult(
        agreement_level=AgreementLevel.DEGRADED_2_MODEL,
        final_bucket=buckets.bucket_for(mean),
        final_score=mean,
        confidence=Confidence.LOW,
        needs_review=needs_review,
        review_reasons=reasons,
    )


def _panel(
    usable: list[ModelJudgeResult], config: EnsembleConfig, buckets: BucketTable
) -> EnsembleResult:
    counts = Counter(r.bucket for r in usable)
    # Bucket order makes the choice among equally common buckets deterministic.
    leader = max(BUCKET_ORDER, key=lambda b: (counts[b], -BUCKET_ORDER.index(b)))
    n = len(usable)

    if counts[leader] == n:
        scores = [_score(r) for r in usable]
        spread = max(scores) - min(scores)
        flagged = spread > config.unanimous_spread_threshold
        return EnsembleResult(
            agreement_level=AgreementLevel.UNANIMOUS,
            final_bucket=leader,
            final_score=float(statistics.median(scores)),
            confidence=_cap(_spread_confidence(spread, config), usable),
            needs_review=flagged,
            agreeing_spread=spread,
            review_reasons=(
                [f"score spread {spread:g} exceeds {config.unanimous_spread_threshold:g}"]
                if flagged
                else []
            ),
        )

    if counts[leader] * 2 > n:
        agreeing = [r for r in usable if r.bucket == leader]
        dissenting = [r for r in usable if r.bucket != leader]
        scores = [_score(r) for r in agreeing]
        worst = max(bucket_distance(leader, r.bucket) for r in dissenting if r.bucket)
        flagged = worst >= config.dissent_review_distance
        reasons = [
            f"{r.judge} dissented with {r.bucket} "
            f"({bucket_distance(leader, r.bucket)} bucket step(s) from {leader})"
            for r in dissenting
            if r.bucket is not None
        ]
        return EnsembleResult(
            agreement_level=AgreementLevel.MAJORITY,
            final_bucket=leader,
            final_score=statistics.fmean(scores),
            confidence=_cap(Confidence.MEDIUM, agreeing),
            needs_review=flagged,
            agreeing_spread=max(scores) - min(scores),
            review_reasons=reasons,
        )

    mean = statistics.fmean(_score(r) for r in usable)
    return EnsembleResult(
        agreement_level=AgreementLevel.NO_CONSENSUS,
        final_bucket=buckets.bucket_for(mean),
        final_score=mean,
        confidence=Confidence.LOW,
        needs_review=True,
        review_reasons=[
            "no bucket consensus: "
            + ", ".join(f"{r.judge}={r.bucket}" for r in usable)
        ],
    )


def _score(result: ModelJudgeResult) -> float:
    assert result.score is not None
    return float(result.score)


def _spread_confidence(spread: float, config: EnsembleConfig) -> Confidence:
    return Confidence.HIGH if spread <= config.tight_agreement_spread else Confidence.MEDIUM


def _cap(agreement: Confidence, contributors: list[ModelJudgeResult]) -> Confidence:
    """Agreement-derived confidence, capped by the judges' own median confidence."""
    reported = statistics.median_low(
        r.confidence.rank for r in contributors if r.confidence is not None
    )
    return Confidence.from_rank(min(agreement.rank, reported))


def _consensus_rejection_reason(rejections: list[ModelJudgeResult]) -> RejectionReason:
    reasons = [r.rejection_reason for r in rejections if r.rejection_reason is not None]
    counts = Counter(reasons)
    best = max(counts.values())
    # Ties go to the earliest judge in panel order.
    return next(reason for reason in reasons if counts[reason] == best)
