"""Scoring Hierarchy Resolver — picks the one signal that sets a review's final score.

Priority, first applicable wins:

1. explicit rating printed by the critic;
2. human override;
3. ensemble result at high or medium effective confidence;
4. aggregator thumb, overriding a low-confidence ensemble result;
5. low-confidence ensemble result when no thumb exists to cross-check it;
6. aggregator thumb alone when no judge produced a usable score.

Effective confidence is forced to low when the full text is missing or shorter
than the configured minimum, whatever the judges reported.
"""

from datetime import datetime

from review_scorer.config.domain.scoring import ScoringConfig
from review_scorer.judge.domain.result import Confidence
from review_scorer.review.domain.record import HumanOverride, ReviewRecord
from review_scorer.review.domain.scored import ScoredReview, ScoreSource
from review_scorer.review.domain.thumb import ThumbDirection
from review_scorer.scoring.domain.ensemble import EnsembleResult
from review_scorer.scoring.domain.explicit import ExplicitRating


def effective_confidence(
    record: ReviewRecord, reported: Confidence, config: ScoringConfig
) -> Confidence:
    text = (record.full_text or "").strip()
    if len(text) < config.min_confident_text_length:
        return Confidence.LOW
    return reported


def resolve(
    record: ReviewRecord,
    explicit: ExplicitRating | None,
    override: HumanOverride | None,
    ensemble: EnsembleResult | None,
    thumb: ThumbDirection | None,
    config: ScoringConfig,
    prompt_version: str,
    scored_at: datetime | None = None,
) -> ScoredReview | None:
    """Return the ScoredReview for record, or None when no signal can score it.

    Invalid or textless records and rejected reviews are never scored. The
    record's current score, if any, becomes previous_score/previous_version.
    """
    if not record.is_scoreable():
        return None
    if ensemble is not None and ensemble.is_rejected:
        return None

    previous = record.scored
    base = {
        "prompt_version": prompt_version,
        "scored_at": scored_at,
        "previous_score": previous.final_score if previous else None,
        "previous_version": previous.prompt_version if previous else None,
        "explicit_rating": explicit,
        "thumb": thumb,
        "ensemble": ensemble,
    }
    buckets = config.buckets

    if explicit is not None:
        return ScoredReview(
            final_score=float(explicit.score),
            final_bucket=buckets.bucket_for(explicit.score),
            score_source=ScoreSource.for_explicit(explicit.format),
            confidence=Confidence.HIGH,
            **base,
        )

    if override is not None:
        return ScoredReview(
            final_score=override.score,
            final_bucket=buckets.bucket_for(override.score),
            score_source=ScoreSource.HUMAN_OVERRIDE,
            confidence=Confidence.HIGH,
            review_reasons=[override.reason] if override.reason else [],
            **base,
        )

    if ensemble is not None and ensemble.is_scored:
        assert ensemble.final_score is not None and ensemble.final_bucket is not None
        assert ensemble.confidence is not None
        confidence = effective_confidence(record, ensemble.confidence, config)
        if confidence != Confidence.LOW:
            return ScoredReview(
                final_score=ensemble.final_score,
                final_bucket=ensemble.final_bucket,
                score_source=ScoreSource.ENSEMBLE_HIGH_CONFIDENCE,
                confidence=confidence,
                needs_review=ensemble.needs_review,
                review_reasons=ensemble.review_reasons,
                **base,
            )
        if thumb is not None:
            score = float(config.thumb_scores[thumb])
            return ScoredReview(
                final_score=score,
                final_bucket=buckets.bucket_for(score),
                score_source=ScoreSource.THUMB_OVERRIDE,
                confidence=Confidence.LOW,
                needs_review=ensemble.needs_review,
                review_reasons=ensemble.review_reasons
                + [f"low-confidence ensemble replaced by aggregator thumb {thumb}"],
                **base,
            )
        return ScoredReview(
            final_score=ensemble.final_score,
            final_bucket=ensemble.final_bucket,
            score_source=ScoreSource.ENSEMBLE_LOW_CONFIDENCE,
            confidence=Confidence.LOW,
            needs_review=ensemble.needs_review,
            review_reasons=ensemble.review_reasons,
            **base,
        )

    if thumb is not None:
        score = float(config.thumb_scores[thumb])
        return ScoredReview(
            final_score=score,
            final_bucket=buckets.bucket_for(score),
            score_source=ScoreSource.THUMB_ONLY,
            confidence=Confidence.LOW,
            needs_review=True,
            review_reasons=["no judge produced a usable score; aggregator thumb only"],
            **base,
        )

    return None
