"""ReviewScoringPipeline — scores one review end to end."""

from collections.abc import Callable
from datetime import UTC, datetime

from review_scorer.config.domain.ensemble import EnsembleConfig
from review_scorer.config.domain.scoring import ScoringConfig
from review_scorer.review.domain.record import ReviewRecord
from review_scorer.scoring.application.panel import JudgePanel
from review_scorer.scoring.domain.context import build_payload
from review_scorer.scoring.domain.ensemble import reconcile
from review_scorer.scoring.domain.explicit import ExplicitRatingExtractor
from review_scorer.scoring.domain.hierarchy import resolve
from review_scorer.scoring.domain.observer import ScoringObserver
from review_scorer.scoring.domain.outcome import ReviewOutcome, ReviewStatus


class ReviewScoringPipeline:
    """Context builder -> judge panel -> reconciler -> hierarchy resolver.

    Per-review problems (judge failures, rejections, no usable signal) come
    back as a ReviewOutcome status rather than an exception.
    """

    def __init__(
        self,
        panel: JudgePanel,
        scoring: ScoringConfig,
        ensemble: EnsembleConfig,
        observer: ScoringObserver,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._panel = panel
        self._scoring = scoring
        self._ensemble = ensemble
        self._observer = observer
        self._clock = clock
        self._extractor = ExplicitRatingExtractor(letter_grades=scoring.letter_grades)

    async def score(self, record: ReviewRecord, prompt_version: str) -> ReviewOutcome:
        payload = build_payload(record)
        if payload is None:
            reason = f"no scoreable text (content tier {record.content_tier})"
            self._observer.review_unscored(
                review_id=record.review_id,
                status=ReviewStatus.UNSCORABLE.value,
                reason=reason,
            )
            return ReviewOutcome(
                record=record, status=ReviewStatus.UNSCORABLE, reason=reason
            )

        verdict = await self._panel.convene(payload)
        ensemble = reconcile(
            results=verdict.results,
            config=self._ensemble,
            buckets=self._scoring.buckets,
        )
        common = {
            "record": record,
            "ensemble": ensemble,
            "failures": verdict.failures,
            "judges_attempted": verdict.attempted,
        }

        if ensemble.is_rejected:
            assert ensemble.rejection_reason is not None
            self._observer.review_rejected(
                review_id=record.review_id,
                rejection_reason=ensemble.rejection_reason.value,
            )
            return ReviewOutcome(
                status=ReviewStatus.REJECTED,
                reason=ensemble.rejection_reason.value,
                **common,
            )

        scored = resolve(
            record=record,
            explicit=self._extractor.extract(record.full_text),
            override=record.human_override,
            ensemble=ensemble,
            thumb=record.thumbs.consensus(),
            config=self._scoring,
            prompt_version=prompt_version,
            scored_at=self._clock(),
        )
        if scored is None:
            reason = "; ".join(ensemble.review_reasons) or "no usable scoring signal"
            self._observer.review_unscored(
                review_id=record.review_id,
                status=ReviewStatus.NEEDS_RESCORE.value,
                reason=reason,
            )
            return ReviewOutcome(
                status=ReviewStatus.NEEDS_RESCORE, reason=reason, **common
            )

        self._observer.review_scored(
            review_id=record.review_id,
            score_source=scored.score_source.value,
            final_score=scored.final_score,
            needs_review=scored.needs_review,
        )
        return ReviewOutcome(status=ReviewStatus.SCORED, scored=scored, **common)
