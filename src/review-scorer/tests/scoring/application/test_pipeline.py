"""Tests for ReviewScoringPipeline."""

from datetime import UTC, datetime

from review_scorer.config.domain.ensemble import EnsembleConfig
from review_scorer.config.domain.scoring import ScoringConfig
from review_scorer.core.retry import RetryPolicy
from review_scorer.judge.domain.bucket import Bucket
from review_scorer.judge.domain.result import ModelJudgeResult, RejectionReason
from review_scorer.judge.infrastructure.errors import JudgeInvocationError
from review_scorer.review.domain.record import ContentTier, HumanOverride
from review_scorer.review.domain.scored import ScoreSource
from review_scorer.review.domain.thumb import ThumbDirection
from review_scorer.scoring.application.panel import JudgePanel
from review_scorer.scoring.application.pipeline import ReviewScoringPipeline
from review_scorer.scoring.domain.ensemble import AgreementLevel
from review_scorer.scoring.domain.outcome import ReviewStatus
from tests.judge.fake_judge import FakeJudge, make_rejection, make_result
from tests.review.builders import LONG_TEXT, make_record, make_scored
from tests.scoring.fake_observer import FakeScoringObserver

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


async def _no_sleep(_: float) -> None:
    return None


def _make_pipeline(
    replies: dict[str, list[ModelJudgeResult | Exception]],
) -> tuple[ReviewScoringPipeline, list[FakeJudge], FakeScoringObserver]:
    observer = FakeScoringObserver()
    judges = [FakeJudge(name, reply) for name, reply in replies.items()]
    panel = JudgePanel(
        judges=judges,
        retry=RetryPolicy(
            max_attempts=1,
            initial_backoff_seconds=0.0,
            backoff_multiplier=1.0,
            sleep=_no_sleep,
        ),
        timeout_seconds=5.0,
        observer=observer,
    )
    pipeline = ReviewScoringPipeline(
        panel=panel,
        scoring=ScoringConfig(),
        ensemble=EnsembleConfig(),
        observer=observer,
        clock=lambda: _NOW,
    )
    return pipeline, judges, observer


def _agreeing_panel() -> dict[str, list[ModelJudgeResult | Exception]]:
    return {
        "claude": [make_result("claude", Bucket.POSITIVE, 78)],
        "gpt": [make_result("gpt", Bucket.POSITIVE, 80)],
        "gemini": [make_result("gemini", Bucket.POSITIVE, 76)],
    }


class TestScored:
    async def test_ensemble_score(self) -> None:
        pipeline, _, observer = _make_pipeline(_agreeing_panel())

        outcome = await pipeline.score(make_record(), prompt_version="v5")

        assert outcome.status == ReviewStatus.SCORED
        assert outcome.scored is not None
        assert outcome.scored.score_source == ScoreSource.ENSEMBLE_HIGH_CONFIDENCE
        assert outcome.scored.final_score == 78.0
        assert outcome.scored.scored_at == _NOW
        assert outcome.judges_attempted == 3
        assert observer.scored[0].score_source == "ensemble-high-confidence"

    async def test_explicit_rating_wins_but_ensemble_is_kept(self) -> None:
        pipeline, judges, _ = _make_pipeline(_agreeing_panel())
        record = make_record(full_text="★★★★☆ " + LONG_TEXT)

        outcome = await pipeline.score(record, prompt_version="v5")

        assert outcome.scored is not None
        assert outcome.scored.score_source == ScoreSource.EXPLICIT_STARS
        assert outcome.scored.final_score == 80.0
        assert outcome.ensemble is not None
        assert outcome.ensemble.agreement_level == AgreementLevel.UNANIMOUS
        assert all(len(j.payloads) == 1 for j in judges)

    async def test_human_override(self) -> None:
        pipeline, _, _ = _make_pipeline(_agreeing_panel())
        record = make_record(human_override=HumanOverride(score=45, reason="Editor call"))

        outcome = await pipeline.score(record, prompt_version="v5")

        assert outcome.scored is not None
        assert outcome.scored.score_source == ScoreSource.HUMAN_OVERRIDE
        assert outcome.scored.final_bucket == Bucket.NEGATIVE

    async def test_previous_score_is_recorded(self) -> None:
        pipeline, _, _ = _make_pipeline(_agreeing_panel())
        record = make_record(scored=make_scored(score=65.0, bucket=Bucket.MIXED, prompt_version="v4"))

        outcome = await pipeline.score(record, prompt_version="v5")

        assert outcome.scored is not None
        assert outcome.scored.previous_score == 65.0
        assert outcome.scored.previous_version == "v4"

    async def test_one_failed_judge_degrades_gracefully(self) -> None:
        replies = _agreeing_panel()
        replies["gpt"] = [JudgeInvocationError(judge="gpt", reason="bad request")]
        pipeline, _, _ = _make_pipeline(replies)

        outcome = await pipeline.score(make_record(), prompt_version="v5")

        assert outcome.status == ReviewStatus.SCORED
        assert outcome.ensemble is not None
        assert outcome.ensemble.agreement_level == AgreementLevel.DEGRADED_2_MODEL
        assert [f.judge for f in outcome.failures] == ["gpt"]
        assert outcome.judges_attempted == 3


class TestNotScored:
    async def test_rejection_quorum(self) -> None:
        pipeline, _, observer = _make_pipeline(
            {
                "claude": [make_rejection("claude", RejectionReason.WRONG_PRODUCTION)],
                "gpt": [make_rejection("gpt", RejectionReason.WRONG_PRODUCTION)],
                "gemini": [make_result("gemini")],
            }
        )

        outcome = await pipeline.score(make_record(), prompt_version="v5")

        assert outcome.status == ReviewStatus.REJECTED
        assert outcome.reason == "wrong_production"
        assert outcome.scored is None
        assert observer.rejected[0].rejection_reason == "wrong_production"

    async def test_all_judges_failing_needs_rescore(self) -> None:
        error = JudgeInvocationError(judge="any", reason="service down")
        pipeline, _, observer = _make_pipeline(
            {"claude": [error], "gpt": [error], "gemini": [error]}
        )

        outcome = await pipeline.score(make_record(), prompt_version="v5")

        assert outcome.status == ReviewStatus.NEEDS_RESCORE
        assert len(outcome.failures) == 3
        assert outcome.reason is not None
        assert "no judge produced a usable score" in outcome.reason
        assert observer.unscored[0].status == "needs_rescore"

    async def test_all_judges_failing_falls_back_to_thumb(self) -> None:
        error = JudgeInvocationError(judge="any", reason="service down")
        pipeline, _, _ = _make_pipeline({"claude": [error], "gpt": [error]})
        record = make_record(dtli_thumb=ThumbDirection.DOWN)

        outcome = await pipeline.score(record, prompt_version="v5")

        assert outcome.status == ReviewStatus.SCORED
        assert outcome.scored is not None
        assert outcome.scored.score_source == ScoreSource.THUMB_ONLY
        assert outcome.scored.final_score == 35.0

    async def test_unscorable_record_never_reaches_judges(self) -> None:
        pipeline, judges, observer = _make_pipeline(_agreeing_panel())

        outcome = await pipeline.score(
            make_record(content_tier=ContentTier.INVALID), prompt_version="v5"
        )

        assert outcome.status == ReviewStatus.UNSCORABLE
        assert outcome.judges_attempted == 0
        assert all(j.payloads == [] for j in judges)
        assert observer.unscored[0].status == "unscorable"
