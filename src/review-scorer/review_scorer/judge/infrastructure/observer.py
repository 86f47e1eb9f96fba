"""Structlog implementation of the JudgeObserver port."""

import structlog


class StructlogJudgeObserver:
    """Delegates judge domain events to structlog.

    Satisfies the JudgeObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def judge_scoring_started(self, judge: str, review_id: str, model: str) -> None:
        self._log.debug(
            "judge.scoring_started",
            judge=judge,
            review_id=review_id,
            model=model,
        )

    def judge_scoring_completed(
        self, judge: str, review_id: str, duration_ms: int, rejected: bool
    ) -> None:
        self._log.debug(
            "judge.scoring_completed",
            judge=judge,
            review_id=review_id,
            duration_ms=duration_ms,
            rejected=rejected,
        )

    def judge_scoring_failed(self, judge: str, review_id: str, reason: str) -> None:
        self._log.warning(
            "judge.scoring_failed",
            judge=judge,
            review_id=review_id,
            reason=reason,
        )

    def judge_score_clamped(
        self, judge: str, review_id: str, bucket: str, raw_score: int, score: int
    ) -> None:
        self._log.info(
            "judge.score_clamped",
            judge=judge,
            review_id=review_id,
            bucket=bucket,
            raw_score=raw_score,
            score=score,
        )

    def judge_high_temperature_warned(self, judge: str, temperature: float) -> None:
        self._log.warning(
            "judge.high_temperature_warned",
            judge=judge,
            temperature=temperature,
        )
