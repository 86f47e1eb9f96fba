"""JudgePanel — asks every judge about one review concurrently."""

import asyncio

from pydantic import BaseModel

from review_scorer.core.errors import ReviewScorerError
from review_scorer.core.retry import RetryPolicy
from review_scorer.judge.domain.judge import Judge
from review_scorer.judge.domain.payload import ScoringPayload
from review_scorer.judge.domain.result import ModelJudgeResult
from review_scorer.judge.infrastructure.errors import JudgeTimeoutError
from review_scorer.scoring.domain.observer import ScoringObserver
from review_scorer.scoring.domain.outcome import JudgeFailure


class PanelVerdict(BaseModel, frozen=True):
    """Results and failures, each in panel order."""

    results: list[ModelJudgeResult]
    failures: list[JudgeFailure]

    @property
    def attempted(self) -> int:
        return len(self.results) + len(self.failures)


class JudgePanel:
    """Runs all judges for a review at once, each with its own timeout and retries.

    A judge that times out or fails after its retries becomes a JudgeFailure;
    it never cancels or delays the other judges, and convene() never raises
    for a judge problem.
    """

    def __init__(
        self,
        judges: list[Judge],
        retry: RetryPolicy,
        timeout_seconds: float,
        observer: ScoringObserver,
    ) -> None:
        self._judges = judges
        self._retry = retry
        self._timeout_seconds = timeout_seconds
        self._observer = observer

    @property
    def size(self) -> int:
        return len(self._judges)

    async def convene(self, payload: ScoringPayload) -> PanelVerdict:
        answers = await asyncio.gather(
            *(self._ask(judge=judge, payload=payload) for judge in self._judges)
        )
        return PanelVerdict(
            results=[a for a in answers if isinstance(a, ModelJudgeResult)],
            failures=[a for a in answers if isinstance(a, JudgeFailure)],
        )

    async def _ask(
        self, judge: Judge, payload: ScoringPayload
    ) -> ModelJudgeResult | JudgeFailure:
        async def attempt() -> ModelJudgeResult:
            try:
                async with asyncio.timeout(self._timeout_seconds):
                    return await judge.score(payload)
            except TimeoutError as exc:
                raise JudgeTimeoutError(
                    judge=judge.name, timeout_seconds=self._timeout_seconds
                ) from exc

        def on_retry(attempt_number: int, exc: ReviewScorerError, backoff: float) -> None:
            self._observer.panel_judge_retry(
                review_id=payload.review_id,
                judge=judge.name,
                attempt=attempt_number,
                reason=str(exc),
                backoff_seconds=backoff,
            )

        try:
            return await self._retry.run(attempt, on_retry=on_retry)
        except ReviewScorerError as exc:
            reason = str(exc)
        except Exception as exc:  # noqa: BLE001
            # A judge bug must not take the review, or the batch, down with it.
            reason = f"unexpected {type(exc).__name__}: {exc}"

        self._observer.panel_judge_failed(
            review_id=payload.review_id, judge=judge.name, reason=reason
        )
        return JudgeFailure(judge=judge.name, reason=reason)
