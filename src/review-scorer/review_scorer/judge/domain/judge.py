"""Judge protocol — the abstract port for scoring one review payload."""

from typing import Protocol

from review_scorer.judge.domain.payload import ScoringPayload
from review_scorer.judge.domain.result import ModelJudgeResult


class Judge(Protocol):
    """Port for one model judge.

    Implementations return a ModelJudgeResult (scored or rejected) and raise a
    ReviewScorerError subclass when the provider call or its output fails.
    """

    @property
    def name(self) -> str: ...

    async def score(self, payload: ScoringPayload) -> ModelJudgeResult: ...
