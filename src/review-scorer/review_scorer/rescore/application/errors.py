"""Errors raised by rescoring runs."""

from review_scorer.core.errors import ReviewScorerError
from review_scorer.rescore.domain.gate import GateBreach


class RescoreHaltedError(ReviewScorerError):
    """Raised by the entry point when a run stopped at the validation gate."""

    def __init__(self, batch_index: int, breaches: list[GateBreach]) -> None:
        self.batch_index = batch_index
        self.breaches = breaches
        details = "; ".join(breach.describe() for breach in breaches)
        super().__init__(f"Failed to validate batch {batch_index}: {details}")
