"""Error types raised by judge infrastructure."""

from review_scorer.core.errors import ReviewScorerError


class JudgeInvocationError(ReviewScorerError):
    """Raised when the provider call fails."""

    def __init__(self, judge: str, reason: str, retriable: bool = False) -> None:
        self.judge = judge
        super().__init__(
            f"Failed to score review with judge '{judge}': {reason}",
            retriable=retriable,
        )


class JudgeTimeoutError(ReviewScorerError):
    """Raised when a judge does not answer within its timeout. Always retriable."""

    def __init__(self, judge: str, timeout_seconds: float) -> None:
        self.judge = judge
        super().__init__(
            f"Failed to score review with judge '{judge}': "
            f"timed out after {timeout_seconds:g}s",
            retriable=True,
        )


class JudgeResponseParseError(ReviewScorerError):
    """Raised when a judge's output cannot be normalized, even by best-effort extraction.

    Retriable: a fresh completion usually parses.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to parse judge response: {reason}", retriable=True)
