"""Base exception class for all review-scorer-specific errors."""


class ReviewScorerError(Exception):
    """Base class for all review-scorer errors."""

    def __init__(self, message: str, retriable: bool = False) -> None:
        super().__init__(message)
        self.retriable = retriable
