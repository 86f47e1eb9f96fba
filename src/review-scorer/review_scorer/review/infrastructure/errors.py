"""Error types raised by review store infrastructure."""

from pathlib import Path

from review_scorer.core.errors import ReviewScorerError


class ReviewStoreError(ReviewScorerError):
    """Raised when a review file cannot be read, parsed or written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to access review file {path}: {reason}")
