"""Error types raised by rescore infrastructure."""

from pathlib import Path

from review_scorer.core.errors import ReviewScorerError


class CheckpointError(ReviewScorerError):
    """Raised when the checkpoint file cannot be read, parsed or written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to access checkpoint {path}: {reason}")
