"""Error types raised by calibration infrastructure."""

from pathlib import Path

from review_scorer.core.errors import ReviewScorerError


class CalibrationSetExistsError(ReviewScorerError):
    """Raised when writing a calibration set would overwrite an existing one."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"Failed to write calibration set: {path} already exists (use --force to replace it)"
        )


class CalibrationSetLoadError(ReviewScorerError):
    """Raised when a calibration set file is missing or invalid."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load calibration set {path}: {reason}")
