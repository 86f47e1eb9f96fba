"""Read and write calibration sets as JSON files."""

import json
from pathlib import Path

from pydantic import ValidationError

from review_scorer.calibration.domain.calibration_set import CalibrationSet
from review_scorer.calibration.infrastructure.errors import (
    CalibrationSetExistsError,
    CalibrationSetLoadError,
)


def write_calibration_set(path: Path, calibration_set: CalibrationSet, force: bool = False) -> None:
    """Write calibration_set to path. An existing file is only replaced when force is set."""
    if path.exists() and not force:
        raise CalibrationSetExistsError(path=path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = calibration_set.model_dump(mode="json")
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def load_calibration_set(path: Path) -> CalibrationSet:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CalibrationSetLoadError(path=path, reason="file not found") from exc
    try:
        return CalibrationSet.model_validate_json(raw)
    except ValidationError as exc:
        raise CalibrationSetLoadError(
            path=path, reason=f"{exc.error_count()} validation error(s)"
        ) from exc
