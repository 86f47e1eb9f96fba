"""JsonCheckpointStore — persists rescoring progress as a single JSON file."""

import json
import os
from pathlib import Path

from pydantic import ValidationError

from review_scorer.rescore.domain.checkpoint import Checkpoint
from review_scorer.rescore.infrastructure.errors import CheckpointError


class JsonCheckpointStore:
    """Satisfies the CheckpointStore protocol structurally."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> Checkpoint | None:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CheckpointError(path=self._path, reason=str(exc)) from exc
        try:
            return Checkpoint.model_validate_json(raw)
        except ValidationError as exc:
            raise CheckpointError(
                path=self._path, reason=f"corrupt checkpoint: {exc.error_count()} error(s)"
            ) from exc

    def save(self, checkpoint: Checkpoint) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = checkpoint.model_dump(mode="json")
            tmp.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise CheckpointError(path=self._path, reason=str(exc)) from exc

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
