"""Checkpoint — persisted progress of a rescoring run, and its storage port."""

from datetime import datetime
from typing import Protocol

from pydantic import BaseModel


class Checkpoint(BaseModel, frozen=True):
    """Progress of one run: the batches and reviews already committed.

    A checkpoint only applies to a run with the same prompt version and the
    same corpus selection.
    """

    run_id: str
    prompt_version: str
    selector_fingerprint: str
    batches_committed: int = 0
    last_batch_index: int | None = None
    committed_review_ids: list[str] = []
    completed: bool = False
    updated_at: datetime | None = None

    def applies_to(self, prompt_version: str, selector_fingerprint: str) -> bool:
        return (
            self.prompt_version == prompt_version
            and self.selector_fingerprint == selector_fingerprint
        )

    def after_batch(
        self, batch_index: int, review_ids: list[str], updated_at: datetime
    ) -> "Checkpoint":
        return self.model_copy(
            update={
                "batches_committed": self.batches_committed + 1,
                "last_batch_index": batch_index,
                "committed_review_ids": [*self.committed_review_ids, *review_ids],
                "updated_at": updated_at,
            }
        )


class CheckpointStore(Protocol):
    def load(self) -> Checkpoint | None: ...

    def save(self, checkpoint: Checkpoint) -> None: ...

    def clear(self) -> None: ...
