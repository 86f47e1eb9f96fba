"""FakeCheckpointStore — in-memory CheckpointStore for use in tests."""

from review_scorer.rescore.domain.checkpoint import Checkpoint


class FakeCheckpointStore:
    def __init__(self, checkpoint: Checkpoint | None = None) -> None:
        self.current = checkpoint
        self.saved: list[Checkpoint] = []
        self.cleared = 0

    def load(self) -> Checkpoint | None:
        return self.current

    def save(self, checkpoint: Checkpoint) -> None:
        self.current = checkpoint
        self.saved.append(checkpoint)

    def clear(self) -> None:
        self.current = None
        self.cleared += 1
