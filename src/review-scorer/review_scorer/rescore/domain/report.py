"""Results of a rescoring run."""

from pydantic import BaseModel

from review_scorer.rescore.domain.gate import GateBreach, GateVerdict
from review_scorer.rescore.domain.metrics import BatchMetrics
from review_scorer.rescore.domain.state import RescoreState


class BatchReport(BaseModel, frozen=True):
    index: int
    review_ids: list[str]
    metrics: BatchMetrics
    verdict: GateVerdict
    committed: bool


class RescoreReport(BaseModel, frozen=True):
    run_id: str
    prompt_version: str
    dry_run: bool
    state: RescoreState
    selected: int
    skipped_committed: int = 0
    batches: list[BatchReport] = []

    @property
    def halted(self) -> bool:
        return self.state == RescoreState.HALTED

    @property
    def breaches(self) -> list[GateBreach]:
        if not self.halted or not self.batches:
            return []
        return self.batches[-1].verdict.breaches

    @property
    def reviews_committed(self) -> int:
        return sum(len(b.review_ids) for b in self.batches if b.committed)
