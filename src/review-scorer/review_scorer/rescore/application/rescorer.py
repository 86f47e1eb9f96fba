"""BatchRescorer — applies the current prompt version to a corpus, batch by batch."""

import asyncio
import time
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from review_scorer.config.domain.execution import ExecutionConfig
from review_scorer.config.domain.gate import GateConfig
from review_scorer.core.errors import ReviewScorerError
from review_scorer.rescore.domain.checkpoint import Checkpoint, CheckpointStore
from review_scorer.rescore.domain.gate import evaluate_gate
from review_scorer.rescore.domain.metrics import compute_metrics
from review_scorer.rescore.domain.observer import RescoreObserver
from review_scorer.rescore.domain.report import BatchReport, RescoreReport
from review_scorer.rescore.domain.state import RescoreState, can_transition
from review_scorer.review.domain.record import ReviewKey, ReviewRecord
from review_scorer.review.domain.repository import ReviewRepository
from review_scorer.review.domain.selector import CorpusSelector
from review_scorer.scoring.application.pipeline import ReviewScoringPipeline
from review_scorer.scoring.domain.outcome import ReviewOutcome, ReviewStatus


class BatchRescorer:
    """Runs the rescoring state machine over fixed-size batches.

    Each batch is loaded, scored with bounded concurrency, validated against
    the gate and only then committed. A batch that fails validation is never
    written and no further batch is loaded. Committed progress is checkpointed
    after every batch so an interrupted run resumes where it stopped.
    """

    def __init__(
        self,
        repository: ReviewRepository,
        pipeline: ReviewScoringPipeline,
        checkpoints: CheckpointStore,
        gate: GateConfig,
        execution: ExecutionConfig,
        observer: RescoreObserver,
        prompt_version: str,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._repository = repository
        self._pipeline = pipeline
        self._checkpoints = checkpoints
        self._gate = gate
        self._execution = execution
        self._observer = observer
        self._prompt_version = prompt_version
        self._clock = clock
        self._state = RescoreState.IDLE

    @property
    def state(self) -> RescoreState:
        return self._state

    async def run(
        self,
        selector: CorpusSelector,
        dry_run: bool = False,
        batch_size: int | None = None,
    ) -> RescoreReport:
        """Rescore every selected review not already committed by a matching checkpoint.

        Dry runs score and validate but never write reviews or checkpoints.
        """
        self._state = RescoreState.IDLE
        size = batch_size or self._execution.batch_size
        keys = self._repository.select(selector, self._prompt_version)

        checkpoint = None if dry_run else self._resumable(selector)
        if checkpoint is None:
            checkpoint = Checkpoint(
                run_id=str(uuid.uuid4()),
                prompt_version=self._prompt_version,
                selector_fingerprint=selector.fingerprint(),
            )
        else:
            self._observer.rescore_resumed(
                run_id=checkpoint.run_id,
                batches_committed=checkpoint.batches_committed,
                reviews_committed=len(checkpoint.committed_review_ids),
            )
        run_id = checkpoint.run_id
        committed = set(checkpoint.committed_review_ids)
        pending = [key for key in keys if key.review_id not in committed]

        self._observer.rescore_started(
            run_id=run_id,
            prompt_version=self._prompt_version,
            total_reviews=len(pending),
            skipped_committed=len(keys) - len(pending),
            batch_size=size,
            dry_run=dry_run,
        )
        started_at = time.monotonic()

        batches: list[BatchReport] = []
        batch_index = checkpoint.batches_committed
        cursor = 0
        while True:
            self._transition(run_id, batch_index, RescoreState.LOADING_BATCH)
            batch_keys = pending[cursor : cursor + size]
            cursor += size
            if not batch_keys:
                self._transition(run_id, batch_index, RescoreState.COMPLETED)
                break
            records = self._load(run_id, batch_index, batch_keys)

            self._transition(run_id, batch_index, RescoreState.SCORING_BATCH)
            outcomes = await self._score_batch(run_id, batch_index, records)

            self._transition(run_id, batch_index, RescoreState.VALIDATING_BATCH)
            metrics = compute_metrics(outcomes)
            verdict = evaluate_gate(metrics, self._gate)
            self._observer.batch_validated(
                run_id=run_id,
                batch_index=batch_index,
                agreement_rate=metrics.agreement_rate,
                mean_agreeing_spread=metrics.mean_agreeing_spread,
                needs_review_rate=metrics.needs_review_rate,
                failure_rate=metrics.failure_rate,
                passed=verdict.passed,
            )
            review_ids = [o.review_id for o in outcomes]

            if not verdict.passed:
                for breach in verdict.breaches:
                    self._observer.gate_breached(
                        run_id=run_id,
                        batch_index=batch_index,
                        metric=breach.metric,
                        value=breach.value,
                        threshold=breach.threshold,
                    )
                batches.append(
                    BatchReport(
                        index=batch_index,
                        review_ids=review_ids,
                        metrics=metrics,
                        verdict=verdict,
                        committed=False,
                    )
                )
                self._transition(run_id, batch_index, RescoreState.HALTED)
                break

            if not dry_run:
                self._transition(run_id, batch_index, RescoreState.COMMITTING_BATCH)
                self._commit(outcomes)
                checkpoint = checkpoint.after_batch(
                    batch_index=batch_index,
                    review_ids=review_ids,
                    updated_at=self._clock(),
                )
                self._checkpoints.save(checkpoint)
                self._observer.batch_committed(
                    run_id=run_id, batch_index=batch_index, reviews=len(review_ids)
                )
            batches.append(
                BatchReport(
                    index=batch_index,
                    review_ids=review_ids,
                    metrics=metrics,
                    verdict=verdict,
                    committed=not dry_run,
                )
            )
            batch_index += 1

        if self._state == RescoreState.COMPLETED and not dry_run:
            self._checkpoints.save(
                checkpoint.model_copy(update={"completed": True, "updated_at": self._clock()})
            )

        report = RescoreReport(
            run_id=run_id,
            prompt_version=self._prompt_version,
            dry_run=dry_run,
            state=self._state,
            selected=len(pending),
            skipped_committed=len(keys) - len(pending),
            batches=batches,
        )
        self._observer.rescore_completed(
            run_id=run_id,
            state=self._state.value,
            batches=len(batches),
            reviews_committed=report.reviews_committed,
            elapsed_seconds=time.monotonic() - started_at,
        )
        return report

    def _resumable(self, selector: CorpusSelector) -> Checkpoint | None:
        checkpoint = self._checkpoints.load()
        if checkpoint is None or checkpoint.completed:
            return None
        if not checkpoint.applies_to(self._prompt_version, selector.fingerprint()):
            return None
        return checkpoint

    def _transition(self, run_id: str, batch_index: int, target: RescoreState) -> None:
        if not can_transition(self._state, target):
            raise RuntimeError(f"illegal rescore transition {self._state} -> {target}")
        self._state = target
        self._observer.rescore_state_changed(
            run_id=run_id, batch_index=batch_index, state=target.value
        )

    def _load(
        self, run_id: str, batch_index: int, keys: list[ReviewKey]
    ) -> list[ReviewRecord]:
        records: list[ReviewRecord] = []
        for key in keys:
            try:
                records.append(self._repository.load(key))
            except ReviewScorerError as exc:
                self._observer.batch_review_failed(
                    run_id=run_id,
                    batch_index=batch_index,
                    review_id=key.review_id,
                    reason=str(exc),
                )
        return records

    async def _score_batch(
        self, run_id: str, batch_index: int, records: list[ReviewRecord]
    ) -> list[ReviewOutcome]:
        sem = asyncio.Semaphore(self._execution.max_concurrent)
        outcomes: dict[int, ReviewOutcome] = {}
        completed_count: list[int] = [0]
        progress_lock = asyncio.Lock()

        async with asyncio.TaskGroup() as tg:
            for position, record in enumerate(records):
                tg.create_task(
                    self._score_one(
                        sem=sem,
                        run_id=run_id,
                        batch_index=batch_index,
                        position=position,
                        record=record,
                        outcomes=outcomes,
                        total=len(records),
                        completed_count=completed_count,
                        progress_lock=progress_lock,
                    )
                )

        # Completion order is irrelevant; report in selection order.
        return [outcomes[position] for position in sorted(outcomes)]

    async def _score_one(
        self,
        sem: asyncio.Semaphore,
        run_id: str,
        batch_index: int,
        position: int,
        record: ReviewRecord,
        outcomes: dict[int, ReviewOutcome],
        total: int,
        completed_count: list[int],
        progress_lock: asyncio.Lock,
    ) -> None:
        async with sem:
            self._observer.batch_review_started(
                run_id=run_id, batch_index=batch_index, review_id=record.review_id
            )
            try:
                outcome = await self._pipeline.score(
                    record, prompt_version=self._prompt_version
                )
            except Exception as exc:  # noqa: BLE001
                # A poison review is marked for rescoring, never fatal to the batch.
                self._observer.batch_review_failed(
                    run_id=run_id,
                    batch_index=batch_index,
                    review_id=record.review_id,
                    reason=str(exc) or type(exc).__name__,
                )
                outcome = ReviewOutcome(
                    record=record,
                    status=ReviewStatus.NEEDS_RESCORE,
                    reason=f"scoring raised {type(exc).__name__}: {exc}",
                )
            outcomes[position] = outcome

        async with progress_lock:
            completed_count[0] += 1
            self._observer.batch_progress(
                run_id=run_id,
                batch_index=batch_index,
                completed=completed_count[0],
                total=total,
            )

    def _commit(self, outcomes: list[ReviewOutcome]) -> None:
        for outcome in outcomes:
            match outcome.status:
                case ReviewStatus.SCORED:
                    assert outcome.scored is not None
                    self._repository.save_scored(outcome.record, outcome.scored)
                case ReviewStatus.REJECTED:
                    assert outcome.ensemble is not None
                    assert outcome.ensemble.rejection_reason is not None
                    self._repository.mark_rejected(
                        outcome.record,
                        outcome.ensemble.rejection_reason,
                        note="; ".join(outcome.ensemble.review_reasons)
                        or "rejected by judge quorum",
                        prompt_version=self._prompt_version,
                    )
                case ReviewStatus.NEEDS_RESCORE:
                    self._repository.mark_needs_rescore(
                        outcome.record, outcome.reason or "no usable scoring signal"
                    )
                case ReviewStatus.UNSCORABLE:
                    self._repository.mark_unscorable(
                        outcome.record,
                        outcome.reason or "no scoreable text",
                        prompt_version=self._prompt_version,
                    )
