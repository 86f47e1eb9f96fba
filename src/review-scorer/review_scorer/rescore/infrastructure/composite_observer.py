"""CompositeRescoreObserver — fans out all rescore events to a list of observers."""

from review_scorer.rescore.domain.observer import RescoreObserver


class CompositeRescoreObserver:
    """Delegates every observer event to each observer in order.

    Does NOT inherit from RescoreObserver (structural typing via Protocol).
    """

    def __init__(self, observers: list[RescoreObserver]) -> None:
        self._observers = observers

    def rescore_started(
        self,
        run_id: str,
        prompt_version: str,
        total_reviews: int,
        skipped_committed: int,
        batch_size: int,
        dry_run: bool,
    ) -> None:
        for obs in self._observers:
            obs.rescore_started(
                run_id=run_id,
                prompt_version=prompt_version,
                total_reviews=total_reviews,
                skipped_committed=skipped_committed,
                batch_size=batch_size,
                dry_run=dry_run,
            )

    def rescore_resumed(
        self, run_id: str, batches_committed: int, reviews_committed: int
    ) -> None:
        for obs in self._observers:
            obs.rescore_resumed(
                run_id=run_id,
                batches_committed=batches_committed,
                reviews_committed=reviews_committed,
            )

    def rescore_state_changed(self, run_id: str, batch_index: int, state: str) -> None:
        for obs in self._observers:
            obs.rescore_state_changed(run_id=run_id, batch_index=batch_index, state=state)

    def batch_review_started(self, run_id: str, batch_index: int, review_id: str) -> None:
        for obs in self._observers:
            obs.batch_review_started(
                run_id=run_id, batch_index=batch_index, review_id=review_id
            )

    def batch_review_failed(
        self, run_id: str, batch_index: int, review_id: str, reason: str
    ) -> None:
        for obs in self._observers:
            obs.batch_review_failed(
                run_id=run_id, batch_index=batch_index, review_id=review_id, reason=reason
            )

    def batch_progress(
        self, run_id: str, batch_index: int, completed: int, total: int
    ) -> None:
        for obs in self._observers:
            obs.batch_progress(
                run_id=run_id, batch_index=batch_index, completed=completed, total=total
            )

    def batch_validated(
        self,
        run_id: str,
        batch_index: int,
        agreement_rate: float | None,
        mean_agreeing_spread: float | None,
        needs_review_rate: float | None,
        failure_rate: float | None,
        passed: bool,
    ) -> None:
        for obs in self._observers:
            obs.batch_validated(
                run_id=run_id,
                batch_index=batch_index,
                agreement_rate=agreement_rate,
                mean_agreeing_spread=mean_agreeing_spread,
                needs_review_rate=needs_review_rate,
                failure_rate=failure_rate,
                passed=passed,
            )

    def gate_breached(
        self,
        run_id: str,
        batch_index: int,
        metric: str,
        value: float,
        threshold: float,
    ) -> None:
        for obs in self._observers:
            obs.gate_breached(
                run_id=run_id,
                batch_index=batch_index,
                metric=metric,
                value=value,
                threshold=threshold,
            )

    def batch_committed(self, run_id: str, batch_index: int, reviews: int) -> None:
        for obs in self._observers:
            obs.batch_committed(run_id=run_id, batch_index=batch_index, reviews=reviews)

    def rescore_completed(
        self,
        run_id: str,
        state: str,
        batches: int,
        reviews_committed: int,
        elapsed_seconds: float,
    ) -> None:
        for obs in self._observers:
            obs.rescore_completed(
                run_id=run_id,
                state=state,
                batches=batches,
                reviews_committed=reviews_committed,
                elapsed_seconds=elapsed_seconds,
            )

    def rollback_applied(
        self, review_id: str, restored_score: float, restored_version: str
    ) -> None:
        for obs in self._observers:
            obs.rollback_applied(
                review_id=review_id,
                restored_score=restored_score,
                restored_version=restored_version,
            )

    def rollback_unavailable(self, review_id: str) -> None:
        for obs in self._observers:
            obs.rollback_unavailable(review_id=review_id)
