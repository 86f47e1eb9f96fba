"""RescoreObserver port — events from the batch rescorer and rollback."""

from typing import Protocol


class RescoreObserver(Protocol):
    def rescore_started(
        self,
        run_id: str,
        prompt_version: str,
        total_reviews: int,
        skipped_committed: int,
        batch_size: int,
        dry_run: bool,
    ) -> None: ...

    def rescore_resumed(
        self, run_id: str, batches_committed: int, reviews_committed: int
    ) -> None: ...

    def rescore_state_changed(
        self, run_id: str, batch_index: int, state: str
    ) -> None: ...

    def batch_review_started(
        self, run_id: str, batch_index: int, review_id: str
    ) -> None: ...

    def batch_review_failed(
        self, run_id: str, batch_index: int, review_id: str, reason: str
    ) -> None: ...

    def batch_progress(
        self, run_id: str, batch_index: int, completed: int, total: int
    ) -> None: ...

    def batch_validated(
        self,
        run_id: str,
        batch_index: int,
        agreement_rate: float | None,
        mean_agreeing_spread: float | None,
        needs_review_rate: float | None,
        failure_rate: float | None,
        passed: bool,
    ) -> None: ...

    def gate_breached(
        self,
        run_id: str,
        batch_index: int,
        metric: str,
        value: float,
        threshold: float,
    ) -> None: ...

    def batch_committed(self, run_id: str, batch_index: int, reviews: int) -> None: ...

    def rescore_completed(
        self,
        run_id: str,
        state: str,
        batches: int,
        reviews_committed: int,
        elapsed_seconds: float,
    ) -> None: ...

    def rollback_applied(
        self, review_id: str, restored_score: float, restored_version: str
    ) -> None: ...

    def rollback_unavailable(self, review_id: str) -> None: ...
