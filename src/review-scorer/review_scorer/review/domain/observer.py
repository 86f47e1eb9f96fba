"""ReviewStoreObserver port — events from the review record store."""

from typing import Protocol


class ReviewStoreObserver(Protocol):
    def review_store_selected(self, root: str, selected: int, skipped: int) -> None: ...

    def review_file_skipped(self, path: str, reason: str) -> None: ...

    def review_written(self, review_id: str, change: str) -> None: ...
