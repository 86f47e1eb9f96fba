"""Structlog implementation of the ReviewStoreObserver port."""

import structlog


class StructlogReviewStoreObserver:
    """Delegates review store events to structlog.

    Satisfies the ReviewStoreObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def review_store_selected(self, root: str, selected: int, skipped: int) -> None:
        self._log.info(
            "review_store.selected", root=root, selected=selected, skipped=skipped
        )

    def review_file_skipped(self, path: str, reason: str) -> None:
        self._log.warning("review_store.file_skipped", path=path, reason=reason)

    def review_written(self, review_id: str, change: str) -> None:
        self._log.debug("review_store.written", review_id=review_id, change=change)
