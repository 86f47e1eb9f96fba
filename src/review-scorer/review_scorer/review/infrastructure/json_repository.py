"""JsonReviewRepository — one JSON document per review under a corpus root."""

import json
import os
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from review_scorer.judge.domain.result import RejectionReason
from review_scorer.review.domain.observer import ReviewStoreObserver
from review_scorer.review.domain.record import ReviewKey, ReviewRecord
from review_scorer.review.domain.scored import ScoredReview
from review_scorer.review.domain.selector import CorpusSelector
from review_scorer.review.infrastructure.documents import (
    Document,
    record_from_document,
    with_needs_rescore,
    with_rejection,
    with_rollback,
    with_scored,
    with_unscorable,
)
from review_scorer.review.infrastructure.errors import ReviewStoreError

# Bookkeeping files written by the acquisition pipeline, not reviews.
_IGNORED_FILES = frozenset({"failed-fetches.json", "index.json"})


class JsonReviewRepository:
    """Reads and writes review documents at <root>/<show_id>/<outlet>--<critic>.json.

    Documents are updated in place, preserving keys this tool does not own.
    Every write goes to a temporary file first and is renamed over the original.
    Satisfies the ReviewRepository protocol structurally.
    """

    def __init__(self, root: Path, observer: ReviewStoreObserver) -> None:
        self._root = root
        self._observer = observer
        # Files found by select() may not follow the canonical naming.
        self._paths: dict[str, Path] = {}

    def select(self, selector: CorpusSelector, prompt_version: str) -> list[ReviewKey]:
        if not self._root.is_dir():
            raise ReviewStoreError(path=self._root, reason="corpus root is not a directory")

        keys: list[ReviewKey] = []
        skipped = 0
        for path in self._review_files(selector):
            try:
                record = record_from_document(self._read(path))
            except ReviewStoreError as exc:
                skipped += 1
                self._observer.review_file_skipped(path=str(path), reason=str(exc))
                continue
            except (ValidationError, ValueError) as exc:
                skipped += 1
                self._observer.review_file_skipped(
                    path=str(path), reason=_first_line(exc)
                )
                continue
            if selector.matches(record, prompt_version):
                self._paths[record.review_id] = path
                keys.append(record.key)

        self._observer.review_store_selected(
            root=str(self._root), selected=len(keys), skipped=skipped
        )
        return keys

    def load(self, key: ReviewKey) -> ReviewRecord:
        path = self._path_for(key)
        try:
            return record_from_document(self._read(path))
        except (ValidationError, ValueError) as exc:
            raise ReviewStoreError(path=path, reason=_first_line(exc)) from exc

    def save_scored(self, record: ReviewRecord, scored: ScoredReview) -> None:
        self._update(record.key, lambda doc: with_scored(doc, scored), "scored")

    def mark_rejected(
        self,
        record: ReviewRecord,
        reason: RejectionReason,
        note: str,
        prompt_version: str,
    ) -> None:
        self._update(
            record.key,
            lambda doc: with_rejection(doc, reason, note, prompt_version),
            "rejected",
        )

    def mark_needs_rescore(self, record: ReviewRecord, reason: str) -> None:
        self._update(
            record.key, lambda doc: with_needs_rescore(doc, reason), "needs_rescore"
        )

    def mark_unscorable(
        self, record: ReviewRecord, reason: str, prompt_version: str
    ) -> None:
        self._update(
            record.key,
            lambda doc: with_unscorable(doc, reason, prompt_version),
            "unscorable",
        )

    def rollback(self, key: ReviewKey) -> ScoredReview | None:
        path = self._path_for(key)
        doc = self._read(path)
        try:
            rolled_back = with_rollback(doc)
        except ValidationError as exc:
            raise ReviewStoreError(path=path, reason=_first_line(exc)) from exc
        if rolled_back is None:
            return None
        updated, restored = rolled_back
        self._write(path, updated)
        self._observer.review_written(review_id=key.review_id, change="rolled_back")
        return restored

    def _update(
        self, key: ReviewKey, change: Callable[[Document], Document], label: str
    ) -> None:
        path = self._path_for(key)
        self._write(path, change(self._read(path)))
        self._observer.review_written(review_id=key.review_id, change=label)

    def _review_files(self, selector: CorpusSelector) -> list[Path]:
        files: list[Path] = []
        for show_dir in sorted(p for p in self._root.iterdir() if p.is_dir()):
            if not selector.includes_show(show_dir.name):
                continue
            files.extend(
                path
                for path in sorted(show_dir.glob("*.json"))
                if path.name not in _IGNORED_FILES
            )
        return files

    def _path_for(self, key: ReviewKey) -> Path:
        known = self._paths.get(key.review_id)
        if known is not None:
            return known
        return self._root / key.show_id / f"{key.outlet_id.lower()}--{key.critic_slug}.json"

    def _read(self, path: Path) -> Document:
        try:
            doc = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ReviewStoreError(path=path, reason="file not found") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise ReviewStoreError(path=path, reason=str(exc)) from exc
        if not isinstance(doc, dict):
            raise ReviewStoreError(path=path, reason="top level is not an object")
        return doc

    def _write(self, path: Path, doc: Document) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(
                json.dumps(doc, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
            )
            os.replace(tmp, path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise ReviewStoreError(path=path, reason=str(exc)) from exc


def _first_line(exc: Exception) -> str:
    return str(exc).splitlines()[0] if str(exc) else type(exc).__name__
