"""ProgressRescoreObserver — renders Rich progress bars for a rescoring run on stderr."""

from __future__ import annotations

from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    Progress,
    ProgressColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.text import Text

_OVERALL = "Overall"
_BATCH = "batch"

# (field, glyph, style), drawn left to right; whatever is left is "remaining".
_SEGMENTS: tuple[tuple[str, str, str], ...] = (
    ("scored", "█", "bright_green"),
    ("failed", "█", "red"),
    ("inflight", "▒", "grey50"),
)
_REMAINING = ("░", "dim white")


class _ReviewCountsColumn(ProgressColumn):
    """scored/total, with a red failure count once any review in the row has failed."""

    def render(self, task: Task) -> Text:
        scored = int(task.fields.get("scored", 0))
        failed = int(task.fields.get("failed", 0))
        counts = Text.assemble(
            (str(scored), "bright_green"),
            ("/", "dim white"),
            (str(int(task.total or 0)), "default"),
        )
        if failed:
            counts.append(f" ✗{failed}", style="red")
        return counts


class _SegmentedBarColumn(ProgressColumn):
    def __init__(self, width: int = 40) -> None:
        super().__init__()
        self.width = width

    def render(self, task: Task) -> Text:
        bar = Text()
        total = task.total or 0
        free = self.width
        for field, glyph, style in _SEGMENTS:
            count = int(task.fields.get(field, 0))
            cells = min(int(count / total * self.width), free) if total > 0 else 0
            bar.append(glyph * cells, style=style)
            free -= cells
        glyph, style = _REMAINING
        bar.append(glyph * free, style=style)
        return bar


def _make_progress(console: Console) -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        _SegmentedBarColumn(),
        _ReviewCountsColumn(),
        TimeElapsedColumn(),
        TextColumn("eta"),
        TimeRemainingColumn(),
        TextColumn("{task.fields[status]}"),
        console=console,
        refresh_per_second=10,
        transient=False,
    )


def _legend() -> Text:
    parts: list[str | tuple[str, str]] = ["  "]
    for field, glyph, style in _SEGMENTS:
        parts += [(glyph, style), f" {field}  "]
    parts += [_REMAINING, " remaining"]
    return Text.assemble(*parts)


class ProgressRescoreObserver:
    """Renders an Overall bar for the run and one bar for the batch being scored.

    The batch row shows the current state machine state, then the gate verdict
    once the batch has been validated. Reviews that fail to load or score are
    drawn in red and counted separately from scored reviews.

    Pass ``disabled=True`` to suppress all terminal output (useful in tests).

    Does NOT inherit from RescoreObserver (structural typing via Protocol).
    """

    def __init__(self, disabled: bool = False) -> None:
        self._disabled = disabled
        self._batch_size = 0
        self._total = 0
        self._done: dict[str, int] = {}
        self._failed: dict[str, int] = {}
        self._inflight: dict[str, int] = {}
        # Reviews of the current batch that were handed to the scorer.
        self._started: set[str] = set()
        # Scoring failures whose batch_progress event has not arrived yet.
        self._unreported_failures = 0
        self._progress: Progress | None = None
        self._rows: dict[str, TaskID] = {}
        self._live: Live | None = None

    def _refresh(self, row: str, **fields: object) -> None:
        if self._progress is None or row not in self._rows:
            return
        done = self._done.get(row, 0)
        failed = self._failed.get(row, 0)
        self._progress.update(
            self._rows[row],
            completed=done + failed,
            scored=done,
            failed=failed,
            inflight=self._inflight.get(row, 0),
            **fields,
        )

    def _count(self, counter: dict[str, int], step: int) -> None:
        for row in (_OVERALL, _BATCH):
            counter[row] = max(0, counter.get(row, 0) + step)

    def rescore_started(
        self,
        run_id: str,
        prompt_version: str,
        total_reviews: int,
        skipped_committed: int,
        batch_size: int,
        dry_run: bool,
    ) -> None:
        self._batch_size = batch_size
        self._total = total_reviews
        self._done = {_OVERALL: 0, _BATCH: 0}
        self._failed = {_OVERALL: 0, _BATCH: 0}
        self._inflight = {_OVERALL: 0, _BATCH: 0}
        self._rows = {}

        if self._disabled:
            return

        console = Console(stderr=True)
        self._progress = _make_progress(console=console)
        status = f"prompt {prompt_version}"
        if dry_run:
            status += " (dry run)"
        self._rows[_OVERALL] = self._progress.add_task(
            description=f"[bold]{_OVERALL:<10}[/bold]",
            total=float(total_reviews),
            status=status,
        )
        self._rows[_BATCH] = self._progress.add_task(
            description=f"{'Batch':<10}",
            total=float(min(batch_size, total_reviews)),
            status="waiting",
        )
        self._refresh(_OVERALL)
        self._refresh(_BATCH)
        self._live = Live(
            Group(self._progress, Text(""), _legend()),
            console=console,
            refresh_per_second=10,
        )
        self._live.start()

    def rescore_resumed(
        self, run_id: str, batches_committed: int, reviews_committed: int
    ) -> None:
        self._refresh(
            _OVERALL,
            status=f"resumed after {batches_committed} batches ({reviews_committed} reviews)",
        )

    def rescore_state_changed(self, run_id: str, batch_index: int, state: str) -> None:
        if state != "loading-batch":
            self._refresh(_BATCH, status=state)
            return

        self._done[_BATCH] = 0
        self._failed[_BATCH] = 0
        self._inflight[_BATCH] = 0
        self._started = set()
        self._unreported_failures = 0
        left = self._total - self._done.get(_OVERALL, 0) - self._failed.get(_OVERALL, 0)
        if self._progress is not None and _BATCH in self._rows:
            self._progress.reset(
                self._rows[_BATCH], total=float(max(0, min(self._batch_size, left)))
            )
        self._refresh(_BATCH, description=f"{f'Batch {batch_index}':<10}", status=state)

    def batch_review_started(self, run_id: str, batch_index: int, review_id: str) -> None:
        self._started.add(review_id)
        self._count(self._inflight, 1)
        self._refresh(_OVERALL)
        self._refresh(_BATCH)

    def batch_review_failed(
        self, run_id: str, batch_index: int, review_id: str, reason: str
    ) -> None:
        # Load failures never start; scoring failures still report progress.
        if review_id in self._started:
            self._unreported_failures += 1
        self._count(self._failed, 1)
        self._refresh(_OVERALL)
        self._refresh(_BATCH)

    def batch_progress(
        self, run_id: str, batch_index: int, completed: int, total: int
    ) -> None:
        if self._unreported_failures:
            self._unreported_failures -= 1
        else:
            self._count(self._done, 1)
        self._count(self._inflight, -1)
        self._refresh(_OVERALL)
        self._refresh(_BATCH)

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
        verdict = "[green]gate passed[/green]" if passed else "[red]gate breached[/red]"
        if agreement_rate is not None:
            verdict += f" (agreement {agreement_rate:.0%})"
        self._refresh(_BATCH, status=verdict)

    def gate_breached(
        self,
        run_id: str,
        batch_index: int,
        metric: str,
        value: float,
        threshold: float,
    ) -> None:
        self._refresh(
            _BATCH, status=f"[red]{metric} {value:.2f} vs limit {threshold:.2f}[/red]"
        )

    def batch_committed(self, run_id: str, batch_index: int, reviews: int) -> None:
        self._refresh(_BATCH, status=f"committed {reviews}")

    def rescore_completed(
        self,
        run_id: str,
        state: str,
        batches: int,
        reviews_committed: int,
        elapsed_seconds: float,
    ) -> None:
        self._refresh(_OVERALL, status=state)
        if self._live is not None:
            self._live.stop()
        self._progress = None
        self._live = None
        self._rows = {}

    def rollback_applied(
        self, review_id: str, restored_score: float, restored_version: str
    ) -> None:
        pass

    def rollback_unavailable(self, review_id: str) -> None:
        pass
