"""CLI entrypoint for review-scorer — typer app with rescore, rollback and calibration commands."""

import asyncio
import sys
import time
from pathlib import Path

import structlog
import typer

from review_scorer.calibration.application.report import collect_pairs, load_records
from review_scorer.calibration.domain.aggregator import aggregator_report
from review_scorer.calibration.domain.calibration_set import build_calibration_set
from review_scorer.calibration.domain.ground_truth import ground_truth_report
from review_scorer.calibration.domain.stats import calibration_stats
from review_scorer.calibration.infrastructure.json_store import (
    load_calibration_set,
    write_calibration_set,
)
from review_scorer.cli.output.summary import (
    print_aggregator_report,
    print_calibration_report,
    print_ground_truth_report,
    print_rescore_summary,
    print_rollback_summary,
)
from review_scorer.config.domain.config import ScorerConfig
from review_scorer.config.infrastructure.observer import StructlogConfigObserver
from review_scorer.config.infrastructure.yaml_loader import YamlConfigLoader
from review_scorer.core.errors import ReviewScorerError
from review_scorer.core.retry import RetryPolicy
from review_scorer.judge.infrastructure.observer import StructlogJudgeObserver
from review_scorer.judge.infrastructure.registry import create_judges
from review_scorer.rescore.application.errors import RescoreHaltedError
from review_scorer.rescore.application.rescorer import BatchRescorer
from review_scorer.rescore.application.rollback import RollbackService
from review_scorer.rescore.domain.observer import RescoreObserver
from review_scorer.rescore.infrastructure.checkpoint_store import JsonCheckpointStore
from review_scorer.rescore.infrastructure.composite_observer import (
    CompositeRescoreObserver,
)
from review_scorer.rescore.infrastructure.observer import StructlogRescoreObserver
from review_scorer.rescore.infrastructure.progress_observer import (
    ProgressRescoreObserver,
)
from review_scorer.review.domain.selector import CorpusSelector
from review_scorer.review.infrastructure.json_repository import JsonReviewRepository
from review_scorer.review.infrastructure.observer import StructlogReviewStoreObserver
from review_scorer.scoring.application.panel import JudgePanel
from review_scorer.scoring.application.pipeline import ReviewScoringPipeline
from review_scorer.scoring.domain.explicit import ExplicitRatingExtractor
from review_scorer.scoring.infrastructure.observer import StructlogScoringObserver

app = typer.Typer(add_completion=False)

EXIT_ERROR = 1
EXIT_HALTED = 2


def _configure_structlog(log_format: str) -> None:
    """Configure structlog based on the requested format."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        sys.exit(EXIT_ERROR)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def _load_config(config_path: Path) -> ScorerConfig:
    loader = YamlConfigLoader(observer=StructlogConfigObserver())
    return loader.load(path=config_path)


def _repository(config: ScorerConfig) -> JsonReviewRepository:
    return JsonReviewRepository(
        root=config.corpus.root, observer=StructlogReviewStoreObserver()
    )


def _rescore_observer(log_format: str) -> RescoreObserver:
    observers: list[RescoreObserver] = [StructlogRescoreObserver()]
    if log_format != "json":
        observers.append(ProgressRescoreObserver())
    return CompositeRescoreObserver(observers=observers)


def _build_rescorer(config: ScorerConfig, log_format: str) -> BatchRescorer:
    """Wire the judges, panel, pipeline and stores described by config."""
    retry_cfg = config.execution.retry
    panel = JudgePanel(
        judges=create_judges(
            configs=config.judges,
            buckets=config.scoring.buckets,
            observer=StructlogJudgeObserver(),
        ),
        retry=RetryPolicy(
            max_attempts=retry_cfg.max_attempts,
            initial_backoff_seconds=retry_cfg.initial_backoff_seconds,
            backoff_multiplier=retry_cfg.backoff_multiplier,
        ),
        timeout_seconds=config.execution.judge_timeout_seconds,
        observer=StructlogScoringObserver(),
    )
    pipeline = ReviewScoringPipeline(
        panel=panel,
        scoring=config.scoring,
        ensemble=config.ensemble,
        observer=StructlogScoringObserver(),
    )
    return BatchRescorer(
        repository=_repository(config),
        pipeline=pipeline,
        checkpoints=JsonCheckpointStore(path=config.corpus.checkpoint_path),
        gate=config.gate,
        execution=config.execution,
        observer=_rescore_observer(log_format),
        prompt_version=config.prompt_version,
    )


def _fail(exc: BaseException) -> None:
    if isinstance(exc, KeyboardInterrupt):
        typer.echo("Interrupted.")
    elif isinstance(exc, ReviewScorerError):
        typer.echo(str(exc))
    else:
        typer.echo(f"Unexpected error: {exc}\nPlease report this bug.")
    sys.exit(EXIT_ERROR)


@app.command()
def rescore(
    config_path: Path = typer.Argument(..., help="Path to scorer config YAML"),
    batch_size: int | None = typer.Option(
        None, "--batch-size", "-b", min=1, help="Reviews per batch (overrides config)"
    ),
    shows: list[str] | None = typer.Option(
        None, "--show", "-s", help="Only rescore this show id (repeatable)"
    ),
    outdated: bool = typer.Option(
        True,
        "--outdated/--all",
        help="Only reviews scored with another prompt version, or every selected review",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Score and validate batches without writing anything"
    ),
    restart: bool = typer.Option(
        False, "--restart", help="Discard any saved checkpoint and start a fresh run"
    ),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: 'console' or 'json'"
    ),
) -> None:
    """Apply the configured prompt version to the corpus, batch by batch.

    Exits with status 2 when a batch fails the validation gate.
    """
    _configure_structlog(log_format=log_format)
    try:
        config = _load_config(config_path)
        if restart and not dry_run:
            JsonCheckpointStore(path=config.corpus.checkpoint_path).clear()
        rescorer = _build_rescorer(config, log_format=log_format)
        selector = CorpusSelector(outdated_only=outdated, show_ids=shows or [])

        started_at = time.monotonic()
        report = asyncio.run(
            rescorer.run(selector=selector, dry_run=dry_run, batch_size=batch_size)
        )
        print_rescore_summary(report, elapsed_seconds=time.monotonic() - started_at)

        if report.halted:
            raise RescoreHaltedError(
                batch_index=report.batches[-1].index, breaches=report.breaches
            )
    except RescoreHaltedError as exc:
        typer.echo(str(exc))
        sys.exit(EXIT_HALTED)
    except (KeyboardInterrupt, Exception) as exc:  # noqa: BLE001
        _fail(exc)


@app.command()
def rollback(
    config_path: Path = typer.Argument(..., help="Path to scorer config YAML"),
    shows: list[str] | None = typer.Option(
        None, "--show", "-s", help="Only roll back this show id (repeatable)"
    ),
    version: str | None = typer.Option(
        None,
        "--version",
        help="Only roll back reviews currently scored with this prompt version",
    ),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: 'console' or 'json'"
    ),
) -> None:
    """Restore each selected review's previous score."""
    _configure_structlog(log_format=log_format)
    try:
        config = _load_config(config_path)
        service = RollbackService(
            repository=_repository(config), observer=StructlogRescoreObserver()
        )
        report = service.run(
            selector=CorpusSelector(show_ids=shows or []), prompt_version=version
        )
        print_rollback_summary(report)
    except (KeyboardInterrupt, Exception) as exc:  # noqa: BLE001
        _fail(exc)


@app.command()
def calibrate(
    config_path: Path = typer.Argument(..., help="Path to scorer config YAML"),
    output: Path = typer.Option(
        Path("./calibration-set.json"), "--output", "-o", help="Calibration set file"
    ),
    size: int = typer.Option(200, "--size", min=1, help="Number of reviews to sample"),
    seed: int = typer.Option(0, "--seed", help="Sampling seed"),
    force: bool = typer.Option(False, "--force", help="Replace an existing set"),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: 'console' or 'json'"
    ),
) -> None:
    """Sample a stratified calibration set of scored reviews for human reference scoring."""
    _configure_structlog(log_format=log_format)
    try:
        config = _load_config(config_path)
        records = load_records(_repository(config), [], config.prompt_version)
        calibration_set = build_calibration_set(
            records=records,
            prompt_version=config.prompt_version,
            size=size,
            seed=seed,
        )
        write_calibration_set(output, calibration_set, force=force)
        typer.echo(f"Wrote {len(calibration_set.entries)} reviews to {output}")
    except (KeyboardInterrupt, Exception) as exc:  # noqa: BLE001
        _fail(exc)


@app.command("calibration-report")
def calibration_report(
    config_path: Path = typer.Argument(..., help="Path to scorer config YAML"),
    set_path: Path = typer.Argument(..., help="Calibration set with reference scores"),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: 'console' or 'json'"
    ),
) -> None:
    """Compare current corpus scores against the calibration set's reference scores."""
    _configure_structlog(log_format=log_format)
    try:
        config = _load_config(config_path)
        pairs = collect_pairs(load_calibration_set(set_path), _repository(config))
        print_calibration_report(calibration_stats(pairs, buckets=config.scoring.buckets))
    except (KeyboardInterrupt, Exception) as exc:  # noqa: BLE001
        _fail(exc)


@app.command("ground-truth-report")
def ground_truth_report_command(
    config_path: Path = typer.Argument(..., help="Path to scorer config YAML"),
    shows: list[str] | None = typer.Option(
        None, "--show", "-s", help="Only report on this show id (repeatable)"
    ),
    largest: int = typer.Option(5, "--largest", min=0, help="Largest errors to list"),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: 'console' or 'json'"
    ),
) -> None:
    """Compare judged scores against the ratings critics printed with their reviews."""
    _configure_structlog(log_format=log_format)
    try:
        config = _load_config(config_path)
        records = load_records(_repository(config), shows or [], config.prompt_version)
        report = ground_truth_report(
            records,
            extractor=ExplicitRatingExtractor(letter_grades=config.scoring.letter_grades),
            buckets=config.scoring.buckets,
            largest=largest,
        )
        print_ground_truth_report(report)
    except (KeyboardInterrupt, Exception) as exc:  # noqa: BLE001
        _fail(exc)


@app.command("aggregator-report")
def aggregator_report_command(
    config_path: Path = typer.Argument(..., help="Path to scorer config YAML"),
    shows: list[str] | None = typer.Option(
        None, "--show", "-s", help="Only report on this show id (repeatable)"
    ),
    min_reviews: int = typer.Option(
        3, "--min-reviews", min=1, help="Reviews needed on each side to compare distributions"
    ),
    max_share_gap: float = typer.Option(
        0.25, "--max-share-gap", min=0.0, max=1.0, help="Largest tolerated Up/Meh/Down share gap"
    ),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: 'console' or 'json'"
    ),
) -> None:
    """Compare each show's judged buckets and scores against aggregator thumbs."""
    _configure_structlog(log_format=log_format)
    try:
        config = _load_config(config_path)
        records = load_records(_repository(config), shows or [], config.prompt_version)
        report = aggregator_report(
            records,
            thumb_scores=config.scoring.thumb_scores,
            min_reviews=min_reviews,
            max_share_gap=max_share_gap,
        )
        print_aggregator_report(report)
    except (KeyboardInterrupt, Exception) as exc:  # noqa: BLE001
        _fail(exc)


if __name__ == "__main__":
    app()
