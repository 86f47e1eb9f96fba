"""Colorized terminal summaries for the review-scorer commands."""

import typer

from review_scorer.calibration.domain.aggregator import AggregatorReport, ThumbDistribution
from review_scorer.calibration.domain.ground_truth import GroundTruthReport
from review_scorer.calibration.domain.stats import CalibrationStats
from review_scorer.rescore.application.rollback import RollbackReport
from review_scorer.rescore.domain.report import RescoreReport

# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_CYAN = "\033[36m"
_YELLOW = "\033[33m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_WHITE = "\033[97m"


def _rule(width: int = 72, color: str = _DIM) -> None:
    typer.echo(f"{color}{'─' * width}{_RESET}")


def _header(title: str, color: str = _CYAN) -> None:
    typer.echo("")
    _rule(color=color)
    typer.echo(f"{color}{_BOLD}  review-scorer  ·  {title}{_RESET}")
    _rule(color=color)
    typer.echo("")


def _rows(rows: list[tuple[str, str]]) -> None:
    label_w = max(len(label) for label, _ in rows)
    for label, value in rows:
        typer.echo(f"  {_DIM}{label:<{label_w}}{_RESET}  {_WHITE}{value}{_RESET}")


def _rate(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.1%}"


def format_elapsed(elapsed_seconds: float) -> str:
    """Format elapsed seconds as '1m 23.4s' or '5.2s'."""
    minutes, seconds = divmod(elapsed_seconds, 60)
    if minutes >= 1:
        return f"{int(minutes)}m {seconds:.1f}s"
    return f"{elapsed_seconds:.1f}s"


def print_rescore_summary(report: RescoreReport, elapsed_seconds: float) -> None:
    """Run metadata, one line per batch, and the gate breaches when halted."""
    color = _RED if report.halted else _CYAN
    title = "Rescore Halted" if report.halted else "Rescore Complete"
    if report.dry_run:
        title += " (dry run)"
    _header(title, color=color)

    _rows(
        [
            ("Run ID", f"{report.run_id[:8]}-..."),
            ("Prompt version", report.prompt_version),
            ("Selected", str(report.selected)),
            ("Already committed", str(report.skipped_committed)),
            ("Batches", str(len(report.batches))),
            ("Reviews committed", str(report.reviews_committed)),
            ("Final state", report.state.value),
            ("Elapsed", format_elapsed(elapsed_seconds)),
        ]
    )

    if report.batches:
        typer.echo("")
        typer.echo(
            f"  {_DIM}{'Batch':>5}  {'Reviews':>7}  {'Agree':>7}  {'Spread':>6}"
            f"  {'Review':>7}  {'Fail':>7}  Gate{_RESET}"
        )
        for batch in report.batches:
            m = batch.metrics
            spread = "n/a" if m.mean_agreeing_spread is None else f"{m.mean_agreeing_spread:.1f}"
            gate = f"{_GREEN}pass{_RESET}" if batch.verdict.passed else f"{_RED}{_BOLD}FAIL{_RESET}"
            typer.echo(
                f"  {batch.index:>5}  {m.reviews:>7}  {_rate(m.agreement_rate):>7}"
                f"  {spread:>6}  {_rate(m.needs_review_rate):>7}"
                f"  {_rate(m.failure_rate):>7}  {gate}"
            )

    if report.halted:
        typer.echo("")
        typer.echo(f"  {_RED}{_BOLD}Validation gate breached: nothing from this batch was written{_RESET}")
        for breach in report.breaches:
            typer.echo(f"  {_YELLOW}{breach.describe()}{_RESET}")

    typer.echo("")
    _rule(color=color)
    typer.echo("")


def print_rollback_summary(report: RollbackReport) -> None:
    _header("Rollback")
    _rows(
        [
            ("Restored", str(len(report.restored))),
            ("No previous score", str(len(report.unavailable))),
            ("Skipped (other version)", str(len(report.skipped))),
        ]
    )
    typer.echo("")


def print_calibration_report(stats: CalibrationStats) -> None:
    """Error statistics, breakdowns, and outlets whose bias exceeds 5 points."""
    _header("Calibration Report")
    if stats.count == 0:
        typer.echo(f"  {_YELLOW}No calibration entries carry a reference score yet.{_RESET}")
        typer.echo("")
        return

    _rows(
        [
            ("Reviews", str(stats.count)),
            ("MAE", f"{stats.mae:.2f} points"),
            ("RMSE", f"{stats.rmse:.2f} points"),
            ("Mean bias", f"{stats.mean_bias:+.2f} points"),
            ("Std dev", f"{stats.std_dev:.2f} points"),
            ("Bucket accuracy", f"{stats.bucket_accuracy:.1%}"),
        ]
    )

    typer.echo("")
    typer.echo(f"  {_DIM}By confidence{_RESET}")
    for confidence, summary in stats.by_confidence.items():
        typer.echo(f"    {confidence:<8} n={summary.count:<4} MAE {summary.mae:.2f}")

    typer.echo("")
    typer.echo(f"  {_DIM}By outlet tier{_RESET}")
    for tier, summary in stats.by_tier.items():
        typer.echo(
            f"    tier {tier:<3} n={summary.count:<4} MAE {summary.mae:.2f}"
            f"  bias {summary.mean_bias:+.2f}"
        )

    biased = [
        (outlet, summary)
        for outlet, summary in stats.outlet_bias.items()
        if abs(summary.mean_bias) > 5
    ]
    if biased:
        typer.echo("")
        typer.echo(f"  {_YELLOW}{_BOLD}Outlets with bias over 5 points{_RESET}")
        for outlet, summary in sorted(biased, key=lambda item: -abs(item[1].mean_bias)):
            typer.echo(f"    {outlet:<24} {summary.mean_bias:+.2f}  (n={summary.count})")
    typer.echo("")


def print_ground_truth_report(report: GroundTruthReport) -> None:
    """Judged scores against printed critic ratings, worst misses and tuning hints."""
    _header("Ground Truth Report")
    stats = report.stats
    _rows(
        [
            ("Reviews with a rating", str(report.rated)),
            ("Unreadable ratings", str(report.unparsed)),
            ("Not yet judged", str(report.unjudged)),
            ("Compared", str(stats.count)),
        ]
    )
    if stats.count == 0:
        typer.echo("")
        typer.echo(f"  {_YELLOW}No judged review carries a printed rating.{_RESET}")
        typer.echo("")
        return

    typer.echo("")
    _rows(
        [
            ("MAE", f"{stats.mae:.2f} points"),
            ("RMSE", f"{stats.rmse:.2f} points"),
            ("Mean bias", f"{stats.mean_bias:+.2f} points"),
            ("Bucket accuracy", f"{stats.bucket_accuracy:.1%}"),
        ]
    )

    typer.echo("")
    typer.echo(f"  {_DIM}By rating format{_RESET}")
    for rating_format, summary in report.by_format.items():
        typer.echo(
            f"    {rating_format:<12} n={summary.count:<4} MAE {summary.mae:.2f}"
            f"  bias {summary.mean_bias:+.2f}"
        )

    typer.echo("")
    typer.echo(f"  {_DIM}Largest errors{_RESET}")
    for miss in report.largest_errors:
        pair = miss.pair
        typer.echo(
            f"    {pair.outlet} ({miss.show_id}): {miss.original_rating}"
            f" → {pair.reference_score:.0f}, judges {pair.ensemble_score:.0f}"
            f" ({pair.delta:+.0f})"
        )

    hints = report.recommendations()
    if hints:
        typer.echo("")
        typer.echo(f"  {_YELLOW}{_BOLD}Recommendations{_RESET}")
        for hint in hints:
            typer.echo(f"    {_YELLOW}• {hint}{_RESET}")
    typer.echo("")


def _distribution(dist: ThumbDistribution) -> str:
    if dist.total == 0:
        return "no data"
    return f"up {dist.up} · meh {dist.meh} · down {dist.down}"


def print_aggregator_report(report: AggregatorReport, agreeing_shown: int = 10) -> None:
    """Per-show agreement with aggregator thumbs, flagged shows first."""
    _header("Aggregator Agreement")
    flagged = report.flagged
    _rows(
        [
            ("Shows", str(len(report.shows))),
            ("Shows flagged", str(len(flagged))),
            ("Reviews with a thumb", str(report.compared)),
            ("Thumb agreement", _rate(report.agreement_rate)),
        ]
    )

    if flagged:
        typer.echo("")
        typer.echo(f"  {_YELLOW}{_BOLD}Shows that disagree with aggregators{_RESET}")
        for show in flagged:
            delta = "n/a" if show.score_delta is None else f"{show.score_delta:+.1f}"
            typer.echo(
                f"    {_WHITE}{show.show_id}{_RESET}  agree {_rate(show.agreement_rate)}"
                f"  delta {delta}"
            )
            typer.echo(f"      ours   {_distribution(show.ours)}")
            for label, dist in show.aggregators.items():
                typer.echo(f"      {label:<6} {_distribution(dist)}")
            typer.echo(f"      {_YELLOW}{show.disagreement}{_RESET}")

    agreeing = [show for show in report.shows if show.disagreement is None]
    if agreeing:
        typer.echo("")
        typer.echo(
            f"  {_DIM}{'Show':<28} {'Thumbs':>6}  {'Agree':>7}  {'Delta':>6}{_RESET}"
        )
        for show in agreeing[:agreeing_shown]:
            delta = "n/a" if show.score_delta is None else f"{show.score_delta:+.1f}"
            typer.echo(
                f"  {show.show_id:<28} {show.compared:>6}"
                f"  {_rate(show.agreement_rate):>7}  {delta:>6}"
            )
        if len(agreeing) > agreeing_shown:
            typer.echo(f"  {_DIM}... and {len(agreeing) - agreeing_shown} more{_RESET}")
    typer.echo("")
