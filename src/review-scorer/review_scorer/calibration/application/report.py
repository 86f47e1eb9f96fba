"""Gather what the calibration reports compare: reference scores and corpus records."""

from review_scorer.calibration.domain.calibration_set import CalibrationSet
from review_scorer.calibration.domain.stats import CalibrationPair
from review_scorer.review.domain.record import ReviewRecord
from review_scorer.review.domain.repository import ReviewRepository
from review_scorer.review.domain.selector import CorpusSelector


def collect_pairs(
    calibration_set: CalibrationSet, repository: ReviewRepository
) -> list[CalibrationPair]:
    """Entries without a reference score, or whose review is no longer scored, are left out."""
    pairs: list[CalibrationPair] = []
    for entry in calibration_set.entries:
        if entry.reference_score is None:
            continue
        record = repository.load(entry.key)
        if record.scored is None:
            continue
        pairs.append(
            CalibrationPair(
                reference_score=entry.reference_score,
                ensemble_score=record.scored.final_score,
                ensemble_bucket=record.scored.final_bucket,
                confidence=record.scored.confidence,
                tier=record.outlet_tier,
                outlet=record.outlet or record.key.outlet_id,
            )
        )
    return pairs


def load_records(
    repository: ReviewRepository, show_ids: list[str], prompt_version: str
) -> list[ReviewRecord]:
    """Every record of the given shows (all shows when empty), scored or not."""
    keys = repository.select(CorpusSelector(show_ids=show_ids), prompt_version)
    return [repository.load(key) for key in keys]
