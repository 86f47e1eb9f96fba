"""CalibrationSet — a stratified sample of scored reviews for human reference scoring."""

import random
from collections import defaultdict
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from review_scorer.judge.domain.bucket import BUCKET_ORDER, Bucket
from review_scorer.judge.domain.result import Confidence
from review_scorer.review.domain.outlet import OutletTier
from review_scorer.review.domain.record import ReviewKey, ReviewRecord
from review_scorer.review.domain.scored import ScoreSource

_TIERS: tuple[OutletTier, ...] = (1, 2, 3)


class CalibrationEntry(BaseModel, frozen=True):
    """One sampled review. reference_score is filled in later by a human scorer."""

    key: ReviewKey
    outlet: str | None = None
    outlet_tier: OutletTier
    bucket: Bucket
    final_score: float
    score_source: ScoreSource
    confidence: Confidence
    reference_score: float | None = Field(default=None, ge=0, le=100)

    @property
    def review_id(self) -> str:
        return self.key.review_id


class CalibrationSet(BaseModel, frozen=True):
    built_at: datetime
    prompt_version: str
    seed: int
    entries: list[CalibrationEntry]


def build_calibration_set(
    records: list[ReviewRecord],
    prompt_version: str,
    size: int = 200,
    seed: int = 0,
    built_at: datetime | None = None,
) -> CalibrationSet:
    """Sample up to size scored records, stratified by final bucket and outlet tier.

    Strata are visited round-robin (Rave..Pan, then tier 1..3 within each
    bucket) so small strata are represented before large ones fill up. The
    sample depends only on the records, size and seed.
    """
    if size < 1:
        raise ValueError("calibration set size must be >= 1")

    strata: dict[tuple[Bucket, OutletTier], list[ReviewRecord]] = defaultdict(list)
    for record in sorted(records, key=lambda r: r.review_id):
        if record.scored is None:
            continue
        strata[(record.scored.final_bucket, record.outlet_tier)].append(record)

    rng = random.Random(seed)
    queues: list[list[ReviewRecord]] = []
    for bucket in BUCKET_ORDER:
        for tier in _TIERS:
            members = strata.get((bucket, tier), [])
            if members:
                rng.shuffle(members)
                queues.append(members)

    chosen: list[ReviewRecord] = []
    while len(chosen) < size and any(queues):
        for queue in queues:
            if queue and len(chosen) < size:
                chosen.append(queue.pop(0))

    return CalibrationSet(
        built_at=built_at or datetime.now(UTC),
        prompt_version=prompt_version,
        seed=seed,
        entries=[_entry(record) for record in chosen],
    )


def _entry(record: ReviewRecord) -> CalibrationEntry:
    assert record.scored is not None
    return CalibrationEntry(
        key=record.key,
        outlet=record.outlet,
        outlet_tier=record.outlet_tier,
        bucket=record.scored.final_bucket,
        final_score=record.scored.final_score,
        score_source=record.scored.score_source,
        confidence=record.scored.confidence,
    )
