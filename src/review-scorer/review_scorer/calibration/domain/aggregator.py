"""Aggregator agreement — how each show's judged scores line up with aggregator thumbs.

Two views per show:

- per review: the thumb implied by the ensemble bucket (Rave and Positive are
  Up, Mixed is Meh, Negative and Pan are Down) against the aggregators'
  consensus thumb, plus the mean gap between the ensemble score and the
  configured thumb score;
- per distribution: the show's share of Up/Meh/Down reviews against each
  aggregator's. A show is flagged when a share differs by more than the
  allowed gap, or when the two sides lean opposite ways.
"""

from pydantic import BaseModel, Field

from review_scorer.calibration.domain.stats import judged_verdict
from review_scorer.judge.domain.bucket import Bucket
from review_scorer.review.domain.record import ReviewRecord
from review_scorer.review.domain.thumb import ThumbDirection

_BUCKET_THUMBS: dict[Bucket, ThumbDirection] = {
    Bucket.RAVE: ThumbDirection.UP,
    Bucket.POSITIVE: ThumbDirection.UP,
    Bucket.MIXED: ThumbDirection.MEH,
    Bucket.NEGATIVE: ThumbDirection.DOWN,
    Bucket.PAN: ThumbDirection.DOWN,
}


def thumb_for_bucket(bucket: Bucket) -> ThumbDirection:
    return _BUCKET_THUMBS[bucket]


class ThumbDistribution(BaseModel, frozen=True):
    up: int = 0
    meh: int = 0
    down: int = 0

    @classmethod
    def of(cls, thumbs: list[ThumbDirection]) -> "ThumbDistribution":
        return cls(
            up=thumbs.count(ThumbDirection.UP),
            meh=thumbs.count(ThumbDirection.MEH),
            down=thumbs.count(ThumbDirection.DOWN),
        )

    @property
    def total(self) -> int:
        return self.up + self.meh + self.down

    def share(self, direction: ThumbDirection) -> float:
        if self.total == 0:
            return 0.0
        counts = {
            ThumbDirection.UP: self.up,
            ThumbDirection.MEH: self.meh,
            ThumbDirection.DOWN: self.down,
        }
        return counts[direction] / self.total

    def lean(self) -> ThumbDirection | None:
        """UP or DOWN when one outnumbers the other, None when they are level."""
        if self.up > self.down:
            return ThumbDirection.UP
        if self.down > self.up:
            return ThumbDirection.DOWN
        return None


class ShowAgreement(BaseModel, frozen=True):
    show_id: str
    judged: int
    compared: int
    agreements: int
    mean_score: float | None = None
    mean_thumb_score: float | None = None
    ours: ThumbDistribution
    aggregators: dict[str, ThumbDistribution] = Field(default_factory=dict)
    disagreement: str | None = None

    @property
    def agreement_rate(self) -> float | None:
        return self.agreements / self.compared if self.compared else None

    @property
    def score_delta(self) -> float | None:
        """Mean ensemble score minus mean thumb score; positive means judges run warmer."""
        if self.mean_score is None or self.mean_thumb_score is None:
            return None
        return self.mean_score - self.mean_thumb_score


class AggregatorReport(BaseModel, frozen=True):
    shows: list[ShowAgreement]

    @property
    def compared(self) -> int:
        return sum(show.compared for show in self.shows)

    @property
    def agreement_rate(self) -> float | None:
        agreements = sum(show.agreements for show in self.shows)
        return agreements / self.compared if self.compared else None

    @property
    def flagged(self) -> list[ShowAgreement]:
        return [show for show in self.shows if show.disagreement is not None]


def compare_distributions(
    ours: ThumbDistribution,
    theirs: ThumbDistribution,
    min_reviews: int = 3,
    max_share_gap: float = 0.25,
) -> str | None:
    """Describe a significant disagreement, or None when the two agree or data is thin."""
    if ours.total < min_reviews or theirs.total < min_reviews:
        return None

    gaps = {
        direction: ours.share(direction) - theirs.share(direction)
        for direction in ThumbDirection
    }
    widest = max(gaps, key=lambda direction: abs(gaps[direction]))
    if abs(gaps[widest]) > max_share_gap:
        return (
            f"{widest} share differs by {abs(gaps[widest]):.0%}"
            f" (ours {ours.share(widest):.0%}, theirs {theirs.share(widest):.0%})"
        )

    our_lean, their_lean = ours.lean(), theirs.lean()
    if our_lean is not None and their_lean is not None and our_lean != their_lean:
        return f"sentiment flip: ours leans {our_lean}, theirs leans {their_lean}"
    return None


def show_agreement(
    show_id: str,
    records: list[ReviewRecord],
    thumb_scores: dict[ThumbDirection, int],
    min_reviews: int = 3,
    max_share_gap: float = 0.25,
) -> ShowAgreement:
    """Agreement for one show's records; records of other shows must be filtered out first."""
    ours: list[ThumbDirection] = []
    scores: list[float] = []
    thumb_values: list[float] = []
    agreements = 0
    for record in records:
        verdict = judged_verdict(record)
        if verdict is None:
            continue
        assert verdict.final_bucket is not None and verdict.final_score is not None
        implied = thumb_for_bucket(verdict.final_bucket)
        ours.append(implied)
        consensus = record.thumbs.consensus()
        if consensus is None:
            continue
        scores.append(verdict.final_score)
        thumb_values.append(float(thumb_scores[consensus]))
        if implied == consensus:
            agreements += 1

    distribution = ThumbDistribution.of(ours)
    aggregators = {
        "DTLI": ThumbDistribution.of([r.thumbs.dtli for r in records if r.thumbs.dtli]),
        "BWW": ThumbDistribution.of([r.thumbs.bww for r in records if r.thumbs.bww]),
    }
    disagreement = None
    for label, theirs in aggregators.items():
        issue = compare_distributions(distribution, theirs, min_reviews, max_share_gap)
        if issue is not None:
            disagreement = f"{label}: {issue}"
            break

    return ShowAgreement(
        show_id=show_id,
        judged=len(ours),
        compared=len(scores),
        agreements=agreements,
        mean_score=sum(scores) / len(scores) if scores else None,
        mean_thumb_score=sum(thumb_values) / len(thumb_values) if thumb_values else None,
        ours=distribution,
        aggregators={label: dist for label, dist in aggregators.items() if dist.total},
        disagreement=disagreement,
    )


def aggregator_report(
    records: list[ReviewRecord],
    thumb_scores: dict[ThumbDirection, int],
    min_reviews: int = 3,
    max_share_gap: float = 0.25,
) -> AggregatorReport:
    """One ShowAgreement per show with at least one judged review, ordered by show id."""
    by_show: dict[str, list[ReviewRecord]] = {}
    for record in records:
        by_show.setdefault(record.key.show_id, []).append(record)

    shows = [
        show_agreement(show_id, members, thumb_scores, min_reviews, max_share_gap)
        for show_id, members in sorted(by_show.items())
    ]
    return AggregatorReport(shows=[show for show in shows if show.judged])
