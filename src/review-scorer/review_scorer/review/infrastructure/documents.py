"""Mapping between on-disk review documents (camelCase JSON) and domain models."""

from datetime import date
from typing import Any

from review_scorer.judge.domain.result import RejectionReason
from review_scorer.review.domain.record import (
    AggregatorExcerpts,
    AggregatorThumbs,
    ContentTier,
    HumanOverride,
    QualityFlags,
    ReviewKey,
    ReviewRecord,
)
from review_scorer.review.domain.scored import ScoredReview
from review_scorer.review.domain.thumb import ThumbDirection

type Document = dict[str, Any]

SCORING_KEY = "scoring"
PREVIOUS_SCORING_KEY = "previousScoring"
REJECTED_VERSION_KEY = "rejectedPromptVersion"

# Top-level copies of the scoring block, read by the downstream aggregation step.
_FLAT_SCORE_KEYS: tuple[str, ...] = (
    "assignedScore",
    "bucket",
    "scoreSource",
    "promptVersion",
    "needsReview",
)


def record_from_document(doc: Document) -> ReviewRecord:
    """Build a ReviewRecord; raises pydantic.ValidationError or ValueError on bad data."""
    return ReviewRecord(
        key=ReviewKey(
            show_id=doc.get("showId") or "",
            outlet_id=doc.get("outletId") or "",
            critic_name=doc.get("criticName") or "",
        ),
        show_title=doc.get("showTitle"),
        outlet=doc.get("outlet"),
        publish_date=_publish_date(doc.get("publishDate")),
        full_text=doc.get("fullText"),
        excerpts=AggregatorExcerpts(
            dtli=doc.get("dtliExcerpt"),
            bww=doc.get("bwwExcerpt"),
            show_score=doc.get("showScoreExcerpt"),
            nyc_theatre=doc.get("nycTheatreExcerpt"),
        ),
        thumbs=AggregatorThumbs(
            dtli=ThumbDirection.parse(doc.get("dtliThumb")),
            bww=ThumbDirection.parse(doc.get("bwwThumb")),
        ),
        original_rating=_original_rating(doc),
        content_tier=ContentTier(doc.get("contentTier") or ContentTier.COMPLETE),
        human_override=_human_override(doc),
        quality_flags=QualityFlags(
            mismatched_show=bool(doc.get("mismatchedShow", False)),
            needs_reacquisition=bool(doc.get("needsReacquisition", False)),
            needs_rescore=bool(doc.get("needsRescore", False)),
            rejection_reason=doc.get("rejectionReason"),
            rejected_version=doc.get(REJECTED_VERSION_KEY),
            note=doc.get("qualityNote"),
        ),
        scored=(
            ScoredReview.model_validate(doc[SCORING_KEY])
            if doc.get(SCORING_KEY)
            else None
        ),
    )


def with_scored(doc: Document, scored: ScoredReview) -> Document:
    """Return doc with scored as the current score and the old score kept as previous."""
    updated = dict(doc)
    if doc.get(SCORING_KEY):
        updated[PREVIOUS_SCORING_KEY] = doc[SCORING_KEY]
    updated[SCORING_KEY] = scored.model_dump(mode="json")
    updated.update(_flattened(scored))
    updated["needsRescore"] = False
    updated.pop("rescoreReason", None)
    updated.pop(REJECTED_VERSION_KEY, None)
    return updated


def with_rollback(doc: Document) -> tuple[Document, ScoredReview] | None:
    previous = doc.get(PREVIOUS_SCORING_KEY)
    if not previous:
        return None
    restored = ScoredReview.model_validate(previous)
    updated = dict(doc)
    updated[SCORING_KEY] = previous
    updated.pop(PREVIOUS_SCORING_KEY)
    updated.pop(REJECTED_VERSION_KEY, None)
    updated.update(_flattened(restored))
    return updated, restored


def with_rejection(
    doc: Document, reason: RejectionReason, note: str, prompt_version: str
) -> Document:
    updated = _without_score(doc, prompt_version)
    updated["rejectionReason"] = reason.value
    updated["qualityNote"] = note
    if reason in (RejectionReason.WRONG_SHOW, RejectionReason.WRONG_PRODUCTION):
        updated["mismatchedShow"] = True
    else:
        updated["needsReacquisition"] = True
    return updated


def with_needs_rescore(doc: Document, reason: str) -> Document:
    return {**doc, "needsRescore": True, "rescoreReason": reason}


def with_unscorable(doc: Document, reason: str, prompt_version: str) -> Document:
    return {
        **_without_score(doc, prompt_version),
        "needsReacquisition": True,
        "qualityNote": reason,
    }


def _without_score(doc: Document, prompt_version: str) -> Document:
    """Drop the current score, keeping it as previousScoring for rollback.

    prompt_version is recorded so outdated-only runs do not send the review
    back to the judges under the same prompt.
    """
    updated = {k: v for k, v in doc.items() if k not in _FLAT_SCORE_KEYS}
    current = updated.pop(SCORING_KEY, None)
    if current:
        updated[PREVIOUS_SCORING_KEY] = current
    updated[REJECTED_VERSION_KEY] = prompt_version
    updated["needsRescore"] = False
    updated.pop("rescoreReason", None)
    return updated


def _flattened(scored: ScoredReview) -> Document:
    return {
        "assignedScore": scored.final_score,
        "bucket": scored.final_bucket.value,
        "scoreSource": scored.score_source.value,
        "promptVersion": scored.prompt_version,
        "needsReview": scored.needs_review,
    }


def _original_rating(doc: Document) -> str | None:
    rating = doc.get("originalRating") or doc.get("originalScore")
    return str(rating) if rating not in (None, "") else None


def _human_override(doc: Document) -> HumanOverride | None:
    override = doc.get("humanOverride")
    if isinstance(override, dict):
        return HumanOverride(
            score=override["score"],
            reason=override.get("reason") or "",
            set_by=override.get("setBy") or "",
            set_at=override.get("setAt"),
        )
    # Older files carry the editor's score as flat fields.
    if doc.get("humanReviewScore") is not None:
        return HumanOverride(
            score=doc["humanReviewScore"],
            reason=doc.get("humanReviewNote") or "",
        )
    return None


def _publish_date(value: object) -> date | None:
    # Acquisition writes ISO dates, sometimes with a time part; anything else is dropped.
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None
