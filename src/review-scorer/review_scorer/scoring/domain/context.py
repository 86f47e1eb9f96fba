"""Input Context Builder — turns a ReviewRecord into the payload every judge sees.

Full-text reviews are judged on their own content. Truncated and excerpt-only
reviews also get the aggregators' thumbs (and, for truncated text, their
excerpts) as labelled corroborating context, with an instruction to reach an
independent verdict.
"""

from review_scorer.judge.domain.payload import ScoringPayload, TextQuality
from review_scorer.review.domain.outlet import tier_label
from review_scorer.review.domain.record import ContentTier, ReviewRecord

# Excerpts shorter than this are too thin to count as an independent excerpt.
_MIN_EXCERPT_LENGTH = 30

_AGGREGATOR_NOTE = (
    "NOTE: Use this context to help identify the likely verdict, but make your "
    "own independent assessment based on the review text. Do not simply adopt "
    "an aggregator's classification."
)


def build_payload(record: ReviewRecord) -> ScoringPayload | None:
    """Assemble the judge payload, or None when the record has no usable text."""
    if not record.is_scoreable():
        return None

    text, quality = _select_text(record)
    if not text:
        return None

    sections = [_metadata(record)]
    if record.original_rating:
        sections.append(
            f"## Original Rating: {record.original_rating}\n"
            "NOTE: The critic's own rating should heavily influence the bucket "
            "classification."
        )
    if quality != TextQuality.COMPLETE:
        sections.append(_quality_warning(record, quality))

    aggregator = _aggregator_context(record, quality, text)
    if aggregator:
        sections.append(aggregator)

    return ScoringPayload(
        review_id=record.review_id,
        text=text,
        context="\n\n".join(sections),
        text_quality=quality,
        includes_aggregator_context=bool(aggregator),
    )


def unique_excerpts(record: ReviewRecord) -> list[tuple[str, str]]:
    seen: set[str] = set()
    unique: list[tuple[str, str]] = []
    for label, excerpt in record.excerpts.labelled():
        if excerpt in seen:
            continue
        seen.add(excerpt)
        unique.append((label, excerpt))
    return unique


def _select_text(record: ReviewRecord) -> tuple[str, TextQuality]:
    full_text = (record.full_text or "").strip()
    if full_text and record.content_tier == ContentTier.COMPLETE:
        return full_text, TextQuality.COMPLETE
    if full_text and record.content_tier == ContentTier.TRUNCATED:
        return full_text, TextQuality.TRUNCATED

    excerpts = [excerpt for _, excerpt in unique_excerpts(record)]
    if excerpts:
        return "\n\n".join(excerpts), TextQuality.EXCERPT_ONLY
    return full_text, TextQuality.EXCERPT_ONLY


def _metadata(record: ReviewRecord) -> str:
    outlet = record.outlet or record.key.outlet_id
    lines = [f"## Outlet: {outlet}", f"Outlet tier: {tier_label(record.outlet_tier)}"]
    if record.key.critic_name:
        lines.append(f"Critic: {record.key.critic_name}")
    lines.append(f"Show: {record.show_title or record.key.show_id}")
    if record.publish_date:
        lines.append(f"Published: {record.publish_date.isoformat()}")
    return "\n".join(lines)


def _quality_warning(record: ReviewRecord, quality: TextQuality) -> str:
    lines = ["## Text Quality Warning"]
    if quality == TextQuality.TRUNCATED:
        lines.append(
            "IMPORTANT: This review text appears to be TRUNCATED (cut off before the end)."
        )
        lines.append(
            "The critic's final verdict may be missing. Score what is there and "
            "report low confidence if the verdict is cut off."
        )
        return "\n".join(lines)

    lines.append(
        "IMPORTANT: Only curated excerpts are available (no full review text)."
    )
    lines.append(
        "These are selected quotes and may not represent the full verdict. "
        "Confidence must be low."
    )
    substantial = [e for _, e in unique_excerpts(record) if len(e) >= _MIN_EXCERPT_LENGTH]
    if len(substantial) <= 1:
        lines.append("")
        lines.append("## Single Excerpt Warning")
        lines.append(
            "CAUTION: Only ONE excerpt is available from this review. A single "
            "curated quote may be cherry-picked. Score conservatively toward the "
            "middle of the chosen bucket range."
        )
    return "\n".join(lines)


def _aggregator_context(record: ReviewRecord, quality: TextQuality, text: str) -> str:
    if quality == TextQuality.COMPLETE:
        return ""

    lines: list[str] = []
    thumbs = record.thumbs.present()
    if thumbs:
        lines.append(
            "Aggregator verdicts: "
            + ", ".join(f"{label}: {thumb}" for label, thumb in thumbs)
        )
    if quality == TextQuality.TRUNCATED:
        extra = [(label, e) for label, e in unique_excerpts(record) if e not in text]
        if extra:
            lines.append("Additional curated excerpts from this review:")
            lines.extend(f'{label} excerpt: "{excerpt}"' for label, excerpt in extra)

    if not lines:
        return ""
    return "\n".join(["## Aggregator Context (for reference only)", _AGGREGATOR_NOTE, *lines])
