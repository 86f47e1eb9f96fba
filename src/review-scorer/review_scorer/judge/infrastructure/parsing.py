"""Normalization of raw judge output into ModelJudgeResult.

Providers return loosely shaped JSON: fenced in markdown, with field-name
variants, bucket names in any casing, numeric strings, scores outside the
claimed bucket. Everything here maps that onto the one shared result shape,
or raises JudgeResponseParseError when nothing usable can be recovered.
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any

from review_scorer.judge.domain.bucket import Bucket, BucketTable
from review_scorer.judge.domain.result import (
    Confidence,
    ModelJudgeResult,
    RejectionReason,
)
from review_scorer.judge.infrastructure.errors import JudgeResponseParseError

_LEADING_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*")
_TRAILING_FENCE = re.compile(r"\s*```\s*$")
_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)
_BUCKET_FIELD = re.compile(
    r'"bucket"\s*:\s*"(rave|positive|mixed|negative|pan)"', re.IGNORECASE
)
_SCORE_FIELD = re.compile(r'"score"\s*:\s*"?(\d+(?:\.\d+)?)', re.IGNORECASE)
_REJECTION_FIELD = re.compile(
    r'"(?:rejection|rejection_reason|rejectionReason)"\s*:\s*'
    r'"(wrong[_ ]show|wrong[_ ]production|not[_ ]a[_ ]review|garbage[_ ]text)"',
    re.IGNORECASE,
)

_EXTRACTED_NOTE = "Extracted from malformed response"


@dataclass(frozen=True)
class NormalizedResult:
    result: ModelJudgeResult
    # Score as the provider returned it (after any calibration offset), before clamping.
    raw_score: int | None


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json (or bare ```) fence and a trailing ``` fence."""
    return _TRAILING_FENCE.sub("", _LEADING_FENCE.sub("", text)).strip()


def parse_judge_output(text: str | None) -> dict[str, Any]:
    """Decode judge output into a dict, falling back to best-effort extraction.

    Raises:
        JudgeResponseParseError: if no JSON object and no bucket/score or
            rejection fields can be found.
    """
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        raise JudgeResponseParseError("empty response")

    for candidate in (cleaned, _first_block(cleaned)):
        if candidate is None:
            continue
        try:
            decoded = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(decoded, dict):
            return decoded

    rejection = _REJECTION_FIELD.search(cleaned)
    if rejection:
        return {
            "scoreable": False,
            "rejection": rejection.group(1),
            "reasoning": _EXTRACTED_NOTE,
        }
    bucket = _BUCKET_FIELD.search(cleaned)
    score = _SCORE_FIELD.search(cleaned)
    if bucket and score:
        return {
            "scoreable": True,
            "bucket": bucket.group(1),
            "score": score.group(1),
            "confidence": "low",
            "reasoning": _EXTRACTED_NOTE,
        }
    raise JudgeResponseParseError(
        f"no JSON object or bucket/score fields in: {cleaned[:120]!r}"
    )


def coerce_bucket(value: Any) -> Bucket | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip().strip(".!").lower()
    for bucket in Bucket:
        if bucket.value.lower() == cleaned:
            return bucket
    return None


def coerce_score(value: Any) -> int | None:
    """Integer score from an int, float or numeric string; None if absent or not a number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or math.isnan(value) or math.isinf(value):
        return None
    return int(math.floor(value + 0.5))


def coerce_confidence(value: Any) -> Confidence:
    if isinstance(value, str):
        try:
            return Confidence(value.strip().lower())
        except ValueError:
            pass
    return Confidence.MEDIUM


def coerce_rejection_reason(value: Any) -> RejectionReason:
    if isinstance(value, str):
        key = re.sub(r"[\s\-]+", "_", value.strip().lower())
        try:
            return RejectionReason(key)
        except ValueError:
            pass
    raise JudgeResponseParseError(f"unknown rejection reason {value!r}")


def to_judge_result(
    raw: dict[str, Any],
    judge: str,
    model: str,
    buckets: BucketTable,
    score_offset: int = 0,
) -> NormalizedResult:
    """Build a ModelJudgeResult from decoded judge output.

    A score outside its bucket's range is clamped into it and marked clamped.
    A missing score with a valid bucket falls back to the bucket midpoint at low
    confidence; a missing bucket with a valid score is derived from the score.
    """
    rationale = str(raw.get("reasoning") or raw.get("rationale") or "")
    if _is_rejection(raw):
        reason = coerce_rejection_reason(
            raw.get("rejection")
            or raw.get("rejection_reason")
            or raw.get("rejectionReason")
        )
        result = ModelJudgeResult(
            judge=judge,
            model=model,
            rejected=True,
            rejection_reason=reason,
            rationale=rationale,
        )
        return NormalizedResult(result=result, raw_score=None)

    bucket = coerce_bucket(raw.get("bucket"))
    score = coerce_score(raw.get("score"))
    confidence = coerce_confidence(raw.get("confidence"))

    if bucket is None and score is None:
        raise JudgeResponseParseError("response has neither a valid bucket nor a score")
    if score is None:
        assert bucket is not None
        score = buckets.range_for(bucket).midpoint
        confidence = Confidence.LOW
    else:
        score += score_offset
    if bucket is None:
        bucket = buckets.bucket_for(max(0, min(100, score)))

    raw_score = score
    clamped = not buckets.contains(bucket, score)
    if clamped:
        score = buckets.clamp(bucket, score)

    result = ModelJudgeResult(
        judge=judge,
        model=model,
        bucket=bucket,
        score=score,
        confidence=confidence,
        rationale=rationale,
        verdict=str(raw.get("verdict") or ""),
        key_quote=str(raw.get("keyQuote") or raw.get("key_quote") or ""),
        clamped=clamped,
    )
    return NormalizedResult(result=result, raw_score=raw_score)


def _first_block(text: str) -> str | None:
    match = _JSON_BLOCK.search(text)
    return match.group(0) if match else None


def _is_rejection(raw: dict[str, Any]) -> bool:
    scoreable = raw.get("scoreable")
    if scoreable is False or (isinstance(scoreable, str) and scoreable.lower() == "false"):
        return True
    return raw.get("rejected") is True
