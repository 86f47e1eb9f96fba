"""CorpusSelector — which reviews a rescoring run should touch."""

import hashlib

from pydantic import BaseModel, Field

from review_scorer.review.domain.record import ReviewRecord


class CorpusSelector(BaseModel, frozen=True):
    """Reviews with an outdated (or missing) prompt version, an explicit show list, or both.

    With neither criterion set, every review in the corpus is selected. A review
    rejected under the current prompt version is not outdated.
    """

    outdated_only: bool = False
    show_ids: list[str] = Field(default_factory=list)

    def includes_show(self, show_id: str) -> bool:
        return not self.show_ids or show_id in self.show_ids

    def matches(self, record: ReviewRecord, prompt_version: str) -> bool:
        if not self.includes_show(record.key.show_id):
            return False
        if self.outdated_only:
            if record.quality_flags.rejected_version == prompt_version:
                return False
            return record.scored is None or record.scored.prompt_version != prompt_version
        return True

    def fingerprint(self) -> str:
        """Stable identity used to decide whether a checkpoint belongs to this selection."""
        material = f"outdated={self.outdated_only};shows={','.join(sorted(self.show_ids))}"
        return hashlib.sha256(material.encode("utf-8")).hexdigest()[:16]
