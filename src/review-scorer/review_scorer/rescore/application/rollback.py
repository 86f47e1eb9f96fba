"""Rollback — restore the scores that preceded a rescoring run."""

from pydantic import BaseModel

from review_scorer.rescore.domain.observer import RescoreObserver
from review_scorer.review.domain.repository import ReviewRepository
from review_scorer.review.domain.selector import CorpusSelector


class RollbackReport(BaseModel, frozen=True):
    restored: list[str] = []
    unavailable: list[str] = []
    skipped: list[str] = []


class RollbackService:
    """Swaps each selected review's current score for its previous one."""

    def __init__(self, repository: ReviewRepository, observer: RescoreObserver) -> None:
        self._repository = repository
        self._observer = observer

    def run(self, selector: CorpusSelector, prompt_version: str | None = None) -> RollbackReport:
        """Roll back selected reviews.

        When prompt_version is given, only reviews currently scored with that
        version are touched; the rest are reported as skipped.
        """
        restored: list[str] = []
        unavailable: list[str] = []
        skipped: list[str] = []

        for key in self._repository.select(selector, prompt_version or ""):
            record = self._repository.load(key)
            if prompt_version is not None and (
                record.scored is None or record.scored.prompt_version != prompt_version
            ):
                skipped.append(key.review_id)
                continue

            previous = self._repository.rollback(key)
            if previous is None:
                unavailable.append(key.review_id)
                self._observer.rollback_unavailable(review_id=key.review_id)
                continue
            restored.append(key.review_id)
            self._observer.rollback_applied(
                review_id=key.review_id,
                restored_score=previous.final_score,
                restored_version=previous.prompt_version,
            )

        return RollbackReport(restored=restored, unavailable=unavailable, skipped=skipped)
