"""Tests for RollbackService."""

from review_scorer.judge.domain.bucket import Bucket
from review_scorer.rescore.application.rollback import RollbackService
from review_scorer.review.domain.selector import CorpusSelector
from tests.rescore.fake_observer import FakeRescoreObserver
from tests.review.builders import make_record, make_scored
from tests.review.fake_repository import FakeReviewRepository


def _make_service(
    repository: FakeReviewRepository,
) -> tuple[RollbackService, FakeRescoreObserver]:
    observer = FakeRescoreObserver()
    return RollbackService(repository=repository, observer=observer), observer


class TestRollback:
    def test_restores_previous_scores(self) -> None:
        record = make_record(scored=make_scored(score=80.0, prompt_version="v5"))
        previous = make_scored(score=62.0, bucket=Bucket.MIXED, prompt_version="v4")
        repo = FakeReviewRepository([record], previous={record.review_id: previous})
        service, observer = _make_service(repo)

        report = service.run(CorpusSelector())

        assert report.restored == [record.review_id]
        restored = repo.records[record.review_id].scored
        assert restored is not None
        assert restored.final_score == 62.0
        assert observer.rollbacks[0].restored_version == "v4"
        assert observer.rollbacks[0].restored_score == 62.0

    def test_reviews_without_previous_score_are_reported(self) -> None:
        record = make_record(scored=make_scored())
        repo = FakeReviewRepository([record])
        service, observer = _make_service(repo)

        report = service.run(CorpusSelector())

        assert report.unavailable == [record.review_id]
        assert report.restored == []
        assert observer.rollback_unavailable_ids == [record.review_id]

    def test_version_filter_skips_other_versions(self) -> None:
        current = make_record(critic_name="A", scored=make_scored(prompt_version="v5"))
        other = make_record(critic_name="B", scored=make_scored(prompt_version="v3"))
        unscored = make_record(critic_name="C")
        repo = FakeReviewRepository(
            [current, other, unscored],
            previous={
                current.review_id: make_scored(prompt_version="v4"),
                other.review_id: make_scored(prompt_version="v2"),
            },
        )
        service, _ = _make_service(repo)

        report = service.run(CorpusSelector(), prompt_version="v5")

        assert report.restored == [current.review_id]
        assert report.skipped == [other.review_id, unscored.review_id]
        assert repo.records[other.review_id].scored == make_scored(prompt_version="v3")

    def test_show_filter(self) -> None:
        hamilton = make_record(scored=make_scored())
        wicked = make_record(show_id="wicked-2003", scored=make_scored())
        repo = FakeReviewRepository(
            [hamilton, wicked],
            previous={
                hamilton.review_id: make_scored(prompt_version="v4"),
                wicked.review_id: make_scored(prompt_version="v4"),
            },
        )
        service, _ = _make_service(repo)

        report = service.run(CorpusSelector(show_ids=["wicked-2003"]))

        assert report.restored == [wicked.review_id]
        assert hamilton.review_id in repo.previous

    def test_rescored_review_can_be_rolled_back(self) -> None:
        record = make_record(scored=make_scored(score=55.0, bucket=Bucket.MIXED, prompt_version="v4"))
        repo = FakeReviewRepository([record])
        repo.save_scored(record, make_scored(score=81.0, prompt_version="v5"))
        service, _ = _make_service(repo)

        service.run(CorpusSelector(), prompt_version="v5")

        restored = repo.records[record.review_id].scored
        assert restored is not None
        assert restored.prompt_version == "v4"
