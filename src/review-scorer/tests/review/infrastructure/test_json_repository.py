"""Tests for JsonReviewRepository against a corpus in tmp_path."""

import json
from pathlib import Path
from typing import Any

import pytest

from review_scorer.judge.domain.bucket import Bucket
from review_scorer.judge.domain.result import RejectionReason
from review_scorer.review.domain.selector import CorpusSelector
from review_scorer.review.infrastructure.errors import ReviewStoreError
from review_scorer.review.infrastructure.json_repository import JsonReviewRepository
from tests.review.builders import make_document, make_scored
from tests.review.fake_observer import FakeReviewStoreObserver


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_doc(root: Path, doc: dict[str, Any], name: str | None = None) -> Path:
    show_dir = root / doc["showId"]
    show_dir.mkdir(parents=True, exist_ok=True)
    filename = name or f"{doc['outletId'].lower()}--{doc['criticName'].lower().replace(' ', '-')}.json"
    path = show_dir / filename
    path.write_text(json.dumps(doc, indent=2), encoding="utf-8")
    return path


def _read_doc(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def _make_repo(root: Path) -> tuple[JsonReviewRepository, FakeReviewStoreObserver]:
    observer = FakeReviewStoreObserver()
    return JsonReviewRepository(root=root, observer=observer), observer


# ---------------------------------------------------------------------------
# select()
# ---------------------------------------------------------------------------


class TestSelect:
    def test_selects_every_review_with_empty_selector(self, tmp_path: Path) -> None:
        _write_doc(tmp_path, make_document())
        _write_doc(tmp_path, make_document(show_id="wicked-2003", outlet_id="VARIETY", critic_name="Charles Isherwood"))
        repo, observer = _make_repo(tmp_path)

        keys = repo.select(CorpusSelector(), prompt_version="v5")

        assert [k.review_id for k in keys] == [
            "hamilton-2015/nyt--ben-brantley",
            "wicked-2003/variety--charles-isherwood",
        ]
        assert observer.selected[0].selected == 2
        assert observer.selected[0].skipped == 0

    def test_outdated_only_skips_current_scores(self, tmp_path: Path) -> None:
        _write_doc(tmp_path, make_document(scored=make_scored(prompt_version="v5")))
        _write_doc(tmp_path, make_document(outlet_id="AP", critic_name="Mark Kennedy", scored=make_scored(prompt_version="v4")))
        repo, _ = _make_repo(tmp_path)

        keys = repo.select(CorpusSelector(outdated_only=True), prompt_version="v5")

        assert [k.outlet_id for k in keys] == ["AP"]

    def test_show_filter(self, tmp_path: Path) -> None:
        _write_doc(tmp_path, make_document())
        _write_doc(tmp_path, make_document(show_id="wicked-2003"))
        repo, _ = _make_repo(tmp_path)

        keys = repo.select(CorpusSelector(show_ids=["wicked-2003"]), prompt_version="v5")

        assert [k.show_id for k in keys] == ["wicked-2003"]

    def test_bookkeeping_files_are_ignored(self, tmp_path: Path) -> None:
        _write_doc(tmp_path, make_document())
        (tmp_path / "hamilton-2015" / "failed-fetches.json").write_text("[]", encoding="utf-8")
        (tmp_path / "hamilton-2015" / "index.json").write_text("{}", encoding="utf-8")
        repo, observer = _make_repo(tmp_path)

        keys = repo.select(CorpusSelector(), prompt_version="v5")

        assert len(keys) == 1
        assert observer.skipped == []

    def test_bad_files_are_skipped_and_reported(self, tmp_path: Path) -> None:
        _write_doc(tmp_path, make_document())
        show_dir = tmp_path / "hamilton-2015"
        (show_dir / "broken.json").write_text("{not json", encoding="utf-8")
        (show_dir / "list.json").write_text("[1, 2]", encoding="utf-8")
        (show_dir / "no-show.json").write_text(
            json.dumps({**make_document(), "showId": ""}), encoding="utf-8"
        )
        repo, observer = _make_repo(tmp_path)

        keys = repo.select(CorpusSelector(), prompt_version="v5")

        assert len(keys) == 1
        assert len(observer.skipped) == 3
        assert observer.selected[0].skipped == 3

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        repo, _ = _make_repo(tmp_path / "absent")

        with pytest.raises(ReviewStoreError, match="not a directory"):
            repo.select(CorpusSelector(), prompt_version="v5")


# ---------------------------------------------------------------------------
# load()
# ---------------------------------------------------------------------------


class TestLoad:
    def test_maps_document_fields(self, tmp_path: Path) -> None:
        _write_doc(
            tmp_path,
            make_document(
                dtliThumb="Up",
                bwwThumb="Rotten",
                dtliExcerpt="A triumph.",
                originalScore="4/5",
                humanReviewScore=88,
                humanReviewNote="Checked by editor",
            ),
        )
        repo, _ = _make_repo(tmp_path)
        key = repo.select(CorpusSelector(), prompt_version="v5")[0]

        record = repo.load(key)

        assert record.publish_date is not None
        assert record.publish_date.isoformat() == "2015-08-06"
        assert record.thumbs.dtli == "Up"
        assert record.thumbs.bww == "Down"
        assert record.excerpts.dtli == "A triumph."
        assert record.original_rating == "4/5"
        assert record.human_override is not None
        assert record.human_override.score == 88
        assert record.human_override.reason == "Checked by editor"

    def test_nested_human_override(self, tmp_path: Path) -> None:
        _write_doc(
            tmp_path,
            make_document(humanOverride={"score": 61, "reason": "Mixed on reread", "setBy": "kim"}),
        )
        repo, _ = _make_repo(tmp_path)
        key = repo.select(CorpusSelector(), prompt_version="v5")[0]

        override = repo.load(key).human_override

        assert override is not None
        assert (override.score, override.set_by) == (61, "kim")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        _write_doc(tmp_path, make_document())
        repo, _ = _make_repo(tmp_path)
        key = repo.select(CorpusSelector(), prompt_version="v5")[0]
        (tmp_path / "hamilton-2015" / "nyt--ben-brantley.json").unlink()

        with pytest.raises(ReviewStoreError, match="file not found"):
            repo.load(key)


# ---------------------------------------------------------------------------
# writes
# ---------------------------------------------------------------------------


class TestSaveScored:
    def test_writes_scoring_and_flattened_fields(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document(customField="keep me", needsRescore=True, rescoreReason="all judges failed"))
        repo, observer = _make_repo(tmp_path)
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v5")[0])

        repo.save_scored(record, make_scored(score=82.0, bucket=Bucket.POSITIVE))

        doc = _read_doc(path)
        assert doc["customField"] == "keep me"
        assert doc["scoring"]["final_score"] == 82.0
        assert doc["assignedScore"] == 82.0
        assert doc["bucket"] == "Positive"
        assert doc["scoreSource"] == "ensemble-high-confidence"
        assert doc["promptVersion"] == "v5"
        assert doc["needsRescore"] is False
        assert "rescoreReason" not in doc
        assert "previousScoring" not in doc
        assert observer.written[0].change == "scored"
        assert not path.with_name(path.name + ".tmp").exists()

    def test_keeps_previous_scoring(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document(scored=make_scored(score=60.0, bucket=Bucket.MIXED, prompt_version="v4")))
        repo, _ = _make_repo(tmp_path)
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v5")[0])

        repo.save_scored(record, make_scored(score=75.0, prompt_version="v5"))

        doc = _read_doc(path)
        assert doc["previousScoring"]["final_score"] == 60.0
        assert doc["previousScoring"]["prompt_version"] == "v4"
        assert doc["scoring"]["prompt_version"] == "v5"

    def test_non_ascii_text_is_written_verbatim(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document(fullText="★★★★☆ Un triomphe éclatant."))
        repo, _ = _make_repo(tmp_path)
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v5")[0])

        repo.save_scored(record, make_scored())

        assert "★★★★☆" in path.read_text(encoding="utf-8")


class TestMarks:
    @pytest.mark.parametrize(
        ("reason", "flag"),
        [
            (RejectionReason.WRONG_SHOW, "mismatchedShow"),
            (RejectionReason.WRONG_PRODUCTION, "mismatchedShow"),
            (RejectionReason.NOT_A_REVIEW, "needsReacquisition"),
            (RejectionReason.GARBAGE_TEXT, "needsReacquisition"),
        ],
    )
    def test_rejection_routing(
        self, tmp_path: Path, reason: RejectionReason, flag: str
    ) -> None:
        path = _write_doc(tmp_path, make_document())
        repo, observer = _make_repo(tmp_path)
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v5")[0])

        repo.mark_rejected(
            record, reason=reason, note="2 of 3 judges rejected", prompt_version="v5"
        )

        doc = _read_doc(path)
        assert doc[flag] is True
        assert doc["rejectionReason"] == reason.value
        assert doc["qualityNote"] == "2 of 3 judges rejected"
        assert observer.written[0].change == "rejected"

    def test_needs_rescore(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document(scored=make_scored()))
        repo, _ = _make_repo(tmp_path)
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v5")[0])

        repo.mark_needs_rescore(record, reason="no judge produced a usable score")

        doc = _read_doc(path)
        assert doc["needsRescore"] is True
        assert doc["rescoreReason"] == "no judge produced a usable score"
        assert doc["scoring"]["final_score"] == 78.0

    def test_unscorable(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document())
        repo, observer = _make_repo(tmp_path)
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v5")[0])

        repo.mark_unscorable(record, reason="no usable text", prompt_version="v5")

        doc = _read_doc(path)
        assert doc["needsReacquisition"] is True
        assert doc["qualityNote"] == "no usable text"
        assert observer.written[0].change == "unscorable"


class TestScreenedOutReviews:
    """Rejected and unscorable reviews carry no score and are not outdated under the same prompt."""

    def _mark(self, repo: JsonReviewRepository, change: str) -> None:
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v5")[0])
        if change == "rejected":
            repo.mark_rejected(
                record,
                reason=RejectionReason.GARBAGE_TEXT,
                note="3 of 3 judges rejected",
                prompt_version="v5",
            )
        else:
            repo.mark_unscorable(record, reason="no usable text", prompt_version="v5")

    @pytest.mark.parametrize("change", ["rejected", "unscorable"])
    def test_score_is_dropped_and_kept_for_rollback(
        self, tmp_path: Path, change: str
    ) -> None:
        old = make_scored(score=80.0, prompt_version="v4")
        path = _write_doc(tmp_path, make_document(scored=old, assignedScore=80.0))
        repo, _ = _make_repo(tmp_path)

        self._mark(repo, change)

        doc = _read_doc(path)
        for key in ("scoring", "assignedScore", "bucket", "scoreSource", "promptVersion"):
            assert key not in doc
        assert doc["previousScoring"]["prompt_version"] == "v4"
        assert doc["rejectedPromptVersion"] == "v5"
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v5")[0])
        assert record.scored is None
        assert record.quality_flags.rejected_version == "v5"

    @pytest.mark.parametrize("change", ["rejected", "unscorable"])
    def test_not_reselected_as_outdated_under_same_version(
        self, tmp_path: Path, change: str
    ) -> None:
        _write_doc(tmp_path, make_document(scored=make_scored(prompt_version="v4")))
        repo, _ = _make_repo(tmp_path)
        self._mark(repo, change)
        outdated = CorpusSelector(outdated_only=True)

        assert repo.select(outdated, prompt_version="v5") == []
        assert len(repo.select(outdated, prompt_version="v6")) == 1
        assert len(repo.select(CorpusSelector(), prompt_version="v5")) == 1

    def test_rollback_undoes_rejection(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document(scored=make_scored(prompt_version="v4")))
        repo, _ = _make_repo(tmp_path)
        self._mark(repo, "rejected")
        key = repo.select(CorpusSelector(), prompt_version="v5")[0]

        restored = repo.rollback(key)

        assert restored is not None
        doc = _read_doc(path)
        assert doc["promptVersion"] == "v4"
        assert doc["assignedScore"] == 78.0
        assert "rejectedPromptVersion" not in doc

    def test_later_score_clears_rejection_version(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document())
        repo, _ = _make_repo(tmp_path)
        self._mark(repo, "unscorable")
        record = repo.load(repo.select(CorpusSelector(), prompt_version="v6")[0])

        repo.save_scored(record, make_scored(prompt_version="v6"))

        assert "rejectedPromptVersion" not in _read_doc(path)


class TestRollback:
    def test_restores_previous_scoring(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document(scored=make_scored(score=60.0, bucket=Bucket.MIXED, prompt_version="v4")))
        repo, observer = _make_repo(tmp_path)
        key = repo.select(CorpusSelector(), prompt_version="v5")[0]
        repo.save_scored(repo.load(key), make_scored(score=75.0, prompt_version="v5"))

        restored = repo.rollback(key)

        assert restored is not None
        assert restored.final_score == 60.0
        doc = _read_doc(path)
        assert doc["scoring"]["prompt_version"] == "v4"
        assert doc["assignedScore"] == 60.0
        assert doc["bucket"] == "Mixed"
        assert "previousScoring" not in doc
        assert observer.written[-1].change == "rolled_back"

    def test_nothing_to_restore(self, tmp_path: Path) -> None:
        path = _write_doc(tmp_path, make_document(scored=make_scored()))
        repo, observer = _make_repo(tmp_path)
        key = repo.select(CorpusSelector(), prompt_version="v5")[0]
        before = path.read_text(encoding="utf-8")

        assert repo.rollback(key) is None
        assert path.read_text(encoding="utf-8") == before
        assert observer.written == []
