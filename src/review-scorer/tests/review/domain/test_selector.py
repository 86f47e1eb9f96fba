"""Tests for CorpusSelector."""

from review_scorer.review.domain.record import QualityFlags
from review_scorer.review.domain.selector import CorpusSelector
from tests.review.builders import make_record, make_scored


class TestMatches:
    def test_empty_selector_matches_everything(self) -> None:
        selector = CorpusSelector()

        assert selector.matches(make_record(scored=make_scored(prompt_version="v5")), "v5")
        assert selector.matches(make_record(), "v5")

    def test_outdated_only_skips_current_version(self) -> None:
        selector = CorpusSelector(outdated_only=True)

        assert not selector.matches(make_record(scored=make_scored(prompt_version="v5")), "v5")
        assert selector.matches(make_record(scored=make_scored(prompt_version="v4")), "v5")
        assert selector.matches(make_record(), "v5")

    def test_show_filter(self) -> None:
        selector = CorpusSelector(show_ids=["wicked-2003"])

        assert not selector.matches(make_record(show_id="hamilton-2015"), "v5")
        assert selector.matches(make_record(show_id="wicked-2003"), "v5")

    def test_show_and_outdated_combined(self) -> None:
        selector = CorpusSelector(outdated_only=True, show_ids=["wicked-2003"])
        current = make_record(show_id="wicked-2003", scored=make_scored(prompt_version="v5"))
        stale = make_record(show_id="wicked-2003", scored=make_scored(prompt_version="v3"))

        assert not selector.matches(current, "v5")
        assert selector.matches(stale, "v5")

    def test_outdated_only_skips_reviews_rejected_under_current_version(self) -> None:
        selector = CorpusSelector(outdated_only=True)
        rejected = make_record().model_copy(
            update={"quality_flags": QualityFlags(rejected_version="v5")}
        )

        assert not selector.matches(rejected, "v5")
        assert selector.matches(rejected, "v6")
        assert CorpusSelector().matches(rejected, "v5")


class TestFingerprint:
    def test_show_order_does_not_matter(self) -> None:
        a = CorpusSelector(show_ids=["b", "a"])
        b = CorpusSelector(show_ids=["a", "b"])

        assert a.fingerprint() == b.fingerprint()

    def test_different_selections_differ(self) -> None:
        assert (
            CorpusSelector(outdated_only=True).fingerprint()
            != CorpusSelector().fingerprint()
        )

    def test_fixed_length(self) -> None:
        assert len(CorpusSelector().fingerprint()) == 16
