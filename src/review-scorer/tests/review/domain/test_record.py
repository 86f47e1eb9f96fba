"""Tests for ReviewRecord, ReviewKey and aggregator signals."""

from review_scorer.review.domain.outlet import outlet_tier, tier_label
from review_scorer.review.domain.record import (
    AggregatorExcerpts,
    AggregatorThumbs,
    ContentTier,
    ReviewKey,
)
from review_scorer.review.domain.thumb import ThumbDirection
from tests.review.builders import make_record


class TestReviewKey:
    def test_review_id_uses_lowercase_outlet_and_critic_slug(self) -> None:
        key = ReviewKey(show_id="hamilton-2015", outlet_id="NYT", critic_name="Ben Brantley")

        assert key.review_id == "hamilton-2015/nyt--ben-brantley"

    def test_slug_collapses_punctuation(self) -> None:
        key = ReviewKey(show_id="s", outlet_id="TMAN", critic_name="  Joe O'Connor, Jr. ")

        assert key.critic_slug == "joe-o-connor-jr"

    def test_missing_critic_name(self) -> None:
        key = ReviewKey(show_id="s", outlet_id="AP", critic_name="")

        assert key.review_id == "s/ap--unknown"


class TestThumbConsensus:
    def test_no_thumbs(self) -> None:
        assert AggregatorThumbs().consensus() is None

    def test_single_thumb(self) -> None:
        assert AggregatorThumbs(bww=ThumbDirection.MEH).consensus() == ThumbDirection.MEH

    def test_agreeing_thumbs(self) -> None:
        thumbs = AggregatorThumbs(dtli=ThumbDirection.UP, bww=ThumbDirection.UP)

        assert thumbs.consensus() == ThumbDirection.UP

    def test_disagreement_prefers_dtli(self) -> None:
        thumbs = AggregatorThumbs(dtli=ThumbDirection.DOWN, bww=ThumbDirection.UP)

        assert thumbs.consensus() == ThumbDirection.DOWN


class TestExcerpts:
    def test_labelled_skips_blank_and_orders_by_priority(self) -> None:
        excerpts = AggregatorExcerpts(dtli="Bold.", bww="   ", show_score="Thrilling.")

        assert excerpts.labelled() == [("Show Score", "Thrilling."), ("DTLI", "Bold.")]


class TestScoreability:
    def test_full_text_is_scoreable(self) -> None:
        assert make_record().is_scoreable()

    def test_excerpt_only_is_scoreable(self) -> None:
        record = make_record(
            full_text=None, content_tier=ContentTier.EXCERPT, dtli_excerpt="A delight."
        )

        assert record.is_scoreable()

    def test_invalid_content_is_never_scoreable(self) -> None:
        assert not make_record(content_tier=ContentTier.INVALID).is_scoreable()

    def test_no_text_at_all(self) -> None:
        assert not make_record(full_text="   ").is_scoreable()


class TestOutletTier:
    def test_known_tiers(self) -> None:
        assert outlet_tier("nyt") == 1
        assert outlet_tier("NYP") == 2

    def test_unknown_outlet_is_tier_three(self) -> None:
        assert outlet_tier("MYBLOG") == 3
        assert make_record(outlet_id="MYBLOG").outlet_tier == 3

    def test_labels(self) -> None:
        assert tier_label(1) == "Tier 1 (major publication)"
