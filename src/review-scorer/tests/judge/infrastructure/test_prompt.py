"""Tests for the judge prompt builders."""

from review_scorer.judge.domain.bucket import Bucket, BucketRange, BucketTable
from review_scorer.judge.domain.payload import ScoringPayload, TextQuality
from review_scorer.judge.infrastructure.prompt import (
    build_system_prompt,
    build_user_prompt,
)


def _make_payload(context: str = "## Outlet: Variety (Tier 1)") -> ScoringPayload:
    return ScoringPayload(
        review_id="show/variety--critic",
        text="A sturdy if unremarkable revival.",
        context=context,
        text_quality=TextQuality.COMPLETE,
        includes_aggregator_context=False,
    )


class TestSystemPrompt:
    def test_lists_every_bucket_with_its_range(self) -> None:
        prompt = build_system_prompt(BucketTable())

        assert "Rave (85-100)" in prompt
        assert "Positive (70-84)" in prompt
        assert "Mixed (55-69)" in prompt
        assert "Negative (35-54)" in prompt
        assert "Pan (0-34)" in prompt

    def test_lists_rejection_categories(self) -> None:
        prompt = build_system_prompt(BucketTable())

        for reason in ("wrong_show", "wrong_production", "not_a_review", "garbage_text"):
            assert reason in prompt

    def test_pan_range_follows_the_table(self) -> None:
        table = BucketTable(
            ranges=[
                BucketRange(bucket=Bucket.PAN, low=0, high=29),
                BucketRange(bucket=Bucket.NEGATIVE, low=30, high=54),
                BucketRange(bucket=Bucket.MIXED, low=55, high=69),
                BucketRange(bucket=Bucket.POSITIVE, low=70, high=84),
                BucketRange(bucket=Bucket.RAVE, low=85, high=100),
            ]
        )

        prompt = build_system_prompt(table)

        assert "Pan (0-29)" in prompt
        assert "25-29" in prompt

    def test_describes_json_output(self) -> None:
        prompt = build_system_prompt(BucketTable())

        assert '"scoreable": true' in prompt
        assert '"keyQuote"' in prompt


class TestUserPrompt:
    def test_contains_context_and_quoted_text(self) -> None:
        prompt = build_user_prompt(_make_payload())

        assert prompt.startswith("Score this Broadway review.")
        assert "## Outlet: Variety (Tier 1)" in prompt
        assert '## Review Text\n"A sturdy if unremarkable revival."' in prompt
        assert prompt.endswith("Respond with ONLY the JSON object.")

    def test_empty_context_is_omitted(self) -> None:
        prompt = build_user_prompt(_make_payload(context=""))

        assert "\n\n\n\n" not in prompt
        assert prompt.count("\n\n") == 2
