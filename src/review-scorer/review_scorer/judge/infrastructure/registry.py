"""Judge registry — builds one judge per configured provider entry."""

import litellm

from review_scorer.config.domain.judge import JudgeConfig
from review_scorer.judge.domain.bucket import BucketTable
from review_scorer.judge.domain.judge import Judge
from review_scorer.judge.domain.observer import JudgeObserver
from review_scorer.judge.infrastructure.litellm import LiteLLMJudge


def create_judges(
    configs: list[JudgeConfig],
    buckets: BucketTable,
    observer: JudgeObserver,
) -> list[Judge]:
    """Return judges in configuration order; that order is the panel's tie-break order."""
    litellm.suppress_debug_info = True
    return [
        LiteLLMJudge(config=config, buckets=buckets, observer=observer)
        for config in configs
    ]
