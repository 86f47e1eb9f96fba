"""Top-level ScorerConfig aggregate — the root configuration object."""

from pydantic import BaseModel, Field, model_validator

from review_scorer.config.domain.corpus import CorpusConfig
from review_scorer.config.domain.ensemble import EnsembleConfig
from review_scorer.config.domain.execution import ExecutionConfig
from review_scorer.config.domain.gate import GateConfig
from review_scorer.config.domain.judge import JudgeConfig
from review_scorer.config.domain.scoring import ScoringConfig


class ScorerConfig(BaseModel, frozen=True):
    """Root configuration aggregate for a review-scorer run."""

    name: str = Field(min_length=1)
    prompt_version: str = Field(min_length=1)
    judges: list[JudgeConfig] = Field(min_length=1)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    ensemble: EnsembleConfig = Field(default_factory=EnsembleConfig)
    gate: GateConfig = Field(default_factory=GateConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    corpus: CorpusConfig

    @model_validator(mode="after")
    def _check_unique_judge_names(self) -> "ScorerConfig":
        names = [judge.name for judge in self.judges]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate judge names: {', '.join(duplicates)}")
        return self
