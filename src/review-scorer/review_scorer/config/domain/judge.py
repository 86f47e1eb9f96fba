"""Judge configuration models — discriminated union on the provider `type` field."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class AnthropicJudgeConfig(BaseModel, frozen=True):
    """Judge backed by an Anthropic model, e.g. anthropic/claude-sonnet-4-5."""

    type: Literal["anthropic"]
    name: str = Field(min_length=1)
    model: str = Field(min_length=1)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)


class OpenAIJudgeConfig(BaseModel, frozen=True):
    """Judge backed by an OpenAI model, e.g. openai/gpt-4o."""

    type: Literal["openai"]
    name: str = Field(min_length=1)
    model: str = Field(min_length=1)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)


class GeminiJudgeConfig(BaseModel, frozen=True):
    """Judge backed by a Gemini model, e.g. gemini/gemini-2.0-flash.

    calibration_offset is added to every score the model returns, before the
    score is clamped into its bucket.
    """

    type: Literal["gemini"]
    name: str = Field(min_length=1)
    model: str = Field(min_length=1)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    calibration_offset: int = Field(default=0, ge=-20, le=20)


type JudgeConfig = Annotated[
    AnthropicJudgeConfig | OpenAIJudgeConfig | GeminiJudgeConfig,
    Field(discriminator="type"),
]
