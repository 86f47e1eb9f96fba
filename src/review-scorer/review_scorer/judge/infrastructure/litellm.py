"""LiteLLMJudge — provider-tagged judge adapters built on LiteLLM."""

import time
from typing import Any

import litellm

from review_scorer.config.domain.judge import (
    AnthropicJudgeConfig,
    GeminiJudgeConfig,
    JudgeConfig,
    OpenAIJudgeConfig,
)
from review_scorer.judge.domain.bucket import BucketTable
from review_scorer.judge.domain.observer import JudgeObserver
from review_scorer.judge.domain.payload import ScoringPayload
from review_scorer.judge.domain.result import ModelJudgeResult
from review_scorer.judge.infrastructure.errors import (
    JudgeInvocationError,
    JudgeResponseParseError,
)
from review_scorer.judge.infrastructure.parsing import (
    parse_judge_output,
    to_judge_result,
)
from review_scorer.judge.infrastructure.prompt import (
    build_system_prompt,
    build_user_prompt,
)

# Provider errors worth another attempt. Everything else (auth, bad request,
# unknown model) fails the judge immediately.
_RETRIABLE_PROVIDER_ERRORS: tuple[type[Exception], ...] = (
    litellm.RateLimitError,
    litellm.Timeout,
    litellm.APIConnectionError,
    litellm.ServiceUnavailableError,
    litellm.InternalServerError,
)

_JSON_MODE: dict[str, Any] = {"response_format": {"type": "json_object"}}


def _provider_options(config: JudgeConfig) -> tuple[dict[str, Any], int]:
    """Request options and score offset for each provider variant."""
    match config:
        case AnthropicJudgeConfig():
            # No JSON mode: replies may arrive fenced or with prose around the object.
            return {}, 0
        case OpenAIJudgeConfig():
            return dict(_JSON_MODE), 0
        case GeminiJudgeConfig(calibration_offset=offset):
            return dict(_JSON_MODE), offset


class LiteLLMJudge:
    """Judge that asks one provider model, via LiteLLM, to score a review payload.

    One instance serves a whole run; review identity travels in the payload so
    observer events carry it without extra constructor state.
    """

    def __init__(
        self,
        config: JudgeConfig,
        buckets: BucketTable,
        observer: JudgeObserver,
    ) -> None:
        self._config = config
        self._buckets = buckets
        self._observer = observer
        self._system_prompt = build_system_prompt(buckets=buckets)
        self._options, self._score_offset = _provider_options(config)

        if config.temperature > 0.0:
            self._observer.judge_high_temperature_warned(
                judge=config.name,
                temperature=config.temperature,
            )

    @property
    def name(self) -> str:
        return self._config.name

    async def score(self, payload: ScoringPayload) -> ModelJudgeResult:
        """Invoke the model and return its normalized verdict.

        Raises:
            JudgeInvocationError: if the provider call fails (retriable for rate
                limits, timeouts, connection and server errors).
            JudgeResponseParseError: if the reply cannot be normalized.
        """
        self._observer.judge_scoring_started(
            judge=self.name,
            review_id=payload.review_id,
            model=self._config.model,
        )

        start = time.monotonic()
        try:
            response = await litellm.acompletion(
                model=self._config.model,
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
                messages=[
                    {"role": "system", "content": self._system_prompt},
                    {"role": "user", "content": build_user_prompt(payload)},
                ],
                **self._options,
            )
        except _RETRIABLE_PROVIDER_ERRORS as exc:
            self._fail(payload=payload, reason=str(exc))
            raise JudgeInvocationError(
                judge=self.name, reason=str(exc), retriable=True
            ) from exc
        except Exception as exc:
            self._fail(payload=payload, reason=str(exc))
            raise JudgeInvocationError(judge=self.name, reason=str(exc)) from exc

        duration_ms = int((time.monotonic() - start) * 1000)

        raw_content: str | None = response.choices[0].message.content
        try:
            normalized = to_judge_result(
                raw=parse_judge_output(raw_content),
                judge=self.name,
                model=self._config.model,
                buckets=self._buckets,
                score_offset=self._score_offset,
            )
        except JudgeResponseParseError as exc:
            self._fail(payload=payload, reason=str(exc))
            raise

        result = normalized.result
        if result.clamped:
            assert result.bucket is not None and result.score is not None
            assert normalized.raw_score is not None
            self._observer.judge_score_clamped(
                judge=self.name,
                review_id=payload.review_id,
                bucket=result.bucket.value,
                raw_score=normalized.raw_score,
                score=result.score,
            )

        self._observer.judge_scoring_completed(
            judge=self.name,
            review_id=payload.review_id,
            duration_ms=duration_ms,
            rejected=result.rejected,
        )
        return result

    def _fail(self, payload: ScoringPayload, reason: str) -> None:
        self._observer.judge_scoring_failed(
            judge=self.name,
            review_id=payload.review_id,
            reason=reason,
        )
