"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, name: str, prompt_version: str, judge_count: int) -> None:
        self._log.info(
            "config.loaded",
            name=name,
            prompt_version=prompt_version,
            judge_count=judge_count,
        )

    def config_judge_temperature_warning(self, judge: str, temperature: float) -> None:
        self._log.warning(
            "config.judge_temperature_warning",
            judge=judge,
            temperature=temperature,
            message="Judge temperature > 0.0 may produce non-deterministic scoring",
        )

    def config_small_panel_warning(self, judge_count: int) -> None:
        self._log.warning(
            "config.small_panel_warning",
            judge_count=judge_count,
            message="Fewer than three judges: majority voting is unavailable",
        )
