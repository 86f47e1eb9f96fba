"""YAML config loader — parses, interpolates env vars, validates, and emits observer events."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from review_scorer.config.domain.config import ScorerConfig
from review_scorer.config.domain.observer import ConfigObserver
from review_scorer.config.infrastructure.env_interpolation import (
    collect_missing_vars,
    interpolate,
)
from review_scorer.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)


class YamlConfigLoader:
    """Loads, interpolates, validates, and returns a ScorerConfig from a YAML file."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path) -> ScorerConfig:
        """
        Load, interpolate, validate, and return a ScorerConfig from a YAML file.

        Relative corpus paths are resolved against the config file's directory.

        Raises:
            ConfigLoadError: if the file is missing or is not valid YAML.
            MissingEnvVarsError: if any ${ENV_VAR} references are unset (all collected first).
            ConfigValidationError: if the schema is violated.
        """
        raw = _parse_yaml(path=path)
        missing = collect_missing_vars(raw)
        if missing:
            raise MissingEnvVarsError(missing)
        interpolated = interpolate(raw)
        cfg = _build_config(resolved=_resolve_corpus_paths(interpolated, path.parent))
        _emit_warnings(cfg=cfg, observer=self._observer)
        self._observer.config_loaded(
            name=cfg.name,
            prompt_version=cfg.prompt_version,
            judge_count=len(cfg.judges),
        )
        return cfg


def load_config(path: Path, observer: ConfigObserver) -> ScorerConfig:
    """Convenience wrapper around YamlConfigLoader(observer).load(path)."""
    return YamlConfigLoader(observer=observer).load(path=path)


def _parse_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise ConfigLoadError(path=path) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path=path, reason=f"invalid YAML ({exc})") from exc
    if not isinstance(data, dict):
        raise ConfigLoadError(path=path, reason="top level must be a mapping")
    return data


def _resolve_corpus_paths(interpolated: Any, base_dir: Path) -> Any:
    corpus = interpolated.get("corpus")
    if not isinstance(corpus, dict):
        return interpolated
    resolved = dict(corpus)
    for key in ("root", "checkpoint_path"):
        value = resolved.get(key)
        if isinstance(value, str) and not Path(value).is_absolute():
            resolved[key] = str(base_dir / value)
    return {**interpolated, "corpus": resolved}


def _build_config(resolved: Any) -> ScorerConfig:
    try:
        return ScorerConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc


def _emit_warnings(cfg: ScorerConfig, observer: ConfigObserver) -> None:
    for judge in cfg.judges:
        if judge.temperature > 0.0:
            observer.config_judge_temperature_warning(
                judge=judge.name, temperature=judge.temperature
            )
    if len(cfg.judges) < 3:
        observer.config_small_panel_warning(judge_count=len(cfg.judges))
