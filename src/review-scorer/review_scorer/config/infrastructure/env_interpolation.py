"""${ENV_VAR} interpolation over raw (pre-validation) config data."""

import os
import re
from collections.abc import Callable

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

type RawValue = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def referenced_vars(data: RawValue) -> list[str]:
    """Every env var name referenced anywhere in data, in first-seen order."""
    names: list[str] = []
    _walk_strings(data, lambda text: _record_names(text, names))
    return names


def collect_missing_vars(data: RawValue) -> list[str]:
    """Names of referenced env vars that are not set. All are collected, not just the first."""
    return [name for name in referenced_vars(data) if name not in os.environ]


def interpolate(data: RawValue) -> RawValue:
    """Return a copy of data with every ${ENV_VAR} replaced by its value.

    Callers must check collect_missing_vars first; an unset variable raises KeyError.
    """
    if isinstance(data, str):
        return _ENV_VAR_PATTERN.sub(lambda m: os.environ[m.group(1)], data)
    if isinstance(data, list):
        return [interpolate(item) for item in data]
    if isinstance(data, dict):
        return {key: interpolate(value) for key, value in data.items()}
    return data


def _record_names(text: str, names: list[str]) -> None:
    for match in _ENV_VAR_PATTERN.finditer(text):
        if match.group(1) not in names:
            names.append(match.group(1))


def _walk_strings(data: RawValue, visit: Callable[[str], None]) -> None:
    if isinstance(data, str):
        visit(data)
    elif isinstance(data, list):
        for item in data:
            _walk_strings(item, visit)
    elif isinstance(data, dict):
        for value in data.values():
            _walk_strings(value, visit)
