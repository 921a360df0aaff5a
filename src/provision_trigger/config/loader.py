"""YAML + environment variable config loader."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import ValidationError

from provision_trigger.config.models import TriggerConfig

DEFAULT_CONFIG = Path(__file__).parent / "defaults" / "trigger.yaml"

# Matches ${VAR} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-((?:[^}\\]|\\.)*))?}")


def _resolve_env_str(value: str) -> str:
    """Replace all ${VAR} / ${VAR:-default} references in a string."""

    def _replace(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        env_val = os.environ.get(var_name)
        if env_val is not None:
            return env_val
        if default is not None:
            return default.replace("\\}", "}")
        msg = f"Environment variable '{var_name}' is not set and no default provided"
        raise ValueError(msg)

    return _ENV_PATTERN.sub(_replace, value)


def resolve_env_vars(data: Any) -> Any:
    """Recursively resolve ${VAR} and ${VAR:-default} in parsed YAML data."""
    if isinstance(data, str):
        return _resolve_env_str(data)
    if isinstance(data, dict):
        return {k: resolve_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [resolve_env_vars(item) for item in data]
    return data


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict."""
    p = Path(path)
    if not p.exists():
        msg = f"Config file not found: {p}"
        raise FileNotFoundError(msg)
    try:
        with p.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        msg = f"Failed to parse YAML in {p}"
        if hasattr(exc, "problem_mark") and exc.problem_mark is not None:
            mark = exc.problem_mark
            msg += f" at line {mark.line + 1}, column {mark.column + 1}"
        msg += f": {exc}"
        raise ValueError(msg) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping at top level in {p}, got {type(data).__name__}"
        raise TypeError(msg)
    return cast(dict[str, Any], resolve_env_vars(data))


def _layer(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    layered = dict(base)
    for key, value in overrides.items():
        current = layered.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            layered[key] = _layer(current, value)
        else:
            layered[key] = value
    return layered


def build_trigger_config(overrides: dict[str, Any] | None = None) -> TriggerConfig:
    """Validate *overrides* laid over the packaged trigger defaults.

    Nested sections merge key by key, so an override only needs the fields
    it changes.
    """
    defaults = load_yaml(DEFAULT_CONFIG)
    return TriggerConfig.model_validate(_layer(defaults, overrides or {}))


def load_trigger_config(path: str | Path | None = None) -> TriggerConfig:
    """Load *path* (if given) over the packaged defaults."""
    overrides = load_yaml(path) if path is not None else {}
    try:
        return build_trigger_config(overrides)
    except ValidationError as exc:
        source = path or "built-in defaults"
        msg = f"Invalid trigger config ({source}):\n{exc}"
        raise ValueError(msg) from exc
