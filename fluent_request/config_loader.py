"""Config Loader - Loads request defaults from YAML.

Handles loading a YAML defaults file with ${ENV_VAR} substitution and
validating it into a RequestDefaults table.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from fluent_request.errors import ConfigurationError
from fluent_request.models import RequestDefaults

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def load_request_defaults(config_path: Path) -> RequestDefaults:
    """Load request defaults from YAML with ${ENV_VAR} substitution.

    An empty file yields the built-in defaults.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigurationError("Config file must be a YAML mapping")

    missing: list[str] = []
    expanded = _expand_env(raw_config, missing)
    if missing:
        names = ", ".join(sorted(set(missing)))
        raise ConfigurationError(f"Environment variables not set: {names}")

    try:
        return RequestDefaults.model_validate(expanded)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config structure: {e}") from e


def _expand_env(value: Any, missing: list[str]) -> Any:
    """Expand ${NAME} in every string leaf; unknown names are collected in ``missing``."""
    if isinstance(value, dict):
        return {key: _expand_env(item, missing) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item, missing) for item in value]
    if not isinstance(value, str):
        return value

    def lookup(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in os.environ:
            missing.append(name)
            return match.group(0)
        return os.environ[name]

    return _ENV_PATTERN.sub(lookup, value)
