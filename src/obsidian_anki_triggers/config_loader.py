"""Config loader utilities (split from config.py)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config_settings import Config
from .exceptions import ConfigurationError
from .utils.logging import get_logger

CONFIG_ENV_VAR = "ANKI_TRIGGERS_CONFIG"


def _candidate_paths(config_path: Path | None) -> list[Path]:
    if config_path:
        return [config_path.expanduser()]

    candidates: list[Path] = []
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.append(Path.cwd() / "config.yaml")
    return candidates


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        msg = f"Failed to parse config file: {path}"
        suggestion = (
            "Check YAML syntax (indentation, colons, quotes). "
            "Validate file encoding is UTF-8. "
            f"Original error: {e}"
        )
        raise ConfigurationError(msg, suggestion=suggestion) from e

    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping at top level: {path}"
        raise ConfigurationError(msg)
    return data


def load_config(
    config_path: Path | None = None,
    *,
    overrides: dict[str, Any] | None = None,
    strict_config: bool = False,
) -> Config:
    """Load configuration from config.yaml, environment and explicit overrides.

    Precedence (highest first): ``overrides``, YAML file, environment, defaults.

    Args:
        config_path: Explicit config file (otherwise $ANKI_TRIGGERS_CONFIG, ./config.yaml)
        overrides: Values supplied on the command line
        strict_config: Raise instead of warn when ``validate_config`` fails
    """
    logger = get_logger(__name__)

    yaml_data: dict[str, Any] = {}
    resolved_config_path: Path | None = None
    for candidate in _candidate_paths(config_path):
        if candidate.exists():
            resolved_config_path = candidate
            break

    if resolved_config_path:
        yaml_data = _read_yaml(resolved_config_path)
        logger.info(
            "config_file_found",
            config_path=str(resolved_config_path),
            keys_count=len(yaml_data),
        )
    elif config_path:
        msg = f"Config file not found: {config_path}"
        raise ConfigurationError(msg)
    else:
        logger.debug("config_file_not_found", using="environment_and_defaults")

    values = {**yaml_data, **{k: v for k, v in (overrides or {}).items() if v is not None}}

    try:
        config = Config(**values)
    except ValidationError as e:
        logger.error("config_validation_error", error=str(e))
        msg = "Invalid configuration"
        raise ConfigurationError(msg, suggestion=str(e)) from e

    try:
        config.validate_config()
    except ConfigurationError as e:
        if strict_config:
            raise
        logger.warning("config_warning", error=e.message, suggestion=e.suggestion)

    logger.debug(
        "config_loaded",
        vault_path=str(config.vault_path),
        triggers=len(config.triggers),
        policy=config.existing_note_behavior,
    )
    return config
