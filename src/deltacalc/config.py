"""Engine configuration loaded from ``deltacalc.yaml`` with defaults."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

CONFIG_FILENAME = "deltacalc.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "use_dependency_index": True,
    "verify_after_apply": False,
    "emit_events": False,
    "log_dir": None,
    "logging_fsync": False,
}


class ConfigError(Exception):
    """Configuration file is unreadable or holds invalid settings."""


class EngineConfig(BaseModel):
    """Validated engine settings."""

    model_config = ConfigDict(extra="forbid")

    use_dependency_index: bool = True
    verify_after_apply: bool = False
    emit_events: bool = False
    log_dir: Path | None = None
    logging_fsync: bool = False


def build_config(overrides: dict[str, Any] | None = None) -> EngineConfig:
    """Merge *overrides* over ``DEFAULT_CONFIG`` and validate.

    Raises:
        ConfigError: On unknown keys or values of the wrong type.
    """
    config = dict(DEFAULT_CONFIG)
    config.update(overrides or {})
    try:
        return EngineConfig(**config)
    except ValidationError as exc:
        raise ConfigError(f"Invalid engine configuration: {exc}") from exc


def load_engine_config(config_dir: Path) -> EngineConfig:
    """Load ``deltacalc.yaml`` from *config_dir*, falling back to defaults.

    A relative ``log_dir`` is resolved against *config_dir*.

    Args:
        config_dir: Directory that may contain ``deltacalc.yaml``.

    Returns:
        The merged, validated configuration.
    """
    user_config: dict[str, Any] = {}
    config_path = config_dir / CONFIG_FILENAME
    if config_path.exists():
        try:
            loaded = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse {config_path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        user_config = loaded

    config = build_config(user_config)
    if config.log_dir is not None and not config.log_dir.is_absolute():
        config = config.model_copy(update={"log_dir": config_dir / config.log_dir})
    return config
