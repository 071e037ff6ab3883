"""Configuration loading and management."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from safenc.utils.exceptions import ConfigError

DEFAULTS_PATH = Path(__file__).parent.parent / "defaults.yml"


def load_config(filepath: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from file.

    Args:
        filepath: Path to a YAML config file. If None, loads defaults.

    Returns:
        Configuration dictionary.

    Raises:
        ConfigError: If ``filepath`` does not exist or is not a mapping.
    """
    import yaml

    config: dict[str, Any] = {}

    if DEFAULTS_PATH.exists():
        with open(DEFAULTS_PATH) as f:
            config = yaml.safe_load(f) or {}

    if filepath:
        user_path = Path(filepath)
        if not user_path.exists():
            raise ConfigError(f"Config file not found: {user_path}")
        with open(user_path) as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ConfigError(f"Config file {user_path} must contain a mapping")
        config = merge_configs(config, user_config)

    return config


def merge_configs(base: dict, override: dict) -> dict:
    """Recursively merge configuration dictionaries.

    Args:
        base: Base configuration.
        override: Override values.

    Returns:
        Merged configuration.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def save_config(config: dict, filepath: str | Path) -> None:
    """Save configuration to file.

    Args:
        config: Configuration dictionary.
        filepath: Output path.
    """
    import yaml

    with open(filepath, "w") as f:
        yaml.safe_dump(config, f, default_flow_style=False)
