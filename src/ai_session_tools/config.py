"""Configuration loader with YAML and environment variable support."""

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from .services.path_constants import CONFIG_FILENAME, LOG_FILENAME


# Default configuration values
DEFAULTS = {
    "progress_log": {
        "path": LOG_FILENAME,
    },
    "reminder": {
        "threshold_minutes": 15,
    },
    "session_counter": {
        "reset_count": 5,
        "commit_count": 3,
        "use_lock": True,
        "lock_timeout": 10,
    },
    "git": {
        "timeout": 5,
    },
    "logging": {
        "level": "WARNING",
        "file": None,
        "max_bytes": 1_000_000,
        "backup_count": 3,
    },
}


def _to_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


# Environment variable mappings
# Maps env var name to (config_section, config_key, type_converter)
ENV_MAPPINGS = {
    "PROGRESS_LOG_PATH": ("progress_log", "path", str),
    "LOG_REMINDER_THRESHOLD_MINUTES": ("reminder", "threshold_minutes", float),
    "SESSION_COUNTER_RESET_COUNT": ("session_counter", "reset_count", int),
    "SESSION_COUNTER_COMMIT_COUNT": ("session_counter", "commit_count", int),
    "SESSION_COUNTER_USE_LOCK": ("session_counter", "use_lock", _to_bool),
    "SESSION_COUNTER_LOCK_TIMEOUT": ("session_counter", "lock_timeout", float),
    "GIT_TIMEOUT": ("git", "timeout", float),
    "AI_SESSION_TOOLS_LOG_LEVEL": ("logging", "level", str),
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(config_path: Path) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r") as f:
        content = yaml.safe_load(f)
        return content if content else {}


def apply_env_overrides(config: dict) -> dict:
    """Apply environment variable overrides to configuration."""
    result = config.copy()

    for env_var, (section, key, converter) in ENV_MAPPINGS.items():
        value = os.environ.get(env_var)
        if value is not None:
            result[section] = dict(result.get(section) or {})
            result[section][key] = converter(value)

    return result


def load_config(config_path: str | Path = CONFIG_FILENAME) -> dict:
    """Load config: env vars > config.yaml > DEFAULTS."""
    if isinstance(config_path, str):
        config_path = Path(config_path)

    # Start with defaults
    config = copy.deepcopy(DEFAULTS)

    # Merge YAML config
    yaml_config = load_yaml_config(config_path)
    config = deep_merge(config, yaml_config)

    # Apply environment overrides
    config = apply_env_overrides(config)

    return config


def get_value(config: dict, *keys: str, default: Any = None) -> Any:
    """Get a nested configuration value by key path."""
    result = config
    for key in keys:
        if isinstance(result, dict) and key in result:
            result = result[key]
        else:
            return default
    return result


def _as_bool(value: Any, default: bool) -> bool:
    """Interpret YAML booleans and strings like "no" or "1"."""
    if value is None:
        return default
    if isinstance(value, str):
        return _to_bool(value.strip())
    return bool(value)


def _positive(value: Any, default: float) -> float:
    """Return value as a number if it is positive, otherwise the default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def get_log_path(config: dict, project_root: str | Path) -> Path:
    """Resolve the progress log path; relative paths hang off the project root."""
    path = Path(
        os.path.expanduser(
            get_value(config, "progress_log", "path", default=LOG_FILENAME)
        )
    )
    if not path.is_absolute():
        path = Path(project_root) / path
    return path


def get_reminder_config(config: dict) -> dict:
    """Get elapsed-time reminder configuration with defaults."""
    return {
        "threshold_minutes": _positive(
            get_value(config, "reminder", "threshold_minutes", default=15), 15
        ),
    }


def get_session_counter_config(config: dict) -> dict:
    """Get session counter configuration with defaults."""
    return {
        "reset_count": int(
            _positive(get_value(config, "session_counter", "reset_count", default=5), 5)
        ),
        "commit_count": int(
            _positive(get_value(config, "session_counter", "commit_count", default=3), 3)
        ),
        "use_lock": _as_bool(
            get_value(config, "session_counter", "use_lock", default=True), True
        ),
        "lock_timeout": _positive(
            get_value(config, "session_counter", "lock_timeout", default=10), 10
        ),
        "git_timeout": _positive(get_value(config, "git", "timeout", default=5), 5),
    }
