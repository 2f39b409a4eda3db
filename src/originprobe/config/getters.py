"""Configuration getter functions."""

import logging
import os
from pathlib import Path
from typing import Any

from .env_loader import load_global_config, load_project_config

logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


def get_config(key: str, project_dir: Path | None = None, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Project .env file
    3. Global config file
    4. Default value

    Args:
        key: Configuration key
        project_dir: Optional project directory
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    # 1. Check environment variable
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    # 2. Check project .env file
    project_config = load_project_config(project_dir)
    if key in project_config:
        return project_config[key]

    # 3. Check global config
    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    # 4. Return default
    return default


def get_int(key: str, project_dir: Path | None = None, default: int | None = None) -> int | None:
    """Integer config value; unparsable values fall back to ``default``."""
    value = get_config(key, project_dir)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer value for %s: %r", key, value)
        return default


def get_bool(key: str, project_dir: Path | None = None, default: bool = False) -> bool:
    value = get_config(key, project_dir)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def get_workers(project_dir: Path | None = None) -> int | None:
    """Configured worker count, or None to autotune."""
    return get_int("ORIGINPROBE_WORKERS", project_dir)


def get_timeout_ms(project_dir: Path | None = None) -> int | None:
    """Configured per-probe timeout in milliseconds, or None to autotune."""
    return get_int("ORIGINPROBE_TIMEOUT_MS", project_dir)


def get_port(project_dir: Path | None = None) -> int | None:
    return get_int("ORIGINPROBE_PORT", project_dir)


def get_status_code(project_dir: Path | None = None) -> int | None:
    return get_int("ORIGINPROBE_STATUS_CODE", project_dir)


def get_method(project_dir: Path | None = None) -> str | None:
    value = get_config("ORIGINPROBE_METHOD", project_dir)
    return str(value).upper() if value else None


def get_user_agent(project_dir: Path | None = None) -> str | None:
    value = get_config("ORIGINPROBE_USER_AGENT", project_dir)
    return str(value) if value else None


def get_verbose(project_dir: Path | None = None) -> bool:
    return get_bool("ORIGINPROBE_VERBOSE", project_dir)


def get_log_level(project_dir: Path | None = None) -> str | None:
    value = get_config("ORIGINPROBE_LOG_LEVEL", project_dir)
    return str(value).upper() if value else None
