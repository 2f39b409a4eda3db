"""Environment variable and configuration file loading."""

from pathlib import Path
from typing import Any

import yaml

CONFIG_DIR_NAME = ".originprobe"


def global_config_path() -> Path:
    """Path of the global YAML config (~/.originprobe/config.yml)."""
    return Path.home() / CONFIG_DIR_NAME / "config.yml"


def project_env_path(project_dir: Path | None = None) -> Path:
    """Path of the project .env file (``<dir>/.originprobe/.env``)."""
    base = project_dir if project_dir is not None else Path.cwd()
    return base / CONFIG_DIR_NAME / ".env"


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from .env file."""
    env_vars = {}
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    # Remove quotes if present
                    value = value.strip().strip("\"'")
                    env_vars[key.strip()] = value
    return env_vars


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.originprobe/config.yml.

    Keys may be given either as the full variable name
    (``ORIGINPROBE_WORKERS: 4000``) or in lower case without the prefix
    (``workers: 4000``).
    """
    config_path = global_config_path()
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        return {}

    config: dict[str, Any] = {}
    for key, value in raw.items():
        name = str(key).strip()
        if not name.upper().startswith("ORIGINPROBE_"):
            name = f"ORIGINPROBE_{name}"
        config[name.upper()] = value
    return config


def load_project_config(project_dir: Path | None = None) -> dict[str, str]:
    """Load project-specific configuration from .env file."""
    return load_env_file(project_env_path(project_dir))
