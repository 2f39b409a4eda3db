"""
Configuration management for originprobe.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Project .env file (./.originprobe/.env)
3. Global config file (~/.originprobe/config.yml)
4. Default values (lowest priority)

Command-line flags override all of them.
"""

from .env_loader import (
    CONFIG_DIR_NAME,
    global_config_path,
    load_env_file,
    load_global_config,
    load_project_config,
    project_env_path,
)
from .getters import (
    get_bool,
    get_config,
    get_int,
    get_log_level,
    get_method,
    get_port,
    get_status_code,
    get_timeout_ms,
    get_user_agent,
    get_verbose,
    get_workers,
)

__all__ = [
    # env_loader
    "CONFIG_DIR_NAME",
    "global_config_path",
    "load_env_file",
    "load_global_config",
    "load_project_config",
    "project_env_path",
    # getters
    "get_bool",
    "get_config",
    "get_int",
    "get_log_level",
    "get_method",
    "get_port",
    "get_status_code",
    "get_timeout_ms",
    "get_user_agent",
    "get_verbose",
    "get_workers",
]
