"""Centralized path management for the injector.

All local state (config, state file, logs) is stored under a single base
directory. The base directory can be overridden with the INJECTOR_HOME
environment variable.

Default locations:
- Linux/macOS: ~/.injector
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "INJECTOR_HOME"


@lru_cache(maxsize=1)
def get_injector_home() -> Path:
    """Get the base directory for all injector data.

    Resolution order:
    1. INJECTOR_HOME environment variable (if set)
    2. Platform default (~/.injector)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".injector"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_injector_home() / "config.toml"


def get_state_path() -> Path:
    """Get the default state file path (injector and local chain)."""
    return get_injector_home() / "state.json"


def get_logs_path() -> Path:
    """Get the JSONL logs directory path."""
    return get_injector_home() / "logs"
