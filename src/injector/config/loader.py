"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from injector.config.models import AppConfig
from injector.config.paths import get_config_path

# (key in [injector], environment variable)
ENV_OVERRIDES: list[tuple[str, str]] = [
    ("address", "INJECTOR_ADDRESS"),
    ("owner", "INJECTOR_OWNER"),
    ("keeper_address", "INJECTOR_KEEPER_ADDRESS"),
    ("inject_token", "INJECTOR_TOKEN"),
]


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.injector/config.toml (or INJECTOR_HOME)
        Path("/etc/injector/config.toml"),  # System-wide
    ]


def _resolve_env(config: dict[str, Any]) -> dict[str, Any]:
    """Fill unset [injector] values from environment variables."""
    section = config.setdefault("injector", {})
    for key, env_var in ENV_OVERRIDES:
        if section.get(key) is None:
            value = os.environ.get(env_var)
            if value:
                section[key] = value
    return config


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If no config file is found.
        ValueError: If config file is invalid.
    """
    config_path: Path | None = None

    default_paths = _get_default_config_paths()

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in default_paths:
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    if config_path is None:
        raise FileNotFoundError(
            f"No config file found. Searched: {', '.join(str(p) for p in default_paths)}"
        )

    with config_path.open("rb") as f:
        raw_config = tomllib.load(f)

    raw_config = _resolve_env(raw_config)

    return AppConfig.model_validate(raw_config)


def get_default_config(
    *,
    owner: str,
    inject_token: str,
    address: str | None = None,
    keeper_address: str | None = None,
) -> AppConfig:
    """Get a default configuration for development/testing."""
    from injector.config.models import InjectorConfig

    injector: dict[str, Any] = {
        "address": address or "0x" + "1" * 40,
        "owner": owner,
        "inject_token": inject_token,
    }
    if keeper_address is not None:
        injector["keeper_address"] = keeper_address
    return AppConfig(injector=InjectorConfig.model_validate(injector))
