"""Configuration module."""

from injector.config.loader import get_default_config, load_config
from injector.config.models import (
    AppConfig,
    ConfigError,
    InjectorConfig,
    KeeperConfig,
    LoggingConfig,
)
from injector.config.paths import (
    get_config_path,
    get_injector_home,
    get_logs_path,
    get_state_path,
)
from injector.config.writer import ConfigWriter

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigWriter",
    "InjectorConfig",
    "KeeperConfig",
    "LoggingConfig",
    "get_config_path",
    "get_default_config",
    "get_injector_home",
    "get_logs_path",
    "get_state_path",
    "load_config",
]
