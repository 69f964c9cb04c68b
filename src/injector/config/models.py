"""Configuration models using Pydantic."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from injector.addresses import ZERO_ADDRESS, is_zero_address, normalize_address
from injector.chain.base import WEEK
from injector.config.paths import get_state_path

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error."""

    pass


class InjectorConfig(BaseModel):
    """Deployment parameters of one injector instance.

    `address` is the custodial account the injector holds funds under.
    `keeper_address` may be the null address, in which case no automation
    caller is authorized until the owner sets one.
    """

    address: str
    owner: str
    keeper_address: str = ZERO_ADDRESS
    min_wait_period_seconds: int = Field(default=WEEK, ge=0)
    inject_token: str
    state_path: Path = Field(default_factory=get_state_path)

    @field_validator("address", "owner", "keeper_address", "inject_token")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        return normalize_address(value)

    @model_validator(mode="after")
    def _validate_roles(self) -> "InjectorConfig":
        if is_zero_address(self.owner):
            raise ValueError("owner cannot be the null address")
        if is_zero_address(self.inject_token):
            raise ValueError("inject_token cannot be the null address")
        if is_zero_address(self.address):
            raise ValueError("address cannot be the null address")
        return self


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None
    log_to_file: bool = False
    retention_days: int = Field(default=7, ge=1)


class KeeperConfig(BaseModel):
    """Configuration for the local keeper watcher."""

    poll_interval: float = Field(default=60.0, gt=0)
    heartbeat_every: int = Field(default=10, ge=1)


class AppConfig(BaseModel):
    """Root configuration model."""

    injector: InjectorConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    keeper: KeeperConfig = Field(default_factory=KeeperConfig)

    @model_validator(mode="after")
    def _warn_missing_keeper(self) -> "AppConfig":
        if is_zero_address(self.injector.keeper_address):
            logger.warning(
                "No keeper_address configured; automated upkeep is disabled"
            )
        return self

    def require_keeper(self) -> str:
        """Return the configured keeper address.

        Raises:
            ConfigError: If no keeper is configured.
        """
        if is_zero_address(self.injector.keeper_address):
            raise ConfigError(
                "No keeper configured. Set [injector].keeper_address or "
                "INJECTOR_KEEPER_ADDRESS"
            )
        return self.injector.keeper_address
