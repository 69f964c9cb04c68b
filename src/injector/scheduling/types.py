"""Schedule types.

Public types:
- ScheduleEntry: Per-recipient disbursement schedule
- InjectorSettings: Runtime configuration shared by the scheduling components
- ReadinessDecision: Why a recipient is (or is not) ready for injection
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

from injector.addresses import normalize_address

# uint8 bounds for period counters
MAX_PERIODS_LIMIT = 255
# uint256 bound for amounts
MAX_AMOUNT = 2**256 - 1


@dataclass
class ScheduleEntry:
    """Schedule state for one recipient."""

    is_active: bool = False
    amount_per_period: int = 0
    max_periods: int = 0
    period_number: int = 0
    last_injection_timestamp: int = 0

    @property
    def remaining_periods(self) -> int:
        return max(0, self.max_periods - self.period_number)

    @property
    def is_finished(self) -> bool:
        return self.period_number >= self.max_periods

    @property
    def remaining_obligation(self) -> int:
        return self.remaining_periods * self.amount_per_period

    def copy(self) -> ScheduleEntry:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_active": self.is_active,
            "amount_per_period": self.amount_per_period,
            "max_periods": self.max_periods,
            "period_number": self.period_number,
            "last_injection_timestamp": self.last_injection_timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduleEntry:
        return cls(
            is_active=bool(data.get("is_active", False)),
            amount_per_period=int(data.get("amount_per_period", 0)),
            max_periods=int(data.get("max_periods", 0)),
            period_number=int(data.get("period_number", 0)),
            last_injection_timestamp=int(data.get("last_injection_timestamp", 0)),
        )


@dataclass
class InjectorSettings:
    """Owner-controlled runtime configuration."""

    keeper_address: str
    min_wait_period_seconds: int
    inject_token: str

    def snapshot(self) -> InjectorSettings:
        return replace(self)

    def restore(self, state: InjectorSettings) -> None:
        # In place: the scheduling components share this instance.
        self.keeper_address = state.keeper_address
        self.min_wait_period_seconds = state.min_wait_period_seconds
        self.inject_token = state.inject_token

    def to_dict(self) -> dict[str, Any]:
        return {
            "keeper_address": self.keeper_address,
            "min_wait_period_seconds": self.min_wait_period_seconds,
            "inject_token": self.inject_token,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InjectorSettings:
        return cls(
            keeper_address=normalize_address(data["keeper_address"]),
            min_wait_period_seconds=int(data["min_wait_period_seconds"]),
            inject_token=normalize_address(data["inject_token"]),
        )


class ReadinessReason(StrEnum):
    """Reasons a recipient is not eligible for injection."""

    INACTIVE = "INACTIVE"
    WAIT_PERIOD = "WAIT_PERIOD"
    REWARD_PERIOD_ACTIVE = "REWARD_PERIOD_ACTIVE"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    PERIODS_EXHAUSTED = "PERIODS_EXHAUSTED"
    NOT_DISTRIBUTOR = "NOT_DISTRIBUTOR"


@dataclass
class ReadinessDecision:
    address: str
    ready: bool
    reasons: list[ReadinessReason] = field(default_factory=list)
    amount_per_period: int = 0
