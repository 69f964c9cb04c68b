"""Interfaces the injector consumes from the outside world.

The injector never moves funds itself. It reads balances and recipient
state, grants allowances, and asks recipients to pull their deposits,
all through these interfaces.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

# Length of a gauge reward period started by a deposit.
WEEK = 7 * 24 * 60 * 60


@dataclass
class RewardData:
    """Reward state a gauge keeps for one reward token."""

    distributor: str
    period_finish: int = 0
    rate: int = 0
    last_update: int = 0


class AssetLedger(Protocol):
    """Standard fungible-asset interface."""

    @property
    def address(self) -> str: ...

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, owner: str, spender: str, amount: int) -> None: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> None: ...


class RewardGauge(Protocol):
    """Recipient contract that accepts periodic reward deposits."""

    @property
    def address(self) -> str: ...

    def reward_data(self, token: str) -> RewardData: ...

    def deposit_reward_token(self, caller: str, token: str, amount: int) -> None:
        """Pull `amount` of `token` from `caller` and start a reward period.

        Raises:
            LedgerError: If the gauge rejects the deposit.
        """
        ...


class Chain(Protocol):
    """Resolves addresses and supports rollback of external effects."""

    def token(self, address: str) -> AssetLedger: ...

    def gauge(self, address: str) -> RewardGauge: ...

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...
