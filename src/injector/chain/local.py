"""In-memory chain used by the CLI and the test suite.

LocalToken follows the usual fungible-token rules (balances, allowances,
transfer_from consuming allowance). LocalGauge follows reward-gauge rules:
only the registered distributor may deposit, a deposit pulls the funds with
transfer_from and starts a new one-week reward period.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from injector.addresses import ZERO_ADDRESS, normalize_address
from injector.chain.base import WEEK, RewardData
from injector.clock import Clock
from injector.errors import LedgerError

logger = logging.getLogger(__name__)


class LocalToken:
    def __init__(self, address: str, symbol: str = "TOKEN"):
        self._address = normalize_address(address)
        self.symbol = symbol
        self._balances: dict[str, int] = {}
        self._allowances: dict[str, dict[str, int]] = {}

    @property
    def address(self) -> str:
        return self._address

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    def balance_of(self, account: str) -> int:
        return self._balances.get(account.lower(), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get(owner.lower(), {}).get(spender.lower(), 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise LedgerError("Negative approval")
        self._allowances.setdefault(owner.lower(), {})[spender.lower()] = amount

    def mint(self, account: str, amount: int) -> None:
        if amount <= 0:
            raise LedgerError("Mint amount must be positive")
        account = account.lower()
        self._balances[account] = self.balance_of(account) + amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        sender, recipient = sender.lower(), recipient.lower()
        if recipient == ZERO_ADDRESS:
            raise LedgerError("Transfer to the null address")
        if amount < 0:
            raise LedgerError("Negative transfer")
        balance = self.balance_of(sender)
        if balance < amount:
            raise LedgerError(
                f"Insufficient balance: {sender} has {balance}, needs {amount}"
            )
        self._balances[sender] = balance - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> None:
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise LedgerError(
                f"Insufficient allowance: {spender} may spend {allowed}, needs {amount}"
            )
        self.transfer(owner, recipient, amount)
        self._allowances[owner.lower()][spender.lower()] = allowed - amount

    def snapshot(self) -> tuple[dict[str, int], dict[str, dict[str, int]]]:
        return (
            dict(self._balances),
            {owner: dict(spenders) for owner, spenders in self._allowances.items()},
        )

    def restore(self, state: tuple[dict[str, int], dict[str, dict[str, int]]]) -> None:
        balances, allowances = state
        self._balances = dict(balances)
        self._allowances = {o: dict(s) for o, s in allowances.items()}

    def to_dict(self) -> dict[str, Any]:
        # Amounts can exceed JSON-safe integer sizes in other tools, so store as strings.
        return {
            "symbol": self.symbol,
            "balances": {a: str(v) for a, v in self._balances.items()},
            "allowances": {
                o: {s: str(v) for s, v in spenders.items()}
                for o, spenders in self._allowances.items()
            },
        }

    @classmethod
    def from_dict(cls, address: str, data: dict[str, Any]) -> LocalToken:
        token = cls(address, symbol=data.get("symbol", "TOKEN"))
        token._balances = {a: int(v) for a, v in data.get("balances", {}).items()}
        token._allowances = {
            o: {s: int(v) for s, v in spenders.items()}
            for o, spenders in data.get("allowances", {}).items()
        }
        return token


class LocalGauge:
    def __init__(self, address: str, chain: LocalChain):
        self._address = normalize_address(address)
        self._chain = chain
        self._rewards: dict[str, RewardData] = {}
        self.killed = False

    @property
    def address(self) -> str:
        return self._address

    def reward_data(self, token: str) -> RewardData:
        data = self._rewards.get(token.lower())
        return replace(data) if data else RewardData(distributor=ZERO_ADDRESS)

    def set_reward_distributor(self, token: str, distributor: str) -> None:
        token, distributor = token.lower(), normalize_address(distributor)
        current = self._rewards.get(token)
        if current is None:
            self._rewards[token] = RewardData(distributor=distributor)
        else:
            current.distributor = distributor

    def deposit_reward_token(self, caller: str, token: str, amount: int) -> None:
        if self.killed:
            raise LedgerError(f"Gauge {self._address} is killed")
        token = token.lower()
        data = self._rewards.get(token)
        if data is None or data.distributor != caller.lower():
            raise LedgerError(f"{caller} is not the distributor of {token}")

        self._chain.token(token).transfer_from(
            self._address, caller, self._address, amount
        )

        now = self._chain.clock.now()
        if now >= data.period_finish:
            data.rate = amount // WEEK
        else:
            leftover = (data.period_finish - now) * data.rate
            data.rate = (amount + leftover) // WEEK
        data.last_update = now
        data.period_finish = now + WEEK
        logger.debug(
            "gauge_reward_deposited",
            extra={"gauge.address": self._address, "injection.amount": amount},
        )

    def snapshot(self) -> tuple[dict[str, RewardData], bool]:
        return {t: replace(d) for t, d in self._rewards.items()}, self.killed

    def restore(self, state: tuple[dict[str, RewardData], bool]) -> None:
        rewards, killed = state
        self._rewards = {t: replace(d) for t, d in rewards.items()}
        self.killed = killed

    def to_dict(self) -> dict[str, Any]:
        return {
            "killed": self.killed,
            "rewards": {
                t: {
                    "distributor": d.distributor,
                    "period_finish": d.period_finish,
                    "rate": str(d.rate),
                    "last_update": d.last_update,
                }
                for t, d in self._rewards.items()
            },
        }

    @classmethod
    def from_dict(
        cls, address: str, data: dict[str, Any], chain: LocalChain
    ) -> LocalGauge:
        gauge = cls(address, chain)
        gauge.killed = bool(data.get("killed", False))
        gauge._rewards = {
            t: RewardData(
                distributor=raw["distributor"],
                period_finish=int(raw.get("period_finish", 0)),
                rate=int(raw.get("rate", 0)),
                last_update=int(raw.get("last_update", 0)),
            )
            for t, raw in data.get("rewards", {}).items()
        }
        return gauge


class LocalChain:
    """Address registry for local tokens and gauges."""

    def __init__(self, clock: Clock):
        self.clock = clock
        self._tokens: dict[str, LocalToken] = {}
        self._gauges: dict[str, LocalGauge] = {}

    def add_token(self, address: str, symbol: str = "TOKEN") -> LocalToken:
        token = LocalToken(address, symbol)
        if token.address in self._tokens:
            raise LedgerError(f"Token {token.address} already exists")
        self._tokens[token.address] = token
        return token

    def add_gauge(self, address: str) -> LocalGauge:
        gauge = LocalGauge(address, self)
        if gauge.address in self._gauges:
            raise LedgerError(f"Gauge {gauge.address} already exists")
        self._gauges[gauge.address] = gauge
        return gauge

    def token(self, address: str) -> LocalToken:
        try:
            return self._tokens[address.lower()]
        except KeyError:
            raise LedgerError(f"Unknown token: {address}") from None

    def gauge(self, address: str) -> LocalGauge:
        try:
            return self._gauges[address.lower()]
        except KeyError:
            raise LedgerError(f"Unknown gauge: {address}") from None

    @property
    def tokens(self) -> list[LocalToken]:
        return list(self._tokens.values())

    @property
    def gauges(self) -> list[LocalGauge]:
        return list(self._gauges.values())

    def snapshot(self) -> dict[str, Any]:
        return {
            "tokens": {a: (t, t.snapshot()) for a, t in self._tokens.items()},
            "gauges": {a: (g, g.snapshot()) for a, g in self._gauges.items()},
        }

    def restore(self, state: dict[str, Any]) -> None:
        self._tokens = {}
        for address, (token, token_state) in state["tokens"].items():
            token.restore(token_state)
            self._tokens[address] = token
        self._gauges = {}
        for address, (gauge, gauge_state) in state["gauges"].items():
            gauge.restore(gauge_state)
            self._gauges[address] = gauge

    def to_dict(self) -> dict[str, Any]:
        return {
            "tokens": {a: t.to_dict() for a, t in self._tokens.items()},
            "gauges": {a: g.to_dict() for a, g in self._gauges.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], clock: Clock) -> LocalChain:
        chain = cls(clock)
        for address, raw in data.get("tokens", {}).items():
            chain._tokens[address] = LocalToken.from_dict(address, raw)
        for address, raw in data.get("gauges", {}).items():
            chain._gauges[address] = LocalGauge.from_dict(address, raw, chain)
        return chain
