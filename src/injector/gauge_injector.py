"""GaugeInjector: the public entrypoints of the injector.

Every entrypoint takes the calling address explicitly. Mutating entrypoints
run inside a single transaction: they are serialized by a re-entrant lock,
and any exception restores the schedule, settings, roles, pause state and
the chain to where they were before the call. Nested entrypoints (the
validated schedule replacement calls the plain one) join the outer
transaction.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from injector.access import AccessGuard, PauseSwitch
from injector.addresses import ZERO_ADDRESS, is_zero_address, normalize_address
from injector.chain.base import Chain
from injector.clock import Clock, SystemClock
from injector.errors import (
    BalanceMismatchError,
    DuplicateAddressError,
    InvalidInputError,
    PeriodsNotFinishedError,
    ZeroAddressRecipientError,
)
from injector.events import EventLog, EventType
from injector.scheduling import (
    BalanceReconciler,
    InjectionExecutor,
    InjectorSettings,
    ReadinessDecision,
    ReadinessEvaluator,
    ScheduleEntry,
    ScheduleRegistry,
)
from injector.transaction import atomic

logger = logging.getLogger(__name__)


def encode_payload(gauges: Sequence[str]) -> bytes:
    """Encode a readiness result as an opaque upkeep payload."""
    return json.dumps({"gauges": list(gauges)}).encode()


def decode_payload(payload: bytes) -> list[str]:
    try:
        data = json.loads(payload)
        gauges = data["gauges"]
    except (ValueError, TypeError, KeyError) as e:
        raise InvalidInputError(f"Malformed upkeep payload: {e}") from None
    if not isinstance(gauges, list) or not all(isinstance(g, str) for g in gauges):
        raise InvalidInputError("Malformed upkeep payload: gauges must be strings")
    return gauges


def _address_arg(value: str, name: str) -> str:
    try:
        return normalize_address(value)
    except ValueError:
        raise InvalidInputError(f"Invalid {name}: {value!r}") from None


class GaugeInjector:
    """Schedules and performs periodic reward injections into gauges."""

    def __init__(
        self,
        *,
        address: str,
        owner: str,
        keeper_address: str,
        min_wait_period_seconds: int,
        inject_token: str,
        chain: Chain,
        clock: Clock | None = None,
        events: EventLog | None = None,
        registry: ScheduleRegistry | None = None,
        paused: bool = False,
    ):
        self._address = _address_arg(address, "injector address")
        self._chain = chain
        self._clock = clock or SystemClock()
        self._settings = InjectorSettings(
            keeper_address=_address_arg(keeper_address, "keeper address"),
            min_wait_period_seconds=_non_negative(
                min_wait_period_seconds, "min_wait_period_seconds"
            ),
            inject_token=_address_arg(inject_token, "inject token"),
        )
        self._registry = registry if registry is not None else ScheduleRegistry()
        self._access = AccessGuard(_address_arg(owner, "owner"), self._settings)
        self._pause = PauseSwitch(paused)
        self._events = events or EventLog(self._clock)
        self._evaluator = ReadinessEvaluator(
            self._registry,
            chain,
            self._settings,
            injector_address=self._address,
            clock=self._clock,
        )
        self._executor = InjectionExecutor(
            self._registry,
            self._evaluator,
            chain,
            self._settings,
            self._events,
            injector_address=self._address,
            clock=self._clock,
        )
        self._reconciler = BalanceReconciler(self._registry, self._evaluator.balance)
        self._lock = threading.RLock()
        self._depth = 0

    # ------------------------------------------------------------------
    # Transaction boundary
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            self._depth = 1
            self._events.begin()
            try:
                with atomic(
                    self._registry,
                    self._settings,
                    self._access,
                    self._pause,
                    self._chain,
                ):
                    yield
            except BaseException:
                self._events.rollback()
                raise
            else:
                self._events.commit()
            finally:
                self._depth = 0

    # ------------------------------------------------------------------
    # Properties and read accessors
    # ------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._address

    @property
    def owner(self) -> str:
        return self._access.owner

    @property
    def pending_owner(self) -> str:
        return self._access.pending_owner

    @property
    def keeper_address(self) -> str:
        return self._settings.keeper_address

    @property
    def min_wait_period_seconds(self) -> int:
        return self._settings.min_wait_period_seconds

    @property
    def inject_token(self) -> str:
        return self._settings.inject_token

    @property
    def paused(self) -> bool:
        return self._pause.paused

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def chain(self) -> Chain:
        return self._chain

    def get_watch_list(self) -> list[str]:
        with self._lock:
            return self._registry.get_watch_list()

    def get_account_info(self, address: str) -> ScheduleEntry:
        with self._lock:
            return self._registry.get_account_info(address)

    def get_balance(self) -> int:
        with self._lock:
            return self._evaluator.balance()

    def total_obligation(self) -> int:
        with self._lock:
            return self._reconciler.total_obligation()

    def balance_delta(self) -> int:
        with self._lock:
            return self._reconciler.balance_delta()

    def has_exact_balance(self) -> bool:
        with self._lock:
            return self._reconciler.exact_match()

    def get_ready_gauges(self) -> list[str]:
        with self._lock:
            return self._evaluator.get_ready_gauges()

    def explain_readiness(self) -> list[ReadinessDecision]:
        with self._lock:
            return self._evaluator.explain()

    # ------------------------------------------------------------------
    # Schedule management (owner)
    # ------------------------------------------------------------------

    def set_recipient_list(
        self,
        caller: str,
        addresses: Sequence[str],
        amounts_per_period: Sequence[int],
        max_periods: Sequence[int],
    ) -> None:
        """Replace the schedule wholesale.

        Raises:
            CallerNotAuthorizedError: Caller is not the owner.
            InvalidInputError: Length mismatch, null address or zero amount.
            DuplicateAddressError: An address is listed twice.
        """
        with self._transaction():
            self._access.require_owner(caller)
            try:
                recipients = self._registry.replace(
                    addresses, amounts_per_period, max_periods
                )
            except (InvalidInputError, DuplicateAddressError) as e:
                self._events.emit(
                    EventType.SCHEDULE_REJECTED,
                    reason=type(e).__name__,
                    message=str(e),
                )
                raise
            self._events.emit(
                EventType.SCHEDULE_SET,
                recipients=recipients,
                amounts_per_period=[int(a) for a in amounts_per_period],
                max_periods=[int(p) for p in max_periods],
            )

    def set_validated_recipient_list(
        self,
        caller: str,
        addresses: Sequence[str],
        amounts_per_period: Sequence[int],
        max_periods: Sequence[int],
    ) -> None:
        """Replace the schedule only if the old one is done and the new one is funded.

        Raises:
            PeriodsNotFinishedError: A current recipient has periods left.
            BalanceMismatchError: The new obligation differs from the balance.
            (plus everything set_recipient_list raises)
        """
        with self._transaction():
            self._access.require_owner(caller)
            unfinished = self._registry.unfinished()
            if unfinished:
                address, entry = unfinished[0]
                self._events.emit(
                    EventType.SCHEDULE_REJECTED,
                    reason=PeriodsNotFinishedError.__name__,
                    gauge=address,
                )
                raise PeriodsNotFinishedError(
                    address, entry.period_number, entry.max_periods
                )

            self.set_recipient_list(caller, addresses, amounts_per_period, max_periods)

            if not self._reconciler.exact_match():
                obligation = self._reconciler.total_obligation()
                balance = self._evaluator.balance()
                self._events.emit(
                    EventType.SCHEDULE_REJECTED,
                    reason=BalanceMismatchError.__name__,
                    obligation=obligation,
                    balance=balance,
                )
                raise BalanceMismatchError(obligation, balance)

    # ------------------------------------------------------------------
    # Injection
    # ------------------------------------------------------------------

    def inject_funds(self, caller: str, gauges: Sequence[str]) -> list[str]:
        """Manual injection by the owner into any listed, eligible gauges."""
        with self._transaction():
            self._access.require_owner(caller)
            self._pause.require_not_paused()
            return self._executor.inject(gauges)

    def check_upkeep(self) -> tuple[bool, bytes]:
        """Automation check: is anything ready, and what to pass to perform."""
        with self._lock:
            self._pause.require_not_paused()
            ready = self._evaluator.get_ready_gauges()
            return bool(ready), encode_payload(ready)

    def perform_upkeep(self, caller: str, perform_data: bytes) -> list[str]:
        """Automation perform: inject the gauges named by a check payload."""
        with self._transaction():
            self._access.require_keeper(caller)
            self._pause.require_not_paused()
            return self._executor.inject(decode_payload(perform_data))

    # ------------------------------------------------------------------
    # Configuration (owner)
    # ------------------------------------------------------------------

    def set_keeper_address(self, caller: str, keeper_address: str) -> None:
        with self._transaction():
            self._access.require_owner(caller)
            new = _address_arg(keeper_address, "keeper address")
            old, self._settings.keeper_address = self._settings.keeper_address, new
            self._events.emit(EventType.KEEPER_ADDRESS_UPDATED, old=old, new=new)

    def set_min_wait_period(self, caller: str, seconds: int) -> None:
        with self._transaction():
            self._access.require_owner(caller)
            new = _non_negative(seconds, "min_wait_period_seconds")
            old = self._settings.min_wait_period_seconds
            self._settings.min_wait_period_seconds = new
            self._events.emit(EventType.MIN_WAIT_PERIOD_UPDATED, old=old, new=new)

    def set_inject_token(self, caller: str, token: str) -> None:
        with self._transaction():
            self._access.require_owner(caller)
            new = _address_arg(token, "inject token")
            if is_zero_address(new):
                raise InvalidInputError("Inject token cannot be the null address")
            old, self._settings.inject_token = self._settings.inject_token, new
            self._events.emit(EventType.INJECT_TOKEN_UPDATED, old=old, new=new)

    def pause(self, caller: str) -> None:
        with self._transaction():
            self._access.require_owner(caller)
            if self._pause.set(True):
                self._events.emit(EventType.PAUSED, account=caller.lower())

    def unpause(self, caller: str) -> None:
        with self._transaction():
            self._access.require_owner(caller)
            if self._pause.set(False):
                self._events.emit(EventType.UNPAUSED, account=caller.lower())

    # ------------------------------------------------------------------
    # Funds (owner)
    # ------------------------------------------------------------------

    def withdraw(self, caller: str, amount: int, recipient: str | None = None) -> None:
        """Move `amount` of the inject token to `recipient` (default: owner)."""
        with self._transaction():
            self._access.require_owner(caller)
            target = _address_arg(recipient or self._access.owner, "recipient")
            if is_zero_address(target):
                raise ZeroAddressRecipientError("Cannot withdraw to the null address")
            amount = _non_negative(amount, "amount")
            balance = self._evaluator.balance()
            if amount == 0 or amount > balance:
                raise InvalidInputError(
                    f"Withdraw amount {amount} must be between 1 and {balance}"
                )
            self._evaluator.token.transfer(self._address, target, amount)
            self._events.emit(
                EventType.FUNDS_WITHDRAWN,
                token=self._settings.inject_token,
                amount=amount,
                recipient=target,
            )

    def sweep(self, caller: str, token: str, recipient: str) -> int:
        """Move the whole balance of any token to `recipient`; returns the amount."""
        with self._transaction():
            self._access.require_owner(caller)
            token = _address_arg(token, "token")
            target = _address_arg(recipient, "recipient")
            if is_zero_address(target):
                raise ZeroAddressRecipientError("Cannot sweep to the null address")
            ledger = self._chain.token(token)
            amount = ledger.balance_of(self._address)
            if amount:
                ledger.transfer(self._address, target, amount)
            self._events.emit(
                EventType.TOKEN_SWEPT, token=token, amount=amount, recipient=target
            )
            return amount

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        with self._transaction():
            self._access.require_owner(caller)
            target = _address_arg(new_owner, "new owner")
            if target == self._access.owner:
                raise InvalidInputError("Cannot transfer ownership to self")
            self._access.propose_owner(target)
            self._events.emit(
                EventType.OWNERSHIP_TRANSFER_REQUESTED,
                previous=self._access.owner,
                proposed=target,
            )

    def accept_ownership(self, caller: str) -> None:
        with self._transaction():
            previous = self._access.accept_owner(caller)
            self._events.emit(
                EventType.OWNERSHIP_TRANSFERRED,
                previous=previous,
                owner=self._access.owner,
            )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "address": self._address,
                **self._access.to_dict(),
                "paused": self._pause.paused,
                "settings": self._settings.to_dict(),
                "schedule": self._registry.to_dict(),
            }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        chain: Chain,
        clock: Clock | None = None,
        events: EventLog | None = None,
    ) -> GaugeInjector:
        settings = InjectorSettings.from_dict(data["settings"])
        injector = cls(
            address=data["address"],
            owner=data["owner"],
            keeper_address=settings.keeper_address,
            min_wait_period_seconds=settings.min_wait_period_seconds,
            inject_token=settings.inject_token,
            chain=chain,
            clock=clock,
            events=events,
            registry=ScheduleRegistry.from_dict(data.get("schedule", {})),
            paused=bool(data.get("paused", False)),
        )
        pending = data.get("pending_owner") or ZERO_ADDRESS
        if not is_zero_address(pending):
            injector._access.propose_owner(pending)
        return injector


def _non_negative(value: Any, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidInputError(f"{name} must be a non-negative integer, got {value!r}")
    return value
