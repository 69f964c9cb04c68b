"""Gauge injector: scheduled, periodic reward injections into gauges.

Public API:
- GaugeInjector: All entrypoints (schedule, inject, upkeep, admin)
- LocalChain: In-memory token and gauge ledger
- StateStore: JSON persistence for an injector and its chain
- KeeperWatcher: Local automation loop
"""

from injector.chain import LocalChain, LocalGauge, LocalToken
from injector.clock import FakeClock, SystemClock
from injector.errors import (
    BalanceMismatchError,
    CallerNotAuthorizedError,
    DuplicateAddressError,
    InjectorError,
    InjectorPausedError,
    InvalidInputError,
    LedgerError,
    PeriodsNotFinishedError,
    RecipientDepositFailedError,
    ZeroAddressRecipientError,
)
from injector.events import EventLog, EventType, InjectorEvent
from injector.gauge_injector import GaugeInjector, decode_payload, encode_payload
from injector.keeper import KeeperWatcher
from injector.store import StateStore

__all__ = [
    "BalanceMismatchError",
    "CallerNotAuthorizedError",
    "DuplicateAddressError",
    "EventLog",
    "EventType",
    "FakeClock",
    "GaugeInjector",
    "InjectorError",
    "InjectorEvent",
    "InjectorPausedError",
    "InvalidInputError",
    "KeeperWatcher",
    "LedgerError",
    "LocalChain",
    "LocalGauge",
    "LocalToken",
    "PeriodsNotFinishedError",
    "RecipientDepositFailedError",
    "StateStore",
    "SystemClock",
    "ZeroAddressRecipientError",
    "decode_payload",
    "encode_payload",
]
