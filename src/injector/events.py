"""Observability events.

Events are fire-and-forget: nothing inside the injector consumes them. They
are written to the log, kept in a bounded in-memory history, and handed to
any registered subscribers.

Inside a transaction events are staged. Committing publishes them in order;
rolling back discards them, except durable events (failure signals), which
describe the abort itself and are published anyway.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from injector.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 1000


class EventType(StrEnum):
    KEEPER_ADDRESS_UPDATED = "keeper_address_updated"
    MIN_WAIT_PERIOD_UPDATED = "min_wait_period_updated"
    INJECT_TOKEN_UPDATED = "inject_token_updated"
    SCHEDULE_SET = "schedule_set"
    SCHEDULE_REJECTED = "schedule_rejected"
    EMISSIONS_INJECTION = "emissions_injection"
    INJECTION_FAILED = "injection_failed"
    FUNDS_WITHDRAWN = "funds_withdrawn"
    TOKEN_SWEPT = "token_swept"
    PAUSED = "paused"
    UNPAUSED = "unpaused"
    OWNERSHIP_TRANSFER_REQUESTED = "ownership_transfer_requested"
    OWNERSHIP_TRANSFERRED = "ownership_transferred"


# Failure signals survive a rollback of the transaction that produced them.
DURABLE_EVENTS = frozenset({EventType.SCHEDULE_REJECTED, EventType.INJECTION_FAILED})


@dataclass
class InjectorEvent:
    type: EventType
    timestamp: int
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def durable(self) -> bool:
        return self.type in DURABLE_EVENTS

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "timestamp": self.timestamp,
            "payload": dict(self.payload),
        }


EventSubscriber = Callable[[InjectorEvent], None]


class EventLog:
    """Staged, bounded event history with subscriber fan-out."""

    def __init__(
        self,
        clock: Clock | None = None,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ):
        self._clock = clock or SystemClock()
        self._history: deque[InjectorEvent] = deque(maxlen=history_size)
        self._subscribers: list[EventSubscriber] = []
        self._staged: list[InjectorEvent] | None = None

    @property
    def events(self) -> list[InjectorEvent]:
        return list(self._history)

    @property
    def in_transaction(self) -> bool:
        return self._staged is not None

    def of_type(self, event_type: EventType) -> list[InjectorEvent]:
        return [e for e in self._history if e.type == event_type]

    def subscribe(self, subscriber: EventSubscriber) -> EventSubscriber:
        """Register a subscriber. Usable as a decorator."""
        self._subscribers.append(subscriber)
        return subscriber

    def emit(self, event_type: EventType, **payload: Any) -> InjectorEvent:
        event = InjectorEvent(
            type=event_type, timestamp=self._clock.now(), payload=payload
        )
        if self._staged is not None:
            self._staged.append(event)
        else:
            self._publish(event)
        return event

    def begin(self) -> None:
        if self._staged is not None:
            raise RuntimeError("EventLog transaction already open")
        self._staged = []

    def commit(self) -> None:
        staged, self._staged = self._staged or [], None
        for event in staged:
            self._publish(event)

    def rollback(self) -> None:
        staged, self._staged = self._staged or [], None
        for event in staged:
            if event.durable:
                self._publish(event)
            else:
                logger.debug(
                    "event_discarded", extra={"event.type": event.type.value}
                )

    def _publish(self, event: InjectorEvent) -> None:
        self._history.append(event)
        level = logging.WARNING if event.durable else logging.INFO
        logger.log(
            level,
            event.type.value,
            extra={"event.timestamp": event.timestamp, "event.payload": event.payload},
        )
        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.error(
                    "event_subscriber_error",
                    extra={"event.type": event.type.value, "error.message": str(e)},
                )
