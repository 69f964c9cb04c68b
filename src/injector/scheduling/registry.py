"""Recipient list and per-recipient schedule state."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from injector.addresses import is_address, is_zero_address
from injector.errors import DuplicateAddressError, InvalidInputError
from injector.scheduling.types import MAX_AMOUNT, MAX_PERIODS_LIMIT, ScheduleEntry

logger = logging.getLogger(__name__)


class ScheduleRegistry:
    """Owns the recipient list and every schedule entry ever created.

    Entries are never deleted. A full replacement deactivates the previous
    recipients; their entries stay in storage but are no longer reachable
    through the watch list.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ScheduleEntry] = {}
        self._recipients: list[str] = []

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get_watch_list(self) -> list[str]:
        return list(self._recipients)

    def get_account_info(self, address: str) -> ScheduleEntry:
        entry = self._entries.get(address.lower())
        return entry.copy() if entry else ScheduleEntry()

    def iter_active(self) -> Iterator[tuple[str, ScheduleEntry]]:
        """Yield (address, entry) for the watch list, in list order."""
        for address in self._recipients:
            yield address, self._entries[address].copy()

    def unfinished(self) -> list[tuple[str, ScheduleEntry]]:
        return [(a, e) for a, e in self.iter_active() if not e.is_finished]

    def __len__(self) -> int:
        return len(self._recipients)

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def replace(
        self,
        addresses: Sequence[str],
        amounts_per_period: Sequence[int],
        max_periods: Sequence[int],
    ) -> list[str]:
        """Replace the whole schedule.

        All inputs are validated before anything is written, so a rejected
        call leaves the registry untouched.

        Raises:
            InvalidInputError: Length mismatch, malformed or null address,
                zero or out-of-range amount, out-of-range period count.
            DuplicateAddressError: An address appears more than once.
        """
        if not (len(addresses) == len(amounts_per_period) == len(max_periods)):
            raise InvalidInputError(
                "addresses, amounts_per_period and max_periods must have equal "
                f"length (got {len(addresses)}, {len(amounts_per_period)}, "
                f"{len(max_periods)})"
            )

        incoming: list[str] = []
        seen: set[str] = set()
        for i, (address, amount, periods) in enumerate(
            zip(addresses, amounts_per_period, max_periods, strict=True)
        ):
            if not is_address(address):
                raise InvalidInputError(f"Invalid address at index {i}: {address!r}")
            if is_zero_address(address):
                raise InvalidInputError(f"Null address at index {i}")
            normalized = address.lower()
            if normalized in seen:
                raise DuplicateAddressError(normalized)
            if not _is_uint(amount) or amount == 0 or amount > MAX_AMOUNT:
                raise InvalidInputError(f"Invalid amount at index {i}: {amount!r}")
            if not _is_uint(periods) or periods > MAX_PERIODS_LIMIT:
                raise InvalidInputError(
                    f"Invalid max_periods at index {i}: {periods!r}"
                )
            seen.add(normalized)
            incoming.append(normalized)

        for address in self._recipients:
            self._entries[address].is_active = False

        for address, amount, periods in zip(
            incoming, amounts_per_period, max_periods, strict=True
        ):
            self._entries[address] = ScheduleEntry(
                is_active=True,
                amount_per_period=int(amount),
                max_periods=int(periods),
            )
        self._recipients = incoming

        logger.info(
            "schedule_replaced",
            extra={"schedule.recipient_count": len(incoming)},
        )
        return list(incoming)

    def record_injection(self, address: str, timestamp: int) -> ScheduleEntry:
        """Advance a recipient by one period after a successful deposit."""
        entry = self._entries[address.lower()]
        if not entry.is_active:
            raise ValueError(f"Recipient {address} is not active")
        if entry.period_number >= entry.max_periods:
            raise ValueError(f"Recipient {address} has no periods remaining")
        if timestamp < entry.last_injection_timestamp:
            raise ValueError("Injection timestamp moved backwards")
        entry.period_number += 1
        entry.last_injection_timestamp = timestamp
        return entry.copy()

    # ------------------------------------------------------------------
    # Snapshot / persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> tuple[dict[str, ScheduleEntry], list[str]]:
        return (
            {address: entry.copy() for address, entry in self._entries.items()},
            list(self._recipients),
        )

    def restore(self, state: tuple[dict[str, ScheduleEntry], list[str]]) -> None:
        entries, recipients = state
        self._entries = {address: entry.copy() for address, entry in entries.items()}
        self._recipients = list(recipients)

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipients": list(self._recipients),
            "entries": {a: e.to_dict() for a, e in self._entries.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduleRegistry:
        registry = cls()
        registry._entries = {
            address.lower(): ScheduleEntry.from_dict(raw)
            for address, raw in data.get("entries", {}).items()
        }
        registry._recipients = [a.lower() for a in data.get("recipients", [])]
        return registry


def _is_uint(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
