"""Obligation vs. custodial balance reconciliation."""

from __future__ import annotations

from collections.abc import Callable

from injector.scheduling.registry import ScheduleRegistry


class BalanceReconciler:
    """Compares what the schedule still owes with what the injector holds.

    The comparison is exact. Any stray deposit or dust left behind breaks
    the match and must be cleaned up by the owner (withdraw or sweep).
    """

    def __init__(self, registry: ScheduleRegistry, balance: Callable[[], int]):
        self._registry = registry
        self._balance = balance

    def total_obligation(self) -> int:
        return sum(
            entry.remaining_obligation for _, entry in self._registry.iter_active()
        )

    def balance_delta(self) -> int:
        """Balance minus obligation; negative means the schedule is underfunded."""
        return self._balance() - self.total_obligation()

    def exact_match(self) -> bool:
        return self.total_obligation() == self._balance()
