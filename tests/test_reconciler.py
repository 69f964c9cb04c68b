"""Tests for obligation vs. balance reconciliation."""

from injector.scheduling import BalanceReconciler, ScheduleRegistry
from tests.conftest import make_address

A = make_address(1)
B = make_address(2)


class TestBalanceReconciler:
    """Tests for BalanceReconciler."""

    def test_empty_schedule_has_no_obligation(self):
        reconciler = BalanceReconciler(ScheduleRegistry(), lambda: 0)
        assert reconciler.total_obligation() == 0
        assert reconciler.exact_match() is True

    def test_obligation_counts_remaining_periods(self):
        registry = ScheduleRegistry()
        registry.replace([A, B], [100, 50], [3, 2])
        registry.record_injection(A, 10)
        reconciler = BalanceReconciler(registry, lambda: 300)

        assert reconciler.total_obligation() == 200 + 100
        assert reconciler.exact_match() is True

    def test_inactive_entries_owe_nothing(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        registry.replace([B], [50], [1])
        reconciler = BalanceReconciler(registry, lambda: 50)

        assert reconciler.total_obligation() == 50

    def test_delta_sign(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [2])

        assert BalanceReconciler(registry, lambda: 150).balance_delta() == -50
        assert BalanceReconciler(registry, lambda: 250).balance_delta() == 50

    def test_reads_balance_on_every_call(self):
        registry = ScheduleRegistry()
        registry.replace([A], [10], [1])
        balance = {"value": 0}
        reconciler = BalanceReconciler(registry, lambda: balance["value"])

        assert reconciler.exact_match() is False
        balance["value"] = 10
        assert reconciler.exact_match() is True
