"""Tests for the recipient schedule registry."""

import pytest

from injector.addresses import ZERO_ADDRESS
from injector.errors import DuplicateAddressError, InvalidInputError
from injector.scheduling import ScheduleEntry, ScheduleRegistry
from tests.conftest import make_address

A = make_address(1)
B = make_address(2)
C = make_address(3)


class TestReplaceValidation:
    """Tests for input validation in ScheduleRegistry.replace()."""

    def test_length_mismatch(self):
        registry = ScheduleRegistry()
        with pytest.raises(InvalidInputError, match="equal length"):
            registry.replace([A, B], [100], [3, 3])

    def test_null_address(self):
        registry = ScheduleRegistry()
        with pytest.raises(InvalidInputError, match="Null address at index 1"):
            registry.replace([A, ZERO_ADDRESS], [100, 100], [1, 1])

    def test_malformed_address(self):
        registry = ScheduleRegistry()
        with pytest.raises(InvalidInputError, match="Invalid address"):
            registry.replace(["0x1234"], [100], [1])

    def test_duplicate_address_is_case_insensitive(self):
        registry = ScheduleRegistry()
        upper = "0x" + "AB" * 20
        lower = upper.lower()
        with pytest.raises(DuplicateAddressError) as exc_info:
            registry.replace([upper, lower], [1, 1], [1, 1])
        assert exc_info.value.address == lower

    def test_zero_amount(self):
        registry = ScheduleRegistry()
        with pytest.raises(InvalidInputError, match="Invalid amount"):
            registry.replace([A], [0], [1])

    def test_bool_amount_rejected(self):
        registry = ScheduleRegistry()
        with pytest.raises(InvalidInputError):
            registry.replace([A], [True], [1])

    def test_periods_above_limit(self):
        registry = ScheduleRegistry()
        with pytest.raises(InvalidInputError, match="max_periods"):
            registry.replace([A], [1], [256])

    def test_max_periods_limit_accepted(self):
        registry = ScheduleRegistry()
        registry.replace([A], [1], [255])
        assert registry.get_account_info(A).max_periods == 255

    def test_rejection_leaves_previous_schedule(self):
        """A bad entry late in the list must not half-apply the replacement."""
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])

        with pytest.raises(InvalidInputError):
            registry.replace([B, C], [50, 0], [2, 2])

        assert registry.get_watch_list() == [A]
        assert registry.get_account_info(A).is_active is True
        assert registry.get_account_info(B).is_active is False


class TestReplace:
    """Tests for successful schedule replacement."""

    def test_sets_watch_list_in_order(self):
        registry = ScheduleRegistry()
        registry.replace([C, A, B], [3, 1, 2], [1, 1, 1])
        assert registry.get_watch_list() == [C, A, B]

    def test_normalizes_addresses(self):
        registry = ScheduleRegistry()
        mixed = "0x" + "Ab" * 20
        assert registry.replace([mixed], [5], [1]) == [mixed.lower()]
        assert registry.get_account_info(mixed).amount_per_period == 5

    def test_new_entries_start_fresh(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        entry = registry.get_account_info(A)
        assert entry == ScheduleEntry(
            is_active=True,
            amount_per_period=100,
            max_periods=3,
            period_number=0,
            last_injection_timestamp=0,
        )

    def test_old_entries_deactivated_but_kept(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        registry.record_injection(A, 1000)

        registry.replace([B], [50], [2])

        old = registry.get_account_info(A)
        assert old.is_active is False
        assert old.period_number == 1
        assert old.last_injection_timestamp == 1000
        assert registry.get_watch_list() == [B]

    def test_relisting_resets_progress(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        registry.record_injection(A, 1000)

        registry.replace([A], [200], [2])

        entry = registry.get_account_info(A)
        assert entry.period_number == 0
        assert entry.last_injection_timestamp == 0
        assert entry.amount_per_period == 200

    def test_empty_list_clears_schedule(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        registry.replace([], [], [])
        assert registry.get_watch_list() == []
        assert len(registry) == 0

    def test_zero_max_periods_is_already_finished(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [0])
        assert registry.get_account_info(A).is_finished is True
        assert registry.unfinished() == []


class TestAccountInfo:
    """Tests for entry lookups."""

    def test_unknown_address_returns_default(self):
        registry = ScheduleRegistry()
        assert registry.get_account_info(A) == ScheduleEntry()

    def test_returns_copy(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        entry = registry.get_account_info(A)
        entry.period_number = 99
        assert registry.get_account_info(A).period_number == 0


class TestRecordInjection:
    """Tests for ScheduleRegistry.record_injection()."""

    def test_advances_period(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [2])
        updated = registry.record_injection(A, 500)
        assert updated.period_number == 1
        assert updated.last_injection_timestamp == 500
        assert updated.remaining_obligation == 100

    def test_refuses_past_max_periods(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [1])
        registry.record_injection(A, 500)
        with pytest.raises(ValueError, match="no periods remaining"):
            registry.record_injection(A, 600)

    def test_refuses_inactive(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [1])
        registry.replace([B], [100], [1])
        with pytest.raises(ValueError, match="not active"):
            registry.record_injection(A, 500)

    def test_refuses_time_going_backwards(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        registry.record_injection(A, 500)
        with pytest.raises(ValueError, match="backwards"):
            registry.record_injection(A, 400)


class TestSnapshot:
    """Tests for snapshot/restore and serialization."""

    def test_restore_undoes_replacement(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        state = registry.snapshot()

        registry.record_injection(A, 10)
        registry.replace([B], [1], [1])
        registry.restore(state)

        assert registry.get_watch_list() == [A]
        assert registry.get_account_info(A).period_number == 0
        assert registry.get_account_info(B) == ScheduleEntry()

    def test_dict_round_trip(self):
        registry = ScheduleRegistry()
        registry.replace([A], [100], [3])
        registry.record_injection(A, 10)
        registry.replace([B], [2**200], [4])

        restored = ScheduleRegistry.from_dict(registry.to_dict())

        assert restored.get_watch_list() == [B]
        assert restored.get_account_info(A).period_number == 1
        assert restored.get_account_info(B).amount_per_period == 2**200
