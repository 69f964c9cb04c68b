"""Tests for injection execution: manual injection, upkeep and batch rollback."""

import pytest

from injector.chain import WEEK
from injector.errors import InvalidInputError, RecipientDepositFailedError
from injector.events import EventType
from injector.gauge_injector import decode_payload, encode_payload
from tests.conftest import KEEPER, OWNER, TOKEN, make_address


class TestInjectFunds:
    """Tests for GaugeInjector.inject_funds()."""

    def test_deposits_and_advances_schedule(self, injector, gauges, fund, token, clock):
        fund(300)
        a = gauges[0].address
        injector.set_recipient_list(OWNER, [a], [100], [3])

        assert injector.inject_funds(OWNER, [a]) == [a]

        entry = injector.get_account_info(a)
        assert entry.period_number == 1
        assert entry.last_injection_timestamp == clock.now()
        assert token.balance_of(a) == 100
        assert token.balance_of(injector.address) == 200
        assert gauges[0].reward_data(TOKEN).period_finish == clock.now() + WEEK

    def test_other_recipients_untouched(self, injector, gauges, fund, token):
        fund(400)
        a, b = gauges[0].address, gauges[1].address
        injector.set_recipient_list(OWNER, [a, b], [100, 100], [2, 2])
        before = injector.get_account_info(b)

        assert injector.inject_funds(OWNER, [a]) == [a]

        assert injector.get_account_info(b) == before
        assert token.balance_of(b) == 0
        assert gauges[1].reward_data(TOKEN).period_finish == 0

    def test_leaves_no_allowance_behind(self, injector, gauges, fund, token):
        fund(100)
        a = gauges[0].address
        injector.set_recipient_list(OWNER, [a], [100], [1])
        injector.inject_funds(OWNER, [a])
        assert token.allowance(injector.address, a) == 0

    def test_skips_ineligible_candidates(self, injector, gauges, fund, token):
        fund(100)
        a, b = gauges[0].address, gauges[1].address
        injector.set_recipient_list(OWNER, [a], [100], [1])

        # b is not on the watch list, so it is inactive and skipped.
        assert injector.inject_funds(OWNER, [b, a]) == [a]
        assert token.balance_of(b) == 0

    def test_duplicate_candidate_injected_once(self, injector, gauges, fund):
        fund(200)
        a = gauges[0].address
        injector.set_recipient_list(OWNER, [a], [100], [2])
        assert injector.inject_funds(OWNER, [a, a]) == [a]
        assert injector.get_account_info(a).period_number == 1

    def test_rechecks_balance_between_candidates(self, injector, gauges, fund):
        fund(120)
        a, b = gauges[0].address, gauges[1].address
        injector.set_recipient_list(OWNER, [a, b], [100, 50], [1, 1])
        assert injector.inject_funds(OWNER, [a, b]) == [a]

    def test_malformed_candidate_rejected(self, injector, gauges, fund):
        fund(100)
        injector.set_recipient_list(OWNER, [gauges[0].address], [100], [1])
        with pytest.raises(InvalidInputError):
            injector.inject_funds(OWNER, [gauges[0].address, "not-an-address"])
        assert injector.get_account_info(gauges[0].address).period_number == 0

    def test_emits_injection_event(self, injector, gauges, fund):
        fund(100)
        a = gauges[0].address
        injector.set_recipient_list(OWNER, [a], [100], [1])
        injector.inject_funds(OWNER, [a])

        [event] = injector.events.of_type(EventType.EMISSIONS_INJECTION)
        assert event.payload == {"gauge": a, "amount": 100, "period_number": 1}


class TestBatchRollback:
    """A failing deposit aborts the whole batch."""

    def test_failed_deposit_undoes_earlier_deposits(
        self, injector, gauges, fund, token
    ):
        fund(150)
        a, b = gauges[0].address, gauges[1].address
        injector.set_recipient_list(OWNER, [a, b], [100, 50], [1, 1])
        gauges[1].killed = True
        before = injector.to_dict()

        with pytest.raises(RecipientDepositFailedError) as exc_info:
            injector.inject_funds(OWNER, [a, b])

        assert exc_info.value.address == b
        assert injector.to_dict() == before
        assert token.balance_of(injector.address) == 150
        assert token.balance_of(a) == 0
        assert token.allowance(injector.address, a) == 0
        assert gauges[0].reward_data(TOKEN).period_finish == 0

    def test_failure_event_survives_rollback(self, injector, gauges, fund):
        fund(150)
        a, b = gauges[0].address, gauges[1].address
        injector.set_recipient_list(OWNER, [a, b], [100, 50], [1, 1])
        gauges[1].killed = True

        with pytest.raises(RecipientDepositFailedError):
            injector.inject_funds(OWNER, [a, b])

        types = [e.type for e in injector.events.events]
        assert EventType.INJECTION_FAILED in types
        assert EventType.EMISSIONS_INJECTION not in types

    def test_gauge_can_be_retried_after_fix(self, injector, gauges, fund):
        fund(150)
        a, b = gauges[0].address, gauges[1].address
        injector.set_recipient_list(OWNER, [a, b], [100, 50], [1, 1])
        gauges[1].killed = True
        with pytest.raises(RecipientDepositFailedError):
            injector.inject_funds(OWNER, [a, b])

        gauges[1].killed = False
        assert injector.inject_funds(OWNER, [a, b]) == [a, b]


class TestUpkeep:
    """Tests for check_upkeep()/perform_upkeep()."""

    def test_check_without_ready_gauges(self, injector):
        needed, payload = injector.check_upkeep()
        assert needed is False
        assert decode_payload(payload) == []

    def test_check_then_perform(self, injector, gauges, fund):
        fund(150)
        a, b = gauges[0].address, gauges[1].address
        injector.set_recipient_list(OWNER, [a, b], [100, 50], [1, 1])

        needed, payload = injector.check_upkeep()
        assert needed is True
        assert decode_payload(payload) == [a, b]

        assert injector.perform_upkeep(KEEPER, payload) == [a, b]
        assert injector.check_upkeep()[0] is False

    def test_stale_payload_is_revalidated(self, injector, gauges, fund):
        fund(100)
        a = gauges[0].address
        injector.set_recipient_list(OWNER, [a], [100], [2])
        _, payload = injector.check_upkeep()

        injector.inject_funds(OWNER, [a])

        assert injector.perform_upkeep(KEEPER, payload) == []
        assert injector.get_account_info(a).period_number == 1

    def test_perform_with_unlisted_gauge_is_skipped(self, injector, gauges, fund):
        fund(100)
        injector.set_recipient_list(OWNER, [gauges[0].address], [100], [1])
        payload = encode_payload([make_address(42)])
        assert injector.perform_upkeep(KEEPER, payload) == []

    def test_malformed_payload(self, injector):
        with pytest.raises(InvalidInputError, match="Malformed"):
            injector.perform_upkeep(KEEPER, b"\x00garbage")
        with pytest.raises(InvalidInputError):
            injector.perform_upkeep(KEEPER, b'{"gauges": [1, 2]}')


class TestScheduleLifecycle:
    """Two recipients with different lengths drain the balance exactly."""

    def test_full_schedule_drains_balance(self, injector, gauges, fund, token, clock):
        fund(400)
        a, b = gauges[0].address, gauges[1].address
        injector.set_validated_recipient_list(OWNER, [a, b], [100, 50], [3, 2])

        rounds = []
        for _ in range(4):
            needed, payload = injector.check_upkeep()
            rounds.append(injector.perform_upkeep(KEEPER, payload) if needed else [])
            clock.advance(WEEK)

        assert rounds == [[a, b], [a, b], [a], []]
        assert token.balance_of(a) == 300
        assert token.balance_of(b) == 100
        assert injector.get_balance() == 0
        assert injector.total_obligation() == 0
        assert injector.has_exact_balance() is True
