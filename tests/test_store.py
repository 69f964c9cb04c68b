"""Tests for JSON state persistence."""

import json
from pathlib import Path

import pytest

from injector.clock import FakeClock
from injector.config import get_default_config
from injector.errors import CallerNotAuthorizedError
from injector.store import StateError, StateStore
from tests.conftest import KEEPER, OWNER, STRANGER, TOKEN, make_address


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    store = StateStore(tmp_path / "state.json", clock=FakeClock(1_700_000_000))
    config = get_default_config(owner=OWNER, inject_token=TOKEN, keeper_address=KEEPER)
    store.initialize(config.injector)
    return store


def _add_gauge(injector) -> str:
    gauge = injector.chain.add_gauge(make_address(1))
    gauge.set_reward_distributor(injector.inject_token, injector.address)
    return gauge.address


class TestStateStore:
    """Tests for StateStore."""

    def test_initialize_creates_empty_deployment(self, store):
        injector = store.load()
        assert injector.owner == OWNER
        assert injector.keeper_address == KEEPER
        assert injector.get_watch_list() == []
        assert injector.get_balance() == 0

    def test_initialize_twice_rejected(self, store):
        config = get_default_config(owner=OWNER, inject_token=TOKEN)
        with pytest.raises(StateError, match="already exists"):
            store.initialize(config.injector)

    def test_mutate_persists(self, store):
        def setup(injector):
            gauge = _add_gauge(injector)
            injector.chain.token(TOKEN).mint(injector.address, 300)
            injector.set_recipient_list(OWNER, [gauge], [100], [3])
            return injector.inject_funds(OWNER, [gauge])

        injected = store.mutate(setup)

        reloaded = store.load()
        assert injected == [make_address(1)]
        assert reloaded.get_account_info(make_address(1)).period_number == 1
        assert reloaded.get_balance() == 200

    def test_failed_mutation_is_not_saved(self, store):
        before = store.path.read_text()

        def bad(injector):
            _add_gauge(injector)
            injector.pause(STRANGER)

        with pytest.raises(CallerNotAuthorizedError):
            store.mutate(bad)

        assert store.path.read_text() == before

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(StateError, match="not found"):
            StateStore(tmp_path / "missing.json").load()

    def test_load_unknown_version(self, store):
        data = json.loads(store.path.read_text())
        data["version"] = 99
        store.path.write_text(json.dumps(data))
        with pytest.raises(StateError, match="version"):
            store.load()

    def test_load_corrupt_file(self, store):
        store.path.write_text("{not json")
        with pytest.raises(StateError):
            store.load()

    def test_mutate_passes_event_log(self, store):
        from injector.events import EventLog, EventType

        events = EventLog(store.clock)
        store.mutate(lambda injector: injector.pause(OWNER), events=events)

        assert [e.type for e in events.events] == [EventType.PAUSED]
        assert store.load().paused is True
