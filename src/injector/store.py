"""JSON-file persistence for an injector and its local chain."""

from __future__ import annotations

import fcntl
import json
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, TypeVar

from injector.chain.local import LocalChain
from injector.clock import Clock, SystemClock
from injector.config.models import InjectorConfig
from injector.events import EventLog
from injector.gauge_injector import GaugeInjector

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

STATE_VERSION = 1


class StateError(Exception):
    """The state file is missing, unreadable or from an unknown version."""


class StateStore:
    """Loads and saves one injector plus the local chain it runs against.

    Writes go through mutate(), which holds an exclusive lock for the whole
    load-apply-save cycle and only saves when the callback returns normally.
    """

    def __init__(self, path: Path, clock: Clock | None = None) -> None:
        self._path = path
        self._lock_file = path.with_name(f".{path.name}.lock")
        self._clock = clock or SystemClock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def clock(self) -> Clock:
        return self._clock

    def exists(self) -> bool:
        return self._path.exists()

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def load(self, events: EventLog | None = None) -> GaugeInjector:
        if not self._path.exists():
            raise StateError(f"State file not found: {self._path}")
        try:
            data = json.loads(self._path.read_text())
        except (OSError, ValueError) as e:
            raise StateError(f"Cannot read state file {self._path}: {e}") from e

        version = data.get("version")
        if version != STATE_VERSION:
            raise StateError(f"Unsupported state version: {version!r}")

        chain = LocalChain.from_dict(data.get("chain", {}), self._clock)
        return GaugeInjector.from_dict(
            data["injector"], chain=chain, clock=self._clock, events=events
        )

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def initialize(self, config: InjectorConfig) -> GaugeInjector:
        """Create a fresh state file from config.

        The local chain starts with the inject token deployed and no gauges.

        Raises:
            StateError: If a state file already exists.
        """
        with self._locked():
            if self._path.exists():
                raise StateError(f"State file already exists: {self._path}")
            chain = LocalChain(self._clock)
            chain.add_token(config.inject_token)
            injector = GaugeInjector(
                address=config.address,
                owner=config.owner,
                keeper_address=config.keeper_address,
                min_wait_period_seconds=config.min_wait_period_seconds,
                inject_token=config.inject_token,
                chain=chain,
                clock=self._clock,
            )
            self._write(injector)
            logger.info("state_initialized", extra={"state.path": str(self._path)})
            return injector

    def save(self, injector: GaugeInjector) -> None:
        with self._locked():
            self._write(injector)

    def mutate(
        self,
        mutate: Callable[[GaugeInjector], _T],
        *,
        events: EventLog | None = None,
    ) -> _T:
        """Apply `mutate` to the stored injector and persist the result.

        Nothing is written if `mutate` raises.
        """
        with self._locked():
            injector = self.load(events=events)
            result = mutate(injector)
            self._write(injector)
            return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _file_lock(self, file: IO) -> Iterator[None]:
        try:
            fcntl.flock(file.fileno(), fcntl.LOCK_EX)
            yield
        finally:
            fcntl.flock(file.fileno(), fcntl.LOCK_UN)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock_file.open("a+") as lockf:
            with self._file_lock(lockf):
                yield

    def _write(self, injector: GaugeInjector) -> None:
        chain = injector.chain
        if not isinstance(chain, LocalChain):
            raise StateError("Only injectors on a LocalChain can be persisted")
        data: dict[str, Any] = {
            "version": STATE_VERSION,
            "chain": chain.to_dict(),
            "injector": injector.to_dict(),
        }
        tmp = self._path.with_name(f"{self._path.name}.tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True))
        os.replace(tmp, self._path)
        logger.debug("state_saved", extra={"state.path": str(self._path)})
