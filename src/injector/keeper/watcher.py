"""Keeper watcher: polls check_upkeep and submits perform_upkeep.

A local stand-in for an off-chain automation network. The watcher owns the
polling loop and the handler registry; all state access goes through an
UpkeepTarget.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from injector.errors import InjectorPausedError
from injector.store import StateStore

logger = logging.getLogger(__name__)

InjectionHandler = Callable[[list[str]], Awaitable[None]]


class UpkeepTarget(Protocol):
    def check_upkeep(self) -> tuple[bool, bytes]: ...

    def perform_upkeep(self, caller: str, perform_data: bytes) -> list[str]: ...


class StoredUpkeepTarget:
    """Runs upkeep against the injector persisted in a StateStore.

    Every check reloads the state, and every perform is a locked
    load-apply-save cycle, so the watcher can run alongside CLI commands.
    """

    def __init__(self, store: StateStore):
        self._store = store

    def check_upkeep(self) -> tuple[bool, bytes]:
        return self._store.load().check_upkeep()

    def perform_upkeep(self, caller: str, perform_data: bytes) -> list[str]:
        return self._store.mutate(
            lambda injector: injector.perform_upkeep(caller, perform_data)
        )


class KeeperWatcher:
    """Polls an injector for upkeep and performs it as the keeper.

    Example:
        watcher = KeeperWatcher(injector, keeper_address, poll_interval=60)

        @watcher.on_injected
        async def notify(gauges):
            print(f"injected into {gauges}")

        await watcher.start()
    """

    def __init__(
        self,
        target: UpkeepTarget,
        keeper_address: str,
        poll_interval: float = 60.0,
        heartbeat_every: int = 10,
    ):
        self._target = target
        self._keeper_address = keeper_address
        self._poll_interval = poll_interval
        self._heartbeat_every = heartbeat_every
        self._handlers: list[InjectionHandler] = []
        self._running = False
        self._task: asyncio.Task | None = None
        self._poll_count = 0

    @property
    def poll_count(self) -> int:
        return self._poll_count

    @property
    def running(self) -> bool:
        return self._running

    def on_injected(self, handler: InjectionHandler) -> InjectionHandler:
        """Decorator to register a handler for successful injections."""
        self._handlers.append(handler)
        return handler

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        logger.info(
            "keeper_watcher_started",
            extra={
                "keeper.address": self._keeper_address,
                "poll.interval": self._poll_interval,
            },
        )
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("keeper_watcher_stopped", extra={"poll.count": self._poll_count})

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error("upkeep_error", extra={"error.message": str(e)})
            await asyncio.sleep(self._poll_interval)

    async def run_once(self) -> list[str]:
        """Run a single check/perform cycle.

        Returns:
            Gauges that received a deposit this cycle.
        """
        self._poll_count += 1
        if self._poll_count % self._heartbeat_every == 0:
            logger.info(
                "keeper_watcher_heartbeat",
                extra={"poll.count": self._poll_count},
            )

        try:
            needed, perform_data = self._target.check_upkeep()
        except InjectorPausedError:
            logger.debug("upkeep_skipped_paused")
            return []
        if not needed:
            logger.debug("upkeep_not_needed")
            return []

        injected = self._target.perform_upkeep(self._keeper_address, perform_data)
        logger.info("upkeep_performed", extra={"injection.gauges": injected})

        if injected:
            for handler in self._handlers:
                try:
                    await handler(injected)
                except Exception as e:
                    logger.error(
                        "injection_handler_error", extra={"error.message": str(e)}
                    )
        return injected
