"""Role checks and the pause gate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from injector.addresses import ZERO_ADDRESS
from injector.errors import CallerNotAuthorizedError, InjectorPausedError
from injector.scheduling.types import InjectorSettings

logger = logging.getLogger(__name__)


@dataclass
class _Roles:
    owner: str
    pending_owner: str


class AccessGuard:
    """Owner and automation-caller authorization.

    The owner is stored here. The automation caller is read from the shared
    InjectorSettings so that reconfiguring it takes effect immediately.
    """

    def __init__(self, owner: str, settings: InjectorSettings):
        self._roles = _Roles(owner=owner.lower(), pending_owner=ZERO_ADDRESS)
        self._settings = settings

    @property
    def owner(self) -> str:
        return self._roles.owner

    @property
    def pending_owner(self) -> str:
        return self._roles.pending_owner

    def is_owner(self, caller: str) -> bool:
        return caller.lower() == self._roles.owner

    def is_keeper(self, caller: str) -> bool:
        keeper = self._settings.keeper_address.lower()
        return keeper != ZERO_ADDRESS and caller.lower() == keeper

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            logger.warning("owner_check_failed", extra={"caller": caller})
            raise CallerNotAuthorizedError(caller, "owner")

    def require_keeper(self, caller: str) -> None:
        if not self.is_keeper(caller):
            logger.warning("keeper_check_failed", extra={"caller": caller})
            raise CallerNotAuthorizedError(caller, "keeper")

    def propose_owner(self, new_owner: str) -> None:
        self._roles.pending_owner = new_owner.lower()

    def accept_owner(self, caller: str) -> str:
        """Complete a handover; returns the previous owner."""
        pending = self._roles.pending_owner
        if pending == ZERO_ADDRESS or caller.lower() != pending:
            raise CallerNotAuthorizedError(caller, "pending owner")
        previous = self._roles.owner
        self._roles = _Roles(owner=caller.lower(), pending_owner=ZERO_ADDRESS)
        return previous

    def snapshot(self) -> _Roles:
        return _Roles(self._roles.owner, self._roles.pending_owner)

    def restore(self, state: _Roles) -> None:
        self._roles = _Roles(state.owner, state.pending_owner)

    def to_dict(self) -> dict[str, Any]:
        return {"owner": self.owner, "pending_owner": self.pending_owner}


class PauseSwitch:
    def __init__(self, paused: bool = False):
        self._paused = paused

    @property
    def paused(self) -> bool:
        return self._paused

    def require_not_paused(self) -> None:
        if self._paused:
            raise InjectorPausedError("Injector is paused")

    def set(self, paused: bool) -> bool:
        """Set the state; returns True if it changed."""
        changed = self._paused != paused
        self._paused = paused
        return changed

    def snapshot(self) -> bool:
        return self._paused

    def restore(self, state: bool) -> None:
        self._paused = state
