"""All-or-nothing execution of mutating operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Snapshottable(Protocol):
    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...


@contextmanager
def atomic(*participants: Snapshottable) -> Iterator[None]:
    """Run a block so that either all of its effects land or none do.

    Each participant is snapshotted on entry. If the block raises, every
    participant is restored (in reverse order) before the exception
    propagates.
    """
    saved = [(participant, participant.snapshot()) for participant in participants]
    try:
        yield
    except BaseException as e:
        for participant, state in reversed(saved):
            participant.restore(state)
        logger.debug(
            "transaction_rolled_back",
            extra={"error.type": type(e).__name__, "error.message": str(e)},
        )
        raise
