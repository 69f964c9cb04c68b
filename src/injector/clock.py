"""Time sources.

All scheduling math is done in whole seconds since the epoch.
"""

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> int:
        return int(time.time())


class FakeClock:
    """Manually driven clock for tests and dry runs."""

    def __init__(self, start: int = 0):
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def set(self, value: int) -> None:
        if value < self._now:
            raise ValueError("FakeClock cannot move backwards")
        self._now = int(value)

    def advance(self, seconds: int) -> int:
        self.set(self._now + seconds)
        return self._now
