"""Clock capability — lets expiry logic run against a controllable time source."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Current time as epoch seconds."""
        ...


class SystemClock:
    """Wall-clock time via :func:`time.time`."""

    def now(self) -> float:
        return time.time()
