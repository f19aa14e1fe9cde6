"""Shared fixtures — frozen wall-clock time for expiry and window tests."""

import time
from datetime import timedelta

import pytest
from freezegun import freeze_time


class FakeClock:
    """Clock over frozen time; only moves when a test says so.

    The store reads it directly and the rate limiter's storage reads
    ``time.time()``, so both see the same instant.
    """

    def __init__(self, frozen) -> None:
        self._frozen = frozen

    def now(self) -> float:
        return time.time()

    def advance(self, seconds: float) -> None:
        self._frozen.tick(timedelta(seconds=seconds))


@pytest.fixture
def clock():
    # 1_700_000_000 epoch seconds; event-loop timing stays real
    with freeze_time("2023-11-14 22:13:20", real_asyncio=True) as frozen:
        yield FakeClock(frozen)
