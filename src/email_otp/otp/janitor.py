"""Janitor — periodic background sweep of expired codes and stale limiter windows."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from email_otp.otp.store import OTPStore
from email_otp.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class Janitor:
    """Runs :meth:`run_once` every *interval_seconds* on an APScheduler job.

    Lazy expiry on read is the primary mechanism; this only bounds memory
    for codes that are never looked at again.
    """

    def __init__(
        self,
        store: OTPStore,
        interval_seconds: float = 3600,
        limiters: Iterable[RateLimiter] = (),
    ) -> None:
        self._store = store
        self._interval = interval_seconds
        self._limiters = list(limiters)
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self) -> int:
        """Sweep the store (and limiters) now; return the number of codes removed."""
        removed = self._store.sweep()
        for limiter in self._limiters:
            limiter.purge()
        if removed:
            logger.info("Swept %d expired OTP(s)", removed)
        else:
            logger.debug("Sweep found no expired OTPs")
        return removed

    def start(self) -> None:
        """Schedule the sweep; must be called with an event loop running."""
        if self.running:
            return
        sched = AsyncIOScheduler(timezone="UTC")
        sched.add_job(
            self.run_once,
            "interval",
            seconds=self._interval,
            id="sweep_expired_otps",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        sched.start()
        self._scheduler = sched
        logger.info("Janitor started (every %ss)", self._interval)

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Janitor stopped")
