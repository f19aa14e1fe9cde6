"""Fixed-window request limiter keyed by client identity.

Built on ``limits``, the engine behind slowapi. One instance guards one
logical route. Two are wired up by default:

  • issue  – 5 per 5 minutes  (send / resend, prevents email spam)
  • verify – 30 per 5 minutes (verify, leaves room for typos)
"""

from __future__ import annotations

import logging
import math
import time

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


class RateLimiter:
    """Admits at most *limit* requests per client key per window.

    A window opens on the first request from a key and lasts
    *window_seconds*. Denied requests are not counted.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        name: str = "default",
        storage: Storage | None = None,
    ) -> None:
        if limit < 1:
            raise ValueError("Rate limit must allow at least one request")
        self.limit = limit
        self.window_seconds = window_seconds
        self.name = name
        self._item = RateLimitItemPerSecond(limit, int(window_seconds))
        self._storage = storage or MemoryStorage()
        self._limiter = FixedWindowRateLimiter(self._storage)
        self._clients: set[str] = set()

    def admit(self, client_key: str) -> bool:
        """Count a request from *client_key*; return ``False`` when over budget."""
        if not self._limiter.test(self._item, self.name, client_key):
            logger.warning(
                "Rate limit '%s' exceeded for %s (%s)", self.name, client_key, self._item
            )
            return False
        self._clients.add(client_key)
        return self._limiter.hit(self._item, self.name, client_key)

    def retry_after(self, client_key: str) -> int:
        """Whole seconds until *client_key*'s current window closes."""
        stats = self._limiter.get_window_stats(self._item, self.name, client_key)
        return max(0, math.ceil(stats.reset_time - time.time()))

    def reset(self, client_key: str | None = None) -> None:
        keys = [client_key] if client_key is not None else list(self._clients)
        for key in keys:
            self._storage.clear(self._item.key_for(self.name, key))
            self._clients.discard(key)

    def purge(self) -> int:
        """Forget clients whose window has elapsed; return how many."""
        stale = [
            key
            for key in list(self._clients)
            if self._storage.get(self._item.key_for(self.name, key)) == 0
        ]
        for key in stale:
            self._clients.discard(key)
        return len(stale)

    @property
    def tracked_clients(self) -> int:
        return len(self._clients)
