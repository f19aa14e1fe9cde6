"""In-memory OTP store with expiry — one pending code per identifier."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from email_otp.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OTPEntry:
    """Snapshot of a pending code. Times are epoch seconds."""

    identifier: str
    code: str
    issued_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at < now


class OTPStore:
    """Lock-guarded in-memory OTP store.

    Each entry maps ``identifier → OTPEntry``. The identifier is opaque to
    the store; callers normalise it. Expired entries are lazily purged on
    access and in bulk by :meth:`sweep`.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._entries: dict[str, OTPEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def put(self, identifier: str, code: str, ttl: float) -> OTPEntry:
        """Insert or replace the entry for *identifier*, valid for *ttl* seconds."""
        now = self._clock.now()
        entry = OTPEntry(
            identifier=identifier, code=code, issued_at=now, expires_at=now + ttl
        )
        with self._lock:
            self._entries[identifier] = entry
        return entry

    def get(self, identifier: str) -> OTPEntry | None:
        """Return the live entry for *identifier*, or ``None``."""
        entry, _ = self.lookup(identifier)
        return entry

    def lookup(self, identifier: str) -> tuple[OTPEntry | None, bool]:
        """Like :meth:`get`, but also report whether a miss was due to expiry.

        Returns ``(entry, expired)``. An expired entry is deleted before
        returning ``(None, True)``.
        """
        now = self._clock.now()
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None:
                return None, False
            if entry.is_expired(now):
                del self._entries[identifier]
                logger.info("OTP expired for %s", identifier)
                return None, True
            return entry, False

    def delete(self, identifier: str) -> bool:
        """Remove the entry for *identifier*. Returns ``True`` if one existed."""
        with self._lock:
            return self._entries.pop(identifier, None) is not None

    def discard(self, identifier: str, code: str) -> bool:
        """Remove the entry only if it still holds *code*."""
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None or entry.code != code:
                return False
            del self._entries[identifier]
            return True

    def sweep(self, now: float | None = None) -> int:
        """Drop every entry that expired before *now*; return how many went."""
        if now is None:
            now = self._clock.now()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)
