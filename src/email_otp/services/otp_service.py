"""OTP lifecycle — issue, reissue and verify codes against the store.

Every operation first asks the limiter for its route, so a throttled
request never touches the store. Business rejections come back as an
:class:`OTPResult` rather than an exception; the API layer maps the
outcome to an HTTP status.
"""

from __future__ import annotations

import enum
import hmac
import logging
import math
import re
from dataclasses import dataclass

from email_otp.otp.generator import CodeGenerator
from email_otp.otp.store import OTPStore
from email_otp.services.email_service import Notifier, render_otp_message
from email_otp.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# local-part "@" domain-with-a-dot; a format guard, not RFC 5322
_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class OTPOutcome(enum.Enum):
    SENT = ("SENT", 200)
    VERIFIED = ("VERIFIED", 200)
    INVALID_INPUT = ("INVALID_INPUT", 400)
    ALREADY_PENDING = ("ALREADY_PENDING", 400)
    NOT_FOUND = ("NOT_FOUND", 400)
    EXPIRED = ("EXPIRED", 400)
    MISMATCH = ("MISMATCH", 400)
    RATE_LIMITED = ("RATE_LIMITED", 429)
    NOTIFIER_FAILURE = ("NOTIFIER_FAILURE", 500)

    def __init__(self, code: str, status_code: int) -> None:
        self.code = code
        self.status_code = status_code


@dataclass(frozen=True)
class OTPResult:
    """Value object returned by every lifecycle operation."""

    outcome: OTPOutcome
    message: str
    retry_after: int | None = None

    @property
    def success(self) -> bool:
        return self.outcome in (OTPOutcome.SENT, OTPOutcome.VERIFIED)


def normalize_identifier(identifier: str) -> str:
    return identifier.strip().lower()


def is_valid_email(identifier: str) -> bool:
    return _EMAIL_RE.fullmatch(identifier) is not None


class OTPService:
    """Orchestrates the OTP lifecycle for one process.

    Parameters
    ----------
    store:
        Owner of all pending entries.
    generator:
        Source of fresh codes; its ``length`` also defines the accepted
        shape of submitted codes.
    notifier:
        Delivery channel for new codes.
    issue_limiter / verify_limiter:
        Independent budgets for the issuance and verification routes.
    ttl_seconds:
        Validity period of an issued code.
    """

    def __init__(
        self,
        store: OTPStore,
        generator: CodeGenerator,
        notifier: Notifier,
        issue_limiter: RateLimiter,
        verify_limiter: RateLimiter,
        ttl_seconds: int = 300,
    ) -> None:
        self.store = store
        self._generator = generator
        self._notifier = notifier
        self.issue_limiter = issue_limiter
        self.verify_limiter = verify_limiter
        self._ttl = ttl_seconds
        self._code_re = re.compile(rf"[0-9]{{{generator.length}}}")

    @property
    def code_length(self) -> int:
        """Number of digits in every issued code."""
        return self._generator.length

    # ── Public operations ────────────────────────────────

    async def issue(self, identifier: str | None, client_key: str) -> OTPResult:
        """Send a new code unless one is already pending for *identifier*."""
        return await self._issue(identifier, client_key, replace=False)

    async def reissue(self, identifier: str | None, client_key: str) -> OTPResult:
        """Send a new code, replacing any pending one."""
        return await self._issue(identifier, client_key, replace=True)

    async def verify(
        self, identifier: str | None, submitted_code: str | None, client_key: str
    ) -> OTPResult:
        """Check *submitted_code*; a match consumes the pending entry."""
        if not self.verify_limiter.admit(client_key):
            return self._rate_limited(self.verify_limiter, client_key)

        key = normalize_identifier(identifier) if identifier else ""
        submitted_code = submitted_code.strip() if submitted_code else ""
        if not key or not submitted_code:
            return OTPResult(OTPOutcome.INVALID_INPUT, "Email and OTP are required")
        if not self._code_re.fullmatch(submitted_code):
            return OTPResult(
                OTPOutcome.INVALID_INPUT,
                f"OTP must be a {self._generator.length}-digit number",
            )

        entry, expired = self.store.lookup(key)
        if expired:
            return OTPResult(
                OTPOutcome.EXPIRED, "OTP has expired. Please request a new one."
            )
        if entry is None:
            return OTPResult(
                OTPOutcome.NOT_FOUND,
                "No pending OTP for this email. Please request a new one.",
            )

        if not hmac.compare_digest(entry.code, submitted_code):
            logger.info("OTP mismatch for %s", key)
            return OTPResult(OTPOutcome.MISMATCH, "Invalid OTP. Please try again.")

        self.store.delete(key)
        logger.info("OTP verified for %s", key)
        return OTPResult(OTPOutcome.VERIFIED, "OTP verified!")

    # ── Private helpers ──────────────────────────────────

    async def _issue(
        self, identifier: str | None, client_key: str, *, replace: bool
    ) -> OTPResult:
        if not self.issue_limiter.admit(client_key):
            return self._rate_limited(self.issue_limiter, client_key)

        key = normalize_identifier(identifier) if identifier else ""
        if not key:
            return OTPResult(OTPOutcome.INVALID_INPUT, "Email is required")
        if not is_valid_email(key):
            return OTPResult(OTPOutcome.INVALID_INPUT, "Invalid email address")

        # No await between the pending check and the write below.
        if not replace and self.store.get(key) is not None:
            return OTPResult(
                OTPOutcome.ALREADY_PENDING,
                "An OTP was already sent to this email. "
                "Please check your inbox or request a new code.",
            )

        code = self._generator.generate()
        self.store.put(key, code, self._ttl)
        logger.debug("OTP %s issued for %s", code, key)

        subject, text_body, html_body = render_otp_message(code, self._ttl)
        delivered = await self._notifier.send(key, subject, text_body, html_body)
        if not delivered:
            # Free the slot so the user can retry straight away
            self.store.discard(key, code)
            logger.error("OTP delivery failed for %s", key)
            return OTPResult(
                OTPOutcome.NOTIFIER_FAILURE, "Error sending OTP. Please try again."
            )

        logger.info("OTP %s for %s", "reissued" if replace else "sent", key)
        return OTPResult(
            OTPOutcome.SENT,
            "A new OTP has been sent!" if replace else "OTP sent successfully!",
        )

    @staticmethod
    def _rate_limited(limiter: RateLimiter, client_key: str) -> OTPResult:
        wait = limiter.retry_after(client_key)
        minutes = max(1, math.ceil(wait / 60))
        return OTPResult(
            OTPOutcome.RATE_LIMITED,
            f"Too many requests. Please try again in {minutes} "
            f"minute{'s' if minutes != 1 else ''}.",
            retry_after=wait,
        )
