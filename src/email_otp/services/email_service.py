"""Email service — delivers one-time codes via async SMTP."""

from __future__ import annotations

import asyncio
import logging
from email.message import EmailMessage
from typing import Protocol

import aiosmtplib

from email_otp.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can deliver a message to a destination address."""

    async def send(
        self, destination: str, subject: str, text_body: str, html_body: str
    ) -> bool:
        ...


def format_validity(ttl_seconds: int) -> str:
    """Human-readable validity period: whole minutes, else seconds."""
    if ttl_seconds >= 60 and ttl_seconds % 60 == 0:
        minutes = ttl_seconds // 60
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{ttl_seconds} second{'s' if ttl_seconds != 1 else ''}"


def render_otp_message(code: str, ttl_seconds: int) -> tuple[str, str, str]:
    """Build ``(subject, text_body, html_body)`` for a code email."""
    validity = format_validity(ttl_seconds)
    subject = "Your OTP Code"
    text_body = (
        f"Your OTP is {code}\n\n"
        f"It expires in {validity}. "
        "If you did not request this code, you can ignore this email."
    )
    html_body = (
        "<div style=\"font-family: sans-serif\">"
        f"<p>Your OTP is <strong style=\"font-size: 1.4em\">{code}</strong></p>"
        f"<p>It expires in {validity}. "
        "If you did not request this code, you can ignore this email.</p>"
        "</div>"
    )
    return subject, text_body, html_body


class EmailService:
    """Sends transactional emails using the configured SMTP server."""

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or default_settings

    async def send(
        self, destination: str, subject: str, text_body: str, html_body: str
    ) -> bool:
        """Send a multipart (text + HTML) email.

        Returns ``True`` once the SMTP server accepted the message, ``False``
        on any transport failure or timeout. Never raises for delivery errors.
        """
        cfg = self._config
        if not cfg.email_user or not cfg.email_pass:
            logger.warning("EMAIL_USER / EMAIL_PASS not set — cannot email %s", destination)
            return False

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = cfg.sender_address
        msg["To"] = destination
        msg.set_content(text_body)
        msg.add_alternative(html_body, subtype="html")

        logger.info("Sending email to %s", destination)

        try:
            # aiosmtplib's timeout is per SMTP step; bound the whole exchange too
            await asyncio.wait_for(
                aiosmtplib.send(
                    msg,
                    hostname=cfg.smtp_host,
                    port=cfg.smtp_port,
                    username=cfg.email_user,
                    password=cfg.email_pass,
                    start_tls=cfg.smtp_start_tls,
                    timeout=cfg.smtp_timeout_seconds,
                ),
                cfg.smtp_timeout_seconds,
            )
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError):
            logger.exception("Failed to send email to %s", destination)
            return False

        logger.info("Email sent to %s", destination)
        return True


class ConsoleNotifier:
    """Logs messages instead of sending them — for local runs and the simulator."""

    def __init__(self) -> None:
        self.outbox: list[tuple[str, str, str]] = []

    async def send(
        self, destination: str, subject: str, text_body: str, html_body: str
    ) -> bool:
        self.outbox.append((destination, subject, text_body))
        logger.info("📧 %s → %s: %s", subject, destination, text_body.splitlines()[0])
        return True
