"""Email OTP service — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── OTP lifecycle ─────────────────────────────────────
    otp_length: int = 4
    otp_ttl_seconds: int = 300  # 5 minutes
    sweep_interval_seconds: int = 3600

    # ── Rate limiting ─────────────────────────────────────
    rate_limit_window_seconds: int = 300
    send_rate_limit: int = 5
    verify_rate_limit: int = 30
    # Peers whose X-Forwarded-For header is believed; empty = trust nobody
    trusted_proxies: list[str] = []

    # ── SMTP ──────────────────────────────────────────────
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_start_tls: bool = True
    smtp_timeout_seconds: float = 15.0
    email_user: str = ""
    email_pass: str = ""
    email_from: str = ""

    # ── App ───────────────────────────────────────────────
    app_name: str = "Email OTP Service"
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def sender_address(self) -> str:
        """Address placed in the ``From`` header."""
        return self.email_from or self.email_user


# Singleton settings instance
settings = Settings()
