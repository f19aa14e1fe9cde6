"""Email OTP service — issue and verify one-time codes sent by email."""

__version__ = "0.1.0"
