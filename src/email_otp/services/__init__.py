"""Lifecycle controller, rate limiting and email delivery."""
