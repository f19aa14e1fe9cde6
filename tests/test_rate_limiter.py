"""Tests for the fixed-window RateLimiter."""

import pytest
from limits.storage import MemoryStorage

from email_otp.services.rate_limiter import RateLimiter


@pytest.fixture
def limiter(clock):
    return RateLimiter(limit=5, window_seconds=300, name="issue")


def test_admits_exactly_limit_then_denies(limiter):
    assert all(limiter.admit("10.0.0.1") for _ in range(5))
    assert limiter.admit("10.0.0.1") is False
    assert limiter.admit("10.0.0.1") is False


def test_clients_have_independent_budgets(limiter):
    for _ in range(5):
        limiter.admit("10.0.0.1")
    assert limiter.admit("10.0.0.1") is False
    assert limiter.admit("10.0.0.2") is True


def test_limiters_sharing_storage_keep_separate_budgets(clock):
    storage = MemoryStorage()
    issue = RateLimiter(1, 300, name="issue", storage=storage)
    verify = RateLimiter(1, 300, name="verify", storage=storage)

    assert issue.admit("10.0.0.1") is True
    assert verify.admit("10.0.0.1") is True
    assert issue.admit("10.0.0.1") is False


def test_window_resets_after_elapsing(limiter, clock):
    for _ in range(5):
        limiter.admit("10.0.0.1")
    assert limiter.admit("10.0.0.1") is False

    clock.advance(300)
    assert limiter.admit("10.0.0.1") is True
    # Fresh window: four more allowed
    assert all(limiter.admit("10.0.0.1") for _ in range(4))
    assert limiter.admit("10.0.0.1") is False


def test_denied_requests_do_not_extend_the_window(limiter, clock):
    for _ in range(5):
        limiter.admit("10.0.0.1")
    clock.advance(299)
    assert limiter.admit("10.0.0.1") is False
    clock.advance(1)
    assert limiter.admit("10.0.0.1") is True


def test_retry_after_counts_down(limiter, clock):
    assert limiter.retry_after("10.0.0.1") == 0
    limiter.admit("10.0.0.1")
    clock.advance(100)
    assert limiter.retry_after("10.0.0.1") == 200


def test_purge_drops_elapsed_windows(limiter, clock):
    limiter.admit("10.0.0.1")
    clock.advance(200)
    limiter.admit("10.0.0.2")
    clock.advance(150)

    assert limiter.purge() == 1
    assert limiter.tracked_clients == 1


def test_reset(limiter):
    for _ in range(5):
        limiter.admit("10.0.0.1")
    limiter.reset("10.0.0.1")
    assert limiter.admit("10.0.0.1") is True
    limiter.reset()
    assert limiter.tracked_clients == 0
    assert limiter.admit("10.0.0.1") is True


def test_rejects_non_positive_limit():
    with pytest.raises(ValueError):
        RateLimiter(limit=0, window_seconds=60)
