"""
Unit tests for rate_limiter module
Tests window accounting, blocking, cancellation and argument checks
"""
import threading
import time

import pytest

from exceptions import ConfigurationError, InterruptedWait
from rate_limiter import RateLimiter
from time_unit import TimeUnit


class TestConstruction:
    """Test RateLimiter argument validation"""

    @pytest.mark.parametrize("limit", [0, -1, -100])
    def test_non_positive_limit_rejected(self, limit):
        """Zero or negative limits fail fast"""
        with pytest.raises(ConfigurationError):
            RateLimiter(TimeUnit.SECONDS, limit)

    def test_non_int_limit_rejected(self):
        with pytest.raises(ConfigurationError):
            RateLimiter(TimeUnit.SECONDS, 2.5)
        with pytest.raises(ConfigurationError):
            RateLimiter(TimeUnit.SECONDS, True)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            RateLimiter(TimeUnit.SECONDS, 0)

    def test_unknown_time_unit_rejected(self):
        with pytest.raises(ConfigurationError):
            RateLimiter("fortnights", 1)

    def test_window_is_one_unit(self):
        """The window spans exactly one unit"""
        assert RateLimiter(TimeUnit.SECONDS, 1).window_seconds == 1.0
        assert RateLimiter("minutes", 1).window_seconds == 60.0
        assert RateLimiter(TimeUnit.MILLISECONDS, 1).window_seconds == pytest.approx(0.001)


class TestAcquireWithFakeClock:
    """Test window accounting deterministically"""

    def test_grants_up_to_limit_without_waiting(self, fake_clock):
        limiter = RateLimiter(TimeUnit.SECONDS, 3, clock=fake_clock, sleep=fake_clock.sleep)
        for _ in range(3):
            limiter.acquire()
        assert fake_clock.sleeps == []
        assert limiter.available() == 0

    def test_extra_grant_waits_for_window_rollover(self, fake_clock):
        """The (N+1)-th grant waits out the rest of the window"""
        limiter = RateLimiter(TimeUnit.SECONDS, 2, clock=fake_clock, sleep=fake_clock.sleep)
        limiter.acquire()
        fake_clock.now += 0.25
        limiter.acquire()
        limiter.acquire()

        assert fake_clock.sleeps == [pytest.approx(0.75)]
        assert limiter.available() == 1

    def test_window_resets_after_elapsed(self, fake_clock):
        limiter = RateLimiter(TimeUnit.MINUTES, 1, clock=fake_clock, sleep=fake_clock.sleep)
        limiter.acquire()
        fake_clock.now += 60.0
        limiter.acquire()
        assert fake_clock.sleeps == []

    def test_grants_per_window_never_exceed_limit(self, fake_clock):
        limiter = RateLimiter(TimeUnit.SECONDS, 4, clock=fake_clock, sleep=fake_clock.sleep)
        grants = []
        for _ in range(20):
            limiter.acquire()
            grants.append(fake_clock.now)

        start = grants[0]
        per_window = {}
        for t in grants:
            per_window.setdefault(int(t - start), 0)
            per_window[int(t - start)] += 1
        assert max(per_window.values()) <= 4
        assert len(fake_clock.sleeps) == 4


class TestAcquireRealTime:
    """Test blocking behaviour against the real clock"""

    def test_two_per_second_delays_third_call(self):
        """3 back-to-back calls at 2/s: the third finishes about a second after the first"""
        limiter = RateLimiter(TimeUnit.SECONDS, 2)
        start = time.monotonic()
        limiter.acquire()
        limiter.acquire()
        assert time.monotonic() - start < 0.5
        limiter.acquire()
        assert time.monotonic() - start >= 0.9

    def test_concurrent_callers_capped_per_window(self):
        """Only `limit` threads get through; the rest wait until cancelled"""
        limiter = RateLimiter(TimeUnit.MINUTES, 5)
        cancel = threading.Event()
        granted = []
        interrupted = []
        lock = threading.Lock()

        def worker():
            try:
                limiter.acquire(cancel)
                with lock:
                    granted.append(1)
            except InterruptedWait:
                with lock:
                    interrupted.append(1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        time.sleep(0.2)
        with lock:
            assert len(granted) == 5
        cancel.set()
        for t in threads:
            t.join(timeout=5)

        assert len(granted) == 5
        assert len(interrupted) == 3
        assert limiter.available() == 0


class TestCancellation:
    """Test InterruptedWait propagation"""

    def test_cancel_raises_interrupted_wait(self):
        limiter = RateLimiter(TimeUnit.HOURS, 1)
        limiter.acquire()
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(InterruptedWait):
            limiter.acquire(cancel)

    def test_cancel_not_consulted_when_slot_free(self):
        limiter = RateLimiter(TimeUnit.HOURS, 1)
        cancel = threading.Event()
        cancel.set()
        limiter.acquire(cancel)
        assert limiter.available() == 0
