"""
Tests for the in-process rate limiter and password lockout.
"""

from bizcards.core.rate_limiter import PasswordAttemptTracker, RateLimiter, minutes_left


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestRateLimiter:
    """Fixed-window counting per identifier."""

    def test_sixth_auth_attempt_denied(self):
        """Auth allows five attempts per window."""
        limiter = RateLimiter(clock=FakeClock())
        results = [limiter.check("10.0.0.1", "auth") for _ in range(6)]

        assert [r.allowed for r in results] == [True] * 5 + [False]
        assert results[4].remaining == 0

    def test_window_resets(self):
        """After the window elapses counting starts over."""
        clock = FakeClock()
        limiter = RateLimiter(clock=clock)
        for _ in range(5):
            limiter.check("10.0.0.1", "auth")

        clock.advance(15 * 60 + 1)
        result = limiter.check("10.0.0.1", "auth")

        assert result.allowed
        assert result.remaining == 4

    def test_identifiers_are_independent(self):
        limiter = RateLimiter(clock=FakeClock())
        for _ in range(5):
            limiter.check("10.0.0.1", "auth")

        assert limiter.check("10.0.0.2", "auth").allowed
        assert not limiter.check("10.0.0.1", "auth").allowed

    def test_sweep_evicts_expired(self):
        """Expired windows are removed by the sweep."""
        clock = FakeClock()
        limiter = RateLimiter(clock=clock)
        limiter.check("10.0.0.1", "api")
        limiter.check("10.0.0.2", "auth")

        clock.advance(61)

        assert limiter.sweep() == 1
        assert len(limiter) == 1

    def test_reset(self):
        limiter = RateLimiter(clock=FakeClock())
        for _ in range(5):
            limiter.check("10.0.0.1", "auth")

        limiter.reset("10.0.0.1", "auth")

        assert limiter.check("10.0.0.1", "auth").allowed


class TestPasswordAttemptTracker:
    """Lockout after repeated wrong passwords."""

    def test_lockout_after_five_failures(self):
        """The fifth failure starts a seven minute lockout."""
        tracker = PasswordAttemptTracker(clock=FakeClock())
        results = [tracker.record_failure("user-1") for _ in range(5)]

        assert results[:4] == [None] * 4
        assert results[4] == 7 * 60
        assert tracker.lockout_remaining("user-1") == 7 * 60

    def test_lockout_expires(self):
        """Once the lockout elapses the user may try again."""
        clock = FakeClock()
        tracker = PasswordAttemptTracker(clock=clock)
        for _ in range(5):
            tracker.record_failure("user-1")

        clock.advance(7 * 60)

        assert tracker.lockout_remaining("user-1") is None
        assert tracker.record_failure("user-1") is None

    def test_old_failures_do_not_count(self):
        """Failures older than the window are forgotten."""
        clock = FakeClock()
        tracker = PasswordAttemptTracker(clock=clock)
        for _ in range(4):
            tracker.record_failure("user-1")

        clock.advance(7 * 60 + 1)

        assert tracker.record_failure("user-1") is None

    def test_reset_clears_failures(self):
        tracker = PasswordAttemptTracker(clock=FakeClock())
        for _ in range(4):
            tracker.record_failure("user-1")

        tracker.reset("user-1")

        assert tracker.record_failure("user-1") is None

    def test_minutes_left_rounds_up(self):
        """Countdown minutes round up and never show zero."""
        assert minutes_left(7 * 60) == 7
        assert minutes_left(61) == 2
        assert minutes_left(5) == 1
