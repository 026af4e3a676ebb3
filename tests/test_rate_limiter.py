"""
Fixed-window rate limiter tests with an injected clock.
"""

from medivoice.adapters.services.in_memory_rate_limiter import InMemoryRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_rejects():
    limiter = InMemoryRateLimiter(max_requests=3, window_seconds=60.0, clock=FakeClock())

    assert [limiter.check("1.2.3.4") for _ in range(4)] == [True, True, True, False]


def test_keys_are_counted_separately():
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60.0, clock=FakeClock())

    assert limiter.check("a") is True
    assert limiter.check("b") is True
    assert limiter.check("a") is False


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60.0, clock=clock)
    limiter.check("a")
    limiter.check("a")
    assert limiter.check("a") is False

    clock.now += 60.0
    assert limiter.check("a") is False

    clock.now += 0.5
    assert limiter.check("a") is True


def test_reset_clears_counts():
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60.0, clock=FakeClock())
    limiter.check("a")

    limiter.reset()

    assert limiter.check("a") is True


def test_expired_windows_are_pruned():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_requests=5, window_seconds=60.0, clock=clock, prune_threshold=3)
    for key in ("a", "b", "c"):
        limiter.check(key)

    clock.now += 61.0
    assert limiter.check("d") is True

    assert limiter.tracked_keys == 1


def test_live_windows_survive_pruning():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60.0, clock=clock, prune_threshold=2)
    limiter.check("a")
    clock.now += 30.0
    limiter.check("b")

    clock.now += 31.0
    limiter.check("c")

    assert limiter.tracked_keys == 2
    assert limiter.check("b") is False
