"""Unit tests for FixedWindowRateLimiter."""

import unittest

from blog_api.core.rate_limit import FixedWindowRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestFixedWindowRateLimiter(unittest.TestCase):
    def test_limit_within_window(self) -> None:
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(2, 60, clock=clock)
        self.assertEqual([limiter.allow("ip:a") for _ in range(3)], [True, True, False])

    def test_keys_are_independent(self) -> None:
        limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
        self.assertTrue(limiter.allow("ip:a"))
        self.assertTrue(limiter.allow("ip:b"))
        self.assertFalse(limiter.allow("ip:a"))

    def test_window_resets(self) -> None:
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        self.assertTrue(limiter.allow("ip:a"))
        clock.now = 59.9
        self.assertFalse(limiter.allow("ip:a"))
        clock.now = 60.0
        self.assertTrue(limiter.allow("ip:a"))

    def test_expired_windows_are_dropped(self) -> None:
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(5, 60, clock=clock)
        for i in range(10_000):
            limiter.allow(f"ip:{i}")
        self.assertEqual(len(limiter._windows), 10_000)
        clock.now = 3600.0
        self.assertTrue(limiter.allow("ip:new"))
        self.assertEqual(list(limiter._windows), ["ip:new"])

    def test_live_windows_survive_sweep(self) -> None:
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        limiter.allow("ip:old")
        clock.now = 30.0
        limiter.allow("ip:recent")
        clock.now = 61.0
        limiter.allow("ip:new")
        self.assertEqual(set(limiter._windows), {"ip:recent", "ip:new"})
        self.assertFalse(limiter.allow("ip:recent"))

    def test_retry_after_counts_down_to_window_end(self) -> None:
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        self.assertEqual(limiter.retry_after("ip:a"), 0.0)
        limiter.allow("ip:a")
        clock.now = 45.0
        self.assertFalse(limiter.allow("ip:a"))
        self.assertEqual(limiter.retry_after("ip:a"), 15.0)


if __name__ == "__main__":
    unittest.main()
