import unittest

from chainledger.adapters.chain.rate_limiter import SimpleRateLimiter
from chainledger.adapters.chain.ttl_cache import TTLCache, shared_cache


class _Clock:
    def __init__(self, now=1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TTLCacheTests(unittest.TestCase):
    def test_hit_within_ttl_and_reload_after_expiry(self) -> None:
        clock = _Clock()
        cache = TTLCache(default_ttl_sec=30, clock=clock)
        loads = []

        def loader():
            loads.append(clock.now)
            return len(loads)

        self.assertEqual(cache.get_or_load("btc:txs:A:first", loader, ttl_sec=15), 1)
        clock.now += 15
        self.assertEqual(cache.get_or_load("btc:txs:A:first", loader, ttl_sec=15), 1)
        clock.now += 0.5
        self.assertEqual(cache.get_or_load("btc:txs:A:first", loader, ttl_sec=15), 2)
        self.assertEqual(len(loads), 2)

    def test_expired_entry_evicted_on_read(self) -> None:
        clock = _Clock()
        cache = TTLCache(default_ttl_sec=10, clock=clock)
        cache.set("k", "v")
        self.assertIn("k", cache)
        clock.now += 11
        cache.get("k")
        self.assertNotIn("k", cache)
        self.assertEqual(len(cache), 0)

    def test_loader_errors_are_not_cached(self) -> None:
        cache = TTLCache(clock=_Clock())

        def fail():
            raise RuntimeError("down")

        with self.assertRaises(RuntimeError):
            cache.get_or_load("k", fail)
        self.assertEqual(len(cache), 0)

    def test_shared_cache_is_process_wide(self) -> None:
        self.assertIs(shared_cache(), shared_cache())


class SimpleRateLimiterTests(unittest.TestCase):
    def test_waits_remaining_interval(self) -> None:
        clock = _Clock(50.0)
        slept = []

        def sleep(t):
            slept.append(t)
            clock.now += t

        rl = SimpleRateLimiter(0.2, clock=clock, sleep=sleep)
        rl.wait()
        clock.now += 0.05
        rl.wait()
        clock.now += 1.0
        rl.wait()

        self.assertEqual(len(slept), 1)
        self.assertAlmostEqual(slept[0], 0.15)

    def test_rejects_negative_interval(self) -> None:
        with self.assertRaises(ValueError):
            SimpleRateLimiter(-1)


if __name__ == "__main__":
    unittest.main()
