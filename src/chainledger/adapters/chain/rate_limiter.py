import time
import random
from typing import Callable


class SimpleRateLimiter:
    """Enforces a minimum interval between consecutive requests of one source."""

    def __init__(
        self,
        min_interval_sec: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval_sec < 0:
            raise ValueError("min_interval_sec must be >= 0")
        self._min_interval = min_interval_sec
        self._clock = clock
        self._sleep = sleep
        self._last_ts: float = float("-inf")

    def wait(self) -> None:
        elapsed = self._clock() - self._last_ts
        sleep_for = self._min_interval - elapsed
        if sleep_for > 0:
            self._sleep(sleep_for)
        self._last_ts = self._clock()


def backoff_sleep(attempt: int, base: float = 0.5, cap: float = 8.0) -> None:
    t = min(cap, base * (2 ** attempt))
    t *= 0.7 + random.random() * 0.6
    time.sleep(t)
