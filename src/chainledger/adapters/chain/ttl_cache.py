from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from chainledger.config import settings


logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    """
    key -> (value, inserted_at) map with expiry checked on read.

    There is no in-flight de-duplication: two callers missing the same key
    both run the loader, and the last write wins.
    """

    def __init__(
        self,
        default_ttl_sec: float = settings.DEFAULT_CACHE_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl_sec
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str, ttl_sec: Optional[float] = None) -> Any:
        hit = self._entries.get(key)
        if hit is None:
            return _MISSING
        value, inserted_at = hit
        ttl = self._default_ttl if ttl_sec is None else ttl_sec
        if self._clock() - inserted_at > ttl:
            del self._entries[key]
            return _MISSING
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (value, self._clock())

    def get_or_load(self, key: str, loader: Callable[[], Any], ttl_sec: Optional[float] = None) -> Any:
        value = self.get(key, ttl_sec)
        if value is not _MISSING:
            logger.debug("cache hit %s", key)
            return value
        value = loader()
        self.set(key, value)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


_shared: Optional[TTLCache] = None


def shared_cache() -> TTLCache:
    """Process-wide cache used when a source is built without one."""
    global _shared
    if _shared is None:
        _shared = TTLCache()
    return _shared
