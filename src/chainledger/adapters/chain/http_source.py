from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from chainledger.config import settings
from chainledger.adapters.chain.rate_limiter import SimpleRateLimiter, backoff_sleep
from chainledger.adapters.chain.ttl_cache import TTLCache, shared_cache
from chainledger.core.errors import DataSourceError, RateLimitError, TransportError
from chainledger.ports.raw_tx_source_port import RawTransactionSourcePort


logger = logging.getLogger(__name__)


class HttpSource(RawTransactionSourcePort):
    """Shared plumbing for the HTTP/RPC sources: session, throttle, cache, retries."""

    label = "HTTP"

    def __init__(
        self,
        base_url: str,
        page_delay_sec: float,
        cache_ttl_sec: float,
        cache: Optional[TTLCache] = None,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[SimpleRateLimiter] = None,
        timeout_sec: int = settings.HTTP_TIMEOUT_SEC,
        max_retries: int = settings.MAX_RETRIES,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._cache_ttl = cache_ttl_sec
        self._cache = cache if cache is not None else shared_cache()
        self._session = session or requests.Session()
        self._rl = rate_limiter or SimpleRateLimiter(page_delay_sec)
        self._timeout = timeout_sec
        self._max_retries = max(1, max_retries)

    # ---------- internal ----------

    def _request(self, method: str, url: str, what: str, **kwargs: Any) -> Any:
        last_err: Optional[TransportError] = None

        for attempt in range(self._max_retries):
            if attempt:
                backoff_sleep(attempt - 1)
            self._rl.wait()
            logger.debug("%s %s %s", self.label, method, url)
            try:
                resp = self._session.request(method, url, timeout=self._timeout, **kwargs)
            except requests.RequestException as e:
                last_err = TransportError(f"{self.label} {what} failed: {e}")
                continue

            if resp.status_code == 429:
                last_err = RateLimitError(f"{self.label} {what} failed: 429", status_code=429)
                continue
            if not resp.ok:
                last_err = TransportError(
                    f"{self.label} {what} failed: {resp.status_code}",
                    status_code=resp.status_code,
                )
                continue

            try:
                return resp.json()
            except ValueError as e:
                raise DataSourceError(f"{self.label} {what} returned invalid JSON") from e

        raise last_err or TransportError(f"{self.label} {what} failed")

    def _cached(self, key: str, method: str, url: str, what: str, **kwargs: Any) -> Any:
        return self._cache.get_or_load(
            key,
            lambda: self._request(method, url, what, **kwargs),
            ttl_sec=self._cache_ttl,
        )
