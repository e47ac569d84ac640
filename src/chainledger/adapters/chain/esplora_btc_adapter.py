from typing import Any, Dict, Optional

from chainledger.config.settings import (
    BTC_API_URL,
    BTC_CACHE_TTL_SEC,
    BTC_PAGE_DELAY_SEC,
)
from chainledger.adapters.chain.http_source import HttpSource
from chainledger.core.dto import RawPage
from chainledger.core.errors import DataSourceError


class EsploraBtcAdapter(HttpSource):
    """
    Blockstream Esplora. Pages are newest first: the first call returns
    mempool txs plus the newest confirmed ones, later calls continue the
    confirmed chain after the last seen txid.
    """

    label = "BTC"

    def __init__(self, base_url: str = BTC_API_URL, **kwargs: Any) -> None:
        kwargs.setdefault("page_delay_sec", BTC_PAGE_DELAY_SEC)
        kwargs.setdefault("cache_ttl_sec", BTC_CACHE_TTL_SEC)
        super().__init__(base_url, **kwargs)

    # ---------- port methods ----------

    def fetch_page(self, address: str, cursor: Optional[str] = None) -> RawPage:
        if cursor:
            url = f"{self._base_url}/address/{address}/txs/chain/{cursor}"
        else:
            url = f"{self._base_url}/address/{address}/txs"

        page = self._cached(f"btc:txs:{address}:{cursor or 'first'}", "GET", url, "tx fetch")
        if not isinstance(page, list):
            raise DataSourceError(f"Invalid BTC tx page: {page!r}")
        if not page:
            return RawPage(items=[], next_cursor=None)
        return RawPage(items=page, next_cursor=page[-1].get("txid"))

    def fetch_current_balance(self, address: str) -> int:
        url = f"{self._base_url}/address/{address}"
        data: Dict[str, Any] = self._cached(f"btc:addr:{address}", "GET", url, "addr fetch")
        chain = data.get("chain_stats") or {}
        mempool = data.get("mempool_stats") or {}
        return (
            int(chain.get("funded_txo_sum") or 0) - int(chain.get("spent_txo_sum") or 0)
            + int(mempool.get("funded_txo_sum") or 0) - int(mempool.get("spent_txo_sum") or 0)
        )
