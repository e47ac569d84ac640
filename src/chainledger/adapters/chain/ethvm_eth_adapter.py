from typing import Any, Dict, Optional

from chainledger.config.settings import (
    ETH_API_URL,
    ETH_CACHE_TTL_SEC,
    ETH_PAGE_DELAY_SEC,
    ETH_PAGE_SIZE,
)
from chainledger.adapters.chain.http_source import HttpSource
from chainledger.core.dto import RawPage
from chainledger.core.errors import DataSourceError


class EthVmEthAdapter(HttpSource):

    label = "ETH"

    def __init__(self, base_url: str = ETH_API_URL, page_size: int = ETH_PAGE_SIZE, **kwargs: Any) -> None:
        kwargs.setdefault("page_delay_sec", ETH_PAGE_DELAY_SEC)
        kwargs.setdefault("cache_ttl_sec", ETH_CACHE_TTL_SEC)
        super().__init__(base_url, **kwargs)
        self._page_size = page_size

    # ---------- port methods ----------

    def fetch_page(self, address: str, cursor: Optional[str] = None) -> RawPage:
        url = f"{self._base_url}/v2/addresses/{address}/transactions"
        params: Dict[str, Any] = {"limit": self._page_size}
        if cursor:
            params["cursor"] = cursor

        data = self._cached(
            f"eth:txs:{address}:{cursor or 'first'}", "GET", url, "tx fetch", params=params,
        )
        if not isinstance(data, dict):
            raise DataSourceError(f"Invalid ETH tx page: {data!r}")

        items = data.get("items") or data.get("transactions") or []
        next_cursor = (data.get("nextPageParams") or {}).get("cursor") or None
        return RawPage(items=list(items), next_cursor=next_cursor)

    def fetch_current_balance(self, address: str) -> int:
        url = f"{self._base_url}/v2/addresses/{address}"
        data: Dict[str, Any] = self._cached(f"eth:addr:{address}", "GET", url, "addr fetch")
        wei = (data.get("nativeBalance") or {}).get("wei")
        if wei is None:
            wei = (data.get("balance") or {}).get("wei")
        return int(wei or 0)
