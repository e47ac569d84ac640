from chainledger.ports.raw_tx_source_port import RawTransactionSourcePort
from chainledger.core.dto import RawPage, RawTx
from typing import Dict, List, Optional

class StaticChainAdapter(RawTransactionSourcePort):
    """In-memory source for tests and offline runs. Items are served in the order given."""

    def __init__(self,
                 transactions: Optional[List[Optional[RawTx]]] = None,
                 balances: Optional[Dict[str, int]] = None,
                 page_size: int = 25,
                 ):
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        self._txs = list(transactions or [])
        self._balances = balances or {}
        self._page_size = page_size
        self.page_calls = 0

    def fetch_page(self, address, cursor = None):
        self.page_calls += 1
        start = int(cursor) if cursor else 0
        end = start + self._page_size
        items = self._txs[start:end]
        return RawPage(items=items, next_cursor=str(end) if end < len(self._txs) else None)

    def fetch_current_balance(self, address):
        return int(self._balances.get(address, 0))
