from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from chainledger.config.settings import (
    SOL_CACHE_TTL_SEC,
    SOL_DETAIL_BATCH_SIZE,
    SOL_PAGE_DELAY_SEC,
    SOL_RPC_URL,
    SOL_SIGNATURE_PAGE_SIZE,
)
from chainledger.adapters.chain.http_source import HttpSource
from chainledger.core.dto import RawPage, RawTx
from chainledger.core.errors import DataSourceError, RpcError


logger = logging.getLogger(__name__)


class SolanaRpcAdapter(HttpSource):
    """
    Solana JSON-RPC. History is two-step: signatures for the address
    (newest first, `before` cursor), then full transactions fetched in
    small JSON-RPC batches.
    """

    label = "SOL"

    def __init__(
        self,
        rpc_url: str = SOL_RPC_URL,
        signature_page_size: int = SOL_SIGNATURE_PAGE_SIZE,
        batch_size: int = SOL_DETAIL_BATCH_SIZE,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("page_delay_sec", SOL_PAGE_DELAY_SEC)
        kwargs.setdefault("cache_ttl_sec", SOL_CACHE_TTL_SEC)
        super().__init__(rpc_url, **kwargs)
        self._page_size = min(signature_page_size, SOL_SIGNATURE_PAGE_SIZE)
        self._batch_size = batch_size

    # ---------- internal ----------

    @staticmethod
    def _envelope(method: str, params: list, req_id: int = 1) -> Dict[str, Any]:
        return {"jsonrpc": "2.0", "id": req_id, "method": method, "params": params}

    @staticmethod
    def _result(resp: Any) -> Any:
        if not isinstance(resp, dict):
            raise DataSourceError(f"Invalid SOL RPC response: {resp!r}")
        err = resp.get("error")
        if err:
            raise RpcError(f"SOL RPC error: {err.get('message')}", code=err.get("code"))
        return resp.get("result")

    def _rpc(self, method: str, params: list) -> Any:
        resp = self._request("POST", self._base_url, f"RPC {method}", json=self._envelope(method, params))
        return self._result(resp)

    def _rpc_batch(self, method: str, param_sets: List[list]) -> List[Any]:
        payload = [self._envelope(method, p, req_id=i) for i, p in enumerate(param_sets)]
        resp = self._request("POST", self._base_url, f"RPC {method} batch", json=payload)
        if isinstance(resp, dict):
            # whole batch rejected
            self._result(resp)
            raise DataSourceError(f"Invalid SOL RPC batch response: {resp!r}")
        if not isinstance(resp, list):
            raise DataSourceError(f"Invalid SOL RPC batch response: {resp!r}")
        ordered = sorted(resp, key=lambda r: r.get("id", 0) if isinstance(r, dict) else 0)
        return [self._result(r) for r in ordered]

    def _signature_page(self, address: str, cursor: Optional[str], limit: int) -> RawPage:
        opts: Dict[str, Any] = {"limit": limit}
        if cursor:
            opts["before"] = cursor
        sigs = self._cache.get_or_load(
            f"sol:sigs:{address}:{cursor or 'first'}:{limit}",
            lambda: self._rpc("getSignaturesForAddress", [address, opts]),
            ttl_sec=self._cache_ttl,
        ) or []
        next_cursor = sigs[-1].get("signature") if len(sigs) >= limit else None
        return RawPage(items=list(sigs), next_cursor=next_cursor)

    def fetch_transactions(self, signatures: List[str]) -> List[Optional[RawTx]]:
        out: List[Optional[RawTx]] = []
        for i in range(0, len(signatures), self._batch_size):
            chunk = signatures[i:i + self._batch_size]
            details = self._rpc_batch(
                "getTransaction",
                [[sig, {"encoding": "json", "maxSupportedTransactionVersion": 0}] for sig in chunk],
            )
            out.extend(details)
        return out

    # ---------- port methods ----------

    def fetch_page(self, address: str, cursor: Optional[str] = None) -> RawPage:
        """One signature page resolved to full transactions; the cursor is the last signature."""
        page = self._signature_page(address, cursor, self._page_size)
        signatures = [s["signature"] for s in page.items if s.get("signature")]
        return RawPage(items=self.fetch_transactions(signatures), next_cursor=page.next_cursor)

    def fetch_history(
        self,
        address: str,
        limit: int,
        cutoff_ms: Optional[int] = None,
    ) -> List[Optional[RawTx]]:
        sig_infos: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while len(sig_infos) < limit:
            page = self._signature_page(address, cursor, min(self._page_size, limit - len(sig_infos)))
            sig_infos.extend(page.items)
            if not page.items or not page.next_cursor:
                break
            cursor = page.next_cursor
        self._warn_if_capped(address, len(sig_infos), limit, cutoff_ms)

        if cutoff_ms is not None:
            sig_infos = [
                s for s in sig_infos
                if s.get("blockTime") and int(s["blockTime"]) * 1000 <= cutoff_ms
            ]

        signatures = [s["signature"] for s in sig_infos if s.get("signature")]
        logger.debug("SOL fetching %d transactions for %s", len(signatures), address)
        return self.fetch_transactions(signatures)

    def fetch_current_balance(self, address: str) -> int:
        result = self._rpc("getBalance", [address, {"commitment": "processed"}])
        return int((result or {}).get("value") or 0)
