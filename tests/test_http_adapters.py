import unittest
from unittest import mock

import requests

from chainledger.adapters.chain.esplora_btc_adapter import EsploraBtcAdapter
from chainledger.adapters.chain.ethvm_eth_adapter import EthVmEthAdapter
from chainledger.adapters.chain.rate_limiter import SimpleRateLimiter
from chainledger.adapters.chain.solana_rpc_adapter import SolanaRpcAdapter
from chainledger.adapters.chain.ttl_cache import TTLCache
from chainledger.core.errors import DataSourceError, RateLimitError, RpcError, TransportError


class _FakeResponse:
    def __init__(self, status_code=200, payload=None) -> None:
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _FakeSession:
    """Routes requests through a handler(method, url, kwargs) -> _FakeResponse."""

    def __init__(self, handler) -> None:
        self._handler = handler
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, kwargs))
        return self._handler(method, url, kwargs)


def _kwargs(session):
    return dict(session=session, cache=TTLCache(), rate_limiter=SimpleRateLimiter(0))


class EsploraBtcAdapterTests(unittest.TestCase):
    BASE = "https://esplora.test/api"

    def test_follows_last_txid_until_empty_page(self) -> None:
        pages = {
            f"{self.BASE}/address/A/txs": [{"txid": "t1"}, {"txid": "t2"}],
            f"{self.BASE}/address/A/txs/chain/t2": [{"txid": "t3"}],
            f"{self.BASE}/address/A/txs/chain/t3": [],
        }
        session = _FakeSession(lambda m, url, kw: _FakeResponse(200, pages[url]))
        src = EsploraBtcAdapter(self.BASE, **_kwargs(session))

        txs = src.fetch_history("A", limit=200)

        self.assertEqual([t["txid"] for t in txs], ["t1", "t2", "t3"])
        self.assertEqual(len(session.calls), 3)

    def test_history_stops_at_limit(self) -> None:
        session = _FakeSession(lambda m, url, kw: _FakeResponse(200, [{"txid": url[-2:] + str(i)} for i in range(25)]))
        src = EsploraBtcAdapter(self.BASE, **_kwargs(session))
        self.assertEqual(len(src.fetch_history("A", limit=30)), 30)
        self.assertEqual(len(session.calls), 2)

    def test_pages_are_cached(self) -> None:
        session = _FakeSession(lambda m, url, kw: _FakeResponse(200, [{"txid": "t1"}]))
        src = EsploraBtcAdapter(self.BASE, **_kwargs(session))
        src.fetch_page("A")
        src.fetch_page("A")
        self.assertEqual(len(session.calls), 1)

    def test_balance_includes_mempool(self) -> None:
        payload = {
            "chain_stats": {"funded_txo_sum": 1000, "spent_txo_sum": 300},
            "mempool_stats": {"funded_txo_sum": 50, "spent_txo_sum": 20},
        }
        session = _FakeSession(lambda m, url, kw: _FakeResponse(200, payload))
        src = EsploraBtcAdapter(self.BASE, **_kwargs(session))
        self.assertEqual(src.fetch_current_balance("A"), 730)

    def test_non_success_status_raises_and_is_not_cached(self) -> None:
        session = _FakeSession(lambda m, url, kw: _FakeResponse(500))
        src = EsploraBtcAdapter(self.BASE, **_kwargs(session))
        with self.assertRaises(TransportError) as ctx:
            src.fetch_page("A")
        self.assertEqual(ctx.exception.status_code, 500)
        with self.assertRaises(TransportError):
            src.fetch_page("A")
        self.assertEqual(len(session.calls), 2)

    def test_rate_limited_status(self) -> None:
        session = _FakeSession(lambda m, url, kw: _FakeResponse(429))
        src = EsploraBtcAdapter(self.BASE, **_kwargs(session))
        with self.assertRaises(RateLimitError):
            src.fetch_current_balance("A")

    def test_network_error_becomes_transport_error(self) -> None:
        def boom(m, url, kw):
            raise requests.ConnectionError("refused")

        src = EsploraBtcAdapter(self.BASE, **_kwargs(_FakeSession(boom)))
        with self.assertRaises(TransportError):
            src.fetch_page("A")

    def test_invalid_json(self) -> None:
        src = EsploraBtcAdapter(self.BASE, **_kwargs(_FakeSession(lambda m, url, kw: _FakeResponse(200))))
        with self.assertRaises(DataSourceError):
            src.fetch_page("A")

    def test_exhausted_retries_raise_last_status(self) -> None:
        statuses = iter([503, 502])
        session = _FakeSession(lambda m, url, kw: _FakeResponse(next(statuses)))
        src = EsploraBtcAdapter(self.BASE, max_retries=2, **_kwargs(session))
        with mock.patch("chainledger.adapters.chain.http_source.backoff_sleep") as backoff:
            with self.assertRaises(TransportError) as ctx:
                src.fetch_page("A")
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(len(session.calls), 2)
        backoff.assert_called_once_with(0)

    def test_zero_retries_still_makes_one_attempt(self) -> None:
        session = _FakeSession(lambda m, url, kw: _FakeResponse(504))
        src = EsploraBtcAdapter(self.BASE, max_retries=0, **_kwargs(session))
        with self.assertRaises(TransportError) as ctx:
            src.fetch_current_balance("A")
        self.assertEqual(ctx.exception.status_code, 504)
        self.assertEqual(len(session.calls), 1)


class EthVmEthAdapterTests(unittest.TestCase):
    BASE = "https://ethvm.test"

    def test_cursor_pagination(self) -> None:
        def handler(m, url, kw):
            if kw["params"].get("cursor") == "c2":
                return _FakeResponse(200, {"transactions": [{"hash": "0x3"}]})
            return _FakeResponse(200, {"items": [{"hash": "0x1"}, {"hash": "0x2"}], "nextPageParams": {"cursor": "c2"}})

        session = _FakeSession(handler)
        src = EthVmEthAdapter(self.BASE, **_kwargs(session))

        txs = src.fetch_history("0xabc", limit=2000)

        self.assertEqual([t["hash"] for t in txs], ["0x1", "0x2", "0x3"])
        self.assertEqual(session.calls[0][1], f"{self.BASE}/v2/addresses/0xabc/transactions")
        self.assertEqual(session.calls[0][2]["params"], {"limit": 100})

    def test_balance_key_paths(self) -> None:
        for payload, expected in (
            ({"nativeBalance": {"wei": "123456789012345678901"}}, 123456789012345678901),
            ({"balance": {"wei": "7"}}, 7),
            ({}, 0),
        ):
            session = _FakeSession(lambda m, url, kw, p=payload: _FakeResponse(200, p))
            src = EthVmEthAdapter(self.BASE, **_kwargs(session))
            self.assertEqual(src.fetch_current_balance("0xabc"), expected)


class SolanaRpcAdapterTests(unittest.TestCase):
    URL = "https://solana.test"

    def _handler(self, sigs, details, errors=None):
        errors = errors or {}

        def handler(m, url, kw):
            body = kw["json"]
            if isinstance(body, list):
                out = []
                for req in reversed(body):
                    sig = req["params"][0]
                    if sig in errors:
                        out.append({"jsonrpc": "2.0", "id": req["id"], "error": {"code": -32009, "message": errors[sig]}})
                    else:
                        out.append({"jsonrpc": "2.0", "id": req["id"], "result": details.get(sig)})
                return _FakeResponse(200, out)
            if body["method"] == "getSignaturesForAddress":
                return _FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "result": sigs})
            if body["method"] == "getBalance":
                return _FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "result": {"context": {}, "value": 2_500_000_000}})
            return _FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Method not found"}})

        return handler

    def test_history_fetches_details_in_batches_in_order(self) -> None:
        sigs = [{"signature": f"s{i}", "blockTime": 1700000000 - i} for i in range(12)]
        details = {f"s{i}": {"blockTime": 1700000000 - i, "n": i} for i in range(12) if i != 5}
        session = _FakeSession(self._handler(sigs, details))
        src = SolanaRpcAdapter(self.URL, **_kwargs(session))

        txs = src.fetch_history("A", limit=200)

        self.assertEqual(len(txs), 12)
        self.assertIsNone(txs[5])
        self.assertEqual([t["n"] for t in txs if t], [i for i in range(12) if i != 5])
        # one signature call + two batches (10 + 2)
        self.assertEqual(len(session.calls), 3)
        self.assertEqual(session.calls[0][2]["json"]["params"], ["A", {"limit": 200}])

    def test_cutoff_skips_newer_signatures(self) -> None:
        sigs = [
            {"signature": "new", "blockTime": 1800000000},
            {"signature": "old", "blockTime": 1600000000},
            {"signature": "pending", "blockTime": None},
        ]
        session = _FakeSession(self._handler(sigs, {"old": {"blockTime": 1600000000}}))
        src = SolanaRpcAdapter(self.URL, **_kwargs(session))

        txs = src.fetch_history("A", limit=1000, cutoff_ms=1700000000 * 1000)

        self.assertEqual(txs, [{"blockTime": 1600000000}])
        batch = session.calls[1][2]["json"]
        self.assertEqual([r["params"][0] for r in batch], ["old"])

    def test_rpc_error_object_raises(self) -> None:
        sigs = [{"signature": "s0", "blockTime": 1}]
        session = _FakeSession(self._handler(sigs, {}, errors={"s0": "Transaction history is not available"}))
        src = SolanaRpcAdapter(self.URL, **_kwargs(session))
        with self.assertRaises(RpcError) as ctx:
            src.fetch_history("A", limit=10)
        self.assertEqual(ctx.exception.code, -32009)

    def test_balance_at_processed_commitment(self) -> None:
        session = _FakeSession(self._handler([], {}))
        src = SolanaRpcAdapter(self.URL, **_kwargs(session))
        self.assertEqual(src.fetch_current_balance("A"), 2_500_000_000)
        self.assertEqual(session.calls[0][2]["json"]["params"], ["A", {"commitment": "processed"}])

    def test_signature_paging_uses_before_cursor(self) -> None:
        seen = []

        def handler(m, url, kw):
            body = kw["json"]
            if isinstance(body, list):
                return _FakeResponse(200, [{"id": r["id"], "result": {}} for r in body])
            opts = body["params"][1]
            seen.append(dict(opts))
            if "before" not in opts:
                return _FakeResponse(200, {"result": [{"signature": "a", "blockTime": 2}, {"signature": "b", "blockTime": 1}]})
            return _FakeResponse(200, {"result": [{"signature": "c", "blockTime": 1}]})

        src = SolanaRpcAdapter(self.URL, signature_page_size=2, **_kwargs(_FakeSession(handler)))

        self.assertEqual(len(src.fetch_history("A", limit=5)), 3)
        self.assertEqual(seen, [{"limit": 2}, {"limit": 2, "before": "b"}])

    def test_fetch_page_returns_full_transactions(self) -> None:
        sigs = [{"signature": "s0", "blockTime": 2}, {"signature": "s1", "blockTime": 1}]
        details = {"s0": {"blockTime": 2, "n": 0}, "s1": {"blockTime": 1, "n": 1}}
        session = _FakeSession(self._handler(sigs, details))
        src = SolanaRpcAdapter(self.URL, signature_page_size=2, **_kwargs(session))

        page = src.fetch_page("A")

        self.assertEqual(page.items, [details["s0"], details["s1"]])
        self.assertEqual(page.next_cursor, "s1")
        self.assertEqual(session.calls[0][2]["json"]["params"], ["A", {"limit": 2}])

    def test_capped_signatures_warn_before_cutoff_filtering(self) -> None:
        # both signatures are after the cutoff, so nothing survives the filter
        sigs = [{"signature": "s0", "blockTime": 1800000001}, {"signature": "s1", "blockTime": 1800000000}]
        session = _FakeSession(self._handler(sigs, {}))
        src = SolanaRpcAdapter(self.URL, signature_page_size=2, **_kwargs(session))

        with self.assertLogs("chainledger.ports.raw_tx_source_port", level="WARNING") as logs:
            txs = src.fetch_history("A", limit=2, cutoff_ms=1700000000 * 1000)

        self.assertEqual(txs, [])
        self.assertIn("SOL history for A hit the 2 tx cap", logs.output[0])


if __name__ == "__main__":
    unittest.main()
