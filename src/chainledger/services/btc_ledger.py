from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, List, Optional

from chainledger.core.dto import RawTx
from chainledger.core.enums import Chain, Description
from chainledger.core.models import TransactionRecord
from chainledger.core.units import to_display_units
from chainledger.ports.ledger_port import BalanceReconstructor, ChainNormalizer


def outputs_to(tx: RawTx, address: str) -> int:
    return sum(
        int(v.get("value") or 0)
        for v in tx.get("vout") or []
        if v.get("scriptpubkey_address") == address
    )


def inputs_from(tx: RawTx, address: str) -> int:
    total = 0
    for vin in tx.get("vin") or []:
        prevout = vin.get("prevout")
        if prevout and prevout.get("scriptpubkey_address") == address:
            total += int(prevout.get("value") or 0)
    return total


def net_delta_sats(tx: RawTx, address: str) -> int:
    return outputs_to(tx, address) - inputs_from(tx, address)


def first_counterparty(addresses: Iterable[Optional[str]], exclude: str) -> Optional[str]:
    """
    Heuristic: first address in iteration order that is not `exclude`.

    Multi-input/multi-output transactions have no single counterparty, so
    this is a best guess, not the "true" other side.
    """
    for addr in addresses:
        if addr and addr != exclude:
            return addr
    return None


def _input_addresses(tx: RawTx) -> List[Optional[str]]:
    return [(vin.get("prevout") or {}).get("scriptpubkey_address") for vin in tx.get("vin") or []]


def _output_addresses(tx: RawTx) -> List[Optional[str]]:
    return [v.get("scriptpubkey_address") for v in tx.get("vout") or []]


def _block_time(tx: RawTx) -> Optional[int]:
    bt = (tx.get("status") or {}).get("block_time")
    return int(bt) if bt else None


def _received_at(raw: Any) -> Optional[int]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, (int, float)):
        return int(raw)
    try:
        parsed = dt.datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return int(parsed.timestamp())


class BtcNormalizer(ChainNormalizer):
    chain = Chain.BTC

    def normalize(self, address: str, raw: Optional[RawTx]) -> Optional[TransactionRecord]:
        if raw is None:
            return None

        # confirmed time, then mempool receipt time, then epoch
        ts = _block_time(raw) or _received_at(raw.get("received_at")) or 0

        delta = net_delta_sats(raw, address)
        if delta >= 0:
            description = Description.RECEIVED
            from_address = first_counterparty(_input_addresses(raw), address)
            to_address: Optional[str] = address
        else:
            description = Description.SENT
            from_address = address
            to_address = first_counterparty(_output_addresses(raw), address)

        return TransactionRecord.from_timestamp(
            ts,
            amount=to_display_units(abs(delta), Chain.BTC),
            crypto=Chain.BTC,
            description=description,
            from_address=from_address,
            to_address=to_address,
            tx_hash=raw.get("txid"),
        )


class BtcReconstructor(BalanceReconstructor):
    chain = Chain.BTC

    def balance_delta(self, address: str, raws: Iterable[Optional[RawTx]], cutoff_ms: int) -> int:
        sats = 0
        for tx in raws:
            if not tx:
                continue
            block_time = _block_time(tx)
            # unconfirmed counts as after any cutoff
            if block_time is None or block_time * 1000 > cutoff_ms:
                continue
            sats += net_delta_sats(tx, address)
        return sats
