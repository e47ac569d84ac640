from __future__ import annotations

from typing import Iterable, List, Optional

from chainledger.core.dto import RawTx
from chainledger.core.enums import Chain, Description
from chainledger.core.models import TransactionRecord
from chainledger.core.units import to_display_units
from chainledger.ports.ledger_port import BalanceReconstructor, ChainNormalizer


def account_keys(tx: RawTx) -> List[Optional[str]]:
    message = (tx.get("transaction") or {}).get("message") or {}
    keys = message.get("accountKeys") or []
    return [k if isinstance(k, str) else (k or {}).get("pubkey") for k in keys]


def _balance_at(balances: Optional[list], idx: int) -> int:
    if not balances or idx >= len(balances):
        return 0
    return int(balances[idx] or 0)


def lamports_delta(tx: RawTx, address: str) -> Optional[int]:
    """post - pre for `address`, or None if the address is not in the key list."""
    keys = account_keys(tx)
    if address not in keys:
        return None
    idx = keys.index(address)
    meta = tx.get("meta") or {}
    return _balance_at(meta.get("postBalances"), idx) - _balance_at(meta.get("preBalances"), idx)


class SolNormalizer(ChainNormalizer):
    """
    Direction and amount come from the address' own balance snapshots.

    Fees are included in the delta, so a fee payer receiving a small amount
    can show up as "Sent". Counterparties are not derivable without parsing
    instructions and are left empty.
    """

    chain = Chain.SOL

    def normalize(self, address: str, raw: Optional[RawTx]) -> Optional[TransactionRecord]:
        if raw is None:
            return None

        delta = 0
        if raw.get("meta"):
            delta = lamports_delta(raw, address) or 0

        signatures = (raw.get("transaction") or {}).get("signatures") or []
        return TransactionRecord.from_timestamp(
            int(raw.get("blockTime") or 0),
            amount=to_display_units(abs(delta), Chain.SOL),
            crypto=Chain.SOL,
            description=Description.RECEIVED if delta >= 0 else Description.SENT,
            tx_hash=signatures[0] if signatures else None,
        )


class SolReconstructor(BalanceReconstructor):
    chain = Chain.SOL

    def balance_delta(self, address: str, raws: Iterable[Optional[RawTx]], cutoff_ms: int) -> int:
        lamports = 0
        for tx in raws:
            if not tx or not tx.get("meta"):
                continue
            block_time = tx.get("blockTime")
            if not block_time or int(block_time) * 1000 > cutoff_ms:
                continue
            delta = lamports_delta(tx, address)
            if delta is not None:
                lamports += delta
        return lamports
