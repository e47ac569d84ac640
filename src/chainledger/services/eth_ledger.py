from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from chainledger.core.dto import RawTx
from chainledger.core.enums import Chain, Description
from chainledger.core.models import TransactionRecord
from chainledger.core.units import to_display_units
from chainledger.ports.ledger_port import BalanceReconstructor, ChainNormalizer


logger = logging.getLogger(__name__)


# -------------------------
# Raw field accessors
# EthVM and explorer-style payloads name the same fields differently.
# -------------------------

def tx_from(tx: RawTx) -> Optional[str]:
    return tx.get("from") or tx.get("sender") or None


def tx_to(tx: RawTx) -> Optional[str]:
    return tx.get("to") or tx.get("receiver") or None


def tx_timestamp(tx: RawTx) -> int:
    return int(tx.get("timestamp") or tx.get("blockTimestamp") or 0)


def tx_hash(tx: RawTx) -> Optional[str]:
    return tx.get("hash") or tx.get("txHash") or tx.get("transactionHash")


def quantity(raw: Any) -> int:
    """Integer from an int, a decimal string or a 0x-prefixed hex string."""
    if isinstance(raw, str):
        s = raw.strip()
        if s[:2].lower() == "0x":
            return int(s, 16) if len(s) > 2 else 0
        return int(s)
    return int(raw)


def value_wei(tx: RawTx) -> int:
    if tx.get("valueWei") is not None:
        return quantity(tx["valueWei"])
    value = tx.get("value")
    if isinstance(value, dict):
        return quantity(value.get("wei") or 0)
    if value is not None:
        return quantity(value)
    return 0


def gas_cost_wei(tx: RawTx) -> Optional[int]:
    """gasUsed * gasPrice, or None if either is missing or unparseable."""
    gas_used: Any = tx.get("gasUsed")
    if gas_used is None:
        gas_used = (tx.get("receipt") or {}).get("gasUsed")
    gas_price: Any = tx.get("gasPriceWei")
    if gas_price is None and isinstance(tx.get("gasPrice"), dict):
        gas_price = tx["gasPrice"].get("wei")
    if gas_used is None or gas_price is None:
        return None
    try:
        return quantity(gas_used) * quantity(gas_price)
    except (TypeError, ValueError):
        return None


def _same(a: Optional[str], b: str) -> bool:
    return a is not None and a.lower() == b.lower()


class EthNormalizer(ChainNormalizer):
    chain = Chain.ETH

    def normalize(self, address: str, raw: Optional[RawTx]) -> Optional[TransactionRecord]:
        if raw is None:
            return None

        from_address = tx_from(raw)
        to_address = tx_to(raw)
        wei = value_wei(raw)
        calldata = raw.get("input")

        description = Description.TRANSFER
        if not to_address:
            description = Description.CONTRACT_CREATION
        if calldata and calldata != "0x" and to_address:
            description = Description.CONTRACT_CALL

        # direction labels override, but only for value-bearing txs
        if wei > 0 and _same(from_address, address):
            description = Description.SENT
        if wei > 0 and _same(to_address, address):
            description = Description.RECEIVED

        return TransactionRecord.from_timestamp(
            tx_timestamp(raw),
            amount=to_display_units(abs(wei), Chain.ETH),
            crypto=Chain.ETH,
            description=description,
            from_address=from_address,
            to_address=to_address,
            tx_hash=tx_hash(raw),
        )


class EthReconstructor(BalanceReconstructor):
    """
    Replays native ETH value transfers plus gas paid on outgoing txs.

    Approximation: internal transactions, contract-induced balance changes
    and block rewards are not visible in the transaction list.
    """

    chain = Chain.ETH

    def balance_delta(self, address: str, raws: Iterable[Optional[RawTx]], cutoff_ms: int) -> int:
        wei = 0
        for tx in raws:
            if not tx:
                continue
            if tx_timestamp(tx) * 1000 > cutoff_ms:
                continue

            value = value_wei(tx)
            outgoing = _same(tx_from(tx), address)
            if outgoing:
                wei -= value
            if _same(tx_to(tx), address):
                wei += value

            if outgoing:
                gas = gas_cost_wei(tx)
                if gas is None:
                    logger.debug("gas fields missing for %s, gas not deducted", tx_hash(tx))
                else:
                    wei -= gas
        return wei
