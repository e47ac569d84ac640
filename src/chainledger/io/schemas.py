from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List

from chainledger.core.models import TransactionRecord


RECORD_FIELDS = ["date", "time", "amount", "crypto", "description", "from", "to", "txHash"]


def dec_to_str(x: Decimal) -> str:
    # keep as string for JSON precision safety
    return format(x, "f")


def record_to_dict(r: TransactionRecord) -> Dict[str, Any]:
    return {
        "date": r.date.isoformat(),
        "time": r.time.strftime("%H:%M:%S"),
        "amount": dec_to_str(r.amount),
        "crypto": r.crypto.value,
        "description": r.description.value,
        "from": r.from_address,
        "to": r.to_address,
        "txHash": r.tx_hash,
    }


def records_to_dicts(records: Iterable[TransactionRecord]) -> List[Dict[str, Any]]:
    return [record_to_dict(r) for r in records]
