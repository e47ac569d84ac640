from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable

from chainledger.core.models import TransactionRecord
from chainledger.io.schemas import RECORD_FIELDS, records_to_dicts


def write_transactions_json(
    records: Iterable[TransactionRecord],
    out_dir: str,
    filename: str = "transactions.json",
) -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(records_to_dicts(records), f, indent=2)

    return str(out_path)


def write_transactions_csv(
    records: Iterable[TransactionRecord],
    out_dir: str,
    filename: str = "transactions.csv",
) -> str:
    """
    Spreadsheet-friendly export, one row per record, empty cells for
    unknown counterparties.
    """
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename
    with out_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=RECORD_FIELDS)
        writer.writeheader()
        for row in records_to_dicts(records):
            writer.writerow({k: ("" if v is None else v) for k, v in row.items()})

    return str(out_path)


def load_fixture(path: str) -> Dict[str, Any]:
    """Reads a `{"transactions": [...], "balance": <int>}` fixture for offline runs."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Fixture {path} must be a JSON object")
    txs = data.get("transactions") or []
    if not isinstance(txs, list):
        raise ValueError(f"Fixture {path}: 'transactions' must be a list")
    return {"transactions": txs, "balance": int(data.get("balance") or 0)}
