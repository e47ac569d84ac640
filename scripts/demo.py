from __future__ import annotations

import argparse
import json

from chainledger.io.schemas import dec_to_str, records_to_dicts
from chainledger.services.dispatcher import build_default_dispatcher
from chainledger.services.ledger_service import LedgerService


SAMPLE_ADDRESSES = {
    "BTC": "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kygt080",
    "ETH": "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
    "SOL": "11111111111111111111111111111111",
}


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--crypto", default="ETH", choices=sorted(SAMPLE_ADDRESSES))
    parser.add_argument("--date", default="2023-12-31", help="Historical balance date (YYYY-MM-DD)")
    args = parser.parse_args()

    address = SAMPLE_ADDRESSES[args.crypto]
    svc = LedgerService(build_default_dispatcher())

    txs = svc.list_transactions(address, args.crypto)
    print(f"Sample {args.crypto} transactions (first 3):")
    print(json.dumps(records_to_dicts(txs[:3]), indent=2))

    print(f"Current {args.crypto} balance: {dec_to_str(svc.current_balance(address, args.crypto))}")
    bal = svc.balance_as_of(address, args.crypto, args.date)
    print(f"{args.crypto} balance on {args.date}: {dec_to_str(bal)}")


if __name__ == "__main__":
    main()
