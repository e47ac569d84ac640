from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
import sys
from typing import List, Optional

from chainledger.config import settings
from chainledger.core.enums import Chain
from chainledger.core.errors import ChainLedgerError
from chainledger.core.units import parse_day
from chainledger.services.dispatcher import ChainDispatcher, build_default_dispatcher
from chainledger.services.ledger_service import LedgerService
from chainledger.io.schemas import dec_to_str, records_to_dicts
from chainledger.io.output_writer import load_fixture, write_transactions_csv, write_transactions_json

from chainledger.adapters.chain.static_chain_adapter import StaticChainAdapter


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="chainledger", description="Transaction history and balances (BTC, ETH, SOL)")
    p.add_argument("--address", required=False, help="Address to query")
    p.add_argument("--crypto", required=False, help="Chain symbol: BTC, ETH or SOL")
    p.add_argument("--txs", action="store_true", help="List recent transactions (default action)")
    p.add_argument("--balance", action="store_true", help="Print the current balance")
    p.add_argument("--balance-at", metavar="YYYY-MM-DD", help="Print the balance at end of day UTC")
    p.add_argument("--limit", type=int, default=settings.HISTORY_LIMIT, help="Max transactions to list")
    p.add_argument("--out", help="Write transactions.json to this folder instead of stdout")
    p.add_argument("--csv", action="store_true", help="Also write transactions.csv (requires --out)")
    p.add_argument("--fixture", help="JSON file with raw transactions for offline runs (dev/testing)")
    p.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (DEBUG, INFO, WARNING...)")
    return p


def _ts() -> str:
    return dt.datetime.now().strftime("%H:%M:%S")


def _status(message: str) -> None:
    print(f"[{_ts()}] {message}", file=sys.stderr)


def _build_dispatcher(fixture: Optional[str], chain: Chain, address: str) -> ChainDispatcher:
    if not fixture:
        return build_default_dispatcher()
    data = load_fixture(fixture)
    # the balance in a fixture belongs to whatever address is queried
    source = StaticChainAdapter(transactions=data["transactions"], balances={address: data["balance"]})
    return ChainDispatcher.from_sources({chain: source})


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not args.address:
        print("Missing --address", file=sys.stderr)
        return 2
    if not args.crypto:
        print("Missing --crypto", file=sys.stderr)
        return 2
    if args.csv and not args.out:
        print("--csv requires --out", file=sys.stderr)
        return 2

    try:
        chain = Chain.parse(args.crypto)
        day = parse_day(args.balance_at) if args.balance_at else None
        dispatcher = _build_dispatcher(args.fixture, chain, args.address)
    except (ChainLedgerError, ValueError, OSError) as exc:
        _status(f"Error: {exc}")
        return 1 if isinstance(exc, OSError) else 2

    svc = LedgerService(dispatcher, history_limit=args.limit)
    list_txs = args.txs or not (args.balance or args.balance_at)

    try:
        if list_txs:
            _status(f"Fetching {chain.value} transactions for {args.address}...")
            records = svc.list_transactions(args.address, chain.value)
            _status(f"Fetched {len(records)} transaction(s)")
            if args.out:
                print(f"Wrote: {write_transactions_json(records, args.out)}")
                if args.csv:
                    print(f"Wrote: {write_transactions_csv(records, args.out)}")
            else:
                print(json.dumps(records_to_dicts(records), indent=2))

        if args.balance:
            bal = svc.current_balance(args.address, chain.value)
            print(f"Current {chain.value} balance: {dec_to_str(bal)}")

        if day is not None:
            bal = svc.balance_as_of(args.address, chain.value, day)
            print(f"{chain.value} balance on {day.isoformat()}: {dec_to_str(bal)}")
    except ChainLedgerError as exc:
        _status(f"Error: {exc.__class__.__name__}: {exc}")
        return 1
    except (TypeError, ValueError) as exc:
        # malformed upstream data, not a usage error
        _status(f"Error: unexpected transaction data: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
