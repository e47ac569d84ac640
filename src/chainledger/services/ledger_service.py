from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import List, Union

from chainledger.config import settings
from chainledger.core.models import TransactionRecord
from chainledger.core.units import end_of_day_ms, to_display_units
from chainledger.services.dispatcher import ChainDispatcher


logger = logging.getLogger(__name__)


class LedgerService:
    """
    Query surface over the three chains.

    - History: raw txs normalized into TransactionRecords, source order
      (newest first for all supported APIs)
    - Balances: current balance from the API, historical balance replayed
      from ledger deltas up to end of day UTC
    - Fetch errors are not caught; a failed page aborts the whole query
    """

    def __init__(self, dispatcher: ChainDispatcher, history_limit: int = settings.HISTORY_LIMIT) -> None:
        self.dispatcher = dispatcher
        self.history_limit = history_limit

    def list_transactions(self, address: str, chain: str) -> List[TransactionRecord]:
        backend = self.dispatcher.resolve(chain)
        raws = backend.source.fetch_history(address, self.history_limit)
        records = backend.normalizer.normalize_all(address, raws)
        logger.debug("%s: %d raw txs -> %d records for %s", chain, len(raws), len(records), address)
        return records[: self.history_limit]

    def current_balance(self, address: str, chain: str) -> Decimal:
        backend = self.dispatcher.resolve(chain)
        base_units = backend.source.fetch_current_balance(address)
        return to_display_units(base_units, backend.normalizer.chain)

    def balance_as_of(self, address: str, chain: str, day: Union[dt.date, str]) -> Decimal:
        backend = self.dispatcher.resolve(chain)
        cutoff_ms = end_of_day_ms(day)
        raws = backend.source.fetch_history(address, backend.reconstruct_limit, cutoff_ms=cutoff_ms)
        base_units = backend.reconstructor.balance_delta(address, raws, cutoff_ms)
        return to_display_units(base_units, backend.reconstructor.chain)
