from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from chainledger.core.dto import RawTx
from chainledger.core.enums import Chain
from chainledger.core.models import TransactionRecord


class ChainNormalizer(ABC):
    chain: Chain

    @abstractmethod
    def normalize(self, address: str, raw: Optional[RawTx]) -> Optional[TransactionRecord]:
        raise NotImplementedError

    def normalize_all(self, address: str, raws: Iterable[Optional[RawTx]]) -> List[TransactionRecord]:
        out: List[TransactionRecord] = []
        for raw in raws:
            rec = self.normalize(address, raw)
            if rec is not None:
                out.append(rec)
        return out


class BalanceReconstructor(ABC):
    chain: Chain

    @abstractmethod
    def balance_delta(self, address: str, raws: Iterable[Optional[RawTx]], cutoff_ms: int) -> int:
        """Net signed base-unit delta of all transactions at or before cutoff_ms."""
        raise NotImplementedError
