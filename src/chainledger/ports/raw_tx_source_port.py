from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from chainledger.core.dto import RawPage, RawTx


logger = logging.getLogger(__name__)


class RawTransactionSourcePort(ABC):
    """
    Abstract Class for fetching raw per-chain transaction data for an address.
    """

    label = "source"

    # --- one page of raw transactions, newest first ---

    @abstractmethod
    def fetch_page(self, address: str, cursor: Optional[str] = None) -> RawPage:
        raise NotImplementedError

    # --- current balance in base units ---

    @abstractmethod
    def fetch_current_balance(self, address: str) -> int:
        raise NotImplementedError

    # --- bounded history ---

    def fetch_history(
        self,
        address: str,
        limit: int,
        cutoff_ms: Optional[int] = None,
    ) -> List[Optional[RawTx]]:
        """
        Follow cursors until exhausted or `limit` items were collected.

        `cutoff_ms` is a hint only; sources may use it to skip work for
        transactions after the cutoff, callers still filter themselves.
        """
        out: List[Optional[RawTx]] = []
        cursor: Optional[str] = None
        while len(out) < limit:
            page = self.fetch_page(address, cursor)
            for item in page.items:
                out.append(item)
                if len(out) >= limit:
                    break
            if not page.items or not page.next_cursor:
                break
            cursor = page.next_cursor
        self._warn_if_capped(address, len(out), limit, cutoff_ms)
        return out

    def _warn_if_capped(self, address: str, collected: int, limit: int, cutoff_ms: Optional[int]) -> None:
        # counted before any cutoff filtering, a replay over a capped history is partial
        if cutoff_ms is not None and collected >= limit:
            logger.warning(
                "%s history for %s hit the %d tx cap; balance reconstruction may be incomplete",
                self.label, address, limit,
            )
