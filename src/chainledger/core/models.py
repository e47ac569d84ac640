from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from chainledger.core.enums import Chain, Description



# Canonical transaction record

@dataclass(frozen=True)
class TransactionRecord:
    """
    Chain-agnostic view of one transaction from the queried address' side.

    `amount` is always a magnitude; direction lives only in `description`.
    """

    date: dt.date
    time: dt.time
    amount: Decimal
    crypto: Chain
    description: Description
    from_address: Optional[str]
    to_address: Optional[str]
    tx_hash: Optional[str]

    @classmethod
    def from_timestamp(
        cls,
        timestamp: int,
        amount: Decimal,
        crypto: Chain,
        description: Description,
        from_address: Optional[str] = None,
        to_address: Optional[str] = None,
        tx_hash: Optional[str] = None,
    ) -> "TransactionRecord":
        instant = dt.datetime.fromtimestamp(int(timestamp), tz=dt.timezone.utc)
        return cls(
            date=instant.date(),
            time=instant.time().replace(tzinfo=None),
            amount=amount,
            crypto=crypto,
            description=description,
            from_address=from_address,
            to_address=to_address,
            tx_hash=tx_hash,
        )
