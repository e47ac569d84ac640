from __future__ import annotations

from enum import Enum

from chainledger.core.errors import UnsupportedChainError


class Chain(str, Enum):
    BTC = "BTC"
    ETH = "ETH"
    SOL = "SOL"

    @classmethod
    def parse(cls, symbol: str) -> "Chain":
        """Case-insensitive lookup; anything else is an unsupported chain."""
        if isinstance(symbol, cls):
            return symbol
        try:
            return cls(str(symbol).strip().upper())
        except ValueError:
            raise UnsupportedChainError(symbol) from None


class Description(str, Enum):
    SENT = "Sent"
    RECEIVED = "Received"
    TRANSFER = "Transfer"
    CONTRACT_CREATION = "Contract Creation"
    CONTRACT_CALL = "Contract Call"
