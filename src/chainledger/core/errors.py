from typing import Optional


class ChainLedgerError(Exception):
    pass


class UnsupportedChainError(ChainLedgerError, ValueError):
    def __init__(self, symbol: str) -> None:
        super().__init__(f"Unsupported crypto {symbol!r}. Use BTC, ETH, or SOL.")
        self.symbol = symbol


class DataSourceError(ChainLedgerError):
    pass


class TransportError(DataSourceError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(TransportError):
    pass


class RpcError(DataSourceError):
    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code
