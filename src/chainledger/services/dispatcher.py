from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from chainledger.config import settings
from chainledger.adapters.chain.esplora_btc_adapter import EsploraBtcAdapter
from chainledger.adapters.chain.ethvm_eth_adapter import EthVmEthAdapter
from chainledger.adapters.chain.solana_rpc_adapter import SolanaRpcAdapter
from chainledger.adapters.chain.ttl_cache import TTLCache
from chainledger.core.enums import Chain
from chainledger.core.errors import UnsupportedChainError
from chainledger.ports.ledger_port import BalanceReconstructor, ChainNormalizer
from chainledger.ports.raw_tx_source_port import RawTransactionSourcePort
from chainledger.services.btc_ledger import BtcNormalizer, BtcReconstructor
from chainledger.services.eth_ledger import EthNormalizer, EthReconstructor
from chainledger.services.sol_ledger import SolNormalizer, SolReconstructor


@dataclass(frozen=True)
class ChainBackend:
    source: RawTransactionSourcePort
    normalizer: ChainNormalizer
    reconstructor: BalanceReconstructor
    reconstruct_limit: int


NORMALIZERS = {
    Chain.BTC: BtcNormalizer,
    Chain.ETH: EthNormalizer,
    Chain.SOL: SolNormalizer,
}

RECONSTRUCTORS = {
    Chain.BTC: BtcReconstructor,
    Chain.ETH: EthReconstructor,
    Chain.SOL: SolReconstructor,
}

RECONSTRUCT_LIMITS = {
    Chain.BTC: settings.BTC_RECONSTRUCT_LIMIT,
    Chain.ETH: settings.ETH_RECONSTRUCT_LIMIT,
    Chain.SOL: settings.SOL_RECONSTRUCT_LIMIT,
}


def backend_for(chain: Chain, source: RawTransactionSourcePort) -> ChainBackend:
    return ChainBackend(
        source=source,
        normalizer=NORMALIZERS[chain](),
        reconstructor=RECONSTRUCTORS[chain](),
        reconstruct_limit=RECONSTRUCT_LIMITS[chain],
    )


class ChainDispatcher:
    """Routes a chain symbol to its source/normalizer/reconstructor triple."""

    def __init__(self, backends: Mapping[Chain, ChainBackend]) -> None:
        self._backends: Dict[Chain, ChainBackend] = dict(backends)

    def resolve(self, symbol: str) -> ChainBackend:
        chain = Chain.parse(symbol)
        backend = self._backends.get(chain)
        if backend is None:
            raise UnsupportedChainError(symbol)
        return backend

    @classmethod
    def from_sources(cls, sources: Mapping[Chain, RawTransactionSourcePort]) -> "ChainDispatcher":
        return cls({chain: backend_for(chain, src) for chain, src in sources.items()})


def build_default_dispatcher(cache: Optional[TTLCache] = None) -> ChainDispatcher:
    return ChainDispatcher.from_sources({
        Chain.BTC: EsploraBtcAdapter(cache=cache),
        Chain.ETH: EthVmEthAdapter(cache=cache),
        Chain.SOL: SolanaRpcAdapter(cache=cache),
    })
