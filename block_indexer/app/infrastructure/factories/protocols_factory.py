from __future__ import annotations

from typing import Callable, Dict, Iterable

from web3 import AsyncHTTPProvider, AsyncWeb3

from block_indexer.app.application.services.protocol_registry import ProtocolRegistry
from block_indexer.app.config import Settings
from block_indexer.app.domain.ports.out import IndexProtocol
from block_indexer.app.infrastructure.adapters.protocols.mimo_protocol import (
    PROTOCOL_ID as MIMO_PROTOCOL_ID,
    MimoProtocol,
)
from block_indexer.app.infrastructure.fetchers.contract_reader import Web3ContractReader
from block_indexer.app.infrastructure.fetchers.erc20_tokens_fetcher import (
    Erc20TokenMetadataFetcher,
)

ProtocolFactory = Callable[[AsyncWeb3, Settings], IndexProtocol]

_PROTOCOL_REGISTRY: Dict[str, ProtocolFactory] = {}


def create_web3(settings: Settings) -> AsyncWeb3:
    return AsyncWeb3(
        AsyncHTTPProvider(
            settings.rpc_url,
            request_kwargs={"timeout": settings.rpc_timeout_s},
        )
    )


def _make_mimo_protocol(w3: AsyncWeb3, settings: Settings) -> IndexProtocol:
    """
    Wire dependencies for mimo:
    - contract reader (eth_call with fixed caller/gas)
    - ERC-20 metadata fetcher (name/symbol/decimals) for exchange creations
    - protocol watching the configured factory (no-op when unset)
    """
    reader = Web3ContractReader(w3=w3)
    fetcher = Erc20TokenMetadataFetcher(reader=reader)

    return MimoProtocol(
        settings.mimo_factory_address,
        token_fetcher=fetcher,
    )


# Register protocols
_PROTOCOL_REGISTRY[MIMO_PROTOCOL_ID] = _make_mimo_protocol


def available_protocols() -> list[str]:
    return sorted(_PROTOCOL_REGISTRY)


def build_protocol_registry(
    *,
    protocol_ids: Iterable[str],
    w3: AsyncWeb3,
    settings: Settings,
) -> ProtocolRegistry:
    """
    Create a registry holding the requested protocols, in the given order.

    The factory wires, per protocol:
    - its RPC-backed enrichment dependencies,
    - its configuration from settings.
    """
    registry = ProtocolRegistry()
    for protocol_id in protocol_ids:
        try:
            factory = _PROTOCOL_REGISTRY[protocol_id]
        except KeyError:
            raise ValueError(f"Unsupported protocol: {protocol_id!r}")
        registry.register(factory(w3, settings))
    return registry
