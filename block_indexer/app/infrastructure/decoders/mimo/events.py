from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from block_indexer.app.domain.models import EventKind
from block_indexer.app.infrastructure.decoders.abi import (
    require_topics,
    topic_to_address,
    topic_to_uint,
)

# topic0 = keccak("NewExchange(address,address)")
NEW_EXCHANGE_TOPIC0 = "9d42cb017eb05bd8944ab536a8b35bc68085931dd5f4356489801453923953f9"
# topic0 = keccak("AddLiquidity(address,uint256,uint256)")
ADD_LIQUIDITY_TOPIC0 = "06239653922ac7bea6aa2b19dc486b9361821d37712eb796adfd38d81de278ca"
# topic0 = keccak("RemoveLiquidity(address,uint256,uint256)")
REMOVE_LIQUIDITY_TOPIC0 = "0fbf06c058b90cb038a618f8c2acbf6145f8b3570fd1fa56abb8f0f3f05b36e8"

MIMO_EVENT_SIGNATURES: Mapping[str, EventKind] = MappingProxyType(
    {
        NEW_EXCHANGE_TOPIC0: EventKind.CREATION,
        ADD_LIQUIDITY_TOPIC0: EventKind.ADDITION,
        REMOVE_LIQUIDITY_TOPIC0: EventKind.REMOVAL,
    }
)


@dataclass(frozen=True)
class ExchangeCreated:
    token: str
    exchange: str


@dataclass(frozen=True)
class LiquidityChanged:
    """
    AddLiquidity / RemoveLiquidity payload.

    Amounts are the raw unsigned magnitudes from the topics; the sign of a
    removal is applied when the row is built, not here.
    """

    kind: EventKind
    provider: str
    iotx_amount: int
    token_amount: int


MimoEvent = ExchangeCreated | LiquidityChanged

_LIQUIDITY_EVENT_NAMES = {
    EventKind.ADDITION: "AddLiquidity",
    EventKind.REMOVAL: "RemoveLiquidity",
}


class MimoEventDecoder:
    """
    Topic-based decoder for the mimo factory and exchange events.

    All fields of these events are indexed:
      NewExchange:      topic1 = token (address),    topic2 = exchange (address)
      AddLiquidity:     topic1 = provider (address), topic2 = iotx amount (uint256),
                        topic3 = token amount (uint256)
      RemoveLiquidity:  same layout as AddLiquidity

    Logs with another topic0 are not mimo events and decode to None.
    """

    def __init__(self, signatures: Mapping[str, EventKind] = MIMO_EVENT_SIGNATURES) -> None:
        self._signatures = signatures

    def classify(self, topics: tuple[bytes, ...]) -> EventKind | None:
        if not topics:
            return None
        return self._signatures.get(bytes(topics[0]).hex())

    def decode(
        self,
        *,
        topics: tuple[bytes, ...],
        data: bytes,
    ) -> MimoEvent | None:
        kind = self.classify(topics)
        if kind is None:
            return None

        if kind is EventKind.CREATION:
            require_topics(topics, 3, event="NewExchange")
            return ExchangeCreated(
                token=topic_to_address(topics[1]),
                exchange=topic_to_address(topics[2]),
            )

        require_topics(topics, 4, event=_LIQUIDITY_EVENT_NAMES[kind])
        return LiquidityChanged(
            kind=kind,
            provider=topic_to_address(topics[1]),
            iotx_amount=topic_to_uint(topics[2]),
            token_amount=topic_to_uint(topics[3]),
        )
