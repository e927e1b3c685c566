from __future__ import annotations

from typing import Iterable

from block_indexer.app.domain.ports.out import IndexProtocol


class ProtocolRegistry:
    """
    Static mapping protocol_id -> protocol instance.

    Protocols are invoked in registration order for every block.
    """

    def __init__(self, protocols: Iterable[IndexProtocol] = ()) -> None:
        self._protocols: dict[str, IndexProtocol] = {}
        for p in protocols:
            self.register(p)

    def register(self, protocol: IndexProtocol) -> None:
        if protocol.protocol_id in self._protocols:
            raise ValueError(f"Protocol already registered: {protocol.protocol_id!r}")
        self._protocols[protocol.protocol_id] = protocol

    def get(self, protocol_id: str) -> IndexProtocol:
        try:
            return self._protocols[protocol_id]
        except KeyError:
            raise ValueError(f"Unknown protocol: {protocol_id!r}")

    def protocols(self) -> list[IndexProtocol]:
        return list(self._protocols.values())

    def __len__(self) -> int:
        return len(self._protocols)

    def __contains__(self, protocol_id: object) -> bool:
        return protocol_id in self._protocols
