from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncConnection

from block_indexer.app.domain.models import BlockData, EventKind, TokenMetadata


class BlockDataHandler(Protocol):
    """
    Port for consuming the data of one block.

    The connection belongs to the caller: implementations write through it
    and never commit or roll back themselves.
    """

    async def handle_block_data(self, conn: AsyncConnection, data: BlockData) -> None:
        ...


@runtime_checkable
class IndexProtocol(BlockDataHandler, Protocol):
    """
    Unit of pluggable indexing logic.

    Implementations own one or more target tables and views:
    - initialize() creates them idempotently (safe to repeat on every start),
    - handle_block_data() derives rows from one block inside the shared
      transaction and raises on any failure so the whole block rolls back.
    """

    protocol_id: str

    async def initialize(self, conn: AsyncConnection) -> None:
        ...


class EvmEventDecoder(Protocol):
    def classify(self, topics: tuple[bytes, ...]) -> EventKind | None:
        """Return the kind of a log from its topic0, None if it is not a known event."""
        ...

    def decode(
        self,
        *,
        topics: tuple[bytes, ...],
        data: bytes,
    ) -> Any | None:
        """
        Decode an EVM log (topics + data) into a typed event.

        Return:
          - the decoded event for a known signature
          - None if topic0 is not one of the decoder's signatures

        Raises MalformedTopicError / MalformedPayloadError when a known event
        does not have the expected shape.
        """
        ...


class ContractReader(Protocol):
    """
    Read-only contract call boundary.

    Implementations simulate a call of call_data against address and return
    the raw ABI-encoded output. They raise RemoteCallError when the node is
    unreachable and ContractExecutionError when the execution fails. No retries.
    """

    async def read(self, *, address: str, call_data: bytes) -> bytes:
        ...


class TokenMetadataFetcher(Protocol):
    """
    Enrichment dependency of creation records.

    Returns the complete metadata of a token or raises; a partial result is
    never returned.
    """

    async def fetch(self, *, token_address: str) -> TokenMetadata:
        ...


class BlockDataSource(Protocol):
    """Port producing BlockData for a height, typically from an RPC node."""

    async def fetch(self, height: int) -> BlockData:
        ...

    async def latest_block(self) -> int:
        ...
