from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from block_indexer.app.application.services.protocol_registry import ProtocolRegistry
from block_indexer.app.domain.models import BlockData
from block_indexer.app.domain.ports.out import BlockDataSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockRange:
    from_block: int
    to_block: int

    def validate(self) -> None:
        if self.from_block < 0 or self.to_block < 0:
            raise ValueError("Block numbers must be non-negative")
        if self.from_block > self.to_block:
            raise ValueError("from_block must be <= to_block")


async def initialize_protocols(
    *,
    engine: AsyncEngine,
    registry: ProtocolRegistry,
) -> None:
    """Create the tables and views of every registered protocol in one transaction."""
    async with engine.begin() as conn:
        for protocol in registry.protocols():
            await protocol.initialize(conn)

    logger.info("Initialized %s protocols", len(registry))


async def index_block(
    *,
    engine: AsyncEngine,
    registry: ProtocolRegistry,
    block_data: BlockData,
) -> None:
    """
    Hand one block to every registered protocol inside a single transaction.

    The transaction commits only if all protocols succeed; any error rolls
    the whole block back and is re-raised unchanged.
    """
    try:
        async with engine.begin() as conn:
            for protocol in registry.protocols():
                await protocol.handle_block_data(conn, block_data)
    except Exception:
        logger.exception("Failed to index block %s, rolled back", block_data.height)
        raise


async def index_blocks_for_block_range(
    *,
    engine: AsyncEngine,
    registry: ProtocolRegistry,
    block_source: BlockDataSource,
    block_range: BlockRange,
) -> None:
    """
    Index blocks sequentially, one transaction per block.

    Stops at the first failing block; blocks before it stay committed.
    """
    block_range.validate()

    logger.info(
        "Indexing blocks: blocks=[%s, %s], protocols=%s",
        block_range.from_block,
        block_range.to_block,
        [p.protocol_id for p in registry.protocols()],
    )

    for height in range(block_range.from_block, block_range.to_block + 1):
        block_data = await block_source.fetch(height)
        await index_block(engine=engine, registry=registry, block_data=block_data)
        logger.debug("Indexed block %s", height)

    logger.info(
        "Finished indexing blocks: blocks=[%s, %s]",
        block_range.from_block,
        block_range.to_block,
    )
