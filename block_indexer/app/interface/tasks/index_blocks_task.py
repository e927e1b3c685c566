from __future__ import annotations

from block_indexer.app.application.services.block_bounds import resolve_block_bounds
from block_indexer.app.application.services.index_blocks import (
    BlockRange,
    index_blocks_for_block_range,
    initialize_protocols,
)
from block_indexer.app.config import settings
from block_indexer.app.infrastructure.db.engine import create_app_async_engine
from block_indexer.app.infrastructure.factories.protocols_factory import (
    build_protocol_registry,
    create_web3,
)
from block_indexer.app.infrastructure.sources.web3_block_source import Web3BlockDataFetcher


async def index_blocks_task(
    *,
    from_block: int | str,
    to_block: int | str,
) -> None:
    """
    Task: run every enabled protocol over a block range.

    from_block / to_block can be:
    - int (a specific block number),
    - "earliest" (genesis),
    - "latest" (current chain head).

    Protocols are initialized first, then each block is fetched from the node
    and indexed in its own transaction.
    """
    engine = create_app_async_engine()
    try:
        w3 = create_web3(settings)
        block_source = Web3BlockDataFetcher(w3=w3)

        resolved_from_block, resolved_to_block = await resolve_block_bounds(
            block_source=block_source,
            from_block=from_block,
            to_block=to_block,
        )

        registry = build_protocol_registry(
            protocol_ids=settings.enabled_protocols,
            w3=w3,
            settings=settings,
        )

        await initialize_protocols(engine=engine, registry=registry)
        await index_blocks_for_block_range(
            engine=engine,
            registry=registry,
            block_source=block_source,
            block_range=BlockRange(
                from_block=resolved_from_block,
                to_block=resolved_to_block,
            ),
        )
    finally:
        await engine.dispose()
