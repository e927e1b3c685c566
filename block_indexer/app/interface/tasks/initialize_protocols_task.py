from __future__ import annotations

from block_indexer.app.application.services.index_blocks import initialize_protocols
from block_indexer.app.config import settings
from block_indexer.app.infrastructure.db.engine import create_app_async_engine
from block_indexer.app.infrastructure.factories.protocols_factory import (
    build_protocol_registry,
    create_web3,
)


async def initialize_protocols_task() -> None:
    """
    Task: create tables and views of every enabled protocol.

    Safe to run repeatedly (create if not exists / create or replace).
    """
    engine = create_app_async_engine()
    try:
        registry = build_protocol_registry(
            protocol_ids=settings.enabled_protocols,
            w3=create_web3(settings),
            settings=settings,
        )
        await initialize_protocols(engine=engine, registry=registry)
    finally:
        await engine.dispose()
