from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from factories import FACTORY, FakeTokenFetcher

from block_indexer.app.infrastructure.adapters.protocols.mimo_protocol import MimoProtocol


@pytest.fixture
def conn() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def token_fetcher() -> FakeTokenFetcher:
    return FakeTokenFetcher()


@pytest.fixture
def protocol(token_fetcher: FakeTokenFetcher) -> MimoProtocol:
    return MimoProtocol(FACTORY, token_fetcher=token_fetcher)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'index.db'}")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def initialized_engine(engine, protocol: MimoProtocol):
    async with engine.begin() as c:
        await protocol.initialize(c)
    return engine
