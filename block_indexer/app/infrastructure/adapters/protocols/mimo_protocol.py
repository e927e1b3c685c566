from __future__ import annotations

import logging

from eth_utils import to_checksum_address
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from block_indexer.app.domain.errors import SchemaError
from block_indexer.app.domain.models import BlockData, Log, Receipt
from block_indexer.app.domain.ports.out import EvmEventDecoder, IndexProtocol, TokenMetadataFetcher
from block_indexer.app.infrastructure.adapters.record_builder import RecordBuilder, signed_amount
from block_indexer.app.infrastructure.db.db_base import BaseDB
from block_indexer.app.infrastructure.db.models.mimo.exchange_creations import (
    MimoExchangeCreationsDB,
)
from block_indexer.app.infrastructure.db.models.mimo.exchange_provider_actions import (
    MimoExchangeProviderActionsDB,
)
from block_indexer.app.infrastructure.decoders.mimo.events import (
    ExchangeCreated,
    LiquidityChanged,
    MimoEventDecoder,
)

logger = logging.getLogger(__name__)

PROTOCOL_ID = "mimo"

EXCHANGE_MONITOR_VIEW_NAME = "mimo_exchange_to_monitor"
TOKEN_MONITOR_VIEW_NAME = "mimo_token_to_monitor"

_CREATIONS = MimoExchangeCreationsDB.__table__
_PROVIDER_ACTIONS = MimoExchangeProviderActionsDB.__table__

_CREATION_COLUMNS = (
    "exchange",
    "token",
    "block_height",
    "action_hash",
    "token_name",
    "token_symbol",
    "token_decimals",
)
_PROVIDER_ACTION_COLUMNS = (
    "action_hash",
    "idx",
    "exchange",
    "block_height",
    "provider",
    "iotx_amount",
    "token_amount",
)

# Every exchange is an account to monitor.
_EXCHANGE_VIEW_SELECT = f"SELECT exchange AS account FROM {_CREATIONS.name}"
# <token, account> pairs: the exchange's balance of its token, and any
# account's balance of the exchange's liquidity token ('*').
_TOKEN_VIEW_SELECT = (
    f"SELECT token, exchange AS account FROM {_CREATIONS.name} "
    f"UNION ALL "
    f"SELECT exchange AS token, '*' AS account FROM {_CREATIONS.name}"
)


def _hash_hex(h: bytes) -> str:
    return "0x" + bytes(h).hex()


def _exchange_of(receipt: Receipt, log: Log) -> str:
    # The exchange of a liquidity action is the contract the transaction
    # called; receipts without one fall back to the emitter.
    if receipt.contract_address:
        return to_checksum_address(receipt.contract_address)
    return log.address


class MimoProtocol(IndexProtocol):
    """
    Indexing protocol for mimo exchanges (Uniswap v1 style factory).

    Strategy:
    - Only logs emitted at the configured factory address are considered.
    - NewExchange creates one exchange row, enriched with the token's
      name/symbol/decimals read on-chain.
    - AddLiquidity / RemoveLiquidity create one provider action row per log,
      attributed to the receipt's contract; removals are stored with negated
      amounts.
    - Rows are batched for the whole block and written with at most one
      INSERT per table at the end of the block.

    Without a factory address the protocol watches nothing and every block is
    a no-op.
    """

    protocol_id = PROTOCOL_ID

    def __init__(
        self,
        factory_address: str | None,
        *,
        token_fetcher: TokenMetadataFetcher,
        decoder: EvmEventDecoder | None = None,
    ) -> None:
        self._factory_address = to_checksum_address(factory_address) if factory_address else None
        self._token_fetcher = token_fetcher
        self._decoder = decoder or MimoEventDecoder()

    @property
    def factory_address(self) -> str | None:
        return self._factory_address

    async def initialize(self, conn: AsyncConnection) -> None:
        try:
            await conn.run_sync(
                BaseDB.metadata.create_all,
                tables=[_CREATIONS, _PROVIDER_ACTIONS],
                checkfirst=True,
            )
            await self._create_or_replace_view(conn, EXCHANGE_MONITOR_VIEW_NAME, _EXCHANGE_VIEW_SELECT)
            await self._create_or_replace_view(conn, TOKEN_MONITOR_VIEW_NAME, _TOKEN_VIEW_SELECT)
        except SQLAlchemyError as exc:
            raise SchemaError(f"failed to initialize {PROTOCOL_ID} tables: {exc}") from exc

        logger.info("Initialized protocol %s", PROTOCOL_ID)

    async def handle_block_data(self, conn: AsyncConnection, data: BlockData) -> None:
        if self._factory_address is None:
            return

        builder = RecordBuilder()
        builder.register(_CREATIONS, _CREATION_COLUMNS)
        builder.register(_PROVIDER_ACTIONS, _PROVIDER_ACTION_COLUMNS)

        for receipt in data.block.receipts:
            if not receipt.succeeded:
                continue
            for log in receipt.logs:
                await self._handle_log(builder, receipt, log)

        executed = await builder.flush(conn)

        if executed:
            logger.debug(
                "Block %s: %s exchange creations, %s provider actions",
                data.height,
                builder.row_count(_CREATIONS),
                builder.row_count(_PROVIDER_ACTIONS),
            )

    async def _handle_log(self, builder: RecordBuilder, receipt: Receipt, log: Log) -> None:
        # Every mimo event is read from logs emitted at the factory address;
        # the same signatures elsewhere belong to other contracts.
        if log.address.lower() != self._factory_address.lower():
            return

        kind = self._decoder.classify(log.topics)
        if kind is None:
            return

        event = self._decoder.decode(topics=log.topics, data=log.data)

        if isinstance(event, ExchangeCreated):
            # Enrichment first: a failure here leaves nothing queued.
            meta = await self._token_fetcher.fetch(token_address=event.token)
            builder.append(
                _CREATIONS,
                (
                    event.exchange,
                    event.token,
                    log.block_height,
                    _hash_hex(log.action_hash),
                    meta.name,
                    meta.symbol,
                    meta.decimals,
                ),
            )
        elif isinstance(event, LiquidityChanged):
            builder.append(
                _PROVIDER_ACTIONS,
                (
                    _hash_hex(receipt.action_hash),
                    log.index,
                    _exchange_of(receipt, log),
                    receipt.block_height,
                    event.provider,
                    signed_amount(event.kind, event.iotx_amount),
                    signed_amount(event.kind, event.token_amount),
                ),
            )

    async def _create_or_replace_view(self, conn: AsyncConnection, name: str, select_sql: str) -> None:
        if conn.dialect.name == "sqlite":
            # SQLite has no CREATE OR REPLACE VIEW
            await conn.execute(text(f"DROP VIEW IF EXISTS {name}"))
            await conn.execute(text(f"CREATE VIEW {name} AS {select_sql}"))
        else:
            await conn.execute(text(f"CREATE OR REPLACE VIEW {name} AS {select_sql}"))
