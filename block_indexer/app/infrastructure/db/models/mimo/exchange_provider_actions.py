from __future__ import annotations

from sqlalchemy import (
    Index,
    Integer,
    PrimaryKeyConstraint,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from block_indexer.app.infrastructure.db.column_types import DecimalInteger
from block_indexer.app.infrastructure.db.db_base import BaseDB


class MimoExchangeProviderActionsDB(BaseDB):
    """
    Liquidity provider actions on mimo exchanges.

    One row = one AddLiquidity / RemoveLiquidity event. Removals carry the
    negated amounts, so SUM(iotx_amount) per exchange is its net liquidity.

    Idempotency:
      - PK matches the event identity: (action_hash, idx)
    """

    __tablename__ = "mimo_exchange_provider_actions"
    __table_args__ = (
        PrimaryKeyConstraint("action_hash", "idx"),
        Index("i_mimo_provider_actions_block_height", "block_height"),
        Index("i_mimo_provider_actions_exchange", "exchange"),
        Index("i_mimo_provider_actions_provider", "provider"),
    )

    action_hash: Mapped[str] = mapped_column(String(66), nullable=False)
    idx: Mapped[int] = mapped_column(Integer, nullable=False, autoincrement=False)

    exchange: Mapped[str] = mapped_column(String(42), nullable=False)
    block_height: Mapped[int] = mapped_column(DecimalInteger, nullable=False)
    provider: Mapped[str] = mapped_column(String(42), nullable=False)

    # Signed: negative for removals
    iotx_amount: Mapped[int] = mapped_column(DecimalInteger, nullable=False)
    token_amount: Mapped[int] = mapped_column(DecimalInteger, nullable=False)
