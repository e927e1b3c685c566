from __future__ import annotations

from sqlalchemy import (
    Index,
    Integer,
    PrimaryKeyConstraint,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from block_indexer.app.infrastructure.db.column_types import DecimalInteger
from block_indexer.app.infrastructure.db.db_base import BaseDB


class MimoExchangeCreationsDB(BaseDB):
    """
    Exchange registry for mimo.

    One row = one exchange created by the factory (NewExchange event), with the
    metadata of its token read on-chain at creation time.

    Idempotency:
      - exchange and token are both unique; re-indexing a creation fails
        instead of producing a second row.
    """

    __tablename__ = "mimo_exchange_creations"
    __table_args__ = (
        PrimaryKeyConstraint("id"),
        UniqueConstraint("exchange", name="exchange_UNIQUE"),
        UniqueConstraint("token", name="token_UNIQUE"),
        Index("i_mimo_exchange_creations_block_height", "block_height"),
    )

    id: Mapped[int] = mapped_column(Integer, autoincrement=True)

    exchange: Mapped[str] = mapped_column(String(42), nullable=False)
    token: Mapped[str] = mapped_column(String(42), nullable=False)

    block_height: Mapped[int] = mapped_column(DecimalInteger, nullable=False)
    action_hash: Mapped[str] = mapped_column(String(66), nullable=False)

    token_name: Mapped[str] = mapped_column(String(140), nullable=False)
    token_symbol: Mapped[str] = mapped_column(String(140), nullable=False)
    token_decimals: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("18"),
    )
