from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence

from sqlalchemy import Insert, Table, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection

from block_indexer.app.domain.errors import DuplicateKeyError
from block_indexer.app.domain.models import EventKind

logger = logging.getLogger(__name__)


def signed_amount(kind: EventKind, magnitude: int) -> int:
    """
    Sign a decoded (unsigned) amount according to its event kind.

    Removals are stored as the exact negation of the addition amounts.
    """
    if kind is EventKind.ADDITION:
        return magnitude
    if kind is EventKind.REMOVAL:
        return -magnitude
    raise ValueError(f"{kind!r} does not carry a quantity delta")


@dataclass
class TableBatch:
    """
    Pending rows for one table.

    Rows are positional tuples matching `columns`; they are written with one
    shared multi-row INSERT statement.
    """

    table: Table
    columns: tuple[str, ...]
    rows: list[tuple[Any, ...]] = field(default_factory=list)

    def append(self, row: Sequence[Any]) -> None:
        if len(row) != len(self.columns):
            raise ValueError(
                f"{self.table.name} row has {len(row)} values, expected {len(self.columns)}"
            )
        self.rows.append(tuple(row))

    def statement(self) -> Insert:
        return insert(self.table).values(
            [dict(zip(self.columns, row)) for row in self.rows]
        )

    def __len__(self) -> int:
        return len(self.rows)


class RecordBuilder:
    """
    Accumulates rows of one block, per target table, until flushed.

    Nothing touches the database before flush(); dropping the builder
    (error, cancellation) discards every pending row.
    Tables are flushed in the order they were registered.
    """

    def __init__(self) -> None:
        self._batches: dict[str, TableBatch] = {}

    def register(self, table: Table, columns: Sequence[str]) -> None:
        if table.name in self._batches:
            raise ValueError(f"Table already registered: {table.name!r}")
        unknown = [c for c in columns if c not in table.c]
        if unknown:
            raise ValueError(f"Unknown columns for {table.name!r}: {unknown}")
        self._batches[table.name] = TableBatch(table=table, columns=tuple(columns))

    def append(self, table: Table, row: Sequence[Any]) -> None:
        try:
            batch = self._batches[table.name]
        except KeyError:
            raise ValueError(f"Table not registered: {table.name!r}")
        batch.append(row)

    def pending(self) -> Iterator[TableBatch]:
        return (b for b in self._batches.values() if b.rows)

    def row_count(self, table: Table) -> int:
        return len(self._batches[table.name])

    async def flush(self, conn: AsyncConnection) -> int:
        """
        Execute one multi-row INSERT per table with pending rows.

        Tables without rows are skipped. Returns the number of statements
        executed.
        """
        executed = 0
        for batch in self.pending():
            try:
                await conn.execute(batch.statement())
            except IntegrityError as exc:
                raise DuplicateKeyError(batch.table.name, str(exc.orig)) from exc

            logger.debug("Inserted %s rows into %s", len(batch), batch.table.name)
            executed += 1
        return executed
