from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

RECEIPT_STATUS_SUCCESS = 1
NATIVE_TRANSFER = "native"


class EventKind(str, Enum):
    """
    Semantic class of a recognized event.

    CREATION events define an entity (one row per entity, ever).
    ADDITION / REMOVAL events are signed quantity deltas against an entity;
    a removal is stored as the negation of the matching addition.
    """

    CREATION = "creation"
    ADDITION = "addition"
    REMOVAL = "removal"


@dataclass(frozen=True)
class Log:
    """
    One emitted event.

    topics are raw 32-byte words, topics[0] being the event signature hash.
    index is the position of the log within its receipt; together with
    action_hash it forms the event identity.
    """

    address: str
    topics: tuple[bytes, ...]
    data: bytes
    action_hash: bytes
    block_height: int
    index: int


@dataclass(frozen=True)
class Receipt:
    status: int
    contract_address: str | None
    action_hash: bytes
    block_height: int
    logs: tuple[Log, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status == RECEIPT_STATUS_SUCCESS


@dataclass(frozen=True)
class Transfer:
    """Native value transfer recorded outside of the event logs."""

    type: str
    sender: str
    recipient: str
    amount: int


@dataclass(frozen=True)
class TransactionLog:
    action_hash: bytes
    transfers: tuple[Transfer, ...] = ()


@dataclass(frozen=True)
class Block:
    height: int
    hash: bytes
    timestamp: int
    receipts: tuple[Receipt, ...] = ()


@dataclass(frozen=True)
class BlockData:
    """
    Input unit handed to every protocol: one block at one height.

    Receipts keep block order and logs keep receipt order; protocols rely on
    both when deriving rows.
    """

    block: Block
    transaction_logs: tuple[TransactionLog, ...] = field(default_factory=tuple)

    @property
    def height(self) -> int:
        return self.block.height


@dataclass(frozen=True)
class TokenMetadata:
    """Descriptive fields of a token read from its contract."""

    name: str
    symbol: str
    decimals: int
