from __future__ import annotations

import logging
from typing import Any, Mapping

from web3 import AsyncWeb3

from block_indexer.app.domain.models import (
    NATIVE_TRANSFER,
    Block,
    BlockData,
    Log,
    Receipt,
    TransactionLog,
    Transfer,
)
from block_indexer.app.domain.ports.out import BlockDataSource

logger = logging.getLogger(__name__)


def _as_bytes(val: Any) -> bytes:
    # HexBytes is a bytes subclass; plain hex strings show up with some providers
    if isinstance(val, (bytes, bytearray, memoryview)):
        return bytes(val)
    if isinstance(val, str):
        s = val[2:] if val.startswith("0x") else val
        return bytes.fromhex(s)
    raise TypeError(f"Unsupported bytes value: {val!r}")


class Web3BlockDataFetcher(BlockDataSource):
    """
    Builds BlockData from an EVM node using AsyncWeb3.

    - eth_getBlockByNumber (full transactions) for the header and transactions,
    - eth_getTransactionReceipt for each transaction, in block order,
    - one TransactionLog per transaction holding its native value transfer.

    Log.index is the position of the log within its receipt.
    """

    def __init__(self, *, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def latest_block(self) -> int:
        return int(await self._w3.eth.block_number)

    async def fetch(self, height: int) -> BlockData:
        block = await self._w3.eth.get_block(height, full_transactions=True)

        receipts: list[Receipt] = []
        transaction_logs: list[TransactionLog] = []
        for tx in block["transactions"]:
            raw = await self._w3.eth.get_transaction_receipt(tx["hash"])
            receipt = self._to_receipt(raw)
            receipts.append(receipt)
            transaction_logs.append(self._to_transaction_log(tx, receipt))

        logger.debug(
            "Fetched block %s with %s receipts",
            height,
            len(receipts),
        )

        return BlockData(
            block=Block(
                height=int(block["number"]),
                hash=_as_bytes(block["hash"]),
                timestamp=int(block["timestamp"]),
                receipts=tuple(receipts),
            ),
            transaction_logs=tuple(transaction_logs),
        )

    def _to_transaction_log(self, tx: Mapping[str, Any], receipt: Receipt) -> TransactionLog:
        # Only the top-level value transfer is visible without a tracing API;
        # reverted transactions move nothing.
        value = int(tx.get("value") or 0)
        recipient = tx.get("to") or receipt.contract_address
        if not receipt.succeeded or value == 0 or not recipient:
            return TransactionLog(action_hash=receipt.action_hash)

        return TransactionLog(
            action_hash=receipt.action_hash,
            transfers=(
                Transfer(
                    type=NATIVE_TRANSFER,
                    sender=self._w3.to_checksum_address(tx["from"]),
                    recipient=self._w3.to_checksum_address(recipient),
                    amount=value,
                ),
            ),
        )

    def _to_receipt(self, raw: Mapping[str, Any]) -> Receipt:
        action_hash = _as_bytes(raw["transactionHash"])
        block_height = int(raw["blockNumber"])

        logs = tuple(
            Log(
                address=self._w3.to_checksum_address(rl["address"]),
                topics=tuple(_as_bytes(t) for t in rl.get("topics", [])),
                data=_as_bytes(rl.get("data") or b""),
                action_hash=action_hash,
                block_height=block_height,
                index=i,
            )
            for i, rl in enumerate(raw.get("logs", []))
        )

        contract_address = raw.get("contractAddress") or raw.get("to")

        return Receipt(
            status=int(raw.get("status", 0)),
            contract_address=contract_address,
            action_hash=action_hash,
            block_height=block_height,
            logs=logs,
        )
