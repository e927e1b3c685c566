from __future__ import annotations

import logging
from typing import Any

from aiohttp import ClientError
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, Web3Exception

from block_indexer.app.domain.errors import ContractExecutionError, RemoteCallError
from block_indexer.app.domain.ports.out import ContractReader

logger = logging.getLogger(__name__)

# Fixed parameters of the simulated call; not configurable.
_CALLER_ADDRESS = "0x0000000000000000000000000000000000000000"
_CALL_GAS = 3_000_000
_CALL_GAS_PRICE = 1
_CALL_VALUE = 0


class Web3ContractReader(ContractReader):
    """
    Read-only contract calls through AsyncWeb3 (eth_call).

    The call is simulated from the zero address with fixed gas / gas price,
    against the latest state of the node.
    """

    def __init__(self, *, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def read(self, *, address: str, call_data: bytes) -> bytes:
        tx: dict[str, Any] = {
            "from": _CALLER_ADDRESS,
            "to": self._w3.to_checksum_address(address),
            "data": "0x" + call_data.hex(),
            "gas": _CALL_GAS,
            "gasPrice": _CALL_GAS_PRICE,
            "value": _CALL_VALUE,
        }

        try:
            output = await self._w3.eth.call(tx)
        except ContractLogicError as exc:
            # revert / invalid opcode in the simulated execution
            raise ContractExecutionError(
                f"call 0x{call_data[:4].hex()} on {address} failed: {exc}"
            ) from exc
        except (Web3Exception, ValueError, ClientError, TimeoutError, OSError) as exc:
            # web3 6.x raises JSON-RPC error responses as a plain ValueError
            raise RemoteCallError(
                f"call 0x{call_data[:4].hex()} on {address} could not be executed: {exc}"
            ) from exc

        output = bytes(output)
        if not output:
            # No code at address, or a function that does not exist without fallback
            raise ContractExecutionError(
                f"call 0x{call_data[:4].hex()} on {address} returned no data"
            )

        logger.debug(
            "Read contract %s selector=0x%s output_len=%s",
            address,
            call_data[:4].hex(),
            len(output),
        )
        return output
