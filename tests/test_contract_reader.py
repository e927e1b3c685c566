from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientConnectionError
from web3 import Web3
from web3.exceptions import ContractLogicError

from factories import TOKEN

from block_indexer.app.domain.errors import ContractExecutionError, RemoteCallError
from block_indexer.app.infrastructure.fetchers.contract_reader import Web3ContractReader

SELECTOR = bytes.fromhex("06fdde03")


@pytest.fixture
def w3() -> MagicMock:
    w3 = MagicMock()
    w3.to_checksum_address = Web3.to_checksum_address
    w3.eth.call = AsyncMock(return_value=b"\x00" * 31 + b"\x12")
    return w3


@pytest.mark.asyncio
async def test_read_returns_raw_output(w3: MagicMock) -> None:
    reader = Web3ContractReader(w3=w3)

    output = await reader.read(address=TOKEN.lower(), call_data=SELECTOR)

    assert output == b"\x00" * 31 + b"\x12"


@pytest.mark.asyncio
async def test_read_uses_fixed_simulation_parameters(w3: MagicMock) -> None:
    reader = Web3ContractReader(w3=w3)

    await reader.read(address=TOKEN.lower(), call_data=SELECTOR)

    (tx,) = w3.eth.call.await_args.args
    assert tx == {
        "from": "0x0000000000000000000000000000000000000000",
        "to": TOKEN,
        "data": "0x06fdde03",
        "gas": 3_000_000,
        "gasPrice": 1,
        "value": 0,
    }


@pytest.mark.asyncio
async def test_reverted_call_is_execution_error(w3: MagicMock) -> None:
    w3.eth.call.side_effect = ContractLogicError("execution reverted")
    reader = Web3ContractReader(w3=w3)

    with pytest.raises(ContractExecutionError):
        await reader.read(address=TOKEN, call_data=SELECTOR)


@pytest.mark.asyncio
async def test_empty_output_is_execution_error(w3: MagicMock) -> None:
    w3.eth.call.return_value = b""
    reader = Web3ContractReader(w3=w3)

    with pytest.raises(ContractExecutionError):
        await reader.read(address=TOKEN, call_data=SELECTOR)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [ClientConnectionError("connection refused"), TimeoutError(), ConnectionResetError()],
)
async def test_transport_failures_are_remote_call_errors(w3: MagicMock, error: Exception) -> None:
    w3.eth.call.side_effect = error
    reader = Web3ContractReader(w3=w3)

    with pytest.raises(RemoteCallError):
        await reader.read(address=TOKEN, call_data=SELECTOR)

    w3.eth.call.assert_awaited_once()


@pytest.mark.asyncio
async def test_json_rpc_error_response_is_remote_call_error(w3: MagicMock) -> None:
    w3.eth.call.side_effect = ValueError({"code": -32000, "message": "header not found"})
    reader = Web3ContractReader(w3=w3)

    with pytest.raises(RemoteCallError, match="header not found"):
        await reader.read(address=TOKEN, call_data=SELECTOR)
