import pytest
from eth_abi import encode

from factories import TOKEN, string_output

from block_indexer.app.domain.errors import MalformedPayloadError, RemoteCallError
from block_indexer.app.domain.models import TokenMetadata
from block_indexer.app.infrastructure.fetchers.erc20_tokens_fetcher import (
    DECIMALS_SELECTOR,
    NAME_SELECTOR,
    SYMBOL_SELECTOR,
    Erc20TokenMetadataFetcher,
)


class FakeReader:
    def __init__(self, outputs: dict[bytes, bytes], fail_on: bytes | None = None) -> None:
        self.outputs = outputs
        self.fail_on = fail_on
        self.calls: list[tuple[str, bytes]] = []

    async def read(self, *, address: str, call_data: bytes) -> bytes:
        self.calls.append((address, call_data))
        if call_data == self.fail_on:
            raise RemoteCallError("node down")
        return self.outputs[call_data]


def _outputs(decimals: bytes = encode(["uint8"], [6])) -> dict[bytes, bytes]:
    return {
        NAME_SELECTOR: string_output("Tether USD"),
        SYMBOL_SELECTOR: string_output("USDT"),
        DECIMALS_SELECTOR: decimals,
    }


@pytest.mark.asyncio
async def test_fetch_reads_name_symbol_decimals_in_order() -> None:
    reader = FakeReader(_outputs())

    meta = await Erc20TokenMetadataFetcher(reader=reader).fetch(token_address=TOKEN)

    assert meta == TokenMetadata(name="Tether USD", symbol="USDT", decimals=6)
    assert reader.calls == [
        (TOKEN, NAME_SELECTOR),
        (TOKEN, SYMBOL_SELECTOR),
        (TOKEN, DECIMALS_SELECTOR),
    ]


@pytest.mark.asyncio
async def test_fetch_accepts_legacy_bytes32_symbol() -> None:
    outputs = _outputs()
    outputs[SYMBOL_SELECTOR] = encode(["bytes32"], [b"MKR".ljust(32, b"\x00")])

    meta = await Erc20TokenMetadataFetcher(reader=FakeReader(outputs)).fetch(token_address=TOKEN)

    assert meta.symbol == "MKR"


@pytest.mark.asyncio
async def test_fetch_propagates_reader_failure() -> None:
    reader = FakeReader(_outputs(), fail_on=SYMBOL_SELECTOR)

    with pytest.raises(RemoteCallError):
        await Erc20TokenMetadataFetcher(reader=reader).fetch(token_address=TOKEN)

    # decimals is never read once symbol failed
    assert [c for _, c in reader.calls] == [NAME_SELECTOR, SYMBOL_SELECTOR]


@pytest.mark.asyncio
async def test_fetch_rejects_short_decimals_output() -> None:
    reader = FakeReader(_outputs(decimals=b"\x12"))

    with pytest.raises(MalformedPayloadError):
        await Erc20TokenMetadataFetcher(reader=reader).fetch(token_address=TOKEN)


@pytest.mark.asyncio
@pytest.mark.parametrize("decimals", [256, 2**255])
async def test_fetch_rejects_decimals_out_of_range(decimals: int) -> None:
    reader = FakeReader(_outputs(decimals=encode(["uint256"], [decimals])))

    with pytest.raises(MalformedPayloadError, match="out of range"):
        await Erc20TokenMetadataFetcher(reader=reader).fetch(token_address=TOKEN)


@pytest.mark.asyncio
async def test_fetch_accepts_max_decimals() -> None:
    reader = FakeReader(_outputs(decimals=encode(["uint256"], [255])))

    meta = await Erc20TokenMetadataFetcher(reader=reader).fetch(token_address=TOKEN)

    assert meta.decimals == 255


@pytest.mark.asyncio
@pytest.mark.parametrize("selector", [NAME_SELECTOR, SYMBOL_SELECTOR])
async def test_fetch_rejects_overlong_text(selector: bytes) -> None:
    outputs = _outputs()
    outputs[selector] = string_output("x" * 141)

    with pytest.raises(MalformedPayloadError, match="max 140"):
        await Erc20TokenMetadataFetcher(reader=FakeReader(outputs)).fetch(token_address=TOKEN)
