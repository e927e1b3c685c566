from __future__ import annotations

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError

from block_indexer.app.domain.errors import MalformedPayloadError
from block_indexer.app.domain.models import TokenMetadata
from block_indexer.app.domain.ports.out import ContractReader, TokenMetadataFetcher
from block_indexer.app.infrastructure.decoders.abi import decode_string_output

# ERC-20 view function selectors
NAME_SELECTOR = bytes.fromhex("06fdde03")
SYMBOL_SELECTOR = bytes.fromhex("95d89b41")
DECIMALS_SELECTOR = bytes.fromhex("313ce567")

# Bounds of the mimo_exchange_creations token columns
MAX_DECIMALS = 255
MAX_TEXT_LENGTH = 140


class Erc20TokenMetadataFetcher(TokenMetadataFetcher):
    """
    ERC-20 metadata fetcher on top of a ContractReader.

    Fetches, in this order:
      - name() -> str
      - symbol() -> str
      - decimals() -> int

    Every failure propagates: a creation record is either complete or not
    written at all.
    """

    def __init__(self, *, reader: ContractReader) -> None:
        self._reader = reader

    async def fetch(self, *, token_address: str) -> TokenMetadata:
        raw_name = await self._reader.read(address=token_address, call_data=NAME_SELECTOR)
        raw_symbol = await self._reader.read(address=token_address, call_data=SYMBOL_SELECTOR)
        raw_decimals = await self._reader.read(address=token_address, call_data=DECIMALS_SELECTOR)

        return TokenMetadata(
            name=self._decode_text(raw_name, field="name", token_address=token_address),
            symbol=self._decode_text(raw_symbol, field="symbol", token_address=token_address),
            decimals=self._decode_decimals(raw_decimals, token_address=token_address),
        )

    @staticmethod
    def _decode_text(output: bytes, *, field: str, token_address: str) -> str:
        value = decode_string_output(output)
        if len(value) > MAX_TEXT_LENGTH:
            raise MalformedPayloadError(
                f"{field}() of {token_address} is {len(value)} characters, max {MAX_TEXT_LENGTH}"
            )
        return value

    @staticmethod
    def _decode_decimals(output: bytes, *, token_address: str) -> int:
        try:
            (decimals,) = abi_decode(["uint256"], output)
        except DecodingError as exc:
            raise MalformedPayloadError(
                f"Invalid decimals() output from {token_address}: 0x{output.hex()}"
            ) from exc
        if not 0 <= decimals <= MAX_DECIMALS:
            raise MalformedPayloadError(
                f"decimals() of {token_address} out of range: {decimals}"
            )
        return int(decimals)
