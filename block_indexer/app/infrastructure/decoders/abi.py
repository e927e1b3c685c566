from __future__ import annotations

from eth_utils import to_checksum_address

from block_indexer.app.domain.errors import MalformedPayloadError, MalformedTopicError

WORD_SIZE = 32

# A `string` return value is (head offset word, length word, bytes...).
_STRING_OUTPUT_OFFSET = WORD_SIZE


def _as_word(topic: bytes) -> bytes:
    b = bytes(topic)
    if len(b) != WORD_SIZE:
        raise MalformedTopicError(f"Expected 32-byte topic, got len={len(b)}")
    return b


def topic_to_address(topic: bytes) -> str:
    """
    Indexed address: the low 20 bytes of the topic word (the upper 12 are
    zero padding), returned as an EIP-55 checksummed string.
    """
    return to_checksum_address("0x" + _as_word(topic)[-20:].hex())


def topic_to_uint(topic: bytes) -> int:
    return int.from_bytes(_as_word(topic), byteorder="big", signed=False)


def require_topics(topics: tuple[bytes, ...], count: int, *, event: str) -> None:
    if len(topics) < count:
        raise MalformedTopicError(
            f"{event} expects {count} topics, got {len(topics)}"
        )


def decode_abi_string(data: bytes, *, offset: int = 0) -> str:
    """
    Decode an ABI dynamic string whose length word starts at `offset`.

    Layout:
      data[offset : offset + 32]         -> N, big-endian unsigned
      data[offset + 32 : offset + 32 + N] -> utf-8 bytes
    Trailing zero padding is ignored.
    """
    start = offset + WORD_SIZE
    if offset < 0 or len(data) < start:
        raise MalformedPayloadError(
            f"Payload too short for string length word at offset {offset} (len={len(data)})"
        )

    length = int.from_bytes(data[offset:start], byteorder="big", signed=False)
    if length > len(data) - start:
        raise MalformedPayloadError(
            f"Declared string length {length} exceeds remaining payload {len(data) - start}"
        )

    return data[start : start + length].decode("utf-8", errors="replace")


def decode_string_output(output: bytes) -> str:
    """
    Decode the output of a `string` view function.

    Some old tokens return bytes32 instead of string; a bare single-word
    output is read that way (NUL padded on the right).
    """
    if len(output) == WORD_SIZE:
        return output.rstrip(b"\x00").decode("utf-8", errors="replace")
    return decode_abi_string(output, offset=_STRING_OUTPUT_OFFSET)
