from __future__ import annotations

from typing import Literal

from block_indexer.app.domain.ports.out import BlockDataSource


BlockSelector = int | str
_EARLIEST: Literal["earliest"] = "earliest"
_LATEST: Literal["latest"] = "latest"


async def resolve_block_bounds(
    *,
    block_source: BlockDataSource,
    from_block: BlockSelector,
    to_block: BlockSelector,
) -> tuple[int, int]:
    """
    Resolve from_block / to_block into concrete block numbers.

    - If both are ints -> they are returned as-is.
    - Numeric strings are parsed.
    - If from_block is "earliest" / "" -> 0 (genesis).
    - If to_block is "latest" / ""     -> current chain head from block_source.
    """
    if isinstance(from_block, int) and isinstance(to_block, int):
        return from_block, to_block

    if isinstance(from_block, int):
        fb = from_block
    else:
        fb_str = from_block.strip().lower()
        if fb_str in ("", _EARLIEST):
            fb = 0
        elif fb_str.isdigit():
            fb = int(fb_str)
        else:
            raise ValueError(f"Unsupported from_block value: {from_block!r}")

    if isinstance(to_block, int):
        tb = to_block
    else:
        tb_str = to_block.strip().lower()
        if tb_str in ("", _LATEST):
            tb = await block_source.latest_block()
        elif tb_str.isdigit():
            tb = int(tb_str)
        else:
            raise ValueError(f"Unsupported to_block value: {to_block!r}")

    return fb, tb
