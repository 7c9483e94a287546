"""
Normalized block containers handed out by the reader.

The reader only ever looks at a block's position and its hash linkage. The
payload travels through untouched, so adapters are free to put whatever
their chain produces in there (decoded actions, raw JSON, receipts).
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from chain_tailer.types import StrictBaseModel

BlockHash = str | bytes
"""
Opaque block identifier. Only equality is ever used.

Adapters may pass hex strings or raw digest bytes, but should use one form
consistently: a `str` never equals a `bytes` hash.
"""


class BlockInfo(StrictBaseModel):
    """Position and hash linkage of a block."""

    block_number: int = Field(gt=0)
    """Height of the block. Block 1 is the first block of the chain."""

    block_hash: BlockHash
    """Identifier of this block, unique per block."""

    previous_block_hash: BlockHash
    """
    Identifier of the parent block.

    On a consistent branch this equals the `block_hash` of the block at
    `block_number - 1`. A mismatch against what the reader committed earlier
    is how forks are detected.
    """


class Block(StrictBaseModel):
    """A block as emitted by the reader: opaque payload plus its BlockInfo."""

    block_info: BlockInfo
    """Position and linkage, the only part the reader inspects."""

    payload: Any = None
    """Chain-specific contents, passed to the handler unexamined."""

    @property
    def number(self) -> int:
        """Shorthand for `block_info.block_number`."""
        return self.block_info.block_number

    def links_to(self, parent: Block) -> bool:
        """Check if this block names `parent` as its predecessor."""
        return self.block_info.previous_block_hash == parent.block_info.block_hash
