"""
Bounded history of committed blocks.

Why Keep History?
-----------------
When a fetched block does not link to the block we committed last, the chain
has reorganized underneath us. To find where our view and the chain's view
diverged, we need the blocks we committed before the current one. The history
is that record, newest at the end.

It is a cache, not a source of truth. It is only used to:

1. Compare hashes while walking back during fork resolution
2. Reposition the stream on seek without refetching a known block

Memory Safety
-------------
The history is bounded by `max_length`. Once full, FIFO eviction drops the
oldest block on every push. The bound is also the deepest reorganization the
reader can heal on its own.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field

from .blocks import Block


@dataclass(slots=True)
class BlockHistory:
    """
    Previously committed blocks, oldest first.

    The current block is never part of the history. It is pushed here only
    when a newer block replaces it.
    """

    max_length: int
    """Maximum number of blocks retained."""

    _blocks: deque[Block] = field(init=False, repr=False)
    """Blocks in commit order. The deque bound performs FIFO eviction."""

    def __post_init__(self) -> None:
        if self.max_length < 1:
            raise ValueError(f"max_length must be at least 1, got {self.max_length}")
        self._blocks = deque(maxlen=self.max_length)

    def __len__(self) -> int:
        """Return the number of retained blocks."""
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        """Iterate from oldest to newest."""
        return iter(self._blocks)

    def __contains__(self, block_number: object) -> bool:
        """Check if a block with the given number is retained."""
        return any(block.number == block_number for block in self._blocks)

    @property
    def is_empty(self) -> bool:
        """Check if no blocks are retained."""
        return not self._blocks

    @property
    def block_numbers(self) -> list[int]:
        """Numbers of retained blocks, oldest first."""
        return [block.number for block in self._blocks]

    def push(self, block: Block) -> None:
        """
        Append a block that is no longer current.

        If the history is full, the oldest block is evicted.

        Args:
            block: The block being replaced as current.
        """
        self._blocks.append(block)

    def newest(self) -> Block | None:
        """
        Get the most recently pushed block without removing it.

        Returns:
            The newest block, or None if the history is empty.
        """
        return self._blocks[-1] if self._blocks else None

    def pop(self) -> Block:
        """
        Remove and return the newest block.

        Raises:
            IndexError: If the history is empty.
        """
        return self._blocks.pop()

    def find(self, block_number: int) -> Block | None:
        """
        Look up a retained block by number, scanning from newest.

        Args:
            block_number: The block number to look for.

        Returns:
            The matching block, or None if it is not retained.
        """
        for block in reversed(self._blocks):
            if block.number == block_number:
                return block
        return None

    def rewind_to(self, block_number: int) -> Block | None:
        """
        Drop everything newer than a block and take that block out.

        Scans from newest to oldest. If the block is found, it and every block
        pushed after it are removed, and it is returned. Older blocks stay.

        If the block is not retained, the history is left untouched.

        Args:
            block_number: The block to rewind to.

        Returns:
            The removed block, or None if it was not found.
        """
        if block_number not in self:
            return None

        # Discard newer blocks first; the match is the last one popped.
        while True:
            block = self._blocks.pop()
            if block.number == block_number:
                return block

    def clear(self) -> None:
        """Remove all retained blocks."""
        self._blocks.clear()
