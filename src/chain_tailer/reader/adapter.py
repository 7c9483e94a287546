"""
Chain adapter interface consumed by the reader.

The reader never talks to a node itself. Everything it knows about the chain
comes through two coroutines supplied by an adapter object.
"""

from __future__ import annotations

from typing import Protocol

from .blocks import Block


class ChainAdapter(Protocol):
    """
    Protocol for chain access.

    This abstraction lets the reader follow any chain without depending on a
    specific node API. Implementations wrap an RPC client, a database, or an
    in-memory fixture.

    Implementers should:
    - Handle request timeouts and retries internally
    - Raise on I/O failure and on missing blocks (the reader never retries)
    - Not pin or cache blocks by number: after a reorganization `get_block(n)`
      must return the block now at `n`
    """

    async def get_head_block_number(self, *, only_irreversible: bool) -> int:
        """
        Load the current head block number.

        Args:
            only_irreversible: Return the most recent irreversible block number
                instead of the most recent block number.

        Returns:
            The head block number as the adapter currently sees it.
        """
        ...

    async def get_block(self, block_number: int) -> Block:
        """
        Load the block currently at the given height.

        Args:
            block_number: Height of the block to load.

        Returns:
            The normalized block.
        """
        ...
