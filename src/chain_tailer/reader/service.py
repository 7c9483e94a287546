"""
Reader service that drives the block stream.

The reader only moves when `advance()` is called. ReaderService is that
driver: a simple polling loop that hands every new block to a handler.

How It Works
------------
1. Advance the reader
2. If the block is new, pass it to the handler (with its rollback flag)
3. If caught up with the head, sleep for the poll interval
4. Repeat until stopped

Errors from the adapter, the reader, or the handler end the loop and are
re-raised. Retry policy belongs to whoever runs the service.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from .blocks import Block
from .config import DEFAULT_POLL_INTERVAL
from .reader import ActionReader

logger = logging.getLogger(__name__)

BlockHandler = Callable[[Block, bool], Awaitable[None]]
"""
Consumer of new blocks.

Signature: (block, is_rollback) -> None

When `is_rollback` is true, the handler must reverse everything it applied
for blocks after `block` before treating `block` as the new tip.
"""


@dataclass(slots=True)
class ReaderService:
    """
    Drives an ActionReader in a polling loop.

    The service serializes all calls to the reader. It is the single caller
    the reader expects, so nothing else should advance or seek the same
    reader while the service runs.
    """

    reader: ActionReader
    """The reader to drive."""

    handle_block: BlockHandler
    """Consumer of `(block, is_rollback)` for every new block."""

    poll_interval: float = DEFAULT_POLL_INTERVAL
    """Seconds to sleep when caught up with the head."""

    _running: bool = field(default=False, init=False, repr=False)
    """Whether the service is running."""

    @property
    def is_running(self) -> bool:
        """Check if the loop is active."""
        return self._running

    async def run(self) -> None:
        """
        Main loop: advance and dispatch until stopped.

        The loop continues until `stop()` is called or an error propagates.
        """
        self._running = True
        logger.info("Reader service started at block %d", self.reader.current_block_number)

        try:
            while self._running:
                is_new_block = await self.step()
                if not is_new_block and self._running:
                    await asyncio.sleep(self.poll_interval)
        finally:
            self._running = False
            logger.info("Reader service stopped at block %d", self.reader.current_block_number)

    async def run_until(self, block_number: int) -> None:
        """
        Advance and dispatch until the current block reaches `block_number`.

        Sleeps while caught up, so the target may lie beyond the current head.

        Args:
            block_number: Block number to stop at (inclusive).
        """
        self._running = True
        try:
            while self._running and self.reader.current_block_number < block_number:
                is_new_block = await self.step()
                if not is_new_block:
                    await asyncio.sleep(self.poll_interval)
        finally:
            self._running = False

    async def step(self) -> bool:
        """
        Advance the reader once and dispatch the result.

        Returns:
            True if a new block was handed to the handler.
        """
        block, is_rollback, is_new_block = await self.reader.advance()

        # Nothing changed since the last call.
        if not is_new_block:
            return False

        if is_rollback:
            logger.info("Dispatching rollback to block %d", block.number)

        await self.handle_block(block, is_rollback)
        return True

    def stop(self) -> None:
        """
        Stop the service.

        Sets the running flag to False, causing the loop to exit after the
        current iteration completes.
        """
        self._running = False
