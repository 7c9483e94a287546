"""
Fork-aware, strictly ordered block reader.

The Core Problem
----------------
A chain's tip is not final. A block we handed downstream a moment ago may be
replaced by a competing block at the same height. Consumers that apply side
effects per block (indexers, bridges, notifiers) need two things:

1. **Order**: Blocks arrive one height at a time, each linking to the last
2. **Correction**: When history changes, they are told to roll back

How It Works
------------
The reader keeps the block it emitted last (the "current" block) and a bounded
history of the blocks before it. On every `advance()`:

1. Refresh the head number if we caught up with it (or never saw it)
2. If behind, fetch the next block
3. If it links to the current block, commit it and move forward
4. Otherwise a fork happened: walk back through history until the chain
   agrees with us again, then report a rollback

Fork Resolution
---------------
Resolution re-fetches the block at the current height and compares its parent
hash with the newest history entry. If they differ, the current block is
dropped and the history entry becomes current. This repeats one block at a
time until a match is found or the history runs out.

Running out of history means the fork is deeper than `max_history_length`.
What to do then is domain-specific, so it is delegated to an injectable
handler. The default handler fails.

Concurrency
-----------
The reader is designed for single-threaded async operation: one caller, one
in-flight `advance()` or `seek()` at a time. Every adapter call is awaited
before the next is issued, because each fetch depends on the previous result.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from chain_tailer import metrics
from chain_tailer.types import (
    HistoryExhaustedError,
    InvalidSeekTargetError,
    ReaderExhaustedError,
    ReaderInvariantError,
)

from .adapter import ChainAdapter
from .blocks import Block, BlockHash
from .config import ReaderConfig
from .history import BlockHistory
from .states import ReaderState

logger = logging.getLogger(__name__)

HistoryExhaustedHandler = Callable[["ActionReader"], Awaitable[None]]
"""
Strategy invoked when fork resolution runs out of history.

Raising marks the reader EXHAUSTED and propagates to the caller of `advance()`.
Returning normally accepts the height of the oldest retained block as the
branch point. The block now at that height is refetched and becomes current.
A handler may adjust the reader first, for example by switching
`only_irreversible` on.
"""


async def raise_history_exhausted(reader: ActionReader) -> None:
    """
    Default history-exhausted handler: log and fail.

    Readers relying on this default should be run with `only_irreversible`
    set, or with a history bound larger than any expected reorganization.

    Raises:
        HistoryExhaustedError: Always.
    """
    logger.info(
        "Fork resolution history has been exhausted at block %d (max_history_length=%d)",
        reader.current_block_number,
        reader.max_history_length,
    )
    raise HistoryExhaustedError(reader.current_block_number, reader.max_history_length)


@dataclass(slots=True)
class ReaderProgress:
    """
    Current reader progress.

    Provides a snapshot of reader state for monitoring and logging.
    """

    state: ReaderState
    """Current reader state machine state."""

    head_block_number: int
    """Last known head block number. 0 when unknown."""

    current_block_number: int
    """Number of the most recently committed block."""

    start_at_block: int
    """First block of the stream, resolved once when tailing."""

    history_length: int
    """Number of blocks retained for fork resolution."""

    blocks_committed: int = 0
    """Total blocks committed in forward advance this session."""

    forks_resolved: int = 0
    """Total forks resolved this session."""


@dataclass(slots=True)
class ActionReader:
    """
    Reads blocks from a chain through an adapter, handling forks.

    Each `advance()` returns `(block, is_rollback, is_new_block)`:

    - `is_new_block=True, is_rollback=False`: a new block extends the stream
    - `is_new_block=True, is_rollback=True`: a fork was resolved; the returned
      block is the last one both branches agree on, and everything emitted
      after it must be reversed
    - `is_new_block=False`: caught up with the head; the same block as before

    The reader owns all of its state. It never persists anything, and it
    never talks to a node except through the adapter.
    """

    adapter: ChainAdapter
    """Chain access for head numbers and blocks."""

    config: ReaderConfig = field(default_factory=ReaderConfig)
    """Start position, head mode and history bound."""

    on_history_exhausted: HistoryExhaustedHandler = field(default=raise_history_exhausted)
    """Strategy for forks deeper than the retained history."""

    start_at_block: int = field(init=False)
    """First block of the stream. Negative until tailing is resolved."""

    only_irreversible: bool = field(init=False)
    """Forwarded to the adapter on every head lookup."""

    head_block_number: int = field(default=0, init=False)
    """Last known head block number. 0 means unknown."""

    current_block_number: int = field(init=False)
    """Number of the most recently committed block."""

    current_block: Block | None = field(default=None, init=False)
    """The most recently committed block, or None before the first commit."""

    block_history: BlockHistory = field(init=False)
    """Blocks committed before the current one, oldest first."""

    is_first_block: bool = field(default=True, init=False)
    """True when the current block is the first block of the stream."""

    _state: ReaderState = field(default=ReaderState.UNINITIALIZED, init=False)
    """Current reader state."""

    _blocks_committed: int = field(default=0, init=False)
    """Counter for committed blocks."""

    _forks_resolved: int = field(default=0, init=False)
    """Counter for resolved forks."""

    def __post_init__(self) -> None:
        """Initialize stream position from the configuration."""
        self.start_at_block = self.config.start_at_block
        self.only_irreversible = self.config.only_irreversible
        self.current_block_number = self.start_at_block - 1
        self.block_history = BlockHistory(max_length=self.config.max_history_length)

    @property
    def state(self) -> ReaderState:
        """Current reader state."""
        return self._state

    @property
    def max_history_length(self) -> int:
        """Bound on retained history."""
        return self.block_history.max_length

    def get_progress(self) -> ReaderProgress:
        """
        Get current reader progress.

        Returns:
            Snapshot of reader state for monitoring.
        """
        return ReaderProgress(
            state=self._state,
            head_block_number=self.head_block_number,
            current_block_number=self.current_block_number,
            start_at_block=self.start_at_block,
            history_length=len(self.block_history),
            blocks_committed=self._blocks_committed,
            forks_resolved=self._forks_resolved,
        )

    async def advance(self) -> tuple[Block, bool, bool]:
        """
        Load, validate, and return the next block.

        Safe to call repeatedly. When caught up with the head, the current
        block is returned again with both flags false.

        Returns:
            Tuple of (block, is_rollback, is_new_block).

        Raises:
            ReaderExhaustedError: If an earlier fork could not be resolved.
            HistoryExhaustedError: If a fork is deeper than the retained
                history and the default handler is in use.
            ReaderInvariantError: If no current block exists afterwards.
        """
        self._ensure_usable()

        is_rollback = False
        is_new_block = False

        # On the head block, or head never seen: refresh it.
        if self.current_block_number == self.head_block_number or not self.head_block_number:
            await self._refresh_head()

        # A negative position tails the chain.
        #
        # This only happens on the very first call, so an empty history is
        # required. Clamp at 0 for chains shorter than the tail.
        if self.current_block_number < 0 and self.block_history.is_empty:
            self.current_block_number = max(self.head_block_number + self.start_at_block, 0)
            self.start_at_block = self.current_block_number + 1
            logger.info("Tailing chain from block %d", self.start_at_block)

        # Behind the head: process the next block.
        if self.current_block_number < self.head_block_number:
            candidate = await self._fetch_block(self.current_block_number + 1)

            expected_hash: BlockHash | None = (
                self.current_block.block_info.block_hash if self.current_block is not None else None
            )
            actual_hash = candidate.block_info.previous_block_hash

            # Same chain as our history, or nothing to validate against yet.
            if expected_hash == actual_hash or self.block_history.is_empty:
                self._commit(candidate)
                is_new_block = True
            else:
                # The new block does not extend what we emitted.
                #
                # Our history is wrong from some point on; find where.
                logger.info(
                    "Fork detected: new block %d previous=%s, old block %d id=%s",
                    candidate.number,
                    actual_hash,
                    self.current_block_number,
                    expected_hash,
                )
                metrics.forks_detected.inc()
                await self._resolve_fork()
                is_new_block = True
                is_rollback = True

                # The new branch may be shorter than the one we left.
                await self._refresh_head()

        # Let the handler know if this is the earliest block we will send.
        self.is_first_block = self.current_block_number == self.start_at_block

        if self.current_block is None:
            raise ReaderInvariantError("current block must be set after advance")

        return self.current_block, is_rollback, is_new_block

    async def seek(self, block_number: int) -> None:
        """
        Position the stream so the next `advance()` emits `block_number`.

        The block before the target becomes current. It is taken from history
        when retained, otherwise fetched through the adapter.

        Args:
            block_number: The block the next advance should return.

        Raises:
            InvalidSeekTargetError: If the target precedes the start block.
            ReaderExhaustedError: If an earlier fork could not be resolved.
        """
        self._ensure_usable()

        earliest = max(self.start_at_block, 1)
        if block_number < earliest:
            raise InvalidSeekTargetError(block_number, earliest)

        logger.info("Seeking to block %d", block_number)

        # Going back to the first block: there is no block before it.
        if block_number == 1:
            self.block_history.clear()
            self.current_block = None
            self.current_block_number = 0
            self.head_block_number = 0
            self._resolve_pending_tail(1)
            self._transition_to(ReaderState.UNINITIALIZED)
            return

        resume_after = block_number - 1

        if self.current_block is not None and self.current_block.number == resume_after:
            block = self.current_block
        elif (retained := self.block_history.rewind_to(resume_after)) is not None:
            block = retained
        else:
            # Not retained.
            #
            # Fetch before touching state so an adapter failure leaves the
            # previous position intact. What we kept does not link to the new
            # position, so history restarts from the fetched block.
            block = await self._fetch_block(resume_after)
            self.block_history.clear()

        self.current_block = block
        self.current_block_number = resume_after
        self.head_block_number = 0
        self._resolve_pending_tail(block_number)
        self._transition_to(ReaderState.TRACKING)

    def _commit(self, block: Block) -> None:
        """Make a validated block current, moving the old one into history."""
        if self.current_block is not None:
            self.block_history.push(self.current_block)

        self.current_block = block
        self.current_block_number = block.number
        self._transition_to(ReaderState.TRACKING)

        self._blocks_committed += 1
        metrics.blocks_committed.inc()
        metrics.current_block_number.set(float(block.number))
        logger.debug("Committed block %d id=%s", block.number, block.block_info.block_hash)

    async def _resolve_fork(self) -> None:
        """
        Roll back one block at a time until the chain agrees with history.

        Each step re-fetches the block at the current height, since the chain
        changed underneath us, and compares it with the newest history entry.
        Resolution ends on the first match or when history is exhausted.
        """
        if self.current_block is None:
            raise ReaderInvariantError(
                "current block must be set when initiating fork resolution"
            )

        self._transition_to(ReaderState.RESOLVING_FORK)

        while (previous_block := self.block_history.newest()) is not None:
            logger.debug("Refetching block %d", self.current_block.number)
            refetched = await self._fetch_block(self.current_block.number)

            new_info = refetched.block_info
            old_info = previous_block.block_info

            if refetched.links_to(previous_block):
                logger.info(
                    "Fork resolved: new block %d previous=%s matches old block %d id=%s",
                    new_info.block_number,
                    new_info.previous_block_hash,
                    old_info.block_number,
                    old_info.block_hash,
                )
                self.current_block = refetched
                break

            logger.info(
                "Fork mismatch: new block %d previous=%s, old block %d id=%s",
                new_info.block_number,
                new_info.previous_block_hash,
                old_info.block_number,
                old_info.block_hash,
            )
            metrics.rollback_steps.inc()

            # Step back: the history entry becomes current.
            #
            # Keep the number in step so a failed refetch leaves a position
            # that the next advance can retry from.
            self.current_block = self.block_history.pop()
            self.current_block_number = self.current_block.number

        if self.block_history.is_empty:
            await self._handle_history_exhausted()

            # The block we stepped back to is from the abandoned branch.
            # Re-anchor on the block the chain now holds at that height.
            self.current_block = await self._fetch_block(self.current_block_number)

        # Resume right after the reconciled point.
        newest = self.block_history.newest()
        if newest is not None:
            self.current_block_number = newest.number + 1
        elif self.current_block is not None:
            self.current_block_number = self.current_block.number

        self._forks_resolved += 1
        self._transition_to(ReaderState.TRACKING)

    async def _handle_history_exhausted(self) -> None:
        """Run the exhaustion handler, entering EXHAUSTED if it fails."""
        metrics.history_exhausted.inc()
        try:
            await self.on_history_exhausted(self)
        except Exception:
            self._transition_to(ReaderState.EXHAUSTED)
            raise
        logger.info("History exhaustion handled; resuming from block %d", self.current_block_number)

    def _resolve_pending_tail(self, first_block: int) -> None:
        """Fix the start block when a seek lands before a negative start was resolved."""
        if self.start_at_block < 0:
            self.start_at_block = first_block
            logger.info("Tailing abandoned; stream now starts at block %d", first_block)

    async def _refresh_head(self) -> None:
        """Load the head block number from the adapter."""
        self.head_block_number = await self.adapter.get_head_block_number(
            only_irreversible=self.only_irreversible
        )
        metrics.head_block_number.set(float(self.head_block_number))
        logger.debug("Head block number is %d", self.head_block_number)

    async def _fetch_block(self, block_number: int) -> Block:
        """Load a block from the adapter, timing the request."""
        with metrics.block_fetch_time.time():
            return await self.adapter.get_block(block_number)

    def _ensure_usable(self) -> None:
        """Reject calls once the reader is in its terminal state."""
        if self._state.is_terminal:
            raise ReaderExhaustedError()

    def _transition_to(self, new_state: ReaderState) -> None:
        """
        Transition to a new reader state.

        Staying in the same state is a no-op.

        Args:
            new_state: Target state.

        Raises:
            ValueError: If transition is not allowed.
        """
        if new_state == self._state:
            return

        if not self._state.can_transition_to(new_state):
            raise ValueError(f"Invalid state transition: {self._state.name} -> {new_state.name}")

        self._state = new_state
