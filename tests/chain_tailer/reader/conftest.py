"""Shared test utilities and fixtures for reader tests."""

from __future__ import annotations

import pytest

from chain_tailer.reader import ActionReader, Block, BlockInfo, ReaderConfig

GENESIS_HASH = "genesis"
"""Parent hash of block 1 on every branch."""


def block_hash(branch: str, number: int) -> str:
    """Deterministic hash for a block on a named branch."""
    return f"{branch}{number}"


def create_block(number: int, previous_block_hash: str, branch: str = "a") -> Block:
    """Create a block with minimal valid structure for testing."""
    return Block(
        block_info=BlockInfo(
            block_number=number,
            block_hash=block_hash(branch, number),
            previous_block_hash=previous_block_hash,
        ),
        payload={"branch": branch, "number": number},
    )


class BlockNotFoundError(LookupError):
    """Raised by the mock chain for heights it does not have."""


class MockChain:
    """
    In-memory chain adapter that can be extended and reorganized.

    Tracks every adapter call so tests can assert on fetch behavior.
    """

    def __init__(self) -> None:
        """Initialize an empty chain."""
        self.blocks: dict[int, Block] = {}
        self.irreversible_lag: int = 0
        self.head_calls: list[bool] = []
        self.fetch_log: list[int] = []
        self._fetch_errors: dict[int, Exception] = {}
        self._head_error: Exception | None = None

    @property
    def head(self) -> int:
        """Number of the highest block."""
        return max(self.blocks, default=0)

    def extend(self, count: int, branch: str = "a") -> None:
        """Append `count` blocks on top of the current head."""
        for _ in range(count):
            number = self.head + 1
            parent = self.blocks.get(number - 1)
            previous = parent.block_info.block_hash if parent is not None else GENESIS_HASH
            self.blocks[number] = create_block(number, previous, branch)

    def reorganize(self, from_number: int, branch: str, new_head: int) -> None:
        """
        Replace every block from `from_number` on with a competing branch.

        The first replaced block still links to the block before it, so the
        branch point is `from_number - 1`.
        """
        for number in list(self.blocks):
            if number >= from_number:
                del self.blocks[number]
        self.extend(new_head - from_number + 1, branch)

    def fail_once(self, block_number: int, error: Exception) -> None:
        """Make the next fetch of `block_number` raise `error`."""
        self._fetch_errors[block_number] = error

    def fail_next_head(self, error: Exception) -> None:
        """Make the next head lookup raise `error`."""
        self._head_error = error

    async def get_head_block_number(self, *, only_irreversible: bool) -> int:
        """Return the head, or the irreversible head when asked."""
        self.head_calls.append(only_irreversible)
        if self._head_error is not None:
            error, self._head_error = self._head_error, None
            raise error
        if only_irreversible:
            return max(self.head - self.irreversible_lag, 0)
        return self.head

    async def get_block(self, block_number: int) -> Block:
        """Return the block currently at `block_number`."""
        self.fetch_log.append(block_number)
        if block_number in self._fetch_errors:
            raise self._fetch_errors.pop(block_number)
        if block_number not in self.blocks:
            raise BlockNotFoundError(f"block {block_number} not found")
        return self.blocks[block_number]


def make_chain(length: int, branch: str = "a") -> MockChain:
    """Create a mock chain with `length` linked blocks."""
    chain = MockChain()
    chain.extend(length, branch)
    return chain


def make_reader(
    chain: MockChain,
    start_at_block: int = 1,
    max_history_length: int = 600,
    only_irreversible: bool = False,
) -> ActionReader:
    """Create a reader over a mock chain."""
    return ActionReader(
        adapter=chain,
        config=ReaderConfig(
            start_at_block=start_at_block,
            max_history_length=max_history_length,
            only_irreversible=only_irreversible,
        ),
    )


@pytest.fixture
def chain() -> MockChain:
    """Provide a ten block chain on branch `a`."""
    return make_chain(10)


@pytest.fixture
def reader(chain: MockChain) -> ActionReader:
    """Provide a reader starting at block 1 over the ten block chain."""
    return make_reader(chain)
