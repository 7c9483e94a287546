"""
Block reader for fork-prone chains.

What Is The Reader?
-------------------
The reader turns a chain that can change its recent history into a stream of
blocks in which every block links to the one before it. When the chain
reorganizes, the reader notices, walks back to the last block both branches
agree on, and tells its consumer to roll back.

How It Works
------------
- An adapter supplies the head number and blocks by number
- `advance()` fetches the next block and checks its parent hash
- On a mismatch, history is compared with freshly fetched blocks
- `seek()` repositions the stream, reusing history when it can
"""

from __future__ import annotations

__all__ = [
    # Reader
    "ActionReader",
    "ReaderProgress",
    "HistoryExhaustedHandler",
    "raise_history_exhausted",
    # Service
    "ReaderService",
    "BlockHandler",
    # States
    "ReaderState",
    # Data
    "Block",
    "BlockInfo",
    "BlockHash",
    "BlockHistory",
    # Adapter
    "ChainAdapter",
    # Configuration
    "ReaderConfig",
    "DEFAULT_START_AT_BLOCK",
    "DEFAULT_ONLY_IRREVERSIBLE",
    "DEFAULT_MAX_HISTORY_LENGTH",
    "DEFAULT_POLL_INTERVAL",
]

from .adapter import ChainAdapter
from .blocks import Block, BlockHash, BlockInfo
from .config import (
    DEFAULT_MAX_HISTORY_LENGTH,
    DEFAULT_ONLY_IRREVERSIBLE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_START_AT_BLOCK,
    ReaderConfig,
)
from .history import BlockHistory
from .reader import (
    ActionReader,
    HistoryExhaustedHandler,
    ReaderProgress,
    raise_history_exhausted,
)
from .service import BlockHandler, ReaderService
from .states import ReaderState
