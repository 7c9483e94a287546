"""Fork-aware block reader for append-only, reorganizing chains."""

from .reader import (
    ActionReader,
    Block,
    BlockInfo,
    ChainAdapter,
    ReaderConfig,
    ReaderService,
    ReaderState,
)
from .types import (
    HistoryExhaustedError,
    InvalidSeekTargetError,
    ReaderError,
    ReaderExhaustedError,
    ReaderInvariantError,
)

__all__ = [
    "ActionReader",
    "Block",
    "BlockInfo",
    "ChainAdapter",
    "ReaderConfig",
    "ReaderService",
    "ReaderState",
    "ReaderError",
    "ReaderInvariantError",
    "InvalidSeekTargetError",
    "HistoryExhaustedError",
    "ReaderExhaustedError",
]
