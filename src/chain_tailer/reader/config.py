"""
Reader configuration.

Operational defaults as module constants, plus the validated runtime
configuration model passed to the reader.
"""

from __future__ import annotations

from typing import Final

from pydantic import Field, field_validator

from chain_tailer.types import StrictBaseModel

DEFAULT_START_AT_BLOCK: Final[int] = 1
"""First block emitted when no start block is configured."""

DEFAULT_ONLY_IRREVERSIBLE: Final[bool] = False
"""Follow the reversible head unless asked otherwise."""

DEFAULT_MAX_HISTORY_LENGTH: Final[int] = 600
"""
Number of committed blocks retained for fork comparison.

This is also the deepest reorganization the reader can heal on its own.
"""

DEFAULT_POLL_INTERVAL: Final[float] = 0.5
"""Seconds the reader service sleeps when caught up with the head."""


class ReaderConfig(StrictBaseModel):
    """Runtime configuration for an ActionReader."""

    start_at_block: int = DEFAULT_START_AT_BLOCK
    """
    First block to emit.

    - Positive values are absolute block numbers.
    - Negative values tail the chain: the first block emitted is
      `head + start_at_block + 1`, so -5 yields the last five blocks.
    """

    only_irreversible: bool = DEFAULT_ONLY_IRREVERSIBLE
    """
    Ask the adapter for the irreversible head instead of the latest head.

    The reader only forwards this flag; its meaning belongs to the adapter.
    """

    max_history_length: int = Field(default=DEFAULT_MAX_HISTORY_LENGTH, ge=1)
    """Bound on the number of past blocks kept for fork resolution and seeking."""

    @field_validator("start_at_block")
    @classmethod
    def _reject_zero_start(cls, value: int) -> int:
        # Block numbers start at 1, and 0 does not describe a tail offset either.
        if value == 0:
            raise ValueError("start_at_block must be a positive block number or a negative offset")
        return value
