"""Exception hierarchy for the block reader."""

from __future__ import annotations


class ReaderError(Exception):
    """
    Base exception for all reader errors.

    Adapter failures are never wrapped in a ReaderError. They propagate to the
    caller unchanged so that retry policy stays with the adapter's owner.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ReaderInvariantError(ReaderError):
    """
    Raised when internal reader state is inconsistent.

    This indicates a bug, not an expected runtime condition. It is never
    raised in response to anything the chain or the adapter does.

    Attributes:
        detail: Which invariant was violated.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Reader invariant violated: {detail}")


class InvalidSeekTargetError(ReaderError, ValueError):
    """
    Raised when seeking before the configured start block.

    Attributes:
        block_number: The requested seek target.
        start_at_block: The earliest block the reader may be positioned at.
    """

    def __init__(self, block_number: int, start_at_block: int) -> None:
        self.block_number = block_number
        self.start_at_block = start_at_block

        super().__init__(
            f"Cannot seek to block {block_number} before configured "
            f"start_at_block {start_at_block}"
        )


class HistoryExhaustedError(ReaderError):
    """
    Raised when fork resolution runs out of cached history.

    The reader walked back through every retained block without finding one
    that the chain still agrees with. The fork is deeper than the history
    bound, so the reader cannot heal itself.

    Attributes:
        block_number: Number of the block being reconciled when history ran out.
        max_history_length: The configured history bound.
    """

    def __init__(self, block_number: int, max_history_length: int) -> None:
        self.block_number = block_number
        self.max_history_length = max_history_length

        super().__init__(
            f"Fork resolution history exhausted at block {block_number} "
            f"(max_history_length={max_history_length}), and no history "
            f"exhaustion handling has been configured"
        )


class ReaderExhaustedError(ReaderError):
    """Raised when a reader in the terminal EXHAUSTED state is used again."""

    def __init__(self) -> None:
        super().__init__(
            "Reader is exhausted after an unresolved fork; create a new reader to continue"
        )
