"""Reader state machine."""

from __future__ import annotations

from enum import Enum, auto


class ReaderState(Enum):
    """
    Reader states representing where the block stream currently stands.

    State Machine Diagram
    ---------------------
    ::

        UNINITIALIZED --> TRACKING <--> RESOLVING_FORK --> EXHAUSTED
              ^              |                |
              +--------------+----------------+

    Transitions
    -----------
    UNINITIALIZED -> TRACKING
        - Triggered when: The first block is committed, or a seek adopts a block
    TRACKING -> RESOLVING_FORK
        - Triggered when: A fetched block does not link to the current block
    RESOLVING_FORK -> TRACKING
        - Triggered when: A branch point is found in history
    RESOLVING_FORK -> EXHAUSTED
        - Triggered when: History runs out and the exhaustion handler raises
    TRACKING -> UNINITIALIZED
        - Triggered when: Seeking back to block 1 clears all state
    RESOLVING_FORK -> UNINITIALIZED
        - Triggered when: Seeking back to block 1 after a resolution was
          aborted by an adapter failure

    A history-exhausted handler that returns normally keeps the reader in
    RESOLVING_FORK, which then completes back to TRACKING. EXHAUSTED is only
    entered when the handler raises.
    """

    UNINITIALIZED = auto()
    """No block committed yet. The next fetched block is accepted unvalidated."""

    TRACKING = auto()
    """Normal forward advance. Each new block must link to the current one."""

    RESOLVING_FORK = auto()
    """Walking back through history looking for the branch point."""

    EXHAUSTED = auto()
    """
    Terminal state: a fork was deeper than the retained history.

    Every later advance or seek fails with ReaderExhaustedError.
    """

    def can_transition_to(self, target: "ReaderState") -> bool:
        """
        Check if transition to target state is valid.

        Args:
            target: The proposed target state.

        Returns:
            True if the transition is allowed by the state machine rules.
        """
        return target in _VALID_TRANSITIONS.get(self, set())

    @property
    def is_terminal(self) -> bool:
        """Check if the reader can no longer advance."""
        return self == ReaderState.EXHAUSTED

    @property
    def has_committed(self) -> bool:
        """Check if the reader holds a committed block in this state."""
        return self in {ReaderState.TRACKING, ReaderState.RESOLVING_FORK}


_VALID_TRANSITIONS: dict[ReaderState, set[ReaderState]] = {
    ReaderState.UNINITIALIZED: {ReaderState.TRACKING},
    ReaderState.TRACKING: {ReaderState.RESOLVING_FORK, ReaderState.UNINITIALIZED},
    ReaderState.RESOLVING_FORK: {
        ReaderState.TRACKING,
        ReaderState.EXHAUSTED,
        ReaderState.UNINITIALIZED,
    },
    ReaderState.EXHAUSTED: set(),
}
"""Valid state transitions for the reader state machine."""
