"""Tests for reader state machine."""

from __future__ import annotations

from chain_tailer.reader.states import ReaderState


class TestReaderStateValues:
    """Tests for ReaderState enum values and basic properties."""

    def test_all_states_exist(self) -> None:
        """All expected reader states are defined."""
        assert hasattr(ReaderState, "UNINITIALIZED")
        assert hasattr(ReaderState, "TRACKING")
        assert hasattr(ReaderState, "RESOLVING_FORK")
        assert hasattr(ReaderState, "EXHAUSTED")

    def test_state_count(self) -> None:
        """Exactly four reader states exist."""
        assert len(ReaderState) == 4

    def test_states_are_unique(self) -> None:
        """Each state has a unique value."""
        values = [state.value for state in ReaderState]
        assert len(values) == len(set(values))


class TestReaderStateTransitions:
    """Tests for state transition validation."""

    def test_uninitialized_can_transition_to_tracking(self) -> None:
        """UNINITIALIZED can transition to TRACKING."""
        assert ReaderState.UNINITIALIZED.can_transition_to(ReaderState.TRACKING)

    def test_uninitialized_cannot_resolve_fork(self) -> None:
        """Fork resolution needs a committed block."""
        assert not ReaderState.UNINITIALIZED.can_transition_to(ReaderState.RESOLVING_FORK)

    def test_tracking_valid_transitions(self) -> None:
        """TRACKING can start fork resolution or be reset by seek."""
        assert ReaderState.TRACKING.can_transition_to(ReaderState.RESOLVING_FORK)
        assert ReaderState.TRACKING.can_transition_to(ReaderState.UNINITIALIZED)

    def test_tracking_cannot_exhaust_directly(self) -> None:
        """Exhaustion only happens during fork resolution."""
        assert not ReaderState.TRACKING.can_transition_to(ReaderState.EXHAUSTED)

    def test_resolving_fork_valid_transitions(self) -> None:
        """RESOLVING_FORK ends in TRACKING or EXHAUSTED."""
        assert ReaderState.RESOLVING_FORK.can_transition_to(ReaderState.TRACKING)
        assert ReaderState.RESOLVING_FORK.can_transition_to(ReaderState.EXHAUSTED)
        assert ReaderState.RESOLVING_FORK.can_transition_to(ReaderState.UNINITIALIZED)

    def test_exhausted_is_terminal(self) -> None:
        """EXHAUSTED has no outgoing transitions."""
        for state in ReaderState:
            assert not ReaderState.EXHAUSTED.can_transition_to(state)


class TestReaderStateProperties:
    """Tests for convenience properties."""

    def test_only_exhausted_is_terminal(self) -> None:
        """Only EXHAUSTED is terminal."""
        assert [state for state in ReaderState if state.is_terminal] == [ReaderState.EXHAUSTED]

    def test_committed_states(self) -> None:
        """TRACKING and RESOLVING_FORK hold a committed block."""
        assert ReaderState.TRACKING.has_committed
        assert ReaderState.RESOLVING_FORK.has_committed
        assert not ReaderState.UNINITIALIZED.has_committed
        assert not ReaderState.EXHAUSTED.has_committed
