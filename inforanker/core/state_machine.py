"""Generic State Machine for status transitions.

This module provides a reusable state machine pattern and the transition
map of a keyword collection job.

Example:
    sm = create_collection_state_machine()
    sm.transition_to(CollectionPhase.COLLECTING_SOURCE)
    sm.transition_to(CollectionPhase.SCORING_SOURCE)
    sm.transition_to(CollectionPhase.COMPLETED)
"""

from enum import Enum
from typing import Generic, TypeVar

from inforanker.core.exceptions import InfoRankerError

T = TypeVar("T", bound=str | Enum)

# Type alias for transition maps
TransitionMap = dict[T, list[T]]


class InvalidTransitionError(InfoRankerError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, current: T, target: T, allowed: list[T] | None = None):
        self.current = current
        self.target = target
        self.allowed = allowed or []
        allowed_str = ", ".join(str(s) for s in self.allowed) if self.allowed else "none"
        super().__init__(
            message=f"Invalid transition from '{current}' to '{target}'. "
            f"Allowed transitions: {allowed_str}",
            context={
                "current": str(current),
                "target": str(target),
                "allowed": [str(s) for s in self.allowed],
            },
        )


class StateMachine(Generic[T]):
    """Generic state machine for status transitions.

    Attributes:
        current: Current state
        transitions: Map of allowed transitions from each state
    """

    def __init__(self, initial: T, transitions: TransitionMap[T]):
        """Initialize state machine.

        Args:
            initial: Initial state
            transitions: Map of state -> list of allowed target states
        """
        self._current = initial
        self._transitions = transitions

    @property
    def current(self) -> T:
        """Get current state."""
        return self._current

    @property
    def allowed_transitions(self) -> list[T]:
        """Get list of states we can transition to from current state."""
        return self._transitions.get(self._current, [])

    @property
    def is_terminal(self) -> bool:
        """True when no transition leaves the current state."""
        return not self.allowed_transitions

    def can_transition(self, target: T) -> bool:
        """Check if transition to target state is allowed.

        Args:
            target: Target state to check

        Returns:
            True if transition is allowed, False otherwise
        """
        return target in self.allowed_transitions

    def transition(self, target: T) -> None:
        """Perform transition to target state.

        Args:
            target: Target state

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(
                current=self._current,
                target=target,
                allowed=self.allowed_transitions,
            )
        self._current = target

    def transition_to(self, target: T) -> T:
        """Perform transition and return new state.

        Args:
            target: Target state

        Returns:
            The new current state (same as target)

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        self.transition(target)
        return self._current

    def __str__(self) -> str:
        return f"StateMachine(current={self._current})"

    def __repr__(self) -> str:
        return f"StateMachine(current={self._current!r}, allowed={self.allowed_transitions!r})"


# ============================================
# Collection Job Transitions
# ============================================


def get_collection_transitions() -> TransitionMap:
    """Get transition map for CollectionPhase.

    A source is collected then scored; the next source starts collecting
    again. Any non-terminal phase may fail.
    """
    from inforanker.models.collection import CollectionPhase

    return {
        CollectionPhase.QUEUED: [
            CollectionPhase.COLLECTING_SOURCE,
            CollectionPhase.COMPLETED,  # keyword with no active sources
            CollectionPhase.FAILED,
        ],
        CollectionPhase.COLLECTING_SOURCE: [
            CollectionPhase.SCORING_SOURCE,
            CollectionPhase.COLLECTING_SOURCE,  # source yielded nothing new
            CollectionPhase.COMPLETED,
            CollectionPhase.FAILED,
        ],
        CollectionPhase.SCORING_SOURCE: [
            CollectionPhase.COLLECTING_SOURCE,
            CollectionPhase.COMPLETED,
            CollectionPhase.FAILED,
        ],
        CollectionPhase.COMPLETED: [],  # Terminal state
        CollectionPhase.FAILED: [],  # Terminal state
    }


def create_collection_state_machine(initial_phase: str | None = None) -> StateMachine:
    """Create a state machine for a collection job.

    Args:
        initial_phase: Initial phase (default: QUEUED)

    Returns:
        Configured StateMachine for a collection job
    """
    from inforanker.models.collection import CollectionPhase

    initial = CollectionPhase(initial_phase) if initial_phase else CollectionPhase.QUEUED
    return StateMachine(initial, get_collection_transitions())
