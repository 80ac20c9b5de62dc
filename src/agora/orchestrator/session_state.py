"""
Session State Management for Agora.

This module defines the operational states a debate or discussion session can
be in, along with the transitions allowed between them.
"""

from enum import Enum
from typing import Dict, List, Set

from agora.errors import TransitionError


class SessionState(str, Enum):
    """
    States of a session within Agora.

    These represent the operational status of a run, independent of the
    debate phase it is in.
    """

    PENDING = "pending"        # Configured, no turn taken yet
    RUNNING = "running"        # Turns are being produced
    COMPLETED = "completed"    # Ran to a terminal condition
    FAILED = "failed"          # Aborted by an error
    ABANDONED = "abandoned"    # Stopped on request


VALID_STATE_TRANSITIONS: Dict[SessionState, Set[SessionState]] = {
    SessionState.PENDING: {SessionState.RUNNING, SessionState.ABANDONED, SessionState.FAILED},
    SessionState.RUNNING: {SessionState.COMPLETED, SessionState.FAILED, SessionState.ABANDONED},
    SessionState.COMPLETED: set(),
    SessionState.FAILED: set(),
    SessionState.ABANDONED: set(),
}

TERMINAL_STATES: Set[SessionState] = {
    SessionState.COMPLETED,
    SessionState.FAILED,
    SessionState.ABANDONED,
}


def validate_state_transition(current_state: SessionState, new_state: SessionState) -> bool:
    """
    Validate whether a state transition is allowed.

    Args:
        current_state: The current session state
        new_state: The proposed new state

    Returns:
        True if the transition is valid, False otherwise
    """
    if current_state == new_state:
        return True

    return new_state in VALID_STATE_TRANSITIONS.get(current_state, set())


def transition(current_state: SessionState, new_state: SessionState) -> SessionState:
    """
    Return ``new_state`` if reachable from ``current_state``.

    Raises:
        TransitionError: If the transition is not allowed
    """
    if not validate_state_transition(current_state, new_state):
        raise TransitionError(f"Invalid state transition: {current_state.value} -> {new_state.value}")
    return new_state


def get_valid_next_states(current_state: SessionState) -> List[SessionState]:
    """Get all valid states that can follow the current state."""
    return list(VALID_STATE_TRANSITIONS.get(current_state, set()))
