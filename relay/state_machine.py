"""
Relay State Machine

Defines the states one invocation passes through and the transitions
allowed between them. Every path ends in exactly one REPORTED state.
"""

from enum import Enum
from typing import Final

import structlog

from relay.exceptions import InvalidStateTransitionError

log = structlog.get_logger()


class RelayState(str, Enum):
    """
    Relay state enum.

    The decoder output is the initial state; REPORTED is the only
    terminal state.
    """

    DECODED = "DECODED"
    """Notification decoded into a submission event."""

    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    """Upstream marked the submission as failed."""

    VALIDATION_FAILURE = "VALIDATION_FAILURE"
    """Submission rejected by the validator."""

    TRANSFERRING = "TRANSFERRING"
    """Artifact is being streamed into object storage."""

    TRANSFER_ERROR = "TRANSFER_ERROR"
    """Source read or storage write failed."""

    SUCCESS = "SUCCESS"
    """Artifact stored."""

    REPORTED = "REPORTED"
    """Status email sent and delivery record attempted."""

    @property
    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no outgoing transitions)."""
        return self in TERMINAL_STATES

    @classmethod
    def from_string(cls, value: str) -> "RelayState":
        """Convert string to RelayState enum."""
        try:
            return cls(value.upper())
        except ValueError as e:
            raise ValueError(
                f"Invalid relay state: '{value}'. "
                f"Valid values are: {[s.value for s in cls]}"
            ) from e


TERMINAL_STATES: Final[frozenset[RelayState]] = frozenset({
    RelayState.REPORTED,
})

# States from which the reporter is invoked
OUTCOME_STATES: Final[frozenset[RelayState]] = frozenset({
    RelayState.UPSTREAM_FAILURE,
    RelayState.VALIDATION_FAILURE,
    RelayState.TRANSFER_ERROR,
    RelayState.SUCCESS,
})

VALID_TRANSITIONS: Final[dict[RelayState, frozenset[RelayState]]] = {
    RelayState.DECODED: frozenset({
        RelayState.UPSTREAM_FAILURE,
        RelayState.VALIDATION_FAILURE,
        RelayState.TRANSFERRING,
    }),
    RelayState.TRANSFERRING: frozenset({
        RelayState.SUCCESS,
        RelayState.TRANSFER_ERROR,
    }),
    RelayState.UPSTREAM_FAILURE: frozenset({RelayState.REPORTED}),
    RelayState.VALIDATION_FAILURE: frozenset({RelayState.REPORTED}),
    RelayState.TRANSFER_ERROR: frozenset({RelayState.REPORTED}),
    RelayState.SUCCESS: frozenset({RelayState.REPORTED}),
    RelayState.REPORTED: frozenset(),  # Terminal
}


def validate_transition(
    current_state: RelayState | str,
    new_state: RelayState | str,
    *,
    raise_on_invalid: bool = True,
) -> bool:
    """
    Validate that a state transition is allowed.

    Args:
        current_state: Current relay state
        new_state: Desired next state
        raise_on_invalid: If True, raise exception on invalid transition

    Returns:
        True if transition is valid

    Raises:
        InvalidStateTransitionError: If transition is invalid and raise_on_invalid=True
    """
    if isinstance(current_state, str):
        current_state = RelayState.from_string(current_state)
    if isinstance(new_state, str):
        new_state = RelayState.from_string(new_state)

    allowed = VALID_TRANSITIONS.get(current_state, frozenset())
    is_valid = new_state in allowed

    if not is_valid and raise_on_invalid:
        log.warning(
            "invalid_state_transition",
            current_state=current_state.value,
            new_state=new_state.value,
            allowed_transitions=sorted(s.value for s in allowed),
        )
        raise InvalidStateTransitionError(
            current_state=current_state.value,
            new_state=new_state.value,
            allowed_transitions=sorted(s.value for s in allowed),
        )

    return is_valid


class StateTracker:
    """Records the path of one invocation through the relay states."""

    def __init__(self, initial: RelayState = RelayState.DECODED) -> None:
        self._history: list[RelayState] = [initial]

    @property
    def current(self) -> RelayState:
        return self._history[-1]

    @property
    def history(self) -> list[str]:
        return [s.value for s in self._history]

    def advance(self, new_state: RelayState) -> RelayState:
        validate_transition(self.current, new_state)
        self._history.append(new_state)
        return new_state
