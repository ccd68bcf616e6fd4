"""Retrieval lifecycle state machine implementation."""

from enum import Enum, auto
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class RetrievalState(Enum):
    """Retrieval lifecycle states.

    State transitions:
        PENDING -> FETCHING: Begin a quality attempt
        FETCHING -> EXTRACTING: Response is HTML-like
        FETCHING -> DONE: Response is not HTML, no quality gating
        EXTRACTING -> ESCALATING: Static metadata unusable, render in browser
        EXTRACTING/ESCALATING -> ENRICHING: Apply platform metadata
        EXTRACTING/ESCALATING/ENRICHING -> FETCHING: Quality too low, retry
        EXTRACTING/ESCALATING/ENRICHING -> DONE: Final result chosen
        any non-terminal -> FAILED: Transport exhausted or cancelled
    """

    PENDING = auto()
    FETCHING = auto()
    EXTRACTING = auto()
    ESCALATING = auto()
    ENRICHING = auto()
    DONE = auto()
    FAILED = auto()


class RetrievalStateError(Exception):
    """Raised when an invalid retrieval state transition is attempted."""

    def __init__(self, from_state: RetrievalState, to_state: RetrievalState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid retrieval state transition: {from_state.name} -> {to_state.name}"
        )


class RetrievalStateMachine:
    """State machine for one retrieval call.

    Enforces valid transitions and logs each one.
    """

    VALID_TRANSITIONS: ClassVar[dict[RetrievalState, set[RetrievalState]]] = {
        RetrievalState.PENDING: {
            RetrievalState.FETCHING,
            RetrievalState.FAILED,
        },
        RetrievalState.FETCHING: {
            RetrievalState.EXTRACTING,
            RetrievalState.DONE,
            RetrievalState.FAILED,
        },
        RetrievalState.EXTRACTING: {
            RetrievalState.ESCALATING,
            RetrievalState.ENRICHING,
            RetrievalState.FETCHING,
            RetrievalState.DONE,
            RetrievalState.FAILED,
        },
        RetrievalState.ESCALATING: {
            RetrievalState.ENRICHING,
            RetrievalState.FETCHING,
            RetrievalState.DONE,
            RetrievalState.FAILED,
        },
        RetrievalState.ENRICHING: {
            RetrievalState.FETCHING,
            RetrievalState.DONE,
            RetrievalState.FAILED,
        },
        RetrievalState.DONE: set(),  # Terminal state
        RetrievalState.FAILED: set(),  # Terminal state
    }

    def __init__(self, url: str) -> None:
        """Initialize the state machine in PENDING state.

        Args:
            url: Target URL, for logging.
        """
        self._url = url
        self._state = RetrievalState.PENDING
        self._log = logger.bind(url=url, component="retrieval")

    @property
    def state(self) -> RetrievalState:
        """Get the current state."""
        return self._state

    def can_transition(self, to_state: RetrievalState) -> bool:
        """Check if a transition to the given state is valid."""
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: RetrievalState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            RetrievalStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise RetrievalStateError(self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._log.debug(
            "state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def to_fetching(self) -> None:
        """Transition to FETCHING state."""
        self.transition(RetrievalState.FETCHING)

    def to_extracting(self) -> None:
        """Transition to EXTRACTING state."""
        self.transition(RetrievalState.EXTRACTING)

    def to_escalating(self) -> None:
        """Transition to ESCALATING state."""
        self.transition(RetrievalState.ESCALATING)

    def to_enriching(self) -> None:
        """Transition to ENRICHING state."""
        self.transition(RetrievalState.ENRICHING)

    def to_done(self) -> None:
        """Transition to DONE state."""
        self.transition(RetrievalState.DONE)

    def to_failed(self) -> None:
        """Transition to FAILED state."""
        self.transition(RetrievalState.FAILED)

    def is_terminal(self) -> bool:
        """Check if the current state is terminal."""
        return self._state in (RetrievalState.DONE, RetrievalState.FAILED)
