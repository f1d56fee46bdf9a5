"""Per-request lifecycle state machine."""

from enum import Enum, auto
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class RequestState(Enum):
    """Analysis request states.

    State transitions:
        RECEIVED -> CACHE_HIT: Raw page found in cache
        RECEIVED -> CACHE_MISS: Nothing cached for the URL
        RECEIVED -> FAILED: URL rejected before any lookup
        CACHE_HIT -> TRANSFORM: Cached page handed to the transformer
        CACHE_MISS -> BLOCKLIST_CHECK: Host checked against the block list
        BLOCKLIST_CHECK -> BLOCKED: Host is on the block list
        BLOCKED -> FAILED: Blocked request reported as an error
        BLOCKLIST_CHECK -> STATUS_PROBE: Host allowed, probe required
        BLOCKLIST_CHECK -> STRATEGY_LOOP: Host allowed, custom rules skip the probe
        STATUS_PROBE -> STRATEGY_LOOP: Upstream answered 200
        STRATEGY_LOOP -> CACHE_STORE: A strategy produced content
        CACHE_STORE -> TRANSFORM: Raw page stored (or store skipped)
        TRANSFORM -> DONE: Transformed HTML returned
        any non-terminal -> FAILED: Request ended with an error
    """

    RECEIVED = auto()
    CACHE_HIT = auto()
    CACHE_MISS = auto()
    BLOCKLIST_CHECK = auto()
    BLOCKED = auto()
    STATUS_PROBE = auto()
    STRATEGY_LOOP = auto()
    CACHE_STORE = auto()
    TRANSFORM = auto()
    DONE = auto()
    FAILED = auto()


class RequestStateError(Exception):
    """Raised when an invalid request state transition is attempted."""

    def __init__(self, from_state: RequestState, to_state: RequestState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid request state transition: {from_state.name} -> {to_state.name}"
        )


class RequestStateMachine:
    """State machine for one analysis request.

    Enforces valid state transitions and logs invariant violations when
    an invalid transition is attempted.
    """

    VALID_TRANSITIONS: ClassVar[dict[RequestState, set[RequestState]]] = {
        RequestState.RECEIVED: {
            RequestState.CACHE_HIT,
            RequestState.CACHE_MISS,
            RequestState.FAILED,
        },
        RequestState.CACHE_HIT: {
            RequestState.TRANSFORM,
            RequestState.FAILED,
        },
        RequestState.CACHE_MISS: {
            RequestState.BLOCKLIST_CHECK,
            RequestState.FAILED,
        },
        RequestState.BLOCKLIST_CHECK: {
            RequestState.BLOCKED,
            RequestState.STATUS_PROBE,
            RequestState.STRATEGY_LOOP,
            RequestState.FAILED,
        },
        RequestState.BLOCKED: {
            RequestState.FAILED,
        },
        RequestState.STATUS_PROBE: {
            RequestState.STRATEGY_LOOP,
            RequestState.FAILED,
        },
        RequestState.STRATEGY_LOOP: {
            RequestState.CACHE_STORE,
            RequestState.FAILED,
        },
        RequestState.CACHE_STORE: {
            RequestState.TRANSFORM,
            RequestState.FAILED,
        },
        RequestState.TRANSFORM: {
            RequestState.DONE,
            RequestState.FAILED,
        },
        RequestState.DONE: set(),  # Terminal state
        RequestState.FAILED: set(),  # Terminal state
    }

    def __init__(self, request_id: str) -> None:
        """Initialize the state machine in RECEIVED state.

        Args:
            request_id: Unique request identifier for logging.
        """
        self._request_id = request_id
        self._state = RequestState.RECEIVED
        self._history: list[RequestState] = [RequestState.RECEIVED]
        self._log = logger.bind(request_id=request_id, component="analyzer")

    @property
    def state(self) -> RequestState:
        """Get the current state."""
        return self._state

    @property
    def history(self) -> list[RequestState]:
        """States visited so far, in order."""
        return list(self._history)

    def can_transition(self, to_state: RequestState) -> bool:
        """Check if a transition to the given state is valid.

        Args:
            to_state: The target state.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: RequestState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            RequestStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise RequestStateError(self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._history.append(to_state)
        self._log.debug(
            "request_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def fail(self) -> None:
        """Move to FAILED unless the request already ended."""
        if not self.is_terminal():
            self.transition(RequestState.FAILED)

    def is_terminal(self) -> bool:
        """Check if the current state is terminal (no more transitions allowed)."""
        return self._state in (RequestState.DONE, RequestState.FAILED)
