"""Unit tests for the request state machine."""

import pytest
from structlog.testing import capture_logs

from unveil.analyzer import RequestState, RequestStateError, RequestStateMachine


FRESH_PATH = [
    RequestState.CACHE_MISS,
    RequestState.BLOCKLIST_CHECK,
    RequestState.STATUS_PROBE,
    RequestState.STRATEGY_LOOP,
    RequestState.CACHE_STORE,
    RequestState.TRANSFORM,
    RequestState.DONE,
]


class TestRequestStateMachine:
    """Tests for RequestStateMachine."""

    def test_starts_received(self) -> None:
        """Test the initial state and history."""
        machine = RequestStateMachine("req-1")

        assert machine.state == RequestState.RECEIVED
        assert machine.history == [RequestState.RECEIVED]
        assert machine.is_terminal() is False

    def test_fresh_fetch_path(self) -> None:
        """Test the full path of an uncached request."""
        machine = RequestStateMachine("req-1")

        for state in FRESH_PATH:
            machine.transition(state)

        assert machine.state == RequestState.DONE
        assert machine.history == [RequestState.RECEIVED, *FRESH_PATH]
        assert machine.is_terminal() is True

    def test_probe_can_be_skipped(self) -> None:
        """Test that the block list check may lead straight to the strategy loop."""
        machine = RequestStateMachine("req-1")
        machine.transition(RequestState.CACHE_MISS)
        machine.transition(RequestState.BLOCKLIST_CHECK)

        assert machine.can_transition(RequestState.STRATEGY_LOOP) is True

    def test_cache_hit_path(self) -> None:
        """Test that hits go straight to transformation."""
        machine = RequestStateMachine("req-1")

        machine.transition(RequestState.CACHE_HIT)

        assert machine.can_transition(RequestState.TRANSFORM) is True
        assert machine.can_transition(RequestState.CACHE_STORE) is False
        assert machine.can_transition(RequestState.BLOCKLIST_CHECK) is False

    def test_blocked_only_fails(self) -> None:
        """Test that BLOCKED can only end in FAILED."""
        machine = RequestStateMachine("req-1")
        machine.transition(RequestState.CACHE_MISS)
        machine.transition(RequestState.BLOCKLIST_CHECK)
        machine.transition(RequestState.BLOCKED)

        assert machine.can_transition(RequestState.STRATEGY_LOOP) is False
        machine.fail()
        assert machine.state == RequestState.FAILED

    def test_invalid_transition_raises_and_logs(self) -> None:
        """Test that illegal moves raise and log an invariant violation."""
        machine = RequestStateMachine("req-1")

        with capture_logs() as logs, pytest.raises(RequestStateError) as exc_info:
            machine.transition(RequestState.TRANSFORM)

        assert exc_info.value.from_state == RequestState.RECEIVED
        assert exc_info.value.to_state == RequestState.TRANSFORM
        assert "RECEIVED -> TRANSFORM" in str(exc_info.value)
        assert machine.state == RequestState.RECEIVED
        violation = [e for e in logs if e["event"] == "invariant_violation"]
        assert violation[0]["error_type"] == "illegal_state_transition"

    def test_terminal_states_have_no_exits(self) -> None:
        """Test that DONE and FAILED are final."""
        for terminal in (RequestState.DONE, RequestState.FAILED):
            assert RequestStateMachine.VALID_TRANSITIONS[terminal] == set()

    def test_every_live_state_can_fail(self) -> None:
        """Test that any non-terminal state may move to FAILED."""
        for state, targets in RequestStateMachine.VALID_TRANSITIONS.items():
            if state in (RequestState.DONE, RequestState.FAILED):
                continue
            assert RequestState.FAILED in targets

    def test_fail_is_idempotent(self) -> None:
        """Test that failing an ended request changes nothing."""
        machine = RequestStateMachine("req-1")
        machine.fail()
        machine.fail()

        assert machine.history == [RequestState.RECEIVED, RequestState.FAILED]

    def test_done_cannot_fail(self) -> None:
        """Test that a completed request stays DONE."""
        machine = RequestStateMachine("req-1")
        for state in FRESH_PATH:
            machine.transition(state)

        machine.fail()

        assert machine.state == RequestState.DONE
