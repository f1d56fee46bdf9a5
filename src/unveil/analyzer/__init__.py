"""Analysis requests: lifecycle, facade and assembly."""

from unveil.analyzer.analyzer import Analyzer
from unveil.analyzer.factory import build_analyzer, build_fetch_config
from unveil.analyzer.state_machine import (
    RequestState,
    RequestStateError,
    RequestStateMachine,
)


__all__ = [
    "Analyzer",
    "RequestState",
    "RequestStateError",
    "RequestStateMachine",
    "build_analyzer",
    "build_fetch_config",
]
