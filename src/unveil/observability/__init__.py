"""Observability helpers."""

from unveil.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
    level_from_name,
)


__all__ = [
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "get_logger",
    "level_from_name",
]
