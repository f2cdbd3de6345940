"""Shared telemetry utilities for the narration service."""

from .health import HealthState
from .logging import configure_logging
from .tracing import (
    TRACE_HEADER_CANDIDATES,
    bind_visitor_id,
    ensure_trace_id,
    get_trace_id,
    get_visitor_id,
    reset_trace_id,
    reset_visitor_id,
    set_trace_id,
)

__all__ = [
    "configure_logging",
    "TRACE_HEADER_CANDIDATES",
    "bind_visitor_id",
    "ensure_trace_id",
    "get_trace_id",
    "get_visitor_id",
    "reset_trace_id",
    "reset_visitor_id",
    "set_trace_id",
    "HealthState",
]
