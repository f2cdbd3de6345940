"""Per-request correlation ids.

A device request carries one trace id; narration work additionally binds the
visitor id so log lines from concurrent walkers can be told apart.
"""

from __future__ import annotations

import re
from contextvars import ContextVar
from typing import Iterable, Optional
from uuid import uuid4

TRACE_HEADER_CANDIDATES: tuple[str, ...] = (
    "x-trace-id",
    "x-request-id",
    "x-device-request-id",
)

_TRACE_ID: ContextVar[str] = ContextVar("trace_id", default="-")
_VISITOR_ID: ContextVar[str] = ContextVar("visitor_id", default="-")
_TRACE_ID_PATTERN = re.compile(r"^[a-fA-F0-9-]{8,64}$")


def _normalise(value: str) -> str:
    value = value.strip()
    if _TRACE_ID_PATTERN.match(value):
        return value.lower()
    return uuid4().hex


def ensure_trace_id(value: Optional[str] = None, *, headers: Optional[Iterable[tuple[str, str]]] = None) -> str:
    """Pick the trace id a device sent, or mint one.

    An explicit ``value`` wins over ``headers``. Ids that are not 8 to 64 hex
    characters (dashes allowed) are replaced with a fresh one instead of being
    logged verbatim.
    """

    if value:
        return _normalise(value)

    if headers:
        for key, header_value in headers:
            if key.lower() in TRACE_HEADER_CANDIDATES and header_value:
                return _normalise(header_value)

    return uuid4().hex


def set_trace_id(trace_id: str):  # noqa: ANN001 - ContextVar API
    return _TRACE_ID.set(_normalise(trace_id))


def reset_trace_id(token):  # noqa: ANN001 - ContextVar API
    if token is not None:
        _TRACE_ID.reset(token)


def get_trace_id() -> str:
    return _TRACE_ID.get()


def bind_visitor_id(visitor_id: object):  # noqa: ANN001 - ContextVar API
    return _VISITOR_ID.set(str(visitor_id))


def reset_visitor_id(token):  # noqa: ANN001 - ContextVar API
    if token is not None:
        _VISITOR_ID.reset(token)


def get_visitor_id() -> str:
    return _VISITOR_ID.get()
