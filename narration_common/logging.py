"""Root logging setup that stamps each record with the device request and visitor it belongs to."""

from __future__ import annotations

import logging
import sys
from typing import Union

from .tracing import get_trace_id, get_visitor_id


class RequestContextFilter(logging.Filter):
    """Copies the request trace id and the visitor being narrated to onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - inherited
        record.trace_id = get_trace_id()
        record.visitor_id = get_visitor_id()
        return True


def configure_logging(service_name: str, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Send every log line to stdout with its trace and visitor ids.

    Returns the service logger so ``main`` can announce startup with it.
    """

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | trace_id=%(trace_id)s "
        "visitor=%(visitor_id)s | %(message)s"
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    return logging.getLogger(service_name)
