from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional
from uuid import UUID

from .exceptions import VisitorNotFound
from .models import Visitor

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    visitor: Visitor
    lock: threading.Lock = field(default_factory=threading.Lock)


class VisitorStore:
    """In-memory visitor registry with one lock per visitor.

    The registry lock only guards lookups and inserts. Reads and writes of a
    visitor's state go through :meth:`session`, which holds that visitor's
    lock, so overlapping requests from one device apply in order while
    different visitors never wait on each other.
    """

    def __init__(self) -> None:
        self._entries: Dict[UUID, _Entry] = {}
        self._by_device: Dict[str, UUID] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, visitor_id: object) -> bool:
        return visitor_id in self._entries

    def add(self, visitor: Visitor) -> Visitor:
        """Insert ``visitor`` unless its device is known; return the stored one."""

        with self._registry_lock:
            existing_id = self._by_device.get(visitor.device_id)
            if existing_id is not None:
                return self._entries[existing_id].visitor
            self._entries[visitor.id] = _Entry(visitor)
            self._by_device[visitor.device_id] = visitor.id
        logger.info("Registered visitor %s for device %s", visitor.id, visitor.device_id)
        return visitor

    def id_for_device(self, device_id: str) -> Optional[UUID]:
        with self._registry_lock:
            return self._by_device.get(device_id)

    def _entry(self, visitor_id: UUID) -> _Entry:
        with self._registry_lock:
            entry = self._entries.get(visitor_id)
        if entry is None:
            raise VisitorNotFound(visitor_id)
        return entry

    @contextmanager
    def session(self, visitor_id: UUID) -> Iterator[Visitor]:
        entry = self._entry(visitor_id)
        with entry.lock:
            yield entry.visitor

    def snapshot(self, visitor_id: UUID) -> Visitor:
        with self.session(visitor_id) as visitor:
            return copy.deepcopy(visitor)
