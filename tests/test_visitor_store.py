import threading
import time
from uuid import uuid4

import pytest

from narration_service.domain.narration import Visitor, VisitorNotFound, VisitorStore


def test_add_is_idempotent_per_device():
    store = VisitorStore()
    first = store.add(Visitor(device_id="phone-1"))
    second = store.add(Visitor(device_id="phone-1"))

    assert second is first
    assert len(store) == 1
    assert store.id_for_device("phone-1") == first.id
    assert first.id in store


def test_session_on_unknown_visitor_raises():
    store = VisitorStore()

    with pytest.raises(VisitorNotFound):
        with store.session(uuid4()):
            pass


def test_snapshot_is_a_copy():
    store = VisitorStore()
    visitor = store.add(Visitor(device_id="phone-1"))

    snapshot = store.snapshot(visitor.id)
    snapshot.device_id = "changed"

    assert store.snapshot(visitor.id).device_id == "phone-1"


def test_sessions_for_same_visitor_are_serialized():
    store = VisitorStore()
    visitor = store.add(Visitor(device_id="phone-1"))
    active = []
    overlaps = []

    def worker():
        with store.session(visitor.id):
            active.append(1)
            if len(active) > 1:
                overlaps.append(len(active))
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlaps == []


def test_sessions_for_different_visitors_do_not_block_each_other():
    store = VisitorStore()
    first = store.add(Visitor(device_id="phone-1"))
    second = store.add(Visitor(device_id="phone-2"))
    entered_second = threading.Event()

    with store.session(first.id):
        thread = threading.Thread(target=lambda: _enter(store, second.id, entered_second))
        thread.start()
        assert entered_second.wait(timeout=2.0)
    thread.join()


def _enter(store, visitor_id, event):
    with store.session(visitor_id):
        event.set()
