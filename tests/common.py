"""
Shared helpers and fakes for the RBN overlay tests.
Import from this module in each test file to avoid duplication.
"""

import threading
import time
from datetime import datetime, timedelta, timezone


NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_record(call="W3LPL", grid="FM19", freq=14025.0, snr=12, minutes_ago=5, now=NOW, **extra):
    """A raw feed record as the RBN proxy sends it."""
    record = {
        'callsign': call,
        'grid': grid,
        'frequency': freq,
        'snr': snr,
        'timestamp': (now - timedelta(minutes=minutes_ago)).isoformat().replace('+00:00', 'Z'),
    }
    record.update(extra)
    return record


class FakeClient:
    """Stands in for RBNClient; returns a canned payload or raises."""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else []
        self.error = error
        self.calls = []

    def fetch_spots(self, callsign, limit=100):
        self.calls.append((callsign, limit))
        if self.error is not None:
            raise self.error
        return list(self.payload)


class GatedClient(FakeClient):
    """FakeClient whose fetch blocks until release() is called."""

    def __init__(self, payload=None, error=None):
        super().__init__(payload, error)
        self.gate = threading.Event()
        self.threads = []

    def fetch_spots(self, callsign, limit=100):
        self.threads.append(threading.current_thread())
        self.gate.wait(5)
        return super().fetch_spots(callsign, limit)

    def release(self):
        self.gate.set()


class FakeSurface:
    """Drawing surface that records what is on it."""

    def __init__(self):
        self.items = {}
        self.added = 0
        self.removed = 0
        self._next = 0

    def add_primitive(self, primitive):
        self._next += 1
        self.items[self._next] = primitive
        self.added += 1
        return self._next

    def remove_primitive(self, handle):
        if self.items.pop(handle, None) is not None:
            self.removed += 1


class FakeControl:
    def __init__(self):
        self.attached = None
        self.stats = []
        self.detached = 0

    def attach(self, filter_state):
        self.attached = filter_state

    def show_stats(self, stats):
        self.stats.append(stats)

    def detach(self):
        self.attached = None
        self.detached += 1


class DeferredRunner:
    """Fetch runner that holds jobs until the test releases them."""

    def __init__(self):
        self.pending = []

    def __call__(self, job):
        self.pending.append(job)

    def run_all(self):
        jobs, self.pending = self.pending, []
        for job in jobs:
            job()


def run_now(job):
    job()


def wait_until(app, predicate, timeout=5.0):
    """Pump the Qt event loop until predicate() holds or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.processEvents()
        if predicate():
            return True
        time.sleep(0.01)
    app.processEvents()
    return predicate()
