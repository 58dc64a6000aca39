"""Thread-safe work queue of SERP page units with URL de-duplication."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .types import UnitOfWork
from .url import normalize_url


class EnqueueStatus(str, Enum):
    """Result status for work queue enqueue attempts."""

    ENQUEUED = "enqueued"
    SKIPPED_INVALID_URL = "skipped_invalid_url"
    SKIPPED_SEEN = "skipped_seen"
    SKIPPED_CLOSED = "skipped_closed"


@dataclass(frozen=True, slots=True)
class EnqueueResult:
    """Outcome of one enqueue attempt."""

    status: EnqueueStatus
    dedup_key: str | None = None
    unit: UnitOfWork | None = None

    @property
    def accepted(self) -> bool:
        return self.status == EnqueueStatus.ENQUEUED


class WorkQueue:
    """Work queue used by the crawl driver's worker threads.

    - Thread-safe `push` and `pop`; every pushed unit is popped by exactly one worker.
    - URLs are de-duplicated at enqueue time, so a unit is never queued twice.
    - Tracks unfinished units (queued or in flight) so the driver can tell when
      the crawl has drained.
    """

    def __init__(self, *, initial_seen_urls: Iterable[str] | None = None) -> None:
        self._queue: queue.Queue[UnitOfWork] = queue.Queue()
        self._lock = threading.Lock()
        self._drained = threading.Condition(self._lock)

        self._seen_keys: set[str] = set()
        self._unfinished = 0

        self._enqueued_count = 0
        self._dequeued_count = 0
        self._skipped_seen_count = 0
        self._skipped_invalid_count = 0

        self._closed = False

        if initial_seen_urls:
            for url in initial_seen_urls:
                key = normalize_url(url)
                if key:
                    self._seen_keys.add(key)

    @staticmethod
    def dedup_key(url: str) -> str | None:
        return normalize_url(url)

    def seed(self, units: Iterable[UnitOfWork]) -> list[EnqueueResult]:
        """Enqueue the initial page-0 units."""

        return [self.push(unit) for unit in units]

    def push(self, unit: UnitOfWork) -> EnqueueResult:
        """Attempt to enqueue one unit."""

        key = self.dedup_key(unit.url)
        if not key:
            with self._lock:
                self._skipped_invalid_count += 1
            return EnqueueResult(EnqueueStatus.SKIPPED_INVALID_URL)

        with self._lock:
            if self._closed:
                return EnqueueResult(EnqueueStatus.SKIPPED_CLOSED, dedup_key=key)

            if key in self._seen_keys:
                self._skipped_seen_count += 1
                return EnqueueResult(EnqueueStatus.SKIPPED_SEEN, dedup_key=key)

            self._seen_keys.add(key)
            self._unfinished += 1
            self._enqueued_count += 1
            self._queue.put(unit)

        return EnqueueResult(EnqueueStatus.ENQUEUED, dedup_key=key, unit=unit)

    def pop(self, *, block: bool = True, timeout: float | None = None) -> UnitOfWork | None:
        """Claim one unit for a worker thread.

        Returns `None` when no unit is available under the requested blocking mode.
        """

        try:
            if block:
                unit = self._queue.get(block=True, timeout=timeout)
            else:
                unit = self._queue.get(block=False)
        except queue.Empty:
            return None

        with self._lock:
            self._dequeued_count += 1
        return unit

    def release(self, unit: UnitOfWork) -> None:
        """Return a claimed but unprocessed unit to the queue; it stays unfinished."""

        with self._lock:
            self._dequeued_count -= 1
            self._queue.put(unit)

    def task_done(self) -> None:
        """Mark one claimed unit as terminal."""

        with self._drained:
            if self._unfinished <= 0:
                raise ValueError("task_done() called more times than units were enqueued")
            self._unfinished -= 1
            if self._unfinished == 0:
                self._drained.notify_all()

    def wait_drained(self, timeout: float | None = None) -> bool:
        """Block until no unit is queued or in flight, or until `timeout`.

        Returns True when the queue drained.
        """

        with self._drained:
            if self._unfinished == 0:
                return True
            self._drained.wait(timeout=timeout)
            return self._unfinished == 0

    def close(self) -> None:
        """Close queue to future enqueue attempts."""

        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        """Whether queue has been closed for new enqueue attempts."""

        with self._lock:
            return self._closed

    def qsize(self) -> int:
        """Approximate number of units waiting to be claimed."""

        return self._queue.qsize()

    def empty(self) -> bool:
        """Return True if no unit is waiting to be claimed."""

        return self._queue.empty()

    def unfinished(self) -> int:
        with self._lock:
            return self._unfinished

    def snapshot(self) -> dict[str, int | bool]:
        """Return queue counters for logs/stats reporting."""

        with self._lock:
            return {
                "closed": self._closed,
                "queue_size": self._queue.qsize(),
                "unfinished": self._unfinished,
                "seen_urls": len(self._seen_keys),
                "enqueued": self._enqueued_count,
                "dequeued": self._dequeued_count,
                "skipped_seen": self._skipped_seen_count,
                "skipped_invalid": self._skipped_invalid_count,
            }


__all__ = [
    "EnqueueResult",
    "EnqueueStatus",
    "WorkQueue",
]
