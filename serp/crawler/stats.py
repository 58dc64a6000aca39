"""Thread-safe crawl statistics aggregation utilities."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
import threading
from typing import TYPE_CHECKING, Any, Mapping

from .frontier import EnqueueResult, EnqueueStatus
from .types import CrawlStats, FetchResult, ResultRecord, parse_iso_utc

if TYPE_CHECKING:
    from .pagination import PaginationDecision


class StatsCollector:
    """Collect and summarize crawler runtime statistics.

    The collector is thread-safe and intended for use across concurrent
    crawl workers.
    """

    def __init__(self, base: CrawlStats | None = None) -> None:
        self._lock = threading.Lock()
        self._core = base or CrawlStats()

        self._queue_extra: dict[str, int] = defaultdict(int)
        self._queue_snapshot: dict[str, int | bool] = {}

        self._fetch_status_code_counts: dict[str, int] = defaultdict(int)
        self._fetch_error_type_counts: dict[str, int] = defaultdict(int)
        self._fetch_elapsed_ms_total = 0
        self._fetch_elapsed_samples = 0
        self._fetch_retries_total = 0
        self._fetch_bytes_total = 0

        self._degraded_fields: dict[str, int] = defaultdict(int)
        self._organic_results_total = 0
        self._paid_results_total = 0
        self._custom_counters: dict[str, int] = defaultdict(int)

    def record_enqueue(self, result_or_status: EnqueueResult | EnqueueStatus) -> None:
        """Record one work queue enqueue outcome."""

        if isinstance(result_or_status, EnqueueResult):
            status = result_or_status.status
        else:
            status = result_or_status

        with self._lock:
            if status == EnqueueStatus.ENQUEUED:
                self._core.queue_enqueued += 1
                return
            if status == EnqueueStatus.SKIPPED_SEEN:
                self._core.queue_skipped_seen += 1
                return

            self._queue_extra[status.value] += 1

    def record_enqueue_many(
        self, results: list[EnqueueResult] | tuple[EnqueueResult, ...]
    ) -> None:
        """Record many enqueue outcomes."""

        for result in results:
            self.record_enqueue(result)

    def record_queue_snapshot(self, snapshot: Mapping[str, int | bool]) -> None:
        """Attach latest work queue snapshot for diagnostics."""

        with self._lock:
            self._queue_snapshot = dict(snapshot)

    def record_fetch(self, result: FetchResult) -> None:
        """Record one (possibly retried) fetch result."""

        with self._lock:
            if result.ok:
                self._core.fetched_ok += 1
            else:
                self._core.fetched_error += 1

            if result.status_code is not None:
                self._fetch_status_code_counts[str(result.status_code)] += 1

            if result.error:
                err_type = result.error.split(":", maxsplit=1)[0].strip() or "Unknown"
                self._fetch_error_type_counts[err_type] += 1

            if result.elapsed_ms is not None:
                self._fetch_elapsed_ms_total += int(result.elapsed_ms)
                self._fetch_elapsed_samples += 1

            self._fetch_retries_total += result.retry_count

            if result.content_length is not None:
                self._fetch_bytes_total += int(result.content_length)

    def record_page(self, record: ResultRecord) -> None:
        """Record one persisted dataset row."""

        with self._lock:
            if record.is_error:
                self._core.pages_error += 1
                return
            self._core.pages_ok += 1
            self._organic_results_total += len(record.organic_results or [])
            self._paid_results_total += len(record.paid_results or [])

    def record_pagination(self, decision: "PaginationDecision") -> None:
        if not decision.stopped_at_limit:
            return
        with self._lock:
            self._core.pagination_stopped_at_limit += 1

    def record_degraded_field(self, field_name: str) -> None:
        """Record an extractor that failed and left its field empty."""

        with self._lock:
            self._degraded_fields[field_name] += 1

    def increment(self, name: str, value: int = 1) -> None:
        """Increment a custom counter for ad-hoc instrumentation."""

        if not name or value == 0:
            return
        with self._lock:
            self._custom_counters[name] += value

    def finish(self) -> None:
        """Mark crawl as finished."""

        with self._lock:
            self._core.finish()

    def core(self) -> CrawlStats:
        """Return a copy of the core `CrawlStats` record."""

        with self._lock:
            return CrawlStats(
                queue_enqueued=self._core.queue_enqueued,
                queue_skipped_seen=self._core.queue_skipped_seen,
                fetched_ok=self._core.fetched_ok,
                fetched_error=self._core.fetched_error,
                pages_ok=self._core.pages_ok,
                pages_error=self._core.pages_error,
                pagination_stopped_at_limit=self._core.pagination_stopped_at_limit,
                started_at=self._core.started_at,
                finished_at=self._core.finished_at,
            )

    def to_json(self) -> dict[str, Any]:
        """Return a JSON-serializable summary payload."""

        with self._lock:
            core = self._core.to_json()

            start = parse_iso_utc(self._core.started_at) or datetime.now(timezone.utc)
            end = parse_iso_utc(self._core.finished_at) or datetime.now(timezone.utc)
            duration_seconds = max(0.0, (end - start).total_seconds())

            fetch_elapsed_avg = (
                self._fetch_elapsed_ms_total / self._fetch_elapsed_samples
                if self._fetch_elapsed_samples > 0
                else 0.0
            )
            pages_total = self._core.pages_ok + self._core.pages_error

            return {
                **core,
                "duration_seconds": duration_seconds,
                "throughput": {
                    "pages_per_second": (
                        pages_total / duration_seconds if duration_seconds > 0 else 0.0
                    ),
                },
                "queue": {
                    "extra_status_counts": dict(self._queue_extra),
                    "snapshot": dict(self._queue_snapshot),
                },
                "fetch": {
                    "status_code_counts": dict(self._fetch_status_code_counts),
                    "error_type_counts": dict(self._fetch_error_type_counts),
                    "elapsed_ms_total": self._fetch_elapsed_ms_total,
                    "elapsed_ms_samples": self._fetch_elapsed_samples,
                    "elapsed_ms_avg": fetch_elapsed_avg,
                    "retries_total": self._fetch_retries_total,
                    "bytes_total": self._fetch_bytes_total,
                },
                "extraction": {
                    "degraded_fields": dict(self._degraded_fields),
                    "organic_results_total": self._organic_results_total,
                    "paid_results_total": self._paid_results_total,
                },
                "custom_counters": dict(self._custom_counters),
            }


__all__ = ["StatsCollector"]
