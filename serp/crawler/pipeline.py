"""Crawl driver: bounded worker pool over the SERP work queue."""

from __future__ import annotations

import logging
from pathlib import Path
import threading
from typing import Any, Iterable

from .config import CrawlConfig
from .errors import ConfigurationError, CustomHookError, FetchExhaustedError
from .expander import expand_queries
from .failures import FailureRecorder
from .fetcher import Fetcher
from .frontier import WorkQueue
from .processor import PageOutcome, PageProcessor, summarize_record
from .stats import StatsCollector
from .storage import Storage
from .types import CrawlStage, FetchResult, UnitOfWork


LOGGER = logging.getLogger(__name__)

_POLL_SECONDS = 0.5


class CrawlDriver:
    """Orchestrates work queue, fetcher, page processor, storage, and stats.

    Each worker claims one unit at a time, fetches it, hands the page to the
    processor and feeds any follow-on page back into the queue. Every claimed
    unit ends as exactly one dataset row, success or `#error`.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        output_dir: str | Path | None = None,
        storage: Storage | None = None,
        fetcher: Fetcher | None = None,
        processor: PageProcessor | None = None,
        stats: StatsCollector | None = None,
    ) -> None:
        if storage is None and output_dir is None:
            raise ValueError("CrawlDriver needs either `storage` or `output_dir`")

        self.config = config

        self.storage = storage or Storage(output_dir)
        self.stats = stats or StatsCollector()
        self.fetcher = fetcher or Fetcher(config)
        self.processor = processor or PageProcessor(config, stats=self.stats)
        self.failures = FailureRecorder(self.storage, self.stats)

        self._owns_fetcher = fetcher is None
        self._stop_event = threading.Event()

    def stop(self) -> None:
        """Stop claiming new units; in-flight units still finish and persist."""

        if not self._stop_event.is_set():
            LOGGER.info("Stop requested, letting in-flight pages finish")
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self, units: Iterable[UnitOfWork] | None = None) -> dict[str, Any]:
        """Crawl until the work queue drains (or `stop()` is called)."""

        initial_units = expand_queries(self.config) if units is None else list(units)
        if not initial_units:
            raise ConfigurationError("The input must contain at least one search query or URL.")

        self.storage.save_crawl_config(self.config)

        work_queue = WorkQueue()
        self.stats.record_enqueue_many(work_queue.seed(initial_units))

        LOGGER.info(
            "Starting crawl: %d initial units, concurrency=%d, max_pages_per_query=%s",
            len(initial_units),
            self.config.concurrency,
            self.config.max_pages_per_query or "unlimited",
        )

        try:
            self._run_workers(work_queue)
        finally:
            if self._owns_fetcher:
                self.fetcher.close()

        snapshot = work_queue.snapshot()
        self.stats.record_queue_snapshot(snapshot)
        self.stats.finish()
        summary = self.stats.to_json()
        self.storage.save_crawl_stats(summary)

        return {
            "dataset_id": self.storage.dataset_id,
            "paths": self.storage.paths,
            "stats": summary,
            "cancelled": self.stopped,
            "pending_units": int(snapshot.get("queue_size", 0)),
        }

    def _run_workers(self, work_queue: WorkQueue) -> None:
        workers = [
            threading.Thread(
                target=self._worker,
                args=(work_queue,),
                name=f"serp-worker-{idx}",
                daemon=True,
            )
            for idx in range(self.config.concurrency)
        ]

        for worker in workers:
            worker.start()

        while not work_queue.wait_drained(timeout=_POLL_SECONDS):
            if self._stop_event.is_set():
                break

        work_queue.close()

        # No timeout: in-flight pages must be flushed before returning.
        for worker in workers:
            worker.join()

        if self._stop_event.is_set() and work_queue.qsize():
            LOGGER.warning("Crawl stopped with %d units never claimed", work_queue.qsize())

    def _worker(self, work_queue: WorkQueue) -> None:
        while not self._stop_event.is_set():
            unit = work_queue.pop(block=True, timeout=_POLL_SECONDS)
            if unit is None:
                if work_queue.closed:
                    return
                continue

            if self._stop_event.is_set():
                # Claimed while stopping; leave it pending.
                work_queue.release(unit)
                return

            try:
                self._handle_unit(work_queue, unit)
            except Exception as exc:
                LOGGER.exception("Unexpected error while handling %s", unit.url)
                self.failures.record(unit, exc, stage=CrawlStage.PROCESS)
            finally:
                work_queue.task_done()

    def _handle_unit(self, work_queue: WorkQueue, unit: UnitOfWork) -> None:
        unit.mark_started()
        LOGGER.info('Querying "%s" page number %d ...', unit.query_term, unit.display_page)

        fetch_result = self._fetch(unit)
        if fetch_result is None:
            return

        if not fetch_result.ok:
            self.failures.record(
                unit,
                FetchExhaustedError(unit.url, fetch_result),
                stage=CrawlStage.FETCH,
                fetch_result=fetch_result,
            )
            return

        outcome = self._process(unit, fetch_result)
        if outcome is None:
            return

        try:
            self.storage.append_result(outcome.record)
        except Exception as exc:
            self.failures.record(unit, exc, stage=CrawlStage.STORE, fetch_result=fetch_result)
            return

        enqueue_result = work_queue.push(outcome.next_unit) if outcome.next_unit is not None else None

        # The row is stored; a bookkeeping error must not add a second row for this unit.
        try:
            if enqueue_result is not None:
                self.stats.record_enqueue(enqueue_result)
            self.stats.record_page(outcome.record)
            self.stats.record_pagination(outcome.pagination)
        except Exception:
            LOGGER.exception("Bookkeeping for %s failed after its record was stored", unit.url)
            return

        LOGGER.info(
            'Finished query "%s" page number %d (%s)',
            unit.query_term,
            unit.display_page,
            summarize_record(outcome.record),
        )

    def _fetch(self, unit: UnitOfWork) -> FetchResult | None:
        try:
            fetch_result = self.fetcher.fetch(unit.url)
        except Exception as exc:
            self.failures.record(unit, exc, stage=CrawlStage.FETCH)
            return None
        finally:
            unit.mark_finished()

        self.stats.record_fetch(fetch_result)
        return fetch_result

    def _process(self, unit: UnitOfWork, fetch_result: FetchResult) -> PageOutcome | None:
        try:
            return self.processor.process(unit, fetch_result)
        except CustomHookError as exc:
            self.failures.record(unit, exc, stage=CrawlStage.HOOK, fetch_result=fetch_result)
            return None
        except Exception as exc:
            LOGGER.exception("Processing %s failed", unit.url)
            self.failures.record(unit, exc, stage=CrawlStage.PROCESS, fetch_result=fetch_result)
            return None


__all__ = ["CrawlDriver"]
