"""Terminal sink for units that could not be fetched or processed."""

from __future__ import annotations

import logging

from .processor import build_debug_info
from .stats import StatsCollector
from .storage import Storage
from .types import CrawlStage, FetchResult, ResultRecord, UnitOfWork


LOGGER = logging.getLogger(__name__)


class FailureRecorder:
    """Append one `#error` record per failed unit. Never raises."""

    def __init__(self, storage: Storage, stats: StatsCollector | None = None) -> None:
        self.storage = storage
        self.stats = stats

    def record(
        self,
        unit: UnitOfWork,
        error: BaseException,
        *,
        stage: CrawlStage = CrawlStage.FETCH,
        fetch_result: FetchResult | None = None,
    ) -> ResultRecord:
        if unit.finished_at is None:
            unit.mark_finished()

        debug = build_debug_info(unit, fetch_result, error_messages=[str(error)])
        debug["stage"] = stage.value
        debug["errorType"] = error.__class__.__name__
        record = ResultRecord(url=unit.url, debug=debug, is_error=True)

        LOGGER.error(
            "Request %s failed at %s stage: %s",
            unit.url,
            stage.value,
            error,
        )

        try:
            self.storage.append_result(record)
        except Exception:
            LOGGER.exception("Could not persist error record for %s", unit.url)
            if self.stats is not None:
                self.stats.increment("error_records_lost")
        else:
            if self.stats is not None:
                self.stats.record_page(record)

        return record


__all__ = ["FailureRecorder"]
