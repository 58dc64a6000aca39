from __future__ import annotations

from serp.crawler import (
    CrawlStage,
    FailureRecorder,
    FetchExhaustedError,
    StatsCollector,
    UnitOfWork,
)


URL = "https://www.google.com/search?q=cats"


class BrokenStorage:
    def append_result(self, record):
        raise OSError("disk full")


def test_error_record_holds_only_debug_and_flag(storage, fetch_result_factory):
    stats = StatsCollector()
    recorder = FailureRecorder(storage, stats)
    unit = UnitOfWork(URL, page=0, query_term="cats")
    unit.mark_started()
    fetch_result = fetch_result_factory(
        URL,
        b"",
        status_code=503,
        error="HTTP status 503",
        attempts=4,
        error_messages=["HTTP status 503"] * 4,
    )

    record = recorder.record(unit, FetchExhaustedError(URL, fetch_result), fetch_result=fetch_result)

    (row,) = list(storage.iter_results())
    assert row == record.to_json()
    assert set(row) == {"#debug", "#error"}
    assert row["#error"] is True

    debug = row["#debug"]
    assert debug["url"] == URL
    assert debug["statusCode"] == 503
    assert debug["retryCount"] == 3
    assert debug["stage"] == "fetch"
    assert debug["errorType"] == "FetchExhaustedError"
    assert debug["finishedAt"] is not None
    assert debug["errorMessages"][-1] == f"Request {URL} failed: HTTP status 503"

    assert stats.core().pages_error == 1


def test_error_without_fetch_result(storage):
    recorder = FailureRecorder(storage)

    record = recorder.record(UnitOfWork(URL), RuntimeError("boom"), stage=CrawlStage.PROCESS)

    assert record.debug["statusCode"] is None
    assert record.debug["errorMessages"] == ["boom"]
    assert record.debug["stage"] == "process"
    assert storage.count_results() == {"ok": 0, "error": 1}


def test_storage_failure_is_logged_not_raised(caplog):
    stats = StatsCollector()
    recorder = FailureRecorder(BrokenStorage(), stats)

    record = recorder.record(UnitOfWork(URL), RuntimeError("boom"))

    assert record.is_error is True
    assert stats.to_json()["custom_counters"] == {"error_records_lost": 1}
    assert stats.core().pages_error == 0
    assert "Could not persist error record" in caplog.text
