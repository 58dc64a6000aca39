from __future__ import annotations

import pytest

from serp.crawler import (
    CustomHook,
    CustomHookError,
    ConfigurationError,
    DesktopExtractor,
    PageProcessor,
    StatsCollector,
    UnitOfWork,
    load_custom_hook,
)
from serp.crawler.processor import build_debug_info, summarize_record


CATS_URL = "https://www.google.com/search?q=cats"


class BrokenOrganicExtractor(DesktopExtractor):
    def extract_organic_results(self, soup, host):
        raise RuntimeError("layout changed")


def _unit(page: int = 0) -> UnitOfWork:
    unit = UnitOfWork(CATS_URL, page=page, query_term="cats")
    unit.mark_started()
    unit.mark_finished()
    return unit


def test_process_builds_record_and_follow_on(make_config, desktop_html, fetch_result_factory):
    processor = PageProcessor(make_config(max_pages_per_query=2))
    fetch_result = fetch_result_factory(CATS_URL, desktop_html().encode())

    outcome = processor.process(_unit(), fetch_result)
    payload = outcome.record.to_json()

    assert payload["#error"] is False
    assert payload["url"] == CATS_URL
    assert payload["searchQuery"]["term"] == "cats"
    assert payload["searchQuery"]["page"] == 1
    assert payload["searchQuery"]["countryCode"] == "US"
    assert payload["resultsTotal"] == 1230000
    assert payload["hasNextPage"] is True
    assert len(payload["organicResults"]) == 2
    assert payload["relatedQueries"] == ["cat breeds", "cat food"]
    assert payload["customData"] is None
    assert "html" not in payload

    assert outcome.next_unit is not None
    assert outcome.next_unit.page == 1
    assert outcome.next_unit.url == "https://www.google.com/search?q=cats&start=10"


def test_limit_reached_sets_has_next_page_without_unit(make_config, desktop_html, fetch_result_factory):
    processor = PageProcessor(make_config(max_pages_per_query=2))
    fetch_result = fetch_result_factory(CATS_URL, desktop_html().encode())

    outcome = processor.process(_unit(page=1), fetch_result)

    assert outcome.record.has_next_page is True
    assert outcome.next_unit is None
    assert outcome.pagination.stopped_at_limit is True


def test_failing_extractor_degrades_single_field(make_config, desktop_html, fetch_result_factory):
    stats = StatsCollector()
    processor = PageProcessor(make_config(), extractor=BrokenOrganicExtractor(), stats=stats)
    fetch_result = fetch_result_factory(CATS_URL, desktop_html().encode())

    record = processor.process(_unit(), fetch_result).record

    assert record.is_error is False
    assert record.organic_results == []
    assert record.results_total == 1230000
    assert len(record.paid_results) == 1
    assert stats.to_json()["extraction"]["degraded_fields"] == {"organicResults": 1}


def test_save_html_keeps_raw_page(make_config, desktop_html, fetch_result_factory):
    html = desktop_html()
    processor = PageProcessor(make_config(save_html=True))

    record = processor.process(_unit(), fetch_result_factory(CATS_URL, html.encode())).record

    assert record.to_json()["html"] == html


def test_custom_hook_output_is_stored(make_config, desktop_html, fetch_result_factory):
    hook = CustomHook(
        name="tests:title",
        function=lambda context: {"title": context.soup.title.get_text(), "term": context.unit.query_term},
    )
    processor = PageProcessor(make_config(), hook=hook)

    record = processor.process(_unit(), fetch_result_factory(CATS_URL, desktop_html().encode())).record

    assert record.custom_data == {"title": "cats - Google Search", "term": "cats"}


def test_custom_hook_failure_raises_with_cause(make_config, desktop_html, fetch_result_factory):
    def explode(context):
        raise KeyError("missing")

    processor = PageProcessor(make_config(), hook=CustomHook(name="tests:explode", function=explode))

    with pytest.raises(CustomHookError, match="tests:explode") as excinfo:
        processor.process(_unit(), fetch_result_factory(CATS_URL, desktop_html().encode()))

    assert isinstance(excinfo.value.__cause__, KeyError)
    assert excinfo.value.url == CATS_URL


def test_hook_loaded_from_config(make_config, desktop_html, fetch_result_factory):
    # os.path.basename rejects a HookContext, which surfaces as a hook failure.
    processor = PageProcessor(make_config(custom_data_function="os.path:basename"))

    assert processor.hook.name == "os.path:basename"
    with pytest.raises(CustomHookError):
        processor.process(_unit(), fetch_result_factory(CATS_URL, desktop_html().encode()))


@pytest.mark.parametrize("dotted_path", ["os.path", "no_such_module_xyz:fn", "os.path:no_such_function", "os:sep"])
def test_load_custom_hook_rejects_bad_paths(dotted_path):
    with pytest.raises(ConfigurationError):
        load_custom_hook(dotted_path)


def test_build_debug_info_includes_fetch_metadata(fetch_result_factory):
    unit = _unit()
    fetch_result = fetch_result_factory(CATS_URL, b"<html></html>", attempts=3, error_messages=["HTTP status 503"] * 2)

    debug = build_debug_info(unit, fetch_result)

    assert len(debug["requestId"]) == 15
    assert debug["page"] == 1
    assert debug["method"] == "GET"
    assert debug["retryCount"] == 2
    assert debug["statusCode"] == 200
    assert debug["errorMessages"] == ["HTTP status 503", "HTTP status 503"]
    assert debug["responseHeaders"]["Content-Type"].startswith("text/html")
    assert debug["durationSecs"] is not None


def test_summarize_record(make_config, desktop_html, fetch_result_factory):
    record = PageProcessor(make_config()).process(
        _unit(), fetch_result_factory(CATS_URL, desktop_html().encode())
    ).record

    assert summarize_record(record) == "2 organic results, 1 paid results, 1 paid products, 2 related queries"


class EmptyOrganicExtractor(DesktopExtractor):
    def extract_organic_results(self, soup, host):
        return None


def test_extractor_returning_none_yields_empty_list(make_config, desktop_html, fetch_result_factory):
    stats = StatsCollector()
    processor = PageProcessor(make_config(), extractor=EmptyOrganicExtractor(), stats=stats)

    record = processor.process(_unit(), fetch_result_factory(CATS_URL, desktop_html().encode())).record
    stats.record_page(record)

    assert record.organic_results == []
    assert record.to_json()["organicResults"] == []
    assert summarize_record(record).startswith("0 organic results")
    assert stats.to_json()["extraction"]["degraded_fields"] == {}
