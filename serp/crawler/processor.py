"""Turn one fetched SERP page into a dataset record plus a pagination decision."""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
import logging
from typing import Any, Callable, TypeVar
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from .config import CrawlConfig
from .hooks import CustomHook, HookContext, load_custom_hook
from .pagination import PaginationDecision, decide_next_page
from .parsers import SerpExtractor, extractor_for, make_soup
from .stats import StatsCollector
from .types import FetchResult, JSONDict, ResultRecord, UnitOfWork
from .url import parse_search_url


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def build_debug_info(
    unit: UnitOfWork,
    fetch_result: FetchResult | None = None,
    *,
    error_messages: list[str] | None = None,
) -> JSONDict:
    """Request/response metadata attached to every record as `#debug`."""

    messages: list[str] = []
    if fetch_result is not None:
        messages.extend(fetch_result.error_messages)
    if error_messages:
        messages.extend(message for message in error_messages if message not in messages)

    debug: JSONDict = {
        "requestId": hashlib.sha1(unit.unique_key.encode("utf-8")).hexdigest()[:15],
        "url": unit.url,
        "loadedUrl": None if fetch_result is None else fetch_result.final_url,
        "method": "GET",
        "page": unit.display_page,
        "retryCount": 0 if fetch_result is None else fetch_result.retry_count,
        "errorMessages": messages,
        "statusCode": None if fetch_result is None else fetch_result.status_code,
        "startedAt": unit.started_at,
        "finishedAt": unit.finished_at,
        "durationSecs": unit.duration_seconds,
    }
    if fetch_result is not None:
        debug["elapsedMs"] = fetch_result.elapsed_ms
        debug["responseHeaders"] = dict(fetch_result.headers)
    return debug


def summarize_record(record: ResultRecord) -> str:
    """Short human summary used in per-page log lines."""

    return (
        f"{len(record.organic_results or [])} organic results, "
        f"{len(record.paid_results or [])} paid results, "
        f"{len(record.paid_products or [])} paid products, "
        f"{len(record.related_queries or [])} related queries"
    )


@dataclass(frozen=True, slots=True)
class PageOutcome:
    """Result of processing one page: the record and the follow-on decision."""

    record: ResultRecord
    pagination: PaginationDecision

    @property
    def next_unit(self) -> UnitOfWork | None:
        return self.pagination.next_unit


class PageProcessor:
    """Assemble a `ResultRecord` from fetched SERP HTML.

    Each extractor runs in isolation: a failing extractor leaves its field
    empty and the page still succeeds. A failing custom hook raises
    `CustomHookError` and the caller records the page as failed.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        extractor: SerpExtractor | None = None,
        hook: CustomHook | None = None,
        stats: StatsCollector | None = None,
    ) -> None:
        self.config = config
        self.extractor = extractor or extractor_for(config.mobile_results)
        if hook is None and config.custom_data_function:
            hook = load_custom_hook(config.custom_data_function)
        self.hook = hook
        self.stats = stats

    def process(self, unit: UnitOfWork, fetch_result: FetchResult) -> PageOutcome:
        html = fetch_result.text
        soup = make_soup(html)
        host = urlsplit(fetch_result.final_url or unit.url).netloc or urlsplit(unit.url).netloc

        search_query = parse_search_url(unit.url, page=unit.page, device=self.config.device)

        results_total = self._extract("resultsTotal", lambda: self.extractor.extract_total_results(soup), None)
        related_queries = self._extract(
            "relatedQueries", lambda: self.extractor.extract_related_queries(soup), list
        )
        paid_results = self._extract(
            "paidResults", lambda: self.extractor.extract_paid_results(soup, host), list
        )
        paid_products = self._extract(
            "paidProducts", lambda: self.extractor.extract_paid_products(soup, host), list
        )
        organic_results = self._extract(
            "organicResults", lambda: self.extractor.extract_organic_results(soup, host), list
        )

        custom_data = None
        if self.hook is not None:
            custom_data = self.hook(self._hook_context(soup, unit, fetch_result, html))

        next_href = self._extract("nextPage", lambda: self.extractor.extract_next_page_href(soup), None)
        pagination = decide_next_page(unit, self.config.max_pages_per_query, next_href)
        if pagination.stopped_at_limit:
            LOGGER.info(
                'Not enqueueing next page for query "%s" because the max_pages_per_query limit has been reached.',
                search_query.term,
            )

        record = ResultRecord(
            url=unit.url,
            debug=build_debug_info(unit, fetch_result),
            is_error=False,
            search_query=search_query,
            has_next_page=pagination.has_next_page,
            results_total=results_total,
            related_queries=related_queries,
            paid_results=paid_results,
            paid_products=paid_products,
            organic_results=organic_results,
            custom_data=custom_data,
            html=html if self.config.save_html else None,
        )
        return PageOutcome(record=record, pagination=pagination)

    def _hook_context(
        self,
        soup: BeautifulSoup,
        unit: UnitOfWork,
        fetch_result: FetchResult,
        html: str,
    ) -> HookContext:
        return HookContext(
            soup=soup,
            unit=unit,
            fetch_result=fetch_result,
            html=html,
            config=self.config,
        )

    def _extract(
        self,
        field_name: str,
        extract: Callable[[], T],
        default: Callable[[], Any] | None,
    ) -> T | Any:
        """Run one extractor; a raise or a `None` result yields the field default."""

        try:
            value = extract()
        except Exception as exc:
            LOGGER.warning(
                "Extractor %s.%s failed, leaving field empty: %s: %s",
                self.extractor.name,
                field_name,
                exc.__class__.__name__,
                exc,
            )
            if self.stats is not None:
                self.stats.record_degraded_field(field_name)
            return default() if default is not None else None

        if value is None and default is not None:
            LOGGER.debug("Extractor %s.%s returned nothing", self.extractor.name, field_name)
            return default()
        return value


__all__ = [
    "PageOutcome",
    "PageProcessor",
    "build_debug_info",
    "summarize_record",
]
