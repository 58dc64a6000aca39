"""Core type definitions for the SERP crawl pipeline.

Only the standard library is imported here; every other crawler module depends
on these records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from hashlib import sha256


class DeviceType(str, Enum):
    """Rendering profile requested from the search engine."""

    DESKTOP = "DESKTOP"
    MOBILE = "MOBILE"


class CrawlStage(str, Enum):
    """Pipeline stage names for error reporting."""

    FETCH = "fetch"
    PROCESS = "process"
    HOOK = "hook"
    STORE = "store"


JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONDict = dict[str, JSONValue]


def utc_now_iso() -> str:
    """Return an RFC3339-like UTC timestamp string for records and manifests."""

    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def parse_iso_utc(value: str | None) -> datetime | None:
    """Parse timestamps written by `utc_now_iso`, returning None when unset."""

    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(slots=True)
class UnitOfWork:
    """One SERP page fetch tracked by the work queue.

    `page` is zero-based; humans see `page + 1`. Timestamps are filled in by the
    crawl driver as the unit moves from in-flight to terminal.
    """

    url: str
    page: int = 0
    query_term: str | None = None
    started_at: str | None = None
    finished_at: str | None = None

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError(f"page must be >= 0, got {self.page}")

    @property
    def unique_key(self) -> str:
        return self.url

    @property
    def display_page(self) -> int:
        return self.page + 1

    def mark_started(self) -> None:
        self.started_at = utc_now_iso()
        self.finished_at = None

    def mark_finished(self) -> None:
        self.finished_at = utc_now_iso()

    @property
    def duration_seconds(self) -> float | None:
        start = parse_iso_utc(self.started_at)
        end = parse_iso_utc(self.finished_at)
        if start is None or end is None:
            return None
        return max(0.0, (end - start).total_seconds())


@dataclass(slots=True)
class FetchResult:
    """Result of attempting to download one SERP URL."""

    requested_url: str
    final_url: str | None
    status_code: int | None
    content_type: str | None
    body: bytes | None
    headers: dict[str, str] = field(default_factory=dict)
    fetched_at: str = field(default_factory=utc_now_iso)
    elapsed_ms: int | None = None
    attempts: int = 1
    error_messages: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return (
            self.error is None
            and self.status_code is not None
            and 200 <= self.status_code < 300
            and self.body is not None
        )

    @property
    def retry_count(self) -> int:
        return max(0, self.attempts - 1)

    @property
    def content_length(self) -> int | None:
        return None if self.body is None else len(self.body)

    @property
    def body_sha256(self) -> str | None:
        return None if self.body is None else sha256(self.body).hexdigest()

    @property
    def text(self) -> str:
        if self.body is None:
            return ""
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """Human-facing description of the search behind a SERP URL."""

    term: str | None
    device: DeviceType
    page: int
    domain: str
    country_code: str
    language_code: str | None = None
    location_uule: str | None = None
    results_per_page: int | str | None = None
    type: str = "SEARCH"

    def to_json(self) -> JSONDict:
        return {
            "term": self.term,
            "device": self.device.value,
            "page": self.page,
            "type": self.type,
            "domain": self.domain,
            "countryCode": self.country_code,
            "languageCode": self.language_code,
            "locationUule": self.location_uule,
            "resultsPerPage": self.results_per_page,
        }


@dataclass(frozen=True, slots=True)
class ResultRecord:
    """One dataset row: a processed SERP page or a terminal failure."""

    url: str | None
    debug: JSONDict
    is_error: bool = False
    search_query: SearchQuery | None = None
    has_next_page: bool = False
    results_total: int | None = None
    related_queries: list[JSONValue] = field(default_factory=list)
    paid_results: list[JSONValue] = field(default_factory=list)
    paid_products: list[JSONValue] = field(default_factory=list)
    organic_results: list[JSONValue] = field(default_factory=list)
    custom_data: JSONValue = None
    html: str | None = None

    def to_json(self) -> JSONDict:
        if self.is_error:
            return {
                "#debug": self.debug,
                "#error": True,
            }

        payload: JSONDict = {
            "#debug": self.debug,
            "#error": False,
            "searchQuery": None if self.search_query is None else self.search_query.to_json(),
            "url": self.url,
            "hasNextPage": self.has_next_page,
            "resultsTotal": self.results_total,
            "relatedQueries": self.related_queries,
            "paidResults": self.paid_results,
            "paidProducts": self.paid_products,
            "organicResults": self.organic_results,
            "customData": self.custom_data,
        }
        if self.html is not None:
            payload["html"] = self.html
        return payload


@dataclass(slots=True)
class CrawlStats:
    """Simple mutable counters used for crawl summary reporting."""

    queue_enqueued: int = 0
    queue_skipped_seen: int = 0

    fetched_ok: int = 0
    fetched_error: int = 0
    pages_ok: int = 0
    pages_error: int = 0
    pagination_stopped_at_limit: int = 0

    started_at: str = field(default_factory=utc_now_iso)
    finished_at: str | None = None

    def finish(self) -> None:
        self.finished_at = utc_now_iso()

    def to_json(self) -> JSONDict:
        return {
            "queue_enqueued": self.queue_enqueued,
            "queue_skipped_seen": self.queue_skipped_seen,
            "fetched_ok": self.fetched_ok,
            "fetched_error": self.fetched_error,
            "pages_ok": self.pages_ok,
            "pages_error": self.pages_error,
            "pagination_stopped_at_limit": self.pagination_stopped_at_limit,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }


__all__ = [
    "CrawlStage",
    "CrawlStats",
    "DeviceType",
    "FetchResult",
    "JSONDict",
    "JSONPrimitive",
    "JSONValue",
    "ResultRecord",
    "SearchQuery",
    "UnitOfWork",
    "parse_iso_utc",
    "utc_now_iso",
]
