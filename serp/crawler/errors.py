"""Exception types raised across the SERP crawl pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import FetchResult


class SerpCrawlerError(Exception):
    """Base class for crawler errors."""


class ConfigurationError(SerpCrawlerError, ValueError):
    """Invalid or empty crawl configuration. Aborts the run before any work."""


class FetchExhaustedError(SerpCrawlerError):
    """A unit could not be fetched after the transport retries ran out."""

    def __init__(self, url: str, fetch_result: "FetchResult | None" = None) -> None:
        self.url = url
        self.fetch_result = fetch_result

        detail = "unknown fetch failure"
        if fetch_result is not None:
            if fetch_result.error:
                detail = fetch_result.error
            elif fetch_result.status_code is not None:
                detail = f"HTTP status {fetch_result.status_code}"
        super().__init__(f"Request {url} failed: {detail}")


class CustomHookError(SerpCrawlerError):
    """The user-supplied custom data function raised while processing a page."""

    def __init__(self, function_name: str, url: str, detail: str | None = None) -> None:
        self.function_name = function_name
        self.url = url
        message = f"Custom data function {function_name!r} failed for {url}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "CustomHookError",
    "FetchExhaustedError",
    "SerpCrawlerError",
]
