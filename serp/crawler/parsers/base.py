"""Shared extractor interface and BeautifulSoup helpers for SERP parsing."""

from __future__ import annotations

import re
from typing import Protocol
from urllib.parse import parse_qs, urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..types import JSONDict


class SerpExtractor(Protocol):
    """Field extractors for one rendering of a Google results page.

    Every method takes already-parsed content and returns a best-effort value;
    callers treat exceptions as a degraded field, not a failed page.
    """

    name: str

    def extract_total_results(self, soup: BeautifulSoup) -> int | None: ...

    def extract_related_queries(self, soup: BeautifulSoup) -> list[str]: ...

    def extract_paid_results(self, soup: BeautifulSoup, host: str) -> list[JSONDict]: ...

    def extract_paid_products(self, soup: BeautifulSoup, host: str) -> list[JSONDict]: ...

    def extract_organic_results(self, soup: BeautifulSoup, host: str) -> list[JSONDict]: ...

    def extract_next_page_href(self, soup: BeautifulSoup) -> str | None: ...


def make_soup(html: str | bytes) -> BeautifulSoup:
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    return BeautifulSoup(html, "lxml")


def text_of(element: Tag | None, separator: str = " ") -> str | None:
    """Whitespace-collapsed text of an element, or None when empty/missing."""

    if element is None:
        return None
    text = re.sub(r"\s+", " ", element.get_text(separator, strip=True)).strip()
    return text or None


def parse_total_results(text: str | None) -> int | None:
    """Parse e.g. "About 1,230,000 results (0.45 seconds)" into 1230000."""

    if not text:
        return None
    # Drop the "(0.45 seconds)" timing suffix before collecting digits.
    without_timing = re.sub(r"\(.*?\)", "", text)
    match = re.search(r"\d[\d.,\s]*", without_timing)
    if match is None:
        return None
    digits = re.sub(r"\D", "", match.group(0))
    return int(digits) if digits else None


def clean_google_href(href: str | None, host: str) -> str | None:
    """Resolve Google-relative and `/url?q=` redirect links to their target."""

    if not href:
        return None
    href = href.strip()
    if href.startswith("/url?") or href.startswith("/aclk?"):
        params = parse_qs(urlsplit(href).query)
        for key in ("q", "url", "adurl"):
            values = params.get(key)
            if values and values[0].startswith(("http://", "https://")):
                return values[0]
    if href.startswith("/"):
        return urljoin(f"https://{host}", href)
    if href.startswith(("http://", "https://")):
        return href
    return None


def first_link(element: Tag, host: str, selector: str = "a[href]") -> str | None:
    for anchor in element.select(selector):
        resolved = clean_google_href(anchor.get("href"), host)
        if resolved:
            return resolved
    return None


def site_links(element: Tag, host: str, selector: str) -> list[JSONDict]:
    links: list[JSONDict] = []
    for anchor in element.select(selector):
        title = text_of(anchor)
        url = clean_google_href(anchor.get("href"), host)
        if title and url:
            links.append({"title": title, "url": url})
    return links


def outermost(elements: list[Tag]) -> list[Tag]:
    """Drop elements nested inside another element of the same selection."""

    selected = {id(element) for element in elements}
    result: list[Tag] = []
    for element in elements:
        if any(id(parent) in selected for parent in element.parents):
            continue
        result.append(element)
    return result


__all__ = [
    "SerpExtractor",
    "clean_google_href",
    "first_link",
    "make_soup",
    "outermost",
    "parse_total_results",
    "site_links",
    "text_of",
]
