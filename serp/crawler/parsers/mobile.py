"""Field extractors for mobile Google result pages.

Mobile SERPs carry no total-results counter and render result cards instead of
the desktop `div.g` blocks, so only the selectors and a few field lookups differ
from the desktop extractor.
"""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup

from ..types import JSONDict
from .base import first_link, outermost, parse_total_results, text_of
from .desktop import PRICE_PATTERN


@dataclass(slots=True)
class MobileSelectors:
    """CSS selectors for the mobile SERP layout."""

    total_results: str = "#result-stats"
    related_queries: str = "a.k8XOCe, div.gGQDvd a, #botstuff a[href^='/search']"
    paid_results: str = "#tads div.mnr-c, #tads [data-text-ad]"
    paid_products: str = ".pla-unit, .mnr-c.pla-unit"
    organic_results: str = "#rso div.mnr-c.xpd, #rso div.MjjYud, #main div.xpd"
    heading: str = "[role=heading], h3, .MUxGbd.v0nnCb"
    description: str = ".yDYNvb, .VwiC3b, .s3v9rd"
    next_page: str = "a[aria-label='Next page'], a[aria-label='More results'], #pnnext"


class MobileExtractor:
    """Extract SERP fields from mobile-rendered Google HTML."""

    name = "mobile"

    def __init__(self, selectors: MobileSelectors | None = None) -> None:
        self.selectors = selectors or MobileSelectors()

    def extract_total_results(self, soup: BeautifulSoup) -> int | None:
        return parse_total_results(text_of(soup.select_one(self.selectors.total_results)))

    def extract_related_queries(self, soup: BeautifulSoup) -> list[str]:
        queries: list[str] = []
        for anchor in soup.select(self.selectors.related_queries):
            title = text_of(anchor)
            if title and title not in queries:
                queries.append(title)
        return queries

    def extract_paid_results(self, soup: BeautifulSoup, host: str) -> list[JSONDict]:
        results: list[JSONDict] = []
        for element in outermost(soup.select(self.selectors.paid_results)):
            title = text_of(element.select_one(self.selectors.heading))
            url = first_link(element, host)
            if not title or not url:
                continue
            results.append(
                {
                    "adPosition": len(results) + 1,
                    "title": title,
                    "url": url,
                    "displayedUrl": text_of(element.select_one("cite, .qzEoUe")),
                    "description": text_of(element.select_one(self.selectors.description)),
                    "siteLinks": [],
                }
            )
        return results

    def extract_paid_products(self, soup: BeautifulSoup, host: str) -> list[JSONDict]:
        products: list[JSONDict] = []
        for element in outermost(soup.select(self.selectors.paid_products)):
            title = text_of(element.select_one(".pla-unit-title, .pymv4e, [role=heading]"))
            url = first_link(element, host)
            if not title or not url:
                continue
            products.append(
                {
                    "title": title,
                    "url": url,
                    "displayedUrl": text_of(element.select_one(".LbUacb, cite")),
                    "prices": PRICE_PATTERN.findall(text_of(element) or ""),
                }
            )
        return products

    def extract_organic_results(self, soup: BeautifulSoup, host: str) -> list[JSONDict]:
        results: list[JSONDict] = []
        for element in outermost(soup.select(self.selectors.organic_results)):
            title = text_of(element.select_one(self.selectors.heading))
            url = first_link(element, host)
            if not title or not url:
                continue
            results.append(
                {
                    "position": len(results) + 1,
                    "title": title,
                    "url": url,
                    "displayedUrl": text_of(element.select_one("cite, .qzEoUe")),
                    "description": text_of(element.select_one(self.selectors.description)),
                    "emphasizedKeywords": [],
                    "siteLinks": [],
                }
            )
        return results

    def extract_next_page_href(self, soup: BeautifulSoup) -> str | None:
        anchor = soup.select_one(self.selectors.next_page)
        if anchor is None:
            return None
        return anchor.get("href") or None


__all__ = ["MobileExtractor", "MobileSelectors"]
