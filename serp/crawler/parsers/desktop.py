"""Field extractors for desktop Google result pages."""

from __future__ import annotations

from dataclasses import dataclass
import re

from bs4 import BeautifulSoup

from ..types import JSONDict
from .base import (
    clean_google_href,
    first_link,
    outermost,
    parse_total_results,
    site_links,
    text_of,
)


PRICE_PATTERN = re.compile(r"[$€£¥₹]\s?\d[\d.,]*|\d[\d.,]*\s?(?:[$€£¥₹]|Kč|zł|kr)")


@dataclass(slots=True)
class DesktopSelectors:
    """CSS selectors for the desktop SERP layout."""

    total_results: str = "#result-stats, #resultStats"
    related_queries: str = "#brs a, #bres a, div.card-section a, #botstuff a.k8XOCe"
    paid_results: str = "#tads [data-text-ad], #tadsb [data-text-ad], .ads-ad"
    paid_products: str = ".pla-unit"
    organic_results: str = "#search div.g, #rso div.g"
    organic_description: str = ".VwiC3b, .IsZvec, .st, div[data-sncf]"
    ad_description: str = ".MUxGbd.yDYNvb, .ads-creative, .ellip"
    site_links: str = ".sld a, table.nrgt a, .HiHjCd a"
    next_page: str = "#pnnext"


class DesktopExtractor:
    """Extract SERP fields from desktop-rendered Google HTML."""

    name = "desktop"

    def __init__(self, selectors: DesktopSelectors | None = None) -> None:
        self.selectors = selectors or DesktopSelectors()

    def extract_total_results(self, soup: BeautifulSoup) -> int | None:
        return parse_total_results(text_of(soup.select_one(self.selectors.total_results)))

    def extract_related_queries(self, soup: BeautifulSoup) -> list[str]:
        queries: list[str] = []
        seen: set[str] = set()
        for anchor in soup.select(self.selectors.related_queries):
            title = text_of(anchor)
            if not title or title.lower() in seen:
                continue
            seen.add(title.lower())
            queries.append(title)
        return queries

    def extract_paid_results(self, soup: BeautifulSoup, host: str) -> list[JSONDict]:
        results: list[JSONDict] = []
        for element in outermost(soup.select(self.selectors.paid_results)):
            heading = element.select_one("[role=heading], h3")
            title = text_of(heading)
            url = first_link(element, host)
            if not title or not url:
                continue
            results.append(
                {
                    "adPosition": len(results) + 1,
                    "title": title,
                    "url": url,
                    "displayedUrl": text_of(element.select_one("cite, .Zu0yb, .qzEoUe")),
                    "description": text_of(element.select_one(self.selectors.ad_description)),
                    "siteLinks": site_links(element, host, self.selectors.site_links),
                }
            )
        return results

    def extract_paid_products(self, soup: BeautifulSoup, host: str) -> list[JSONDict]:
        products: list[JSONDict] = []
        for element in soup.select(self.selectors.paid_products):
            title = text_of(element.select_one(".pla-unit-title, .pymv4e, [role=heading]"))
            url = first_link(element, host)
            if not title or not url:
                continue
            text = text_of(element) or ""
            products.append(
                {
                    "title": title,
                    "url": url,
                    "displayedUrl": text_of(element.select_one(".LbUacb, .zPEcBd, cite")),
                    "prices": PRICE_PATTERN.findall(text),
                }
            )
        return products

    def extract_organic_results(self, soup: BeautifulSoup, host: str) -> list[JSONDict]:
        results: list[JSONDict] = []
        for element in outermost(soup.select(self.selectors.organic_results)):
            heading = element.select_one("h3")
            title = text_of(heading)
            anchor = heading.find_parent("a") if heading is not None else None
            url = clean_google_href(anchor.get("href"), host) if anchor is not None else None
            url = url or first_link(element, host)
            if not title or not url:
                continue

            description_el = element.select_one(self.selectors.organic_description)
            emphasized = []
            if description_el is not None:
                emphasized = [text for text in (text_of(em) for em in description_el.select("em, b")) if text]

            results.append(
                {
                    "position": len(results) + 1,
                    "title": title,
                    "url": url,
                    "displayedUrl": text_of(element.select_one("cite")),
                    "description": text_of(description_el),
                    "emphasizedKeywords": emphasized,
                    "siteLinks": site_links(element, host, self.selectors.site_links),
                }
            )
        return results

    def extract_next_page_href(self, soup: BeautifulSoup) -> str | None:
        anchor = soup.select_one(self.selectors.next_page)
        if anchor is None:
            return None
        return anchor.get("href") or None


__all__ = ["DesktopExtractor", "DesktopSelectors"]
