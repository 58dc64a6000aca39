"""Decide whether a processed SERP page spawns a follow-on page."""

from __future__ import annotations

from dataclasses import dataclass

from .types import UnitOfWork
from .url import query_term_from_url, resolve_url


@dataclass(frozen=True, slots=True)
class PaginationDecision:
    """Outcome of the pagination check for one page.

    `has_next_page` reports whether the SERP offered more results, even when
    `next_unit` is None because the per-query page limit was reached.
    """

    has_next_page: bool
    next_unit: UnitOfWork | None = None

    @property
    def stopped_at_limit(self) -> bool:
        return self.has_next_page and self.next_unit is None


def page_limit_allows(page: int, max_pages_per_query: int | None) -> bool:
    """Return True when a page after `page` is still within the per-query limit."""

    if not max_pages_per_query:
        return True
    return page + 1 < max_pages_per_query


def decide_next_page(
    unit: UnitOfWork,
    max_pages_per_query: int | None,
    next_href: str | None,
) -> PaginationDecision:
    """Pure pagination decision for `unit` given the page's "next" link."""

    next_url = resolve_url(unit.url, next_href)
    if next_url is None:
        return PaginationDecision(has_next_page=False)

    if not page_limit_allows(unit.page, max_pages_per_query):
        return PaginationDecision(has_next_page=True)

    next_unit = UnitOfWork(
        url=next_url,
        page=unit.page + 1,
        query_term=query_term_from_url(next_url) or unit.query_term,
    )
    return PaginationDecision(has_next_page=True, next_unit=next_unit)


__all__ = [
    "PaginationDecision",
    "decide_next_page",
    "page_limit_allows",
]
