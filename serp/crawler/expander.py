"""Turn configured queries into the initial page-0 units of work."""

from __future__ import annotations

import logging

from .config import CrawlConfig
from .errors import ConfigurationError
from .types import UnitOfWork
from .url import build_search_url, normalize_search_url, query_term_from_url


LOGGER = logging.getLogger(__name__)


def expand_query(raw: str, config: CrawlConfig) -> UnitOfWork:
    """Build the page-0 unit for one search term or result-page URL."""

    search_url = normalize_search_url(raw)
    if search_url is not None:
        return UnitOfWork(url=search_url, page=0, query_term=query_term_from_url(search_url))

    term = raw.strip()
    url = build_search_url(
        term,
        domain=config.search_domain,
        language_code=config.language_code,
        location_uule=config.location_uule,
        results_per_page=config.results_per_page,
    )
    return UnitOfWork(url=url, page=0, query_term=term)


def expand_queries(config: CrawlConfig) -> list[UnitOfWork]:
    """Return one page-0 unit per configured query, preserving input order.

    Raises `ConfigurationError` when no query survives normalization.
    """

    units = [expand_query(raw, config) for raw in config.queries if raw and raw.strip()]
    if not units:
        raise ConfigurationError("The input must contain at least one search query or URL.")

    LOGGER.debug("Expanded %d queries into initial units", len(units))
    return units


__all__ = ["expand_queries", "expand_query"]
