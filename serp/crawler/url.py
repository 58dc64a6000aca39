"""URL normalization plus search-URL building and decomposition helpers."""

from __future__ import annotations

import posixpath
import re
from typing import Sequence
from urllib.parse import (
    parse_qs,
    parse_qsl,
    quote,
    urlencode,
    urljoin,
    urlsplit,
    urlunsplit,
)

from .constants import (
    DEFAULT_GOOGLE_SEARCH_DOMAIN_COUNTRY_CODE,
    GOOGLE_DEFAULT_RESULTS_PER_PAGE,
    GOOGLE_SEARCH_DOMAIN_TO_COUNTRY_CODE,
    GOOGLE_SEARCH_URL_REGEX,
)
from .types import DeviceType, SearchQuery


DEFAULT_ALLOWED_SCHEMES = ("http", "https")
SKIP_HREF_PREFIXES = ("javascript:", "mailto:", "tel:", "data:")

# Pagination offset; stripped so a resumed URL always restarts its chain.
PAGE_OFFSET_PARAM = "start"


def host_from_url(url: str) -> str:
    """Extract normalized host from URL."""

    parsed = urlsplit(url)
    host = (parsed.hostname or "").strip().lower()
    if host.startswith("www."):
        host = host[4:]
    return host.strip(".")


def is_http_url(url: str, allowed_schemes: Sequence[str] = DEFAULT_ALLOWED_SCHEMES) -> bool:
    """Return True if URL is absolute and has an allowed HTTP-like scheme."""

    parsed = urlsplit(url)
    if not parsed.scheme or not parsed.netloc:
        return False
    return parsed.scheme.lower() in {scheme.lower() for scheme in allowed_schemes}


def _has_default_port(scheme: str, port: int | None) -> bool:
    if port is None:
        return False
    return (scheme == "http" and port == 80) or (scheme == "https" and port == 443)


def _normalize_netloc(
    parsed_url,  # urllib.parse.SplitResult
    *,
    strip_default_port: bool,
) -> str:
    host = (parsed_url.hostname or "").lower()
    if not host:
        return parsed_url.netloc.lower()

    userinfo = ""
    if parsed_url.username:
        userinfo = quote(parsed_url.username, safe="")
        if parsed_url.password:
            userinfo += ":" + quote(parsed_url.password, safe="")
        userinfo += "@"

    port: int | None
    try:
        port = parsed_url.port
    except ValueError:
        port = None

    include_port = port is not None and (not strip_default_port or not _has_default_port(parsed_url.scheme.lower(), port))

    if include_port:
        return f"{userinfo}{host}:{port}"
    return f"{userinfo}{host}"


def _normalize_path(path: str) -> str:
    if not path:
        return "/"

    collapsed = re.sub(r"/{2,}", "/", path)
    normalized = posixpath.normpath(collapsed)

    if collapsed.startswith("/") and not normalized.startswith("/"):
        normalized = "/" + normalized

    if normalized in {"", "."}:
        normalized = "/"

    return normalized


def _normalize_query(query: str, *, sort_query_params: bool) -> str:
    if not query:
        return ""

    pairs = parse_qsl(query, keep_blank_values=True)
    if sort_query_params:
        pairs = sorted(pairs, key=lambda item: (item[0], item[1]))

    if not pairs:
        return ""

    return urlencode(pairs, doseq=True)


def normalize_url(
    url: str,
    *,
    strip_fragment: bool = True,
    strip_default_port: bool = True,
    sort_query_params: bool = True,
    allowed_schemes: Sequence[str] = DEFAULT_ALLOWED_SCHEMES,
) -> str | None:
    """Canonicalize absolute URL for queue de-duplication.

    Query parameters are kept (they are the whole point of a SERP URL) but sorted.
    Returns `None` for URLs that are invalid or outside allowed schemes.
    """

    if not url:
        return None

    raw = url.strip()
    if not raw:
        return None

    parsed = urlsplit(raw)
    if not parsed.scheme or not parsed.netloc:
        return None

    scheme = parsed.scheme.lower()
    if scheme not in {item.lower() for item in allowed_schemes}:
        return None

    netloc = _normalize_netloc(parsed, strip_default_port=strip_default_port)
    if not netloc:
        return None

    path = _normalize_path(parsed.path)
    query = _normalize_query(parsed.query, sort_query_params=sort_query_params)
    fragment = "" if strip_fragment else parsed.fragment

    return urlunsplit((scheme, netloc, path, query, fragment))


def resolve_url(
    base_url: str,
    href: str | None,
    *,
    allowed_schemes: Sequence[str] = DEFAULT_ALLOWED_SCHEMES,
) -> str | None:
    """Resolve possibly relative link against base URL and validate scheme."""

    if href is None:
        return None

    candidate = href.strip()
    if not candidate or candidate.startswith("#"):
        return None

    lowered = candidate.lower()
    if any(lowered.startswith(prefix) for prefix in SKIP_HREF_PREFIXES):
        return None

    absolute = urljoin(base_url, candidate)
    if is_http_url(absolute, allowed_schemes=allowed_schemes):
        return absolute
    return None


def is_search_url(url: str) -> bool:
    """Return True for Google result-page URLs such as `https://www.google.de/search?q=x`."""

    return GOOGLE_SEARCH_URL_REGEX.match(url.strip()) is not None


def normalize_search_url(raw: str) -> str | None:
    """Fix up a user-supplied result-page URL, or return None if it is not one.

    Adds a missing scheme, lower-cases the host, forces the `www.` host form and
    drops the page offset so the URL always describes page 0.
    """

    candidate = (raw or "").strip()
    if not candidate:
        return None
    if "://" not in candidate:
        candidate = "http://" + candidate
    if not is_search_url(candidate):
        return None

    parts = urlsplit(candidate)
    host = (parts.hostname or "").lower()
    if not host.startswith("www."):
        host = "www." + host

    pairs = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key != PAGE_OFFSET_PARAM
    ]
    return urlunsplit((parts.scheme.lower(), host, parts.path, urlencode(pairs), ""))


def build_search_url(
    term: str,
    *,
    domain: str,
    language_code: str | None = None,
    location_uule: str | None = None,
    results_per_page: int | None = None,
) -> str:
    """Build the canonical page-0 search URL for a raw search term."""

    params: list[tuple[str, str]] = [("q", term)]
    if language_code:
        params.append(("hl", language_code))
    if location_uule:
        params.append(("uule", location_uule))
    if results_per_page:
        params.append(("num", str(results_per_page)))
    return f"https://www.{domain}/search?{urlencode(params)}"


def search_domain_from_url(url: str) -> str:
    """Return the Google domain (e.g. `google.co.uk`) a search URL targets."""

    match = GOOGLE_SEARCH_URL_REGEX.match(url.strip())
    if match:
        return match.group(3).lower()
    return host_from_url(url)


def country_code_for_domain(
    domain: str,
    default: str = DEFAULT_GOOGLE_SEARCH_DOMAIN_COUNTRY_CODE,
) -> str:
    """Map a Google search domain to its country code, falling back to `default`."""

    return GOOGLE_SEARCH_DOMAIN_TO_COUNTRY_CODE.get(domain.strip().lower(), default)


def query_term_from_url(url: str) -> str | None:
    values = parse_qs(urlsplit(url).query).get("q")
    return values[0] if values else None


def _first_param(params: dict[str, list[str]], key: str) -> str | None:
    values = params.get(key)
    if not values:
        return None
    return values[0] or None


def parse_search_url(
    url: str,
    *,
    page: int,
    device: DeviceType,
    default_country_code: str = DEFAULT_GOOGLE_SEARCH_DOMAIN_COUNTRY_CODE,
) -> SearchQuery:
    """Decompose a request URL into the fixed-shape `SearchQuery` record.

    `page` is the zero-based page index of the unit; the record carries the
    human-facing number (`page + 1`).
    """

    params = parse_qs(urlsplit(url).query, keep_blank_values=True)
    domain = search_domain_from_url(url)

    results_per_page: int | str = GOOGLE_DEFAULT_RESULTS_PER_PAGE
    raw_num = _first_param(params, "num")
    if raw_num is not None:
        results_per_page = int(raw_num) if raw_num.isdigit() else raw_num

    return SearchQuery(
        term=_first_param(params, "q"),
        device=device,
        page=page + 1,
        domain=domain,
        country_code=country_code_for_domain(domain, default_country_code),
        language_code=_first_param(params, "hl"),
        location_uule=_first_param(params, "uule"),
        results_per_page=results_per_page,
    )


__all__ = [
    "DEFAULT_ALLOWED_SCHEMES",
    "PAGE_OFFSET_PARAM",
    "SKIP_HREF_PREFIXES",
    "build_search_url",
    "country_code_for_domain",
    "host_from_url",
    "is_http_url",
    "is_search_url",
    "normalize_search_url",
    "normalize_url",
    "parse_search_url",
    "query_term_from_url",
    "resolve_url",
    "search_domain_from_url",
]
