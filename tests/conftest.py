from __future__ import annotations

import threading
from typing import Callable

import pytest

from serp.crawler import CrawlConfig, FetchResult, Storage


CATS_URL = "https://www.google.com/search?q=cats"


def make_fetch_result(
    url: str,
    body: bytes | None = b"",
    *,
    status_code: int | None = 200,
    error: str | None = None,
    attempts: int = 1,
    error_messages: list[str] | None = None,
) -> FetchResult:
    return FetchResult(
        requested_url=url,
        final_url=url if status_code is not None else None,
        status_code=status_code,
        content_type="text/html; charset=UTF-8" if body is not None else None,
        body=body,
        headers={"Content-Type": "text/html; charset=UTF-8"} if body is not None else {},
        elapsed_ms=5,
        attempts=attempts,
        error_messages=list(error_messages or []),
        error=error,
    )


class FakeFetcher:
    """Serve canned pages keyed by URL, falling back to `default`.

    Values may be HTML strings, `FetchResult`s, exceptions (raised) or
    callables taking the URL.
    """

    def __init__(self, pages: dict | None = None, default=None) -> None:
        self.pages = dict(pages or {})
        self.default = default
        self.calls: list[str] = []
        self.closed = False
        self.on_fetch: Callable[[str], None] | None = None
        self._lock = threading.Lock()

    def fetch(self, url: str) -> FetchResult:
        with self._lock:
            self.calls.append(url)
        if self.on_fetch is not None:
            self.on_fetch(url)

        response = self.pages.get(url, self.default)
        if response is None:
            return make_fetch_result(url, b"not found", status_code=404)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, FetchResult):
            return response
        if callable(response):
            return response(url)
        return make_fetch_result(url, response.encode("utf-8"))

    def close(self) -> None:
        self.closed = True


def _desktop_serp_html(next_href: str | None = "/search?q=cats&start=10") -> str:
    next_link = f'<a id="pnnext" href="{next_href}">Next</a>' if next_href else ""
    return f"""<!doctype html>
<html><head><title>cats - Google Search</title></head>
<body>
<div id="result-stats">About 1,230,000 results<nobr> (0.45 seconds)</nobr></div>
<div id="tads">
  <div data-text-ad="1">
    <a href="https://ads.example.com/landing"><div role="heading">Buy Cat Food Online</div></a>
    <cite>ads.example.com</cite>
    <div class="MUxGbd yDYNvb">Best cat food deals, free delivery.</div>
  </div>
</div>
<div class="pla-unit">
  <a href="https://shop.example.com/cat-toy"><div class="pla-unit-title">Feather Cat Toy</div></a>
  <span>$12.99</span>
  <span class="LbUacb">shop.example.com</span>
</div>
<div id="search"><div id="rso">
  <div class="g">
    <a href="/url?q=https://en.wikipedia.org/wiki/Cat&amp;sa=U"><h3>Cat - Wikipedia</h3></a>
    <cite>en.wikipedia.org</cite>
    <div class="VwiC3b">The <em>cat</em> is a domestic species of small carnivorous mammal.</div>
  </div>
  <div class="g">
    <a href="https://www.britannica.com/animal/cat"><h3>Cat | Britannica</h3></a>
    <cite>www.britannica.com</cite>
    <div class="VwiC3b">Cats are popular pets.</div>
  </div>
</div></div>
<div id="brs">
  <a href="/search?q=cat+breeds">cat breeds</a>
  <a href="/search?q=cat+food">cat food</a>
</div>
{next_link}
</body></html>
"""


MOBILE_SERP_HTML = """<!doctype html>
<html><body>
<div id="rso">
  <div class="MjjYud">
    <a href="/url?q=https://m.example.com/cats&amp;sa=U"><div role="heading">Cats on the go</div></a>
    <cite>m.example.com</cite>
    <div class="yDYNvb">All about cats, sized for phones.</div>
  </div>
  <div class="MjjYud">
    <a href="https://kittens.example.org/"><div role="heading">Kitten care</div></a>
    <div class="yDYNvb">Raising kittens.</div>
  </div>
</div>
<a class="k8XOCe" href="/search?q=kittens">kittens</a>
<a class="k8XOCe" href="/search?q=cat+videos">cat videos</a>
<a aria-label="Next page" href="/search?q=cats&amp;start=10">Next</a>
</body></html>
"""


@pytest.fixture
def desktop_html() -> Callable[..., str]:
    return _desktop_serp_html


@pytest.fixture
def mobile_html() -> str:
    return MOBILE_SERP_HTML


@pytest.fixture
def storage(tmp_path) -> Storage:
    return Storage(tmp_path / "out")


@pytest.fixture
def make_config() -> Callable[..., CrawlConfig]:
    def _make(**overrides) -> CrawlConfig:
        values = {
            "queries": ["cats"],
            "concurrency": 2,
            "retries": 0,
            "retry_backoff_seconds": 0.0,
        }
        values.update(overrides)
        return CrawlConfig(**values)

    return _make


@pytest.fixture
def fake_fetcher_cls() -> type[FakeFetcher]:
    return FakeFetcher


@pytest.fixture
def fetch_result_factory() -> Callable[..., FetchResult]:
    return make_fetch_result
