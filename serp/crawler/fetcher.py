"""SERP fetching over `requests` with retry, rate-limit and proxy rotation."""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass

import requests

from .config import CrawlConfig
from .types import FetchResult
from .url import host_from_url, normalize_url


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _AttemptConfig:
    attempts: int
    backoff_seconds: float


class Fetcher:
    """Fetch SERP URLs with a per-thread `requests.Session`.

    Retries cover connection errors, 408, 429 and 5xx responses (search engines
    answer blocked scrapers with 429/503). When proxies are configured each
    attempt takes the next one round-robin, so a retry leaves through a
    different exit.
    """

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config

        self._thread_local = threading.local()

        self._rate_lock = threading.Lock()
        self._next_allowed_time_by_host: dict[str, float] = {}

        self._proxy_lock = threading.Lock()
        self._proxy_cycle = itertools.cycle(config.proxy_urls) if config.proxy_urls else None

        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()

        self._closed = False
        self._closed_lock = threading.Lock()

    def fetch(self, url: str) -> FetchResult:
        """Fetch one URL with configured retries and policies."""

        if normalize_url(url) is None:
            return FetchResult(
                requested_url=url,
                final_url=None,
                status_code=None,
                content_type=None,
                body=None,
                error="Invalid or unsupported URL",
            )

        if self._is_closed():
            return FetchResult(
                requested_url=url,
                final_url=None,
                status_code=None,
                content_type=None,
                body=None,
                error="Fetcher is closed",
            )

        attempt_cfg = _AttemptConfig(
            attempts=max(1, self.config.retries + 1),
            backoff_seconds=max(0.0, self.config.retry_backoff_seconds),
        )
        return self._fetch_with_retries(url=url, attempt_cfg=attempt_cfg)

    def close(self) -> None:
        """Close pooled HTTP sessions."""

        with self._closed_lock:
            self._closed = True

        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _is_closed(self) -> bool:
        with self._closed_lock:
            return self._closed

    def _fetch_with_retries(self, *, url: str, attempt_cfg: _AttemptConfig) -> FetchResult:
        last_result: FetchResult | None = None
        error_messages: list[str] = []

        for attempt in range(1, attempt_cfg.attempts + 1):
            result = self._fetch_once(url)
            result.attempts = attempt
            last_result = result

            if self._is_terminal_result(result):
                result.error_messages = error_messages
                return result

            message = result.error or f"HTTP status {result.status_code}"
            error_messages.append(message)
            LOGGER.warning(
                "Attempt %d/%d for %s failed: %s",
                attempt,
                attempt_cfg.attempts,
                url,
                message,
            )

            if self._is_closed():
                break

            if attempt < attempt_cfg.attempts and attempt_cfg.backoff_seconds > 0:
                # Linear backoff keeps behavior simple and predictable.
                time.sleep(attempt_cfg.backoff_seconds * attempt)

        if last_result is None:
            return FetchResult(
                requested_url=url,
                final_url=None,
                status_code=None,
                content_type=None,
                body=None,
                error="Unknown fetch failure",
                error_messages=error_messages,
            )

        last_result.error_messages = error_messages
        if last_result.error is None and not last_result.ok:
            last_result.error = f"HTTP status {last_result.status_code}"
        return last_result

    @staticmethod
    def _is_terminal_result(result: FetchResult) -> bool:
        if result.error is not None:
            return False

        if result.status_code is None:
            return False

        if result.status_code in {408, 429} or result.status_code >= 500:
            return False

        return True

    def _fetch_once(self, url: str) -> FetchResult:
        self._wait_for_rate_limit(url)
        started = time.perf_counter()

        session = self._thread_local_session()
        proxy = self._next_proxy()
        proxies = {"http": proxy, "https": proxy} if proxy else None

        try:
            response = session.get(
                url,
                headers=self.config.headers(),
                timeout=self.config.timeout_seconds,
                allow_redirects=True,
                proxies=proxies,
            )
            elapsed_ms = int((time.perf_counter() - started) * 1000)

            body = response.content if response.content is not None else b""
            return FetchResult(
                requested_url=url,
                final_url=response.url or url,
                status_code=response.status_code,
                content_type=response.headers.get("Content-Type"),
                body=body,
                headers=dict(response.headers),
                elapsed_ms=elapsed_ms,
                error=None,
            )
        except requests.RequestException as exc:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            return FetchResult(
                requested_url=url,
                final_url=None,
                status_code=None,
                content_type=None,
                body=None,
                elapsed_ms=elapsed_ms,
                error=f"{exc.__class__.__name__}: {exc}",
            )

    def _next_proxy(self) -> str | None:
        if self._proxy_cycle is None:
            return None
        with self._proxy_lock:
            return next(self._proxy_cycle)

    def _thread_local_session(self) -> requests.Session:
        session = getattr(self._thread_local, "session", None)
        if session is None:
            session = requests.Session()
            self._thread_local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _wait_for_rate_limit(self, url: str) -> None:
        wait_seconds = max(0.0, self.config.rate_limit_seconds)
        if wait_seconds <= 0:
            return

        host = host_from_url(url)

        while True:
            with self._rate_lock:
                now = time.monotonic()
                next_allowed = self._next_allowed_time_by_host.get(host, 0.0)
                if now >= next_allowed:
                    self._next_allowed_time_by_host[host] = now + wait_seconds
                    return
                sleep_for = next_allowed - now

            if sleep_for > 0:
                time.sleep(sleep_for)


__all__ = ["Fetcher"]
