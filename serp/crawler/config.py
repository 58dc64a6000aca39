"""Typed crawler configuration with JSON/YAML load/save helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml  # type: ignore

from .constants import (
    COUNTRY_CODE_TO_GOOGLE_SEARCH_DOMAIN,
    DEFAULT_CONCURRENCY,
    DEFAULT_GOOGLE_SEARCH_DOMAIN,
    DEFAULT_HTTP_HEADERS,
    DEFAULT_MAX_PAGES_PER_QUERY,
    DEFAULT_MOBILE_RESULTS,
    DEFAULT_RATE_LIMIT_SECONDS,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    DEFAULT_SAVE_HTML,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    JSON_INDENT,
    MOBILE_USER_AGENT,
    SUPPORTED_CONFIG_SUFFIXES,
)
from .errors import ConfigurationError
from .types import DeviceType, JSONDict, JSONValue


def split_queries(value: Any) -> list[str]:
    """Accept a list of queries or one newline-separated string."""

    if value is None:
        return []
    if isinstance(value, str):
        items = value.splitlines()
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value if item is not None]
    else:
        raise ConfigurationError(f"Invalid queries value: {value!r}")
    return [item.strip() for item in items if item and item.strip()]


def _as_float(value: Any, key: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid float for '{key}': {value!r}") from exc


def _as_int(value: Any, key: str) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid int for '{key}': {value!r}") from exc


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigurationError(f"Invalid bool for '{key}': {value!r}")


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(slots=True)
class CrawlConfig:
    """Top-level crawl configuration, read-only once the run starts."""

    queries: list[str]

    concurrency: int = DEFAULT_CONCURRENCY
    max_pages_per_query: int = DEFAULT_MAX_PAGES_PER_QUERY
    mobile_results: bool = DEFAULT_MOBILE_RESULTS
    save_html: bool = DEFAULT_SAVE_HTML
    custom_data_function: str | None = None

    country_code: str | None = None
    language_code: str | None = None
    location_uule: str | None = None
    results_per_page: int | None = None

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retries: int = DEFAULT_RETRIES
    retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS
    rate_limit_seconds: float = DEFAULT_RATE_LIMIT_SECONDS

    user_agent: str | None = None
    default_headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HTTP_HEADERS))
    proxy_urls: list[str] = field(default_factory=list)

    metadata: dict[str, JSONValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.queries = split_queries(self.queries)

        if self.max_pages_per_query is None:
            self.max_pages_per_query = 0
        if self.concurrency is None:
            self.concurrency = DEFAULT_CONCURRENCY
        if self.concurrency <= 0:
            raise ConfigurationError("concurrency must be > 0")
        if self.max_pages_per_query < 0:
            raise ConfigurationError("max_pages_per_query must be >= 0 (0 means unlimited)")
        if self.results_per_page is not None and self.results_per_page <= 0:
            raise ConfigurationError("results_per_page must be > 0 when set")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be > 0")
        if self.retries < 0:
            raise ConfigurationError("retries must be >= 0")
        if self.retry_backoff_seconds < 0:
            raise ConfigurationError("retry_backoff_seconds must be >= 0")
        if self.rate_limit_seconds < 0:
            raise ConfigurationError("rate_limit_seconds must be >= 0")

        if self.country_code is not None:
            self.country_code = self.country_code.strip().upper() or None
        if self.custom_data_function is not None and ":" not in self.custom_data_function:
            raise ConfigurationError(
                "custom_data_function must look like 'package.module:function', "
                f"got {self.custom_data_function!r}"
            )

        self.proxy_urls = [url.strip() for url in self.proxy_urls if url and url.strip()]

    @property
    def device(self) -> DeviceType:
        return DeviceType.MOBILE if self.mobile_results else DeviceType.DESKTOP

    @property
    def pages_unlimited(self) -> bool:
        return not self.max_pages_per_query

    @property
    def search_domain(self) -> str:
        """Google domain used when turning raw terms into search URLs."""

        if self.country_code:
            return COUNTRY_CODE_TO_GOOGLE_SEARCH_DOMAIN.get(
                self.country_code,
                DEFAULT_GOOGLE_SEARCH_DOMAIN,
            )
        return DEFAULT_GOOGLE_SEARCH_DOMAIN

    def effective_user_agent(self) -> str:
        if self.user_agent:
            return self.user_agent
        return MOBILE_USER_AGENT if self.mobile_results else DEFAULT_USER_AGENT

    def headers(self) -> dict[str, str]:
        """Return request headers for SERP fetches."""

        merged: dict[str, str] = dict(self.default_headers)
        merged.setdefault("User-Agent", self.effective_user_agent())
        return merged

    def to_dict(self) -> JSONDict:
        """Serialize config for manifests and reproducibility."""

        return {
            "queries": self.queries,
            "concurrency": self.concurrency,
            "max_pages_per_query": self.max_pages_per_query,
            "mobile_results": self.mobile_results,
            "save_html": self.save_html,
            "custom_data_function": self.custom_data_function,
            "country_code": self.country_code,
            "language_code": self.language_code,
            "location_uule": self.location_uule,
            "results_per_page": self.results_per_page,
            "timeout_seconds": self.timeout_seconds,
            "retries": self.retries,
            "retry_backoff_seconds": self.retry_backoff_seconds,
            "rate_limit_seconds": self.rate_limit_seconds,
            "user_agent": self.user_agent,
            "default_headers": self.default_headers,
            "proxy_urls": self.proxy_urls,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CrawlConfig":
        """Build config from a parsed dictionary."""

        if "queries" not in payload:
            raise ConfigurationError("Config missing required key: 'queries'")

        max_pages = payload.get("max_pages_per_query", DEFAULT_MAX_PAGES_PER_QUERY)

        return cls(
            queries=split_queries(payload["queries"]),
            concurrency=_as_int(payload.get("concurrency", DEFAULT_CONCURRENCY), "concurrency"),
            max_pages_per_query=_as_int(max_pages, "max_pages_per_query") or 0,
            mobile_results=_as_bool(
                payload.get("mobile_results", DEFAULT_MOBILE_RESULTS),
                "mobile_results",
            ),
            save_html=_as_bool(payload.get("save_html", DEFAULT_SAVE_HTML), "save_html"),
            custom_data_function=_as_optional_str(payload.get("custom_data_function")),
            country_code=_as_optional_str(payload.get("country_code")),
            language_code=_as_optional_str(payload.get("language_code")),
            location_uule=_as_optional_str(payload.get("location_uule")),
            results_per_page=_as_int(payload.get("results_per_page"), "results_per_page"),
            timeout_seconds=_as_float(
                payload.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
                "timeout_seconds",
            ),
            retries=_as_int(payload.get("retries", DEFAULT_RETRIES), "retries"),
            retry_backoff_seconds=_as_float(
                payload.get("retry_backoff_seconds", DEFAULT_RETRY_BACKOFF_SECONDS),
                "retry_backoff_seconds",
            ),
            rate_limit_seconds=_as_float(
                payload.get("rate_limit_seconds", DEFAULT_RATE_LIMIT_SECONDS),
                "rate_limit_seconds",
            ),
            user_agent=_as_optional_str(payload.get("user_agent")),
            default_headers={
                str(k): str(v)
                for k, v in dict(payload.get("default_headers", DEFAULT_HTTP_HEADERS)).items()
            },
            proxy_urls=[str(url) for url in list(payload.get("proxy_urls") or [])],
            metadata=dict(payload.get("metadata", {})),
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"YAML config at {path} must be a mapping at top level")
    return data


def load_config_payload(path: str | Path) -> dict[str, Any]:
    """Read a JSON/YAML config file into a plain mapping."""

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ConfigurationError(
            f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
        )

    try:
        if suffix == ".json":
            payload = json.loads(config_path.read_text(encoding="utf-8"))
        else:
            payload = _load_yaml(config_path)
    except ConfigurationError:
        raise
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config at {config_path}: {exc}") from exc
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot parse config at {config_path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config at {config_path} must be a mapping")
    return payload


def load_config(path: str | Path) -> CrawlConfig:
    """Load CrawlConfig from JSON/YAML path."""

    return CrawlConfig.from_dict(load_config_payload(path))


def save_config(config: CrawlConfig, path: str | Path) -> None:
    """Save CrawlConfig as JSON or YAML based on file extension."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = out_path.suffix.lower()
    payload = config.to_dict()

    if suffix == ".json":
        out_path.write_text(
            json.dumps(payload, indent=JSON_INDENT, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        return

    if suffix in {".yaml", ".yml"}:
        out_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        return

    raise ConfigurationError(
        f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
    )


__all__ = [
    "CrawlConfig",
    "load_config",
    "load_config_payload",
    "save_config",
    "split_queries",
]
