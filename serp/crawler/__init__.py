"""Crawler package: config, shared types, and SERP pipeline components."""

from .config import CrawlConfig, load_config, save_config
from .errors import ConfigurationError, CustomHookError, FetchExhaustedError, SerpCrawlerError
from .expander import expand_queries
from .failures import FailureRecorder
from .fetcher import Fetcher
from .frontier import EnqueueResult, EnqueueStatus, WorkQueue
from .hooks import CustomHook, HookContext, load_custom_hook
from .pagination import PaginationDecision, decide_next_page
from .parsers import DesktopExtractor, MobileExtractor, SerpExtractor, extractor_for
from .pipeline import CrawlDriver
from .processor import PageOutcome, PageProcessor
from .stats import StatsCollector
from .storage import Storage
from .types import (
    CrawlStage,
    CrawlStats,
    DeviceType,
    FetchResult,
    ResultRecord,
    SearchQuery,
    UnitOfWork,
    utc_now_iso,
)
from .url import build_search_url, country_code_for_domain, normalize_search_url, parse_search_url

__all__ = [
    "ConfigurationError",
    "CrawlConfig",
    "CrawlDriver",
    "CrawlStage",
    "CrawlStats",
    "CustomHook",
    "CustomHookError",
    "DesktopExtractor",
    "DeviceType",
    "EnqueueResult",
    "EnqueueStatus",
    "FailureRecorder",
    "FetchExhaustedError",
    "FetchResult",
    "Fetcher",
    "HookContext",
    "MobileExtractor",
    "PageOutcome",
    "PageProcessor",
    "PaginationDecision",
    "ResultRecord",
    "SearchQuery",
    "SerpCrawlerError",
    "SerpExtractor",
    "StatsCollector",
    "Storage",
    "UnitOfWork",
    "WorkQueue",
    "build_search_url",
    "country_code_for_domain",
    "decide_next_page",
    "expand_queries",
    "extractor_for",
    "load_config",
    "load_custom_hook",
    "normalize_search_url",
    "parse_search_url",
    "save_config",
    "utc_now_iso",
]
