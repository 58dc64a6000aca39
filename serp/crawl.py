"""CLI entrypoint for SERP crawl execution."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import signal
import sys
from typing import Any

from serp.crawler import ConfigurationError, CrawlConfig, CrawlDriver, Storage, expand_queries
from serp.crawler.config import load_config_payload


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scrape Google search result pages for a list of queries.",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to JSON/YAML crawl config.",
    )
    parser.add_argument(
        "--output_dir",
        type=Path,
        default=Path("serp_output"),
        help="Root output directory for datasets/manifests/logs.",
    )
    parser.add_argument(
        "--dataset_name",
        type=str,
        default="default",
        help="Name of the JSONL dataset file under <output_dir>/datasets.",
    )

    parser.add_argument(
        "--query",
        action="append",
        default=[],
        help="Search term or Google result-page URL (repeatable). Overrides config queries if provided.",
    )
    parser.add_argument("--concurrency", type=int, default=None)
    parser.add_argument(
        "--max_pages_per_query",
        type=int,
        default=None,
        help="Use 0 to follow pagination without a limit.",
    )
    parser.add_argument(
        "--mobile",
        dest="mobile_results",
        action="store_true",
        default=None,
        help="Request mobile result pages.",
    )
    parser.add_argument(
        "--desktop",
        dest="mobile_results",
        action="store_false",
        help="Request desktop result pages.",
    )
    parser.add_argument(
        "--save_html",
        action="store_true",
        default=None,
        help="Store raw page HTML in every dataset row.",
    )
    parser.add_argument(
        "--custom_data_function",
        type=str,
        default=None,
        help="Dotted path 'package.module:function' called for every page.",
    )

    parser.add_argument("--country_code", type=str, default=None)
    parser.add_argument("--language_code", type=str, default=None)
    parser.add_argument("--location_uule", type=str, default=None)
    parser.add_argument("--results_per_page", type=int, default=None)

    parser.add_argument("--timeout_seconds", type=float, default=None)
    parser.add_argument("--retries", type=int, default=None)
    parser.add_argument("--retry_backoff_seconds", type=float, default=None)
    parser.add_argument("--rate_limit_seconds", type=float, default=None)
    parser.add_argument("--user_agent", type=str, default=None)
    parser.add_argument(
        "--proxy",
        action="append",
        default=[],
        help="Proxy URL (repeatable), rotated round-robin per request attempt.",
    )

    parser.add_argument(
        "--print_stats_json",
        action="store_true",
        help="Print full stats JSON in stdout after run.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    return parser.parse_args(argv)


_OVERRIDE_KEYS = (
    "concurrency",
    "max_pages_per_query",
    "mobile_results",
    "save_html",
    "custom_data_function",
    "country_code",
    "language_code",
    "location_uule",
    "results_per_page",
    "timeout_seconds",
    "retries",
    "retry_backoff_seconds",
    "rate_limit_seconds",
    "user_agent",
)


def build_config(args: argparse.Namespace) -> CrawlConfig:
    payload: dict[str, Any] = {}
    if args.config is not None:
        payload = load_config_payload(args.config)

    if args.query:
        payload["queries"] = list(args.query)
    payload.setdefault("queries", [])

    for key in _OVERRIDE_KEYS:
        value = getattr(args, key)
        if value is not None:
            payload[key] = value

    if args.proxy:
        payload["proxy_urls"] = list(args.proxy)

    return CrawlConfig.from_dict(payload)


def setup_logging(output_dir: Path, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO

    log_dir = output_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "crawl.log"

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # urllib3 logs every retry/connection at DEBUG; keep crawler logs readable.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def print_summary(result: dict[str, Any], *, print_stats_json: bool) -> None:
    paths = result.get("paths", {})
    stats = result.get("stats", {})

    print("\n=== Google SERP scraping finished ===")
    print(f"dataset: {result.get('dataset_id')}")
    print(f"Full results in JSON lines format: {paths.get('dataset')}")
    print(f"stats: {paths.get('crawl_stats')}")
    if result.get("cancelled"):
        print(f"cancelled: yes ({result.get('pending_units', 0)} units never claimed)")

    print("\n--- Core Stats ---")
    for key in [
        "queue_enqueued",
        "queue_skipped_seen",
        "fetched_ok",
        "fetched_error",
        "pages_ok",
        "pages_error",
        "pagination_stopped_at_limit",
        "duration_seconds",
    ]:
        if key in stats:
            print(f"{key}: {stats[key]}")

    if print_stats_json:
        print("\n--- Full Stats JSON ---")
        print(json.dumps(stats, indent=2, sort_keys=True))


def _install_interrupt_handler(driver: CrawlDriver) -> Any:
    def _handle_sigint(signum, frame):  # noqa: ARG001
        if driver.stopped:
            raise KeyboardInterrupt
        logging.warning("Interrupt received, finishing in-flight pages (press Ctrl-C again to abort)")
        driver.stop()

    return signal.signal(signal.SIGINT, _handle_sigint)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.output_dir, verbose=args.verbose)

    try:
        config = build_config(args)
        units = expand_queries(config)
    except ConfigurationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2

    logging.info(
        "Starting SERP crawl: output_dir=%s, queries=%d, device=%s",
        args.output_dir,
        len(config.queries),
        config.device.value,
    )

    try:
        storage = Storage(args.output_dir, dataset_name=args.dataset_name)
        driver = CrawlDriver(config, storage=storage)
    except ConfigurationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2
    except OSError:
        logging.exception("Cannot open output storage")
        return 1

    previous_handler = _install_interrupt_handler(driver)

    try:
        result = driver.run(units)
    except KeyboardInterrupt:
        logging.error("Interrupted by user")
        return 130
    except Exception:
        logging.exception("Crawl failed")
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    print_summary(result, print_stats_json=args.print_stats_json)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
