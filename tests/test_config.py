from __future__ import annotations

import json

import pytest

from serp.crawler import ConfigurationError, CrawlConfig, DeviceType, load_config, save_config
from serp.crawler.constants import DEFAULT_USER_AGENT, MOBILE_USER_AGENT
from serp.crawler.config import load_config_payload


def test_load_yaml_with_newline_separated_queries(tmp_path):
    path = tmp_path / "crawl.yaml"
    path.write_text(
        "queries: |\n"
        "  cats\n"
        "\n"
        "  https://www.google.de/search?q=hunde\n"
        "concurrency: 4\n"
        "max_pages_per_query: 3\n"
        "mobile_results: true\n"
        "country_code: de\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.queries == ["cats", "https://www.google.de/search?q=hunde"]
    assert config.concurrency == 4
    assert config.max_pages_per_query == 3
    assert config.device is DeviceType.MOBILE
    assert config.country_code == "DE"
    assert config.search_domain == "google.de"
    assert config.effective_user_agent() == MOBILE_USER_AGENT


def test_load_json_and_defaults(tmp_path):
    path = tmp_path / "crawl.json"
    path.write_text(json.dumps({"queries": ["cats"], "max_pages_per_query": None}), encoding="utf-8")

    config = load_config(path)

    assert config.max_pages_per_query == 0
    assert config.pages_unlimited
    assert config.device is DeviceType.DESKTOP
    assert config.search_domain == "google.com"
    assert config.headers()["User-Agent"] == DEFAULT_USER_AGENT


def test_save_and_reload_yaml(tmp_path):
    config = CrawlConfig(queries=["cats"], concurrency=3, save_html=True, proxy_urls=[" http://p:1 ", ""])
    path = tmp_path / "nested" / "crawl.yml"

    save_config(config, path)

    assert load_config(path) == config
    assert config.proxy_urls == ["http://p:1"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"concurrency": 0},
        {"max_pages_per_query": -1},
        {"timeout_seconds": 0},
        {"retries": -1},
        {"results_per_page": 0},
        {"custom_data_function": "no_colon_here"},
    ],
)
def test_invalid_values_raise_configuration_error(overrides):
    with pytest.raises(ConfigurationError):
        CrawlConfig(queries=["cats"], **overrides)


def test_from_dict_requires_queries_and_typed_values():
    with pytest.raises(ConfigurationError, match="queries"):
        CrawlConfig.from_dict({})
    with pytest.raises(ConfigurationError, match="mobile_results"):
        CrawlConfig.from_dict({"queries": ["cats"], "mobile_results": "yes"})
    with pytest.raises(ConfigurationError, match="concurrency"):
        CrawlConfig.from_dict({"queries": ["cats"], "concurrency": "many"})


def test_configuration_error_is_a_value_error():
    assert issubclass(ConfigurationError, ValueError)


@pytest.mark.parametrize(
    ("name", "content"),
    [("crawl.toml", "queries = []"), ("crawl.json", "{not json"), ("crawl.yaml", "- a\n- b\n")],
)
def test_unreadable_config_files(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config_payload(path)


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_config_payload(tmp_path / "missing.yaml")
