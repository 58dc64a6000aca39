from __future__ import annotations

import pytest

from serp.crawler import ConfigurationError, expand_queries
from serp.crawler.expander import expand_query


def test_one_page_zero_unit_per_query_in_input_order(make_config):
    config = make_config(queries=["cats", "dogs", "cat food"])

    units = expand_queries(config)

    assert [unit.url for unit in units] == [
        "https://www.google.com/search?q=cats",
        "https://www.google.com/search?q=dogs",
        "https://www.google.com/search?q=cat+food",
    ]
    assert all(unit.page == 0 for unit in units)
    assert [unit.query_term for unit in units] == ["cats", "dogs", "cat food"]


def test_term_uses_country_domain_and_search_parameters(make_config):
    config = make_config(
        queries=["cats"],
        country_code="gb",
        language_code="en",
        location_uule="w+CAIQICIGTG9uZG9u",
        results_per_page=20,
    )

    (unit,) = expand_queries(config)

    assert unit.url == "https://www.google.co.uk/search?q=cats&hl=en&uule=w%2BCAIQICIGTG9uZG9u&num=20"


def test_search_url_input_is_normalized_and_reset_to_page_zero(make_config):
    unit = expand_query("google.de/search?q=hunde&start=20", make_config())

    assert unit.url == "http://www.google.de/search?q=hunde"
    assert unit.page == 0
    assert unit.query_term == "hunde"


def test_newline_separated_queries_skip_blank_lines(make_config):
    config = make_config(queries="cats\n\n   \ndogs\n")

    assert [unit.query_term for unit in expand_queries(config)] == ["cats", "dogs"]


@pytest.mark.parametrize("queries", [[], "", "\n  \n", ["  "]])
def test_empty_input_raises_configuration_error(make_config, queries):
    config = make_config(queries=queries)

    with pytest.raises(ConfigurationError, match="at least one search query"):
        expand_queries(config)
