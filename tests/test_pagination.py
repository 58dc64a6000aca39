from __future__ import annotations

import pytest

from serp.crawler import UnitOfWork, decide_next_page
from serp.crawler.pagination import page_limit_allows


BASE_URL = "https://www.google.com/search?q=cats"
NEXT_HREF = "/search?q=cats&start=10"


def test_no_next_link_means_no_unit_and_no_next_page():
    decision = decide_next_page(UnitOfWork(BASE_URL, page=0), 5, None)

    assert decision.has_next_page is False
    assert decision.next_unit is None
    assert decision.stopped_at_limit is False


def test_next_link_within_limit_creates_following_page():
    decision = decide_next_page(UnitOfWork(BASE_URL, page=0, query_term="cats"), 2, NEXT_HREF)

    assert decision.has_next_page is True
    assert decision.next_unit == UnitOfWork(
        "https://www.google.com/search?q=cats&start=10",
        page=1,
        query_term="cats",
    )


def test_limit_reached_keeps_has_next_page_without_unit():
    decision = decide_next_page(UnitOfWork(BASE_URL, page=2), 3, NEXT_HREF)

    assert decision.has_next_page is True
    assert decision.next_unit is None
    assert decision.stopped_at_limit is True


@pytest.mark.parametrize("limit", [0, None])
def test_unlimited_always_follows_next_link(limit):
    decision = decide_next_page(UnitOfWork(BASE_URL, page=7), limit, NEXT_HREF)

    assert decision.next_unit is not None
    assert decision.next_unit.page == 8


def test_relative_link_resolves_against_current_host():
    unit = UnitOfWork("https://www.google.de/search?q=hunde", page=0)

    decision = decide_next_page(unit, 0, "/search?q=hunde&start=10")

    assert decision.next_unit.url == "https://www.google.de/search?q=hunde&start=10"
    assert decision.next_unit.query_term == "hunde"


def test_unusable_link_is_treated_as_absent():
    decision = decide_next_page(UnitOfWork(BASE_URL), 0, "javascript:void(0)")

    assert decision.has_next_page is False


def test_decision_is_repeatable():
    unit = UnitOfWork(BASE_URL, page=1, query_term="cats")

    first = decide_next_page(unit, 4, NEXT_HREF)
    second = decide_next_page(unit, 4, NEXT_HREF)

    assert first == second
    assert unit.page == 1


@pytest.mark.parametrize(
    ("page", "limit", "allowed"),
    [(0, 1, False), (0, 2, True), (1, 2, False), (5, 0, True), (5, None, True)],
)
def test_page_limit_allows(page, limit, allowed):
    assert page_limit_allows(page, limit) is allowed
