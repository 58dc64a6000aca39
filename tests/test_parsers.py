from __future__ import annotations

import pytest

from serp.crawler import DesktopExtractor, MobileExtractor, extractor_for
from serp.crawler.parsers import make_soup
from serp.crawler.parsers.base import clean_google_href, parse_total_results


HOST = "www.google.com"


def test_desktop_extracts_all_fields(desktop_html):
    soup = make_soup(desktop_html())
    extractor = DesktopExtractor()

    assert extractor.extract_total_results(soup) == 1230000
    assert extractor.extract_related_queries(soup) == ["cat breeds", "cat food"]
    assert extractor.extract_next_page_href(soup) == "/search?q=cats&start=10"

    organic = extractor.extract_organic_results(soup, HOST)
    assert [item["position"] for item in organic] == [1, 2]
    assert organic[0]["title"] == "Cat - Wikipedia"
    assert organic[0]["url"] == "https://en.wikipedia.org/wiki/Cat"
    assert organic[0]["displayedUrl"] == "en.wikipedia.org"
    assert organic[0]["emphasizedKeywords"] == ["cat"]
    assert organic[1]["url"] == "https://www.britannica.com/animal/cat"
    assert organic[1]["description"] == "Cats are popular pets."

    (ad,) = extractor.extract_paid_results(soup, HOST)
    assert ad["adPosition"] == 1
    assert ad["title"] == "Buy Cat Food Online"
    assert ad["url"] == "https://ads.example.com/landing"
    assert ad["description"] == "Best cat food deals, free delivery."

    (product,) = extractor.extract_paid_products(soup, HOST)
    assert product["title"] == "Feather Cat Toy"
    assert product["url"] == "https://shop.example.com/cat-toy"
    assert product["prices"] == ["$12.99"]


def test_desktop_last_page_has_no_next_link(desktop_html):
    soup = make_soup(desktop_html(next_href=None))

    assert DesktopExtractor().extract_next_page_href(soup) is None


def test_desktop_empty_page_yields_empty_fields():
    soup = make_soup("<html><body><p>Our systems have detected unusual traffic</p></body></html>")
    extractor = DesktopExtractor()

    assert extractor.extract_total_results(soup) is None
    assert extractor.extract_organic_results(soup, HOST) == []
    assert extractor.extract_paid_results(soup, HOST) == []
    assert extractor.extract_related_queries(soup) == []


def test_mobile_extracts_cards(mobile_html):
    soup = make_soup(mobile_html)
    extractor = MobileExtractor()

    assert extractor.extract_total_results(soup) is None
    assert extractor.extract_related_queries(soup) == ["kittens", "cat videos"]
    assert extractor.extract_next_page_href(soup) == "/search?q=cats&start=10"

    organic = extractor.extract_organic_results(soup, HOST)
    assert [item["title"] for item in organic] == ["Cats on the go", "Kitten care"]
    assert organic[0]["url"] == "https://m.example.com/cats"
    assert organic[0]["description"] == "All about cats, sized for phones."
    assert organic[1]["url"] == "https://kittens.example.org/"


def test_extractor_for_selects_rendering():
    assert isinstance(extractor_for(True), MobileExtractor)
    assert isinstance(extractor_for(False), DesktopExtractor)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("About 1,230,000 results (0.45 seconds)", 1230000),
        ("Ungefähr 4.560 Ergebnisse (0,31 Sekunden)", 4560),
        ("12 results", 12),
        ("No results", None),
        (None, None),
    ],
)
def test_parse_total_results(text, expected):
    assert parse_total_results(text) == expected


@pytest.mark.parametrize(
    ("href", "expected"),
    [
        ("/url?q=https://example.com/a&sa=U", "https://example.com/a"),
        ("/aclk?sa=l&adurl=https://ads.example.com/", "https://ads.example.com/"),
        ("/search?q=dogs", "https://www.google.com/search?q=dogs"),
        ("https://example.org/", "https://example.org/"),
        ("javascript:void(0)", None),
        (None, None),
    ],
)
def test_clean_google_href(href, expected):
    assert clean_google_href(href, HOST) == expected
