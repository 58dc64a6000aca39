"""Parser package exports."""

from .base import SerpExtractor, make_soup
from .desktop import DesktopExtractor, DesktopSelectors
from .mobile import MobileExtractor, MobileSelectors


def extractor_for(mobile: bool) -> SerpExtractor:
    """Return the extractor matching the configured rendering."""

    return MobileExtractor() if mobile else DesktopExtractor()


__all__ = [
    "DesktopExtractor",
    "DesktopSelectors",
    "MobileExtractor",
    "MobileSelectors",
    "SerpExtractor",
    "extractor_for",
    "make_soup",
]
