# src/sources/argos_source.py

"""Scraper for argos.co.uk (United Kingdom)."""

from bs4 import Tag

from src.sources.html_source import HtmlSource


class ArgosSource(HtmlSource):
    """Argos UK search results page.

    Prices are shown as ``£899.00`` (major units).  Ratings live in the
    ``data-star-rating`` attribute of the ratings widget rather than
    its text.
    """

    PRICE_IN_MINOR_UNITS = False
    SELECTOR_KEY = "argos"
    SEARCH_PATH = "/search/{query}/"

    def _text(self, card: Tag, key: str) -> str:
        if key == "rating":
            el = self._select(card, key)
            if el is not None and el.get("data-star-rating"):
                return str(el["data-star-rating"])
        return super()._text(card, key)
