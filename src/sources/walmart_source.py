# src/sources/walmart_source.py

"""Scraper for walmart.com (United States)."""

from bs4 import Tag

from src.sources.html_source import HtmlSource


class WalmartSource(HtmlSource):
    """Walmart US search results page.

    The price block reads ``current price $899.00``; amounts are major
    units.  Cards carry the item id in ``data-item-id``.
    """

    PRICE_IN_MINOR_UNITS = False
    SELECTOR_KEY = "walmart"
    SEARCH_PATH = "/search?q={query}"

    def _text(self, card: Tag, key: str) -> str:
        text = super()._text(card, key)
        if key in ("price", "old_price"):
            # Screen-reader prefix ("current price", "was") precedes the amount
            text = text.lower().replace("current price", "").replace("was", "")
        return text.strip()
