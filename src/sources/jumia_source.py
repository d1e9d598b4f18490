# src/sources/jumia_source.py

"""Scraper for jumia.com.eg (Egypt)."""

from src.sources.html_source import HtmlSource


class JumiaSource(HtmlSource):
    """Jumia Egypt catalog search.

    Card prices are rendered as ``EGP 45,999.00`` (major units).  The
    native id is the ``data-id`` SKU on the ``a.core`` link; a
    "Jumia Express" badge means free delivery.
    """

    PRICE_IN_MINOR_UNITS = False
    SELECTOR_KEY = "jumia"
    SEARCH_PATH = "/catalog/?q={query}"
