# src/sources/html_source.py

"""Base class for sources scraped from server-rendered search pages."""

import asyncio
import json
from typing import Any
from urllib.parse import quote_plus, urlparse

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup, Tag
from curl_cffi import requests as curl_requests

from src.models.errors import AdapterParseError, SourceFetchError
from src.models.listing import NormalizedListing, Shipping
from src.sources.base_source import BaseSource, SourceContext
from src.sources.field_parsers import (
    extract_price,
    parse_rating,
    parse_review_count,
)


class HtmlSource(BaseSource):
    """Scrape product cards from an HTML search page.

    Subclasses set ``SELECTOR_KEY`` (their entry in ``selectors.json``)
    and ``SEARCH_PATH`` (a path template with a ``{query}`` slot).
    Card fields are read generically from the configured selectors:

    ``product_card``, ``title``, ``price``, ``old_price``, ``rating``,
    ``reviews``, ``url``, ``image``, ``availability``, ``brand``,
    ``seller``, ``free_shipping``, and ``id_attr`` (an attribute holding
    the native id, looked up on the card and then on the link).

    Pages are fetched with the browser-impersonating curl_cffi session;
    when that is blocked the request is repeated once through
    cloudscraper in a worker thread.
    """

    SELECTOR_KEY: str = ""
    SEARCH_PATH: str = ""

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(
        self,
        context: SourceContext,
        session: curl_requests.AsyncSession,
    ) -> None:
        super().__init__(context, session)
        self.selectors: dict[str, str] = self._load_selectors()

    def _load_selectors(self) -> dict[str, str]:
        """Load CSS selectors for this source from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, str] = all_selectors.get(self.SELECTOR_KEY, {})
        return result

    # ── Fetching ─────────────────────────────────────────

    def _validate_response(self, text: str) -> bool:
        """Check for Cloudflare challenge pages and CAPTCHA indicators."""
        lower = text.lower()
        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "[%s] Cloudflare challenge detected (marker: '%s')",
                    self.source_id,
                    marker,
                )
                return False

        # Real result pages mention "captcha" in scripts; only flag thin pages
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "[%s] CAPTCHA keyword '%s' detected",
                        self.source_id,
                        keyword,
                    )
                    return False
        return True

    def _fetch_with_cloudscraper(
        self, url: str, headers: dict[str, str],
    ) -> str:
        """Blocking cloudscraper GET; runs in a worker thread."""
        try:
            scraper: Any = cloudscraper.create_scraper()
            resp: Any = scraper.get(
                url,
                headers=headers,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            raise SourceFetchError(
                self.label, f"cloudscraper fallback failed: {exc}"
            ) from exc
        if resp.status_code != 200:
            raise SourceFetchError(
                self.label, f"HTTP {resp.status_code} (cloudscraper)"
            )
        text = str(resp.text)
        if not self._validate_response(text):
            raise SourceFetchError(self.label, "blocked by bot challenge")
        return text

    async def _get_html(self, url: str) -> str:
        """Fetch a page, falling back to cloudscraper when blocked."""
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._get_homepage(),
        }
        try:
            resp = await self._get(url, headers)
            if self._validate_response(resp.text):
                return resp.text
            reason = "bot challenge"
        except SourceFetchError as exc:
            reason = exc.message

        self.logger.info(
            "[%s] curl_cffi failed (%s), falling back to cloudscraper",
            self.source_id,
            reason,
        )
        return await asyncio.to_thread(
            self._fetch_with_cloudscraper, url, headers
        )

    async def fetch_raw(self, query: str) -> list[Tag]:
        """Fetch the search page and return its product card elements."""
        url = self._absolute_url(
            self.SEARCH_PATH.format(query=quote_plus(query))
        )
        html = await self._get_html(url)
        soup = BeautifulSoup(html, "lxml")
        cards: list[Tag] = soup.select(self.selectors["product_card"])
        return cards

    # ── Card parsing ─────────────────────────────────────

    def _select(self, card: Tag, key: str) -> Tag | None:
        selector = self.selectors.get(key, "")
        if not selector:
            return None
        return card.select_one(selector)

    def _text(self, card: Tag, key: str) -> str:
        el = self._select(card, key)
        return el.get_text(" ", strip=True) if el else ""

    def _native_id(self, card: Tag, link: Tag | None, href: str) -> str:
        """Native id from ``id_attr`` on the card or link, else the URL slug."""
        attr = self.selectors.get("id_attr", "")
        if attr:
            for el in (card, link):
                value = el.get(attr) if el is not None else None
                if value:
                    return str(value)
        path = urlparse(href).path.rstrip("/")
        slug = path.rsplit("/", 1)[-1]
        return slug.removesuffix(".html")

    def _image(self, card: Tag) -> str:
        el = self._select(card, "image")
        if el is None:
            return ""
        src = el.get("data-src") or el.get("src") or ""
        return self._absolute_url(str(src))

    def normalize(self, raw_item: Tag) -> NormalizedListing:
        """Parse one product card into a listing."""
        if not isinstance(raw_item, Tag):
            raise AdapterParseError(self.label, "not an HTML element")

        link = self._select(raw_item, "url")
        href = str(link.get("href") or "") if link is not None else ""

        price_text = self._text(raw_item, "price")
        old_price_text = self._text(raw_item, "old_price")
        free = self._select(raw_item, "free_shipping") is not None

        return self._build_listing(
            native_id=self._native_id(raw_item, link, href),
            title=self._text(raw_item, "title"),
            price=self._amount(extract_price(price_text))
            if price_text
            else None,
            original_price=self._amount(extract_price(old_price_text))
            if old_price_text
            else None,
            url=self._absolute_url(href),
            rating=parse_rating(self._text(raw_item, "rating")),
            review_count=parse_review_count(self._text(raw_item, "reviews")),
            images=[self._image(raw_item)],
            brand=self._text(raw_item, "brand") or None,
            availability_text=self._text(raw_item, "availability") or None,
            shipping=Shipping(free=free, cost=0.0 if free else None),
            seller=self._text(raw_item, "seller") or None,
        )
