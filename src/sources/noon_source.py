# src/sources/noon_source.py

"""Noon (Egypt, UAE, Saudi Arabia) via its internal catalog search API."""

import json
from typing import Any
from urllib.parse import quote_plus

from src.models.listing import NormalizedListing, Shipping
from src.sources.base_source import BaseSource
from src.sources.field_parsers import parse_rating, parse_review_count


class NoonSource(BaseSource):
    """Noon catalog search through the JSON API behind the Next.js SPA.

    Noon returns 403 for HTML scraping, so the internal catalog API is
    used instead.  ``price`` and ``sale_price`` are already in major
    units (``4999`` is AED 4,999.00).

    Context options:
        ``locale``: API locale, e.g. ``en-ae``.
        ``path``:   storefront path segment, e.g. ``uae-en``.
    """

    PRICE_IN_MINOR_UNITS = False

    SEARCH_API = (
        "https://www.noon.com/_svc/catalog/api/v3/u/"
        "search?q={query}&page=1&limit={limit}&locale={locale}"
    )
    IMAGE_CDN = "https://f.nooncdn.com/p/{key}.jpg"

    @property
    def _locale(self) -> str:
        return self.context.options.get("locale", "en-ae")

    @property
    def _path(self) -> str:
        return self.context.options.get("path", "uae-en")

    def _get_homepage(self) -> str:
        """Return the locale storefront URL."""
        return f"https://www.noon.com/{self._path}/"

    async def fetch_raw(self, query: str) -> list[dict[str, Any]]:
        """Fetch one page of catalog hits."""
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": f"{self._get_homepage()}search/?q={quote_plus(query)}",
            "Accept": "application/json",
            "X-Locale": self._locale,
            "X-Content": "V6",
        }
        url = self.SEARCH_API.format(
            query=quote_plus(query),
            limit=self.settings.MAX_ITEMS_PER_SOURCE,
            locale=self._locale,
        )
        resp = await self._get(url, headers)
        data: dict[str, Any] = json.loads(resp.text)
        hits: list[dict[str, Any]] = data.get("hits") or []
        return hits

    def _images(self, hit: dict[str, Any]) -> list[str]:
        images: list[str] = []
        if hit.get("image_url"):
            images.append(str(hit["image_url"]))
        for key in [hit.get("image_key"), *(hit.get("image_keys") or [])]:
            if key:
                url = self.IMAGE_CDN.format(key=key)
                if url not in images:
                    images.append(url)
        return images

    @staticmethod
    def _availability_text(hit: dict[str, Any]) -> str | None:
        if hit.get("is_buyable") is False:
            return "out of stock"
        stock = hit.get("stock")
        if isinstance(stock, (int, float)) and not isinstance(stock, bool):
            if stock <= 0:
                return "out of stock"
            if stock <= 5:
                return f"only {int(stock)} left"
        return hit.get("availability")

    def normalize(self, raw_item: dict[str, Any]) -> NormalizedListing:
        """Parse a single Noon API hit into a listing.

        The title falls back from ``name`` to ``name_en`` to ``title``.
        When ``sale_price`` is set, ``price`` is the original price.
        """
        sku = raw_item.get("sku")
        title = (
            raw_item.get("name")
            or raw_item.get("name_en")
            or raw_item.get("title")
        )
        sale_price = self._amount(raw_item.get("sale_price"))
        list_price = self._amount(raw_item.get("price"))
        price = sale_price or list_price
        original_price = list_price if sale_price else None

        rating_raw = raw_item.get("rating")
        review_count = (
            rating_raw.get("count")
            if isinstance(rating_raw, dict)
            else raw_item.get("review_count")
        )

        free_delivery = bool(raw_item.get("is_free_delivery"))
        express = bool(raw_item.get("is_express"))
        shipping = Shipping(
            free=free_delivery,
            cost=0.0 if free_delivery else None,
            estimated_days="1-2 days" if express else "2-5 days",
        )

        return self._build_listing(
            native_id=sku,
            title=title,
            price=price,
            original_price=original_price,
            url=f"https://www.noon.com/{self._path}/{sku}/p/" if sku else "",
            rating=parse_rating(rating_raw),
            review_count=parse_review_count(review_count),
            images=self._images(raw_item),
            brand=raw_item.get("brand"),
            availability_text=self._availability_text(raw_item),
            shipping=shipping,
            seller=raw_item.get("store_name") or raw_item.get("seller_name"),
        )
