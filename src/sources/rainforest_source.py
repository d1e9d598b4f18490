# src/sources/rainforest_source.py

"""Amazon regional marketplaces via the Rainforest product-data API."""

from typing import Any

from curl_cffi import requests as curl_requests

from src.models.errors import SourceFetchError
from src.models.listing import NormalizedListing, Shipping
from src.sources.base_source import BaseSource, SourceContext
from src.sources.field_parsers import parse_rating, parse_review_count


class RainforestSource(BaseSource):
    """Amazon search (amazon.eg, .ae, .sa, .com, .co.uk) through Rainforest.

    Rainforest reports ``price.value`` in major units (``999.0`` is
    USD 999.00), so no cents conversion is applied.  The list price
    comes from ``price.list_price`` or the RRP entry of ``prices``.
    """

    PRICE_IN_MINOR_UNITS = False

    def __init__(
        self,
        context: SourceContext,
        session: curl_requests.AsyncSession,
        api_key: str,
    ) -> None:
        super().__init__(context, session)
        self.api_key = api_key

    async def fetch_raw(self, query: str) -> list[dict[str, Any]]:
        """Run one ``type=search`` request against the Amazon domain."""
        params = {
            "api_key": self.api_key,
            "type": "search",
            "amazon_domain": self.context.platform.domain,
            "search_term": query,
            "page": "1",
        }
        resp = await self._get(
            self.settings.RAINFOREST_BASE_URL,
            headers={"Accept": "application/json"},
            params=params,
        )
        data: dict[str, Any] = resp.json()

        request_info = data.get("request_info") or {}
        if request_info.get("success") is False:
            message = str(
                request_info.get("message") or "request unsuccessful"
            )
            raise SourceFetchError(self.label, message)

        results: list[dict[str, Any]] = data.get("search_results") or []
        return results

    @staticmethod
    def _prices(item: dict[str, Any]) -> tuple[Any, Any]:
        """Return the raw (selling, list) price values of a search result."""
        price_info = item.get("price") or {}
        selling = price_info.get("value")
        listed = price_info.get("list_price")

        for entry in item.get("prices") or []:
            if not isinstance(entry, dict):
                continue
            if entry.get("is_rrp"):
                listed = listed if listed is not None else entry.get("value")
            elif selling is None:
                selling = entry.get("value")
        return selling, listed

    @staticmethod
    def _seller(item: dict[str, Any]) -> str | None:
        seller = item.get("seller")
        if isinstance(seller, dict):
            return seller.get("name")
        return seller or None

    def normalize(self, raw_item: dict[str, Any]) -> NormalizedListing:
        """Map one Rainforest ``search_results`` entry to a listing."""
        asin = raw_item.get("asin")
        selling, listed = self._prices(raw_item)
        domain = self.context.platform.domain
        url = raw_item.get("link") or (
            f"https://www.{domain}/dp/{asin}" if asin else ""
        )

        images = [raw_item.get("image") or ""]
        for extra in raw_item.get("images") or []:
            link = extra.get("link") if isinstance(extra, dict) else extra
            if link and link not in images:
                images.append(link)

        is_prime = bool(raw_item.get("is_prime"))
        shipping = (
            Shipping(free=True, cost=0.0, estimated_days="1-2 days")
            if is_prime
            else Shipping(free=False, cost=5.0, estimated_days="3-5 days")
        )
        availability = raw_item.get("availability")
        if isinstance(availability, dict):
            availability = availability.get("raw")

        return self._build_listing(
            native_id=asin,
            title=raw_item.get("title"),
            price=self._amount(selling),
            original_price=self._amount(listed),
            url=url,
            rating=parse_rating(raw_item.get("rating")),
            review_count=parse_review_count(raw_item.get("ratings_total")),
            images=images,
            brand=raw_item.get("brand"),
            availability_text=availability,
            shipping=shipping,
            seller=self._seller(raw_item),
        )
