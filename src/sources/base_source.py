# src/sources/base_source.py

"""Abstract base class for all marketplace source adapters."""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Collection, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import AdapterParseError, SourceFetchError
from src.models.listing import NormalizedListing, Platform, Shipping
from src.sources.field_parsers import (
    categorize_product,
    extract_brand,
    parse_availability,
    to_amount,
)

_SECRET_PARAM_RE = re.compile(r"(api_key=)[^&\s]+", re.IGNORECASE)


def redact_secrets(text: str) -> str:
    """Hide API keys that transport errors echo back inside URLs."""
    return _SECRET_PARAM_RE.sub(r"\1[REDACTED]", text)


@dataclass(frozen=True)
class SourceContext:
    """Locale-bound identity of one configured source."""

    source_id: str
    label: str
    platform: Platform
    country_code: str
    currency: str
    currency_symbol: str
    options: Mapping[str, str] = field(default_factory=dict)


class BaseSource(ABC):
    """Abstract base class for all marketplace source adapters.

    A source issues exactly one HTTP request per search
    (:meth:`fetch_raw`) and maps each raw record onto a
    :class:`NormalizedListing` (:meth:`normalize`).  The HTTP session
    is injected so that callers own its lifetime and tests can pass a
    stub.

    Subclasses declare their price unit convention through
    ``PRICE_IN_MINOR_UNITS``; when true, raw amounts are cents and are
    divided by 100 during normalization.
    """

    PRICE_IN_MINOR_UNITS: bool = False

    def __init__(
        self,
        context: SourceContext,
        session: curl_requests.AsyncSession,
    ) -> None:
        self.context = context
        self.session = session
        self.source_id = context.source_id
        self.logger = logging.getLogger(
            f"shopscout.{context.source_id}"
        )
        self.settings = Settings()

    @property
    def label(self) -> str:
        """Human-readable source name used in results and errors."""
        return self.context.label

    # ── Fetching ─────────────────────────────────────────

    async def _get(
        self,
        url: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
    ) -> curl_requests.Response:
        """Single GET; transport failures and non-200s raise SourceFetchError."""
        return await self._send(
            self.session.get, url, headers=headers, params=params
        )

    async def _post(
        self,
        url: str,
        headers: Mapping[str, str],
        data: bytes,
        ok_statuses: Collection[int] = (200,),
    ) -> curl_requests.Response:
        """Single POST of a pre-encoded body.

        Statuses outside *ok_statuses* raise SourceFetchError; APIs that
        explain failures in a JSON body can widen the set.
        """
        return await self._send(
            self.session.post,
            url,
            ok_statuses=ok_statuses,
            headers=dict(headers),
            data=data,
        )

    async def _send(
        self,
        method: Callable[..., Awaitable[curl_requests.Response]],
        url: str,
        ok_statuses: Collection[int] = (200,),
        **kwargs: Any,
    ) -> curl_requests.Response:
        try:
            resp = await method(
                url, timeout=self.settings.REQUEST_TIMEOUT, **kwargs
            )
        except Exception as exc:
            message = redact_secrets(str(exc))
            self.logger.warning(
                "[%s] Request error: %s", self.source_id, message
            )
            raise SourceFetchError(
                self.label, f"request failed: {message}"
            ) from exc

        if resp.status_code not in ok_statuses:
            self.logger.warning(
                "[%s] HTTP %d", self.source_id, resp.status_code
            )
            raise SourceFetchError(
                self.label, f"HTTP {resp.status_code}"
            )
        return resp

    @abstractmethod
    async def fetch_raw(self, query: str) -> Sequence[Any]:
        """Fetch the provider's raw item records for *query*."""
        ...

    # ── Normalization ────────────────────────────────────

    @abstractmethod
    def normalize(self, raw_item: Any) -> NormalizedListing:
        """Map one raw record to a listing; raise AdapterParseError if malformed."""
        ...

    def parse_items(
        self, raw_items: Sequence[Any],
    ) -> tuple[list[NormalizedListing], int]:
        """Normalize every raw item, dropping the malformed ones.

        Returns the listings and the number of dropped items.
        """
        listings: list[NormalizedListing] = []
        dropped = 0
        for raw_item in raw_items:
            try:
                listings.append(self.normalize(raw_item))
            except AdapterParseError as exc:
                self.logger.debug(
                    "[%s] Dropped item: %s", self.source_id, exc.message
                )
                dropped += 1
            except (
                KeyError,
                IndexError,
                TypeError,
                ValueError,
                AttributeError,
                OverflowError,
            ) as exc:
                self.logger.debug(
                    "[%s] Dropped malformed item: %r",
                    self.source_id,
                    exc,
                )
                dropped += 1

        if dropped:
            self.logger.info(
                "[%s] Normalization dropped %d of %d items",
                self.source_id,
                dropped,
                len(raw_items),
            )
        return listings, dropped

    async def search(self, query: str) -> list[NormalizedListing]:
        """Fetch and normalize listings for *query*.

        Raises SourceFetchError when the provider cannot be queried and
        AdapterParseError when it answered but no item could be parsed.
        """
        raw_items = list(await self.fetch_raw(query))
        raw_items = raw_items[: self.settings.MAX_ITEMS_PER_SOURCE]
        listings, _dropped = self.parse_items(raw_items)
        if raw_items and not listings:
            raise AdapterParseError(
                self.label,
                f"all {len(raw_items)} items failed to parse",
            )
        self.logger.info(
            "[%s] %d listings for '%s'",
            self.source_id,
            len(listings),
            query,
        )
        return listings

    # ── Helpers for subclasses ───────────────────────────

    def _amount(self, value: Any) -> float | None:
        """Convert a raw price to major units per this source's convention."""
        return to_amount(value, self.PRICE_IN_MINOR_UNITS)

    def _absolute_url(self, href: str) -> str:
        """Resolve a relative link against the platform homepage."""
        if not href:
            return ""
        return urljoin(self._get_homepage(), href)

    def _get_homepage(self) -> str:
        """Return the platform homepage URL."""
        return f"https://www.{self.context.platform.domain}/"

    def _build_listing(
        self,
        *,
        native_id: Any,
        title: Any,
        price: float | None,
        url: str,
        original_price: float | None = None,
        rating: float = 0.0,
        review_count: int = 0,
        images: Sequence[str] = (),
        brand: str | None = None,
        category: str | None = None,
        availability_text: str | None = None,
        shipping: Shipping | None = None,
        seller: str | None = None,
        description: str = "",
    ) -> NormalizedListing:
        """Validate required fields and assemble a listing in locale context."""
        native = str(native_id or "").strip()
        if not native:
            raise AdapterParseError(self.label, "missing item id")
        clean_title = " ".join(str(title or "").split())
        if not clean_title:
            raise AdapterParseError(
                self.label, f"missing title for {native}"
            )
        if price is None or price <= 0:
            raise AdapterParseError(
                self.label, f"missing price for {native}"
            )
        if not url:
            raise AdapterParseError(
                self.label, f"missing url for {native}"
            )

        ctx = self.context
        return NormalizedListing(
            id=f"{ctx.platform.id}:{native}",
            title=clean_title,
            price=price,
            original_price=original_price,
            rating=rating,
            review_count=review_count,
            images=tuple(img for img in images if img),
            brand=brand or extract_brand(clean_title),
            category=category or categorize_product(clean_title),
            availability=parse_availability(availability_text),
            platform=ctx.platform,
            url=url,
            currency=ctx.currency,
            currency_symbol=ctx.currency_symbol,
            shipping=shipping or Shipping(),
            seller=seller or None,
            description=description,
        )
