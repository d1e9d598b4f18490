# src/sources/paapi_source.py

"""Amazon regional marketplaces via the Product Advertising API 5.0."""

import json
from dataclasses import dataclass
from typing import Any

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import SourceFetchError
from src.models.listing import NormalizedListing, Shipping
from src.sources.base_source import BaseSource, SourceContext
from src.sources.field_parsers import parse_rating, parse_review_count

_TARGET_PREFIX = "com.amazon.paapi5.v1.ProductAdvertisingAPIv1."
# Empty searches come back as HTTP 404 with this error code
_NO_RESULTS = "NoResults"
# Statuses whose JSON body carries an ``Errors`` explanation
_EXPLAINED_STATUSES = (200, 400, 401, 404, 429)


@dataclass(frozen=True)
class PaapiCredentials:
    """Associate credentials used to sign PA-API requests."""

    access_key: str
    secret_key: str
    partner_tag: str

    @classmethod
    def from_settings(cls) -> "PaapiCredentials | None":
        """Credentials from the environment, or None unless all are set."""
        creds = cls(
            access_key=Settings.PAAPI_ACCESS_KEY,
            secret_key=Settings.PAAPI_SECRET_KEY,
            partner_tag=Settings.PAAPI_PARTNER_TAG,
        )
        if creds.access_key and creds.secret_key and creds.partner_tag:
            return creds
        return None


def _display(node: Any) -> str | None:
    if isinstance(node, dict) and node.get("DisplayValue"):
        return str(node["DisplayValue"])
    return None


def _first(entries: Any) -> dict[str, Any]:
    if isinstance(entries, list) and entries and isinstance(entries[0], dict):
        return entries[0]
    return {}


class PaapiSource(BaseSource):
    """Amazon SearchItems through the official Product Advertising API.

    Every search is one JSON POST to ``https://<host>/paapi5/searchitems``
    signed with AWS Signature Version 4 for the marketplace region.
    ``Price.Amount`` is a decimal in major units, so no cents conversion
    is applied.  The selling price comes from the first offer listing,
    falling back to the lowest summary price.
    """

    PRICE_IN_MINOR_UNITS = False

    def __init__(
        self,
        context: SourceContext,
        session: curl_requests.AsyncSession,
        credentials: PaapiCredentials,
    ) -> None:
        super().__init__(context, session)
        self.credentials = credentials

    @property
    def host(self) -> str:
        return self.context.options.get(
            "host", f"webservices.{self.context.platform.domain}"
        )

    @property
    def region(self) -> str:
        return self.context.options.get("region", "us-east-1")

    @property
    def endpoint(self) -> str:
        return f"https://{self.host}/paapi5/searchitems"

    def _payload(self, query: str) -> dict[str, Any]:
        return {
            "Keywords": query,
            "SearchIndex": "All",
            "ItemCount": self.settings.PAAPI_ITEM_COUNT,
            "ItemPage": 1,
            "Marketplace": f"www.{self.context.platform.domain}",
            "PartnerTag": self.credentials.partner_tag,
            "PartnerType": "Associates",
            "Resources": list(self.settings.PAAPI_RESOURCES),
            "LanguagesOfPreference": [
                self.context.options.get("language", "en_US")
            ],
            "CurrencyOfPreference": self.context.currency,
        }

    def _signed_headers(self, body: bytes) -> dict[str, str]:
        """Sign a SearchItems POST and return the headers to send."""
        request = AWSRequest(
            method="POST",
            url=self.endpoint,
            data=body,
            headers={
                "content-encoding": "amz-1.0",
                "content-type": "application/json; charset=utf-8",
                "host": self.host,
                "x-amz-target": f"{_TARGET_PREFIX}SearchItems",
            },
        )
        credentials = Credentials(
            self.credentials.access_key, self.credentials.secret_key
        )
        SigV4Auth(
            credentials, self.settings.PAAPI_SERVICE, self.region
        ).add_auth(request)
        return dict(request.headers.items())

    async def fetch_raw(self, query: str) -> list[dict[str, Any]]:
        """Run one signed ``SearchItems`` request for the marketplace."""
        body = json.dumps(self._payload(query)).encode("utf-8")
        resp = await self._post(
            self.endpoint,
            self._signed_headers(body),
            body,
            ok_statuses=_EXPLAINED_STATUSES,
        )
        try:
            data: dict[str, Any] = json.loads(resp.text or "{}")
        except ValueError as exc:
            raise SourceFetchError(
                self.label, f"HTTP {resp.status_code}"
            ) from exc

        items: list[dict[str, Any]] = (
            (data.get("SearchResult") or {}).get("Items") or []
        )
        if resp.status_code == 200 and items:
            return items

        error = _first(data.get("Errors"))
        if error.get("Code") == _NO_RESULTS:
            return []
        if error:
            message = str(error.get("Message") or error.get("Code"))
            self.logger.warning(
                "[%s] PA-API error %s: %s",
                self.source_id,
                error.get("Code"),
                message,
            )
            raise SourceFetchError(self.label, message)
        if resp.status_code != 200:
            raise SourceFetchError(self.label, f"HTTP {resp.status_code}")
        return items

    @staticmethod
    def _amount_field(node: Any) -> Any:
        return node.get("Amount") if isinstance(node, dict) else None

    @staticmethod
    def _images(item: dict[str, Any]) -> list[str]:
        images_info = item.get("Images") or {}
        primary = (images_info.get("Primary") or {}).get("Large") or {}
        images = [primary.get("URL") or ""]
        for variant in images_info.get("Variants") or []:
            url = ((variant or {}).get("Large") or {}).get("URL")
            if url and url not in images:
                images.append(url)
        return images

    @staticmethod
    def _availability_text(availability: dict[str, Any]) -> str | None:
        message = availability.get("Message")
        if message:
            return str(message)
        kind = availability.get("Type")
        if kind and kind != "Now":
            # Backorder, preorder and similar offers ship eventually
            return "limited"
        return None

    def normalize(self, raw_item: dict[str, Any]) -> NormalizedListing:
        """Map one ``SearchResult.Items`` entry to a listing."""
        asin = raw_item.get("ASIN")
        info = raw_item.get("ItemInfo") or {}
        offers = raw_item.get("Offers") or {}
        offer = _first(offers.get("Listings"))
        summary = _first(offers.get("Summaries"))

        price = self._amount(
            self._amount_field(offer.get("Price"))
        ) or self._amount(self._amount_field(summary.get("LowestPrice")))
        original_price = self._amount(
            self._amount_field(offer.get("SavingBasis"))
        ) or self._amount(self._amount_field(summary.get("HighestPrice")))

        byline = info.get("ByLineInfo") or {}
        features = (info.get("Features") or {}).get("DisplayValues") or []
        reviews = raw_item.get("CustomerReviews") or {}

        delivery = offer.get("DeliveryInfo") or {}
        free = bool(delivery.get("IsFreeShippingEligible"))
        shipping = Shipping(
            free=free,
            cost=0.0 if free else None,
            estimated_days=(
                "1-2 days" if delivery.get("IsPrimeEligible") else "3-7 days"
            ),
        )

        domain = self.context.platform.domain
        return self._build_listing(
            native_id=asin,
            title=_display(info.get("Title")),
            price=price,
            original_price=original_price,
            url=raw_item.get("DetailPageURL") or (
                f"https://www.{domain}/dp/{asin}" if asin else ""
            ),
            rating=parse_rating(
                (reviews.get("StarRating") or {}).get("Value")
            ),
            review_count=parse_review_count(reviews.get("Count")),
            images=self._images(raw_item),
            brand=_display(byline.get("Brand"))
            or _display(byline.get("Manufacturer")),
            category=_display(
                (info.get("Classifications") or {}).get("ProductGroup")
            ),
            availability_text=self._availability_text(
                offer.get("Availability") or {}
            ),
            shipping=shipping,
            seller=(offer.get("MerchantInfo") or {}).get("Name"),
            description=". ".join(str(f) for f in features),
        )
