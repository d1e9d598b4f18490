# src/models/listing.py

"""Canonical listing models shared by every pipeline stage."""

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Availability(str, Enum):
    """Normalized stock vocabulary."""

    IN_STOCK = "in_stock"
    LIMITED_STOCK = "limited_stock"
    OUT_OF_STOCK = "out_of_stock"


@dataclass(frozen=True)
class Platform:
    """A locale-specific marketplace instance (e.g. Amazon UAE)."""

    id: str
    name: str
    domain: str


@dataclass(frozen=True)
class Shipping:
    """Delivery terms as reported (or inferred) for a listing."""

    free: bool = False
    cost: float | None = None
    estimated_days: str = ""


@dataclass(frozen=True)
class NormalizedListing:
    """One marketplace offer in canonical form.

    ``original_price`` is dropped at construction when it is lower than
    ``price``; a list price below the selling price carries no meaning.
    """

    id: str
    title: str
    price: float
    platform: Platform
    url: str
    currency: str
    currency_symbol: str
    original_price: float | None = None
    rating: float = 0.0
    review_count: int = 0
    images: tuple[str, ...] = ()
    brand: str = ""
    category: str = ""
    availability: Availability = Availability.IN_STOCK
    shipping: Shipping = field(default_factory=Shipping)
    seller: str | None = None
    description: str = ""
    fetched_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("listing title must not be empty")
        if not math.isfinite(self.price) or self.price < 0:
            raise ValueError(f"invalid price: {self.price}")
        if self.original_price is not None and (
            not math.isfinite(self.original_price)
            or self.original_price < self.price
        ):
            object.__setattr__(self, "original_price", None)
        object.__setattr__(
            self, "rating", min(max(float(self.rating), 0.0), 5.0)
        )
        object.__setattr__(
            self, "review_count", max(int(self.review_count), 0)
        )
        object.__setattr__(self, "images", tuple(self.images))

    @property
    def discount(self) -> str | None:
        """Percentage saved versus the list price, e.g. ``"20%"``."""
        if not self.original_price or self.original_price <= self.price:
            return None
        pct = round(
            (self.original_price - self.price) / self.original_price * 100
        )
        return f"{pct}%"

    @property
    def image(self) -> str:
        """Primary image URL, empty when the source had none."""
        return self.images[0] if self.images else ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise to JSON-compatible primitives."""
        data = asdict(self)
        data["availability"] = self.availability.value
        data["images"] = list(self.images)
        data["fetched_at"] = self.fetched_at.isoformat()
        data["discount"] = self.discount
        return data


@dataclass(frozen=True)
class ScoredListing:
    """A listing annotated with its sub-scores (each 0-100)."""

    listing: NormalizedListing
    relevance_score: float
    authenticity_score: float
    price_competitiveness: float
    availability_score: float
    overall_score: float

    def to_dict(self) -> dict[str, Any]:
        """Flatten listing fields and scores into one JSON-ready dict."""
        data = self.listing.to_dict()
        data.update(
            relevance_score=round(self.relevance_score, 2),
            authenticity_score=round(self.authenticity_score, 2),
            price_competitiveness=round(self.price_competitiveness, 2),
            availability_score=round(self.availability_score, 2),
            overall_score=round(self.overall_score, 2),
        )
        return data
