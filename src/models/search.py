# src/models/search.py

"""Query, filter and result envelope models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.config.settings import Settings
from src.models.listing import NormalizedListing, ScoredListing


class SortBy(str, Enum):
    """Supported result orderings."""

    RELEVANCE = "relevance"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
    RATING = "rating"
    REVIEWS = "reviews"
    NEWEST = "newest"


@dataclass(frozen=True)
class PriceRange:
    """Inclusive price bounds in the locale currency."""

    min: float = 0.0
    max: float = float("inf")


@dataclass(frozen=True)
class SearchFilters:
    """User constraints applied after scoring."""

    price_range: PriceRange = field(default_factory=PriceRange)
    min_rating: float = 0.0
    in_stock_only: bool = False
    sort_by: SortBy = SortBy.RELEVANCE
    category: str | None = None
    brand: str | None = None


@dataclass(frozen=True)
class SearchQuery:
    """Inbound search request."""

    text: str
    country_code: str
    filters: SearchFilters = field(default_factory=SearchFilters)
    page: int = 1
    page_size: int = Settings.DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class SourceError:
    """Advisory per-source failure surfaced in the result."""

    source: str
    message: str


@dataclass
class FetchOutcome:
    """Merged output of one fan-out across all sources."""

    listings: list[NormalizedListing] = field(
        default_factory=lambda: list[NormalizedListing]()
    )
    sources_queried: list[str] = field(
        default_factory=lambda: list[str]()
    )
    errors: list[SourceError] = field(
        default_factory=lambda: list[SourceError]()
    )
    succeeded: int = 0

    @property
    def all_failed(self) -> bool:
        """True when sources were dispatched but none returned data."""
        return bool(self.sources_queried) and self.succeeded == 0


@dataclass(frozen=True)
class FacetItem:
    """One facet bucket with its listing count."""

    value: str
    label: str
    count: int


@dataclass
class SearchResult:
    """Container for a completed, ranked and paginated search."""

    query: str
    country_code: str
    currency: str
    listings: list[ScoredListing] = field(
        default_factory=lambda: list[ScoredListing]()
    )
    total_found: int = 0
    elapsed_ms: float = 0.0
    page: int = 1
    page_size: int = Settings.DEFAULT_PAGE_SIZE
    sources_queried: list[str] = field(
        default_factory=lambda: list[str]()
    )
    errors: list[SourceError] = field(
        default_factory=lambda: list[SourceError]()
    )
    facets: dict[str, list[FacetItem]] = field(
        default_factory=lambda: dict[str, list[FacetItem]]()
    )
    suggestions: list[str] = field(
        default_factory=lambda: list[str]()
    )

    @property
    def has_next(self) -> bool:
        """Whether a later page holds more listings."""
        return self.page * self.page_size < self.total_found

    def to_dict(self) -> dict[str, Any]:
        """Serialise the envelope for JSON output."""
        return {
            "query": self.query,
            "country_code": self.country_code,
            "currency": self.currency,
            "listings": [s.to_dict() for s in self.listings],
            "total_found": self.total_found,
            "elapsed_ms": round(self.elapsed_ms, 1),
            "page": self.page,
            "page_size": self.page_size,
            "has_next": self.has_next,
            "sources_queried": list(self.sources_queried),
            "errors": [
                {"source": e.source, "message": e.message}
                for e in self.errors
            ],
            "facets": {
                name: [
                    {"value": f.value, "label": f.label, "count": f.count}
                    for f in items
                ]
                for name, items in self.facets.items()
            },
            "suggestions": list(self.suggestions),
        }
