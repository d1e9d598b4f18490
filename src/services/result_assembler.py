# src/services/result_assembler.py

"""Pagination and packaging of ranked listings into a SearchResult."""

import logging
import math
import time
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from src.config.settings import Settings
from src.models.listing import ScoredListing
from src.models.search import FacetItem, SearchResult, SourceError

logger = logging.getLogger("shopscout.assembler")

# Query keyword -> related searches, first match wins
_RELATED_SEARCHES: tuple[tuple[str, list[str]], ...] = (
    ("gaming", ["gaming laptop", "gaming mouse", "gaming keyboard", "gaming headset"]),
    ("iphone", ["iphone 15 pro", "iphone case", "airpods", "iphone charger"]),
    ("nike", ["nike air max", "nike jordan", "nike running shoes", "nike sneakers"]),
)
_MAX_SUGGESTIONS = 4


@dataclass
class AssemblyMeta:
    """Request context carried from dispatch to assembly."""

    query: str
    country_code: str
    currency: str
    currency_symbol: str
    started_at: float
    sources_queried: list[str] = field(
        default_factory=lambda: list[str]()
    )
    errors: list[SourceError] = field(
        default_factory=lambda: list[SourceError]()
    )


def build_suggestions(query: str) -> list[str]:
    """Related searches for *query*."""
    lower = query.lower()
    for keyword, related in _RELATED_SEARCHES:
        if keyword in lower:
            return related[:_MAX_SUGGESTIONS]
    return [
        f"{query} deals",
        f"{query} review",
        f"best {query}",
        f"{query} price",
    ][:_MAX_SUGGESTIONS]


def _price_label(low: float, high: float, symbol: str) -> str:
    if low <= 0:
        return f"Under {symbol}{high:,.0f}"
    if math.isinf(high):
        return f"Over {symbol}{low:,.0f}"
    return f"{symbol}{low:,.0f} - {symbol}{high:,.0f}"


def build_facets(
    listings: Sequence[ScoredListing], currency_symbol: str,
) -> dict[str, list[FacetItem]]:
    """Count categories, brands, platforms and price buckets."""

    def ranked(counter: Counter[str], labels: dict[str, str]) -> list[FacetItem]:
        ordered = sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))
        return [
            FacetItem(value=value, label=labels.get(value, value), count=count)
            for value, count in ordered
        ]

    categories: Counter[str] = Counter()
    brands: Counter[str] = Counter()
    platforms: Counter[str] = Counter()
    platform_names: dict[str, str] = {}
    for scored in listings:
        listing = scored.listing
        if listing.category:
            categories[listing.category] += 1
        if listing.brand:
            brands[listing.brand] += 1
        platforms[listing.platform.id] += 1
        platform_names[listing.platform.id] = listing.platform.name

    price_ranges: list[FacetItem] = []
    for low, high in Settings.PRICE_BUCKETS:
        count = sum(1 for s in listings if low <= s.listing.price < high)
        price_ranges.append(
            FacetItem(
                value=f"{low:g}-{high:g}",
                label=_price_label(low, high, currency_symbol),
                count=count,
            )
        )

    return {
        "categories": ranked(categories, {}),
        "brands": ranked(brands, {}),
        "platforms": ranked(platforms, platform_names),
        "price_ranges": price_ranges,
    }


class ResultAssembler:
    """Slice the ordered listings into one page and attach metadata."""

    @staticmethod
    def assemble(
        ordered: Sequence[ScoredListing],
        page: int,
        page_size: int,
        meta: AssemblyMeta,
    ) -> SearchResult:
        """Build the SearchResult for *page*.

        ``total_found`` is the count before slicing; pages past the end
        come back empty.
        """
        start = (page - 1) * page_size
        page_items = list(ordered[start:start + page_size])

        result = SearchResult(
            query=meta.query,
            country_code=meta.country_code,
            currency=meta.currency,
            listings=page_items,
            total_found=len(ordered),
            page=page,
            page_size=page_size,
            sources_queried=list(meta.sources_queried),
            errors=list(meta.errors),
            facets=build_facets(ordered, meta.currency_symbol),
            suggestions=build_suggestions(meta.query),
        )
        result.elapsed_ms = (time.monotonic() - meta.started_at) * 1000
        logger.info(
            "Assembled page %d (%d of %d listings) for '%s' in %.0fms",
            page,
            len(page_items),
            result.total_found,
            meta.query,
            result.elapsed_ms,
        )
        return result
