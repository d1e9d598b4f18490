# src/filters/listing_filter.py

"""Post-scoring filtering and ordering of listings."""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from src.models.listing import Availability, ScoredListing
from src.models.search import SearchFilters, SortBy

logger = logging.getLogger("shopscout.filters")

# (key, descending)
_SORT_KEYS: dict[SortBy, tuple[Callable[[ScoredListing], Any], bool]] = {
    SortBy.RELEVANCE: (lambda s: s.overall_score, True),
    SortBy.PRICE_LOW: (lambda s: s.listing.price, False),
    SortBy.PRICE_HIGH: (lambda s: s.listing.price, True),
    SortBy.RATING: (lambda s: s.listing.rating, True),
    SortBy.REVIEWS: (lambda s: s.listing.review_count, True),
    SortBy.NEWEST: (lambda s: s.listing.fetched_at, True),
}


def _loose_match(value: str, term: str) -> bool:
    """Case-insensitive substring match in either direction."""
    value_lower = value.lower().strip()
    term_lower = term.lower().strip()
    if not value_lower:
        return False
    return term_lower in value_lower or value_lower in term_lower


class ListingFilter:
    """Apply user constraints and a sort order to scored listings.

    Scores are taken as computed over the full fetched batch; removing
    listings here does not re-rank price competitiveness.
    """

    @staticmethod
    def matches(scored: ScoredListing, filters: SearchFilters) -> bool:
        """Return True when the listing passes every active constraint."""
        listing = scored.listing
        price_range = filters.price_range
        if not price_range.min <= listing.price <= price_range.max:
            return False
        if listing.rating < filters.min_rating:
            return False
        if (
            filters.in_stock_only
            and listing.availability is not Availability.IN_STOCK
        ):
            return False
        if filters.category and not _loose_match(
            listing.category, filters.category
        ):
            return False
        if filters.brand and not _loose_match(listing.brand, filters.brand):
            return False
        return True

    @staticmethod
    def sort(
        listings: Sequence[ScoredListing], sort_by: SortBy,
    ) -> list[ScoredListing]:
        """Stable sort; ties keep their incoming order."""
        key, descending = _SORT_KEYS.get(
            sort_by, _SORT_KEYS[SortBy.RELEVANCE]
        )
        return sorted(listings, key=key, reverse=descending)

    @staticmethod
    def apply(
        listings: Sequence[ScoredListing],
        filters: SearchFilters,
    ) -> list[ScoredListing]:
        """Filter then sort.

        Returns a new list; the input sequence is left untouched.
        """
        kept = [s for s in listings if ListingFilter.matches(s, filters)]
        excluded = len(listings) - len(kept)
        if excluded:
            logger.info(
                "Filters removed %d of %d listings", excluded, len(listings)
            )
        return ListingFilter.sort(kept, filters.sort_by)
