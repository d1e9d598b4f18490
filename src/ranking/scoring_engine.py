# src/ranking/scoring_engine.py

"""Multi-factor scoring of normalized listings.

Each listing receives four sub-scores on a 0-100 scale which are
combined into ``overall_score`` using ``Settings.SCORE_WEIGHTS``:

- relevance: how well the title and brand match the query
- authenticity: rating, review volume, platform and seller reputation
- price competitiveness: position within the batch's price range
- availability: in stock 100, limited 50, out of stock 0

Scores depend only on the listing, the query and the batch, so the
same input always yields the same output.
"""

import logging
import math
from collections.abc import Mapping, Sequence

from src.config.settings import Settings
from src.models.listing import Availability, NormalizedListing, ScoredListing

logger = logging.getLogger("shopscout.scoring")

_AVAILABILITY_SCORES: dict[Availability, float] = {
    Availability.IN_STOCK: 100.0,
    Availability.LIMITED_STOCK: 50.0,
    Availability.OUT_OF_STOCK: 0.0,
}

# (threshold, points), checked top-down
_RATING_TIERS: tuple[tuple[float, float], ...] = (
    (4.5, 30.0),
    (4.0, 25.0),
    (3.5, 15.0),
    (3.0, 5.0),
)
_REVIEW_TIERS: tuple[tuple[int, float], ...] = (
    (1000, 25.0),
    (500, 20.0),
    (100, 15.0),
    (50, 10.0),
    (10, 5.0),
)

NEUTRAL_PRICE_SCORE = 50.0


def _clamp(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 100.0)


class ScoringEngine:
    """Compute sub-scores and the weighted overall score."""

    def __init__(
        self,
        weights: Mapping[str, float] | None = None,
        platform_reputation: Mapping[str, int] | None = None,
    ) -> None:
        self.weights = dict(weights or Settings.SCORE_WEIGHTS)
        self.platform_reputation = dict(
            platform_reputation or Settings.PLATFORM_REPUTATION
        )
        total = sum(self.weights.values())
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"score weights must sum to 1, got {total}")

    # ── Sub-scores ───────────────────────────────────────

    @staticmethod
    def relevance_score(listing: NormalizedListing, query: str) -> float:
        """Title/brand match quality.

        +50 when the whole query appears in the title, +30 when the
        brand appears in the query, and up to +20 for the share of
        query words (longer than 2 chars) contained in a title word.
        """
        query_lower = query.lower().strip()
        title_lower = listing.title.lower()
        score = 0.0

        if query_lower and query_lower in title_lower:
            score += 50.0

        brand = listing.brand.lower().strip()
        if brand and brand in query_lower:
            score += 30.0

        query_words = [w for w in query_lower.split() if len(w) > 2]
        if query_words:
            title_words = title_lower.split()
            matched = sum(
                1
                for q_word in query_words
                if any(q_word in t_word for t_word in title_words)
            )
            score += matched / len(query_words) * 20.0

        return min(score, 100.0)

    def authenticity_score(self, listing: NormalizedListing) -> float:
        """Trust signal from rating, review volume, platform and seller."""
        score = 0.0

        for threshold, points in _RATING_TIERS:
            if listing.rating >= threshold:
                score += points
                break

        for min_reviews, points in _REVIEW_TIERS:
            if listing.review_count >= min_reviews:
                score += points
                break

        platform_name = listing.platform.name.lower()
        for marker, points in self.platform_reputation.items():
            if marker in platform_name:
                score += points
                break
        else:
            score += Settings.DEFAULT_PLATFORM_REPUTATION

        seller = (listing.seller or "").strip().lower()
        if seller and "unknown" not in seller:
            score += 20.0

        return min(score, 100.0)

    @staticmethod
    def price_competitiveness(
        listing: NormalizedListing,
        batch: Sequence[NormalizedListing],
    ) -> float:
        """Position of the price within the batch range (cheapest = 100).

        Neutral 50 when the listing has no peers in the batch or every
        price in the batch is the same.
        """
        peers = [p for p in batch if p is not listing]
        if not peers:
            return NEUTRAL_PRICE_SCORE

        prices = [listing.price, *(p.price for p in peers)]
        min_price = min(prices)
        max_price = max(prices)
        if max_price == min_price:
            return NEUTRAL_PRICE_SCORE

        position = (max_price - listing.price) / (max_price - min_price)
        return _clamp(position * 100.0)

    @staticmethod
    def availability_score(listing: NormalizedListing) -> float:
        return _AVAILABILITY_SCORES[listing.availability]

    # ── Combination ──────────────────────────────────────

    def score(
        self,
        listing: NormalizedListing,
        query: str,
        batch: Sequence[NormalizedListing],
    ) -> ScoredListing:
        """Score one listing against the query and its batch."""
        relevance = self.relevance_score(listing, query)
        authenticity = self.authenticity_score(listing)
        price = self.price_competitiveness(listing, batch)
        availability = self.availability_score(listing)

        overall = (
            relevance * self.weights["relevance"]
            + authenticity * self.weights["authenticity"]
            + price * self.weights["price"]
            + availability * self.weights["availability"]
        )
        return ScoredListing(
            listing=listing,
            relevance_score=relevance,
            authenticity_score=authenticity,
            price_competitiveness=price,
            availability_score=availability,
            overall_score=_clamp(overall),
        )

    def score_batch(
        self,
        listings: Sequence[NormalizedListing],
        query: str,
    ) -> list[ScoredListing]:
        """Score every listing against the full batch, preserving order."""
        scored = [self.score(listing, query, listings) for listing in listings]
        if scored:
            logger.debug(
                "Scored %d listings for '%s' (top overall %.1f)",
                len(scored),
                query,
                max(s.overall_score for s in scored),
            )
        return scored
