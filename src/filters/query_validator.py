# src/filters/query_validator.py

"""Inbound query sanitisation and validation, run before any fetch."""

import logging
import math
import re
from dataclasses import replace

from src.config.settings import Settings
from src.models.errors import ValidationError
from src.models.search import SearchQuery

logger = logging.getLogger("shopscout.filters")

_UNSAFE_CHARS_RE = re.compile(r"[<>\x00-\x1f\x7f]")


class QueryValidator:
    """Reject malformed search requests with :class:`ValidationError`."""

    @staticmethod
    def sanitize(text: str) -> str:
        """Strip markup/control characters and collapse whitespace."""
        cleaned = _UNSAFE_CHARS_RE.sub(" ", text or "")
        return " ".join(cleaned.split())

    @staticmethod
    def validate(query: SearchQuery) -> SearchQuery:
        """Return a sanitised copy of *query* or raise ValidationError.

        An inverted price range (``min > max``) is rejected rather than
        swapped.
        """
        text = QueryValidator.sanitize(query.text)
        if len(text) < Settings.MIN_QUERY_LENGTH:
            raise ValidationError(
                "Search query must be at least "
                f"{Settings.MIN_QUERY_LENGTH} character(s) long"
            )
        if len(text) > Settings.MAX_QUERY_LENGTH:
            raise ValidationError(
                "Search query must be at most "
                f"{Settings.MAX_QUERY_LENGTH} characters long"
            )

        country_code = (query.country_code or "").strip().upper()
        if not country_code:
            raise ValidationError("Country code is required")

        if query.page < 1:
            raise ValidationError(f"Page must be >= 1, got {query.page}")
        if not 1 <= query.page_size <= Settings.MAX_PAGE_SIZE:
            raise ValidationError(
                f"Page size must be between 1 and {Settings.MAX_PAGE_SIZE}, "
                f"got {query.page_size}"
            )

        filters = query.filters
        price_range = filters.price_range
        if math.isnan(price_range.min) or math.isnan(price_range.max):
            raise ValidationError("Price bounds must be numbers")
        if price_range.min < 0 or price_range.max < 0:
            raise ValidationError("Price bounds must not be negative")
        if price_range.min > price_range.max:
            raise ValidationError(
                f"Invalid price range: min {price_range.min:g} "
                f"exceeds max {price_range.max:g}"
            )
        if not 0 <= filters.min_rating <= 5:
            raise ValidationError(
                f"Minimum rating must be between 0 and 5, got {filters.min_rating}"
            )

        if text != query.text:
            logger.debug("Sanitised query %r -> %r", query.text, text)
        return replace(query, text=text, country_code=country_code)
