# src/sources/field_parsers.py

"""Field-level parsing helpers shared by every source adapter."""

import math
import re
from typing import Any

from src.config.settings import Settings
from src.models.listing import Availability

_OUT_OF_STOCK_TERMS: tuple[str, ...] = ("out of stock", "unavailable")
_LIMITED_TERMS: tuple[str, ...] = ("limited", "few left")
_ONLY_N_LEFT_RE = re.compile(r"\bonly\s+\d+\s+left\b")
_NUMBER_RE = re.compile(r"\d+\.?\d*")


def parse_availability(raw: str | None) -> Availability:
    """Map a free-text stock message onto :class:`Availability`.

    Missing or unrecognised text is treated as in stock.
    """
    if not raw:
        return Availability.IN_STOCK
    lower = raw.lower()
    if any(term in lower for term in _OUT_OF_STOCK_TERMS):
        return Availability.OUT_OF_STOCK
    if any(term in lower for term in _LIMITED_TERMS):
        return Availability.LIMITED_STOCK
    if _ONLY_N_LEFT_RE.search(lower):
        return Availability.LIMITED_STOCK
    return Availability.IN_STOCK


def calculate_discount(
    price: float, original_price: float | None,
) -> str | None:
    """Return ``"<n>%"`` off the original price, or None."""
    if not original_price or original_price <= price:
        return None
    pct = round((original_price - price) / original_price * 100)
    return f"{pct}%"


def extract_price(text: str | None) -> float:
    """Extract a numeric price from a string like 'AED 1,299.00'."""
    if not text:
        return 0.0
    cleaned = text.replace(",", "")
    numbers = _NUMBER_RE.findall(cleaned)
    return float(numbers[0]) if numbers else 0.0


def _finite(value: int | float | str) -> float | None:
    # json.loads accepts NaN and Infinity; huge ints overflow float()
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def to_amount(value: Any, minor_units: bool = False) -> float | None:
    """Coerce a raw price value to a float in major units.

    Strings go through :func:`extract_price`.  When *minor_units* is
    true the raw figure is in cents (or fils, piastres) and is divided
    by 100.  Returns None when the value is missing, not numeric or
    not finite.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = _finite(value)
    elif isinstance(value, str):
        if not _NUMBER_RE.search(value):
            return None
        amount = _finite(extract_price(value))
    else:
        return None
    if amount is None:
        return None
    if minor_units:
        amount /= 100
    return amount


def parse_rating(value: Any) -> float:
    """Parse ``4.5``, ``"4.5 out of 5 stars"`` or ``{"average": 4.5}``."""
    if isinstance(value, dict):
        value = value.get("average") or value.get("value")
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        rating = _finite(value)
    else:
        match = _NUMBER_RE.search(str(value))
        rating = _finite(match.group()) if match else None
    if rating is None:
        return 0.0
    return min(max(rating, 0.0), 5.0)


def parse_review_count(value: Any) -> int:
    """Parse ``1234``, ``"(1,234)"`` or ``"1,234 ratings"``."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        count = _finite(value)
    else:
        match = _NUMBER_RE.search(str(value).replace(",", ""))
        count = _finite(match.group()) if match else None
    return max(int(count), 0) if count is not None else 0


def extract_brand(title: str) -> str:
    """Best-effort brand from a title: known brand, else first word."""
    lower = title.lower()
    for brand in Settings.KNOWN_BRANDS:
        if brand.lower() in lower:
            return brand
    words = title.split()
    return words[0] if words else "Generic"


def categorize_product(title: str) -> str:
    """Best-effort category from title keywords."""
    lower = title.lower()
    for category, keywords in Settings.CATEGORY_KEYWORDS:
        if any(kw in lower for kw in keywords):
            return category
    return Settings.DEFAULT_CATEGORY
