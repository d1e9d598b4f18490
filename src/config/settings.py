# src/config/settings.py

"""Central configuration for the shopscout ranking engine."""

import os
from pathlib import Path
from typing import Any

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the shopscout ranking engine."""

    # --- Providers ---
    RAINFOREST_API_KEY: str = os.getenv("RAINFOREST_API_KEY", "")
    RAINFOREST_BASE_URL: str = "https://api.rainforestapi.com/request"
    # Amazon Product Advertising API 5.0 (all three must be set)
    PAAPI_ACCESS_KEY: str = os.getenv("PAAPI_ACCESS_KEY", "")
    PAAPI_SECRET_KEY: str = os.getenv("PAAPI_SECRET_KEY", "")
    PAAPI_PARTNER_TAG: str = os.getenv("PAAPI_PARTNER_TAG", "")
    PAAPI_SERVICE: str = "ProductAdvertisingAPI"
    PAAPI_ITEM_COUNT: int = 10          # SearchItems maximum per page
    PAAPI_RESOURCES: list[str] = [
        "Images.Primary.Large",
        "Images.Variants.Large",
        "ItemInfo.Title",
        "ItemInfo.ByLineInfo",
        "ItemInfo.Features",
        "ItemInfo.Classifications",
        "Offers.Listings.Price",
        "Offers.Listings.SavingBasis",
        "Offers.Listings.Availability.Message",
        "Offers.Listings.Availability.Type",
        "Offers.Listings.DeliveryInfo.IsFreeShippingEligible",
        "Offers.Listings.DeliveryInfo.IsPrimeEligible",
        "Offers.Listings.MerchantInfo",
        "Offers.Summaries.HighestPrice",
        "Offers.Summaries.LowestPrice",
        "CustomerReviews.Count",
        "CustomerReviews.StarRating",
    ]

    # --- Fetching ---
    REQUEST_TIMEOUT: int = 15           # Seconds before one source request times out
    SEARCH_TIMEOUT: float = 30.0        # Seconds before the whole fan-out is abandoned
    MAX_ITEMS_PER_SOURCE: int = 40      # Raw items kept from each source response
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Query validation ---
    MIN_QUERY_LENGTH: int = 1
    MAX_QUERY_LENGTH: int = 200
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # --- Scoring ---
    SCORE_WEIGHTS: dict[str, float] = {
        "relevance": 0.35,
        "authenticity": 0.25,
        "price": 0.25,
        "availability": 0.15,
    }
    PLATFORM_REPUTATION: dict[str, int] = {
        "amazon": 25,
        "noon": 20,
    }
    DEFAULT_PLATFORM_REPUTATION: int = 15

    # --- Inference ---
    KNOWN_BRANDS: list[str] = [
        "Apple", "Samsung", "Sony", "LG", "Nike", "Adidas", "Canon",
        "Nikon", "Dell", "HP", "Lenovo", "ASUS", "Acer", "Microsoft",
        "Google", "Amazon", "Huawei", "Xiaomi", "OnePlus", "Oppo",
        "Vivo", "Realme", "Honor",
    ]
    # First matching keyword wins, so order matters
    CATEGORY_KEYWORDS: list[tuple[str, list[str]]] = [
        ("Smartphones", ["phone", "iphone", "samsung"]),
        ("Laptops", ["laptop", "macbook", "computer"]),
        ("Audio", ["headphone", "earphone", "audio"]),
        ("Wearables", ["watch"]),
        ("Cameras", ["camera", "photography"]),
        ("Tablets", ["tablet", "ipad"]),
        ("Footwear", ["shoe", "sneaker", "boot"]),
    ]
    DEFAULT_CATEGORY: str = "Electronics"
    PRICE_BUCKETS: list[tuple[float, float]] = [
        (0, 100),
        (100, 500),
        (500, 1000),
        (1000, float("inf")),
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Locales (country code -> currency and enabled sources) ---
    COUNTRIES: dict[str, dict[str, Any]] = {
        "EG": {
            "name": "Egypt",
            "currency": "EGP",
            "currency_symbol": "ج.م",
            "sources": [
                {
                    "id": "amazon_eg",
                    "label": "Amazon Egypt",
                    "domain": "amazon.eg",
                    "source": "src.sources.rainforest_source.RainforestSource",
                },
                {
                    "id": "amazon_paapi_eg",
                    "label": "Amazon Egypt (PA-API)",
                    "domain": "amazon.eg",
                    "host": "webservices.amazon.eg",
                    "region": "eu-west-1",
                    "language": "en_AE",
                    "source": "src.sources.paapi_source.PaapiSource",
                },
                {
                    "id": "noon_eg",
                    "label": "Noon Egypt",
                    "domain": "noon.com",
                    "locale": "en-eg",
                    "path": "egypt-en",
                    "source": "src.sources.noon_source.NoonSource",
                },
                {
                    "id": "jumia_eg",
                    "label": "Jumia Egypt",
                    "domain": "jumia.com.eg",
                    "source": "src.sources.jumia_source.JumiaSource",
                },
            ],
        },
        "AE": {
            "name": "United Arab Emirates",
            "currency": "AED",
            "currency_symbol": "د.إ",
            "sources": [
                {
                    "id": "amazon_ae",
                    "label": "Amazon UAE",
                    "domain": "amazon.ae",
                    "source": "src.sources.rainforest_source.RainforestSource",
                },
                {
                    "id": "amazon_paapi_ae",
                    "label": "Amazon UAE (PA-API)",
                    "domain": "amazon.ae",
                    "host": "webservices.amazon.ae",
                    "region": "eu-west-1",
                    "language": "en_AE",
                    "source": "src.sources.paapi_source.PaapiSource",
                },
                {
                    "id": "noon_ae",
                    "label": "Noon UAE",
                    "domain": "noon.com",
                    "locale": "en-ae",
                    "path": "uae-en",
                    "source": "src.sources.noon_source.NoonSource",
                },
            ],
        },
        "SA": {
            "name": "Saudi Arabia",
            "currency": "SAR",
            "currency_symbol": "ر.س",
            "sources": [
                {
                    "id": "amazon_sa",
                    "label": "Amazon Saudi Arabia",
                    "domain": "amazon.sa",
                    "source": "src.sources.rainforest_source.RainforestSource",
                },
                {
                    "id": "amazon_paapi_sa",
                    "label": "Amazon Saudi Arabia (PA-API)",
                    "domain": "amazon.sa",
                    "host": "webservices.amazon.sa",
                    "region": "eu-west-1",
                    "language": "en_AE",
                    "source": "src.sources.paapi_source.PaapiSource",
                },
                {
                    "id": "noon_sa",
                    "label": "Noon Saudi Arabia",
                    "domain": "noon.com",
                    "locale": "en-sa",
                    "path": "saudi-en",
                    "source": "src.sources.noon_source.NoonSource",
                },
            ],
        },
        "US": {
            "name": "United States",
            "currency": "USD",
            "currency_symbol": "$",
            "sources": [
                {
                    "id": "amazon_us",
                    "label": "Amazon US",
                    "domain": "amazon.com",
                    "source": "src.sources.rainforest_source.RainforestSource",
                },
                {
                    "id": "amazon_paapi_us",
                    "label": "Amazon US (PA-API)",
                    "domain": "amazon.com",
                    "host": "webservices.amazon.com",
                    "region": "us-east-1",
                    "language": "en_US",
                    "source": "src.sources.paapi_source.PaapiSource",
                },
                {
                    "id": "walmart_us",
                    "label": "Walmart US",
                    "domain": "walmart.com",
                    "source": "src.sources.walmart_source.WalmartSource",
                },
            ],
        },
        "GB": {
            "name": "United Kingdom",
            "currency": "GBP",
            "currency_symbol": "£",
            "sources": [
                {
                    "id": "amazon_uk",
                    "label": "Amazon UK",
                    "domain": "amazon.co.uk",
                    "source": "src.sources.rainforest_source.RainforestSource",
                },
                {
                    "id": "amazon_paapi_uk",
                    "label": "Amazon UK (PA-API)",
                    "domain": "amazon.co.uk",
                    "host": "webservices.amazon.co.uk",
                    "region": "eu-west-1",
                    "language": "en_GB",
                    "source": "src.sources.paapi_source.PaapiSource",
                },
                {
                    "id": "argos_uk",
                    "label": "Argos UK",
                    "domain": "argos.co.uk",
                    "source": "src.sources.argos_source.ArgosSource",
                },
            ],
        },
    }
