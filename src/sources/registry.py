# src/sources/registry.py

"""Country locale lookup and production source wiring."""

import importlib
import logging
from dataclasses import dataclass, field
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import UnsupportedCountryError
from src.models.listing import Platform
from src.sources.base_source import BaseSource, SourceContext
from src.sources.paapi_source import PaapiCredentials, PaapiSource
from src.sources.rainforest_source import RainforestSource

logger = logging.getLogger("shopscout.registry")

# Source entry keys that are not locale options
_RESERVED_KEYS = frozenset({"id", "label", "domain", "source"})


@dataclass(frozen=True)
class Locale:
    """Currency and enabled sources for one country."""

    code: str
    name: str
    currency: str
    currency_symbol: str
    sources: list[dict[str, str]] = field(
        default_factory=lambda: list[dict[str, str]]()
    )


def resolve_locale(country_code: str) -> Locale:
    """Look up a country in ``Settings.COUNTRIES``.

    Raises UnsupportedCountryError for unknown codes.
    """
    code = (country_code or "").strip().upper()
    entry: dict[str, Any] | None = Settings.COUNTRIES.get(code)
    if entry is None:
        raise UnsupportedCountryError(country_code)
    return Locale(
        code=code,
        name=entry["name"],
        currency=entry["currency"],
        currency_symbol=entry["currency_symbol"],
        sources=list(entry["sources"]),
    )


def _load_source_class(dotted_path: str) -> type[BaseSource]:
    """Dynamically import a source class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[BaseSource] = getattr(module, class_name)
    return cls


def build_context(locale: Locale, entry: dict[str, str]) -> SourceContext:
    """Build the locale-bound context for one source entry."""
    return SourceContext(
        source_id=entry["id"],
        label=entry["label"],
        platform=Platform(
            id=entry["id"],
            name=entry["label"],
            domain=entry["domain"],
        ),
        country_code=locale.code,
        currency=locale.currency,
        currency_symbol=locale.currency_symbol,
        options={
            k: v for k, v in entry.items() if k not in _RESERVED_KEYS
        },
    )


class SourceRegistry:
    """Builds production source adapters around an injected HTTP session."""

    def __init__(
        self,
        session: curl_requests.AsyncSession,
        rainforest_api_key: str | None = None,
        paapi_credentials: PaapiCredentials | None = None,
    ) -> None:
        self.session = session
        self.rainforest_api_key = (
            Settings.RAINFOREST_API_KEY
            if rainforest_api_key is None
            else rainforest_api_key
        )
        self.paapi_credentials = (
            paapi_credentials or PaapiCredentials.from_settings()
        )

    def sources_for(self, country_code: str) -> list[BaseSource]:
        """Instantiate every enabled source for *country_code*.

        Rainforest-backed sources are skipped when no API key is set,
        PA-API sources when the associate credentials are incomplete.
        """
        locale = resolve_locale(country_code)
        sources: list[BaseSource] = []
        for entry in locale.sources:
            cls = _load_source_class(entry["source"])
            context = build_context(locale, entry)
            if issubclass(cls, RainforestSource):
                if not self.rainforest_api_key:
                    logger.warning(
                        "Skipping %s: RAINFOREST_API_KEY is not set",
                        entry["label"],
                    )
                    continue
                sources.append(
                    cls(context, self.session, self.rainforest_api_key)
                )
            elif issubclass(cls, PaapiSource):
                if self.paapi_credentials is None:
                    logger.info(
                        "Skipping %s: PA-API credentials are not set",
                        entry["label"],
                    )
                    continue
                sources.append(
                    cls(context, self.session, self.paapi_credentials)
                )
            else:
                sources.append(cls(context, self.session))

        logger.debug(
            "Built %d sources for %s: %s",
            len(sources),
            locale.code,
            ", ".join(s.label for s in sources),
        )
        return sources
