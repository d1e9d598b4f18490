# src/models/errors.py

"""Exception hierarchy for the search pipeline."""


class SearchError(Exception):
    """Base class for every error raised by the search core."""


class ValidationError(SearchError):
    """Query or filters rejected before any source is contacted."""


class UnsupportedCountryError(ValidationError):
    """No sources are configured for the requested country."""

    def __init__(self, country_code: str) -> None:
        super().__init__(f"Unsupported country: {country_code!r}")
        self.country_code = country_code


class SourceFetchError(SearchError):
    """A single source could not be queried (network, timeout, HTTP status)."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class AdapterParseError(SearchError):
    """A raw item (or a whole source response) could not be normalized."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class InternalError(SearchError):
    """Unexpected defect after fetching; fails the whole search call."""
