# src/services/search_service.py

"""Single entry point: validate, fetch, score, filter, paginate."""

import logging
import time
from collections.abc import Callable, Sequence

from src.filters.listing_filter import ListingFilter
from src.filters.query_validator import QueryValidator
from src.models.errors import InternalError, UnsupportedCountryError
from src.models.search import SearchQuery, SearchResult, SourceError
from src.ranking.scoring_engine import ScoringEngine
from src.services.fetch_orchestrator import FetchOrchestrator
from src.services.result_assembler import AssemblyMeta, ResultAssembler
from src.sources.base_source import BaseSource

logger = logging.getLogger("shopscout.search")

ALL_SOURCES = "*"

SourceFactory = Callable[[str], Sequence[BaseSource]]


class SearchService:
    """Coordinates validation, fan-out, scoring, filtering and paging.

    *source_factory* maps a country code to the adapters to query; in
    production that is :meth:`SourceRegistry.sources_for`, in tests a
    function returning fake sources.
    """

    def __init__(
        self,
        source_factory: SourceFactory,
        orchestrator: FetchOrchestrator | None = None,
        scoring: ScoringEngine | None = None,
    ) -> None:
        self.source_factory = source_factory
        self.orchestrator = orchestrator or FetchOrchestrator()
        self.scoring = scoring or ScoringEngine()

    async def search(self, query: SearchQuery) -> SearchResult:
        """Run one complete search and return the requested page.

        Raises ValidationError (before any fetch) for bad input and
        InternalError for defects after fetching.  Source failures are
        reported in ``SearchResult.errors`` instead of raising.
        """
        query = QueryValidator.validate(query)
        sources = list(self.source_factory(query.country_code))
        if not sources:
            raise UnsupportedCountryError(query.country_code)

        context = sources[0].context
        started_at = time.monotonic()
        logger.info(
            "Searching '%s' in %s across %d sources",
            query.text,
            query.country_code,
            len(sources),
        )

        outcome = await self.orchestrator.fetch_all(query.text, sources)
        errors: list[SourceError] = list(outcome.errors)
        if outcome.all_failed:
            logger.error(
                "All %d sources failed for '%s'", len(sources), query.text
            )
            errors.append(
                SourceError(
                    ALL_SOURCES, f"All {len(sources)} sources failed"
                )
            )

        try:
            scored = self.scoring.score_batch(outcome.listings, query.text)
            ordered = ListingFilter.apply(scored, query.filters)
            return ResultAssembler.assemble(
                ordered,
                query.page,
                query.page_size,
                AssemblyMeta(
                    query=query.text,
                    country_code=query.country_code,
                    currency=context.currency,
                    currency_symbol=context.currency_symbol,
                    started_at=started_at,
                    sources_queried=outcome.sources_queried,
                    errors=errors,
                ),
            )
        except Exception as exc:
            logger.critical(
                "Ranking pipeline failed for '%s'", query.text, exc_info=True
            )
            raise InternalError(f"Ranking pipeline failed: {exc}") from exc
