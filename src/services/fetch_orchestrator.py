# src/services/fetch_orchestrator.py

"""Concurrent fan-out of one query to every configured source."""

import asyncio
import logging
from collections.abc import Sequence

from src.config.settings import Settings
from src.models.errors import AdapterParseError, SourceFetchError
from src.models.listing import NormalizedListing
from src.models.search import FetchOutcome, SourceError
from src.sources.base_source import BaseSource

logger = logging.getLogger("shopscout.orchestrator")


class FetchOrchestrator:
    """Dispatch sources concurrently and collect whatever settles.

    Every source runs as its own task on the event loop.  The call
    waits for all of them (or the overall timeout), never failing fast:
    one source's failure is recorded as a :class:`SourceError` and the
    rest still contribute listings.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = (
            Settings.SEARCH_TIMEOUT if timeout is None else timeout
        )

    async def fetch_all(
        self,
        query: str,
        sources: Sequence[BaseSource],
    ) -> FetchOutcome:
        """Query every source and merge the normalized listings.

        Sources still running when the timeout elapses are cancelled and
        reported as timed out.  If the caller's task is cancelled, all
        in-flight fetches are cancelled with it.
        """
        outcome = FetchOutcome(
            sources_queried=[s.label for s in sources]
        )
        if not sources:
            return outcome

        tasks: list[tuple[BaseSource, asyncio.Task[list[NormalizedListing]]]] = [
            (
                source,
                asyncio.create_task(
                    source.search(query),
                    name=f"fetch:{source.source_id}",
                ),
            )
            for source in sources
        ]

        try:
            _done, pending = await asyncio.wait(
                [task for _, task in tasks], timeout=self.timeout
            )
        finally:
            # Covers both the timeout and cancellation of the caller
            for _, task in tasks:
                if not task.done():
                    task.cancel()

        if pending:
            logger.warning(
                "Search timeout (%.1fs) cancelled %d source(s) for '%s'",
                self.timeout,
                len(pending),
                query,
            )

        # Merge on this task only, in configured source order
        for source, task in tasks:
            if task in pending:
                outcome.errors.append(
                    SourceError(
                        source.label,
                        f"timed out after {self.timeout:g}s",
                    )
                )
                continue
            if task.cancelled():
                outcome.errors.append(SourceError(source.label, "cancelled"))
                continue

            exc = task.exception()
            if exc is None:
                outcome.listings.extend(task.result())
                outcome.succeeded += 1
            else:
                outcome.errors.append(self._to_source_error(source, exc))

        logger.info(
            "Fetched %d listings for '%s' from %d/%d sources",
            len(outcome.listings),
            query,
            outcome.succeeded,
            len(sources),
        )
        return outcome

    @staticmethod
    def _to_source_error(
        source: BaseSource, exc: BaseException,
    ) -> SourceError:
        """Record one source failure with the matching log severity."""
        if isinstance(exc, (SourceFetchError, AdapterParseError)):
            logger.warning("Source %s failed: %s", source.label, exc.message)
            return SourceError(source.label, exc.message)

        logger.error(
            "Unexpected error from source %s: %s",
            source.label,
            exc,
            exc_info=exc,
        )
        return SourceError(
            source.label, f"{type(exc).__name__}: {exc}"
        )
