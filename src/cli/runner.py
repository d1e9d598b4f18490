# src/cli/runner.py

"""Headless CLI search runner built on the search service."""

import json
import logging
import sys
from collections.abc import Callable, Sequence

from curl_cffi.requests import AsyncSession
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.config.settings import Settings
from src.models.errors import InternalError, ValidationError
from src.models.listing import Availability, ScoredListing
from src.models.search import SearchQuery, SearchResult
from src.services.fetch_orchestrator import FetchOrchestrator
from src.services.search_service import SearchService
from src.sources.base_source import BaseSource
from src.sources.registry import SourceRegistry

logger = logging.getLogger("shopscout.cli")

EXIT_OK = 0
EXIT_NO_RESULTS = 1
EXIT_INVALID = 2

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_AVAILABILITY_LABELS: dict[Availability, str] = {
    Availability.IN_STOCK: "[green]in stock[/green]",
    Availability.LIMITED_STOCK: "[yellow]limited[/yellow]",
    Availability.OUT_OF_STOCK: "[red]out of stock[/red]",
}


def _print_table(result: SearchResult, listings: Sequence[ScoredListing]) -> None:
    """Render a Rich table of ranked listings to stdout."""
    table = Table(
        title=(
            f"Results for '{escape(result.query)}' ({result.country_code}) "
            f"page {result.page}"
        ),
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Stock", justify="center")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Source", style="magenta")
    table.add_column("URL", overflow="fold", style="dim")

    offset = (result.page - 1) * result.page_size
    for idx, scored in enumerate(listings, offset + 1):
        listing = scored.listing
        price_str = f"{listing.currency} {listing.price:,.2f}"
        if listing.discount:
            price_str += f"\n[dim]-{listing.discount}[/dim]"
        rating = (
            f"{listing.rating:.1f} ({listing.review_count:,})"
            if listing.rating
            else "-"
        )
        table.add_row(
            str(idx),
            escape(listing.title[:60]),
            price_str,
            rating,
            _AVAILABILITY_LABELS[listing.availability],
            f"{scored.overall_score:.1f}",
            escape(listing.platform.name),
            escape(listing.url),
        )

    Console().print(table)


def _report(result: SearchResult) -> None:
    """Summary and advisory errors go to stderr."""
    for error in result.errors:
        _err.print(
            f"[red]Error ({escape(error.source)}): "
            f"{escape(error.message)}[/red]"
        )
    if result.listings:
        more = " (more available)" if result.has_next else ""
        _err.print(
            f"[green]✓ {len(result.listings)} of {result.total_found} "
            f"listings in {result.elapsed_ms:.0f}ms{more}[/green]"
        )


async def run_search(
    query: SearchQuery,
    source_factory: Callable[[str], Sequence[BaseSource]],
    output_format: str = "json",
    timeout: float | None = None,
) -> int:
    """Run one search with the given sources and print the result.

    Returns an exit code: 0 with results, 1 without, 2 on invalid input.
    """
    service = SearchService(
        source_factory, orchestrator=FetchOrchestrator(timeout=timeout)
    )
    try:
        result = await service.search(query)
    except ValidationError as exc:
        logger.warning("Rejected search: %s", exc)
        _err.print(f"[red]Invalid search: {escape(str(exc))}[/red]")
        return EXIT_INVALID
    except InternalError as exc:
        _err.print(f"[red]Search failed: {escape(str(exc))}[/red]")
        return EXIT_NO_RESULTS

    _report(result)

    if output_format == "table":
        if result.listings:
            _print_table(result, result.listings)
    else:
        json.dump(
            result.to_dict(),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    if not result.listings:
        _err.print("[yellow]No listings found.[/yellow]")
        return EXIT_NO_RESULTS
    return EXIT_OK


async def cli_search(
    query: SearchQuery,
    output_format: str = "json",
    timeout: float | None = None,
) -> int:
    """Run a headless search against the live sources for the query's country."""
    _err.print(
        f"[bold]Searching:[/bold] {escape(query.text)}  "
        f"[dim]country={query.country_code.upper()}[/dim]"
    )
    async with AsyncSession(
        impersonate=Settings.IMPERSONATE_BROWSER
    ) as session:
        registry = SourceRegistry(session)
        return await run_search(
            query, registry.sources_for, output_format, timeout
        )
