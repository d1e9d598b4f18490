# main.py

"""Entry point for the shopscout headless search CLI."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings
from src.models.search import PriceRange, SearchFilters, SearchQuery, SortBy

logger = logging.getLogger("shopscout.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    countries = ", ".join(
        f"{code} ({entry['name']})"
        for code, entry in Settings.COUNTRIES.items()
    )

    parser = argparse.ArgumentParser(
        prog="shopscout",
        description="Multi-marketplace product search and ranking.",
        epilog=f"Supported countries: {countries}",
    )
    parser.add_argument("query", help="Product search query.")
    parser.add_argument(
        "-c",
        "--country",
        default="AE",
        help="Country code selecting currency and sources (default: AE).",
    )
    parser.add_argument(
        "-s",
        "--sort",
        choices=[s.value for s in SortBy],
        default=SortBy.RELEVANCE.value,
        help="Result ordering (default: relevance).",
    )
    parser.add_argument(
        "--min-price", type=float, default=0.0, dest="min_price",
    )
    parser.add_argument(
        "--max-price", type=float, default=float("inf"), dest="max_price",
    )
    parser.add_argument(
        "--min-rating", type=float, default=0.0, dest="min_rating",
    )
    parser.add_argument(
        "--in-stock",
        action="store_true",
        default=False,
        dest="in_stock",
        help="Only show listings that are fully in stock.",
    )
    parser.add_argument("--category", default=None)
    parser.add_argument("--brand", default=None)
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument(
        "--page-size",
        type=int,
        default=Settings.DEFAULT_PAGE_SIZE,
        dest="page_size",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help=(
            "Overall fan-out timeout in seconds "
            f"(default: {Settings.SEARCH_TIMEOUT:g})."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Echo INFO logs to stderr.",
    )
    return parser


def build_query(args: argparse.Namespace) -> SearchQuery:
    """Translate parsed CLI arguments into a SearchQuery."""
    return SearchQuery(
        text=args.query,
        country_code=args.country,
        filters=SearchFilters(
            price_range=PriceRange(min=args.min_price, max=args.max_price),
            min_rating=args.min_rating,
            in_stock_only=args.in_stock,
            sort_by=SortBy(args.sort),
            category=args.category,
            brand=args.brand,
        ),
        page=args.page,
        page_size=args.page_size,
    )


def main() -> None:
    """Parse arguments, run one search and exit with its status code."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(
        console_level=logging.INFO if args.verbose else logging.WARNING
    )
    logger.info("shopscout starting, log file: %s", log_file)

    from src.cli.runner import cli_search

    try:
        exit_code = asyncio.run(
            cli_search(
                build_query(args),
                output_format=args.output_format,
                timeout=args.timeout,
            )
        )
    except Exception:
        logger.critical("Fatal error during CLI run", exc_info=True)
        raise
    finally:
        logger.info("shopscout shutting down")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
