# tests/test_runner.py

"""Tests for the headless CLI runner and argument parsing."""

import io
import json
import os
import unittest
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock, patch

from fake_source import FakeSource, make_item

from main import _build_parser, build_query
from src.cli.runner import (
    EXIT_INVALID,
    EXIT_NO_RESULTS,
    EXIT_OK,
    cli_search,
    run_search,
)
from src.models.errors import SourceFetchError
from src.models.search import SearchQuery, SortBy
from src.sources.base_source import BaseSource


def _factory(*sources: FakeSource) -> Callable[[str], list[BaseSource]]:
    return lambda _country: list(sources)


class TestRunSearch(unittest.IsolatedAsyncioTestCase):
    """run_search() prints results and maps outcomes to exit codes."""

    async def test_json_output(self) -> None:
        source = FakeSource("shop_a", [make_item("1", "Apple iPhone 15", 999)])
        with patch("sys.stdout", new_callable=io.StringIO) as stdout:
            code = await run_search(
                SearchQuery("iphone 15", "AE"), _factory(source), "json", 5
            )
        self.assertEqual(code, EXIT_OK)
        data = json.loads(stdout.getvalue())
        self.assertEqual(data["query"], "iphone 15")
        self.assertEqual(data["total_found"], 1)
        self.assertEqual(data["listings"][0]["id"], "shop_a:1")
        self.assertEqual(data["listings"][0]["price_competitiveness"], 50.0)

    async def test_table_output(self) -> None:
        source = FakeSource(
            "shop_a", [make_item("1", "Apple iPhone 15", 999, original_price=1099)]
        )
        with (
            patch.dict(os.environ, {"COLUMNS": "200"}),
            patch("sys.stdout", new_callable=io.StringIO) as stdout,
        ):
            code = await run_search(
                SearchQuery("iphone 15", "AE"), _factory(source), "table", 5
            )
        self.assertEqual(code, EXIT_OK)
        self.assertIn("Apple iPhone 15", stdout.getvalue())

    async def test_no_results_exit_code(self) -> None:
        failing = FakeSource("shop_a", error=SourceFetchError("Shop A", "HTTP 500"))
        with patch("sys.stdout", new_callable=io.StringIO) as stdout:
            code = await run_search(
                SearchQuery("iphone", "AE"), _factory(failing), "json", 5
            )
        self.assertEqual(code, EXIT_NO_RESULTS)
        data = json.loads(stdout.getvalue())
        self.assertEqual(data["errors"][-1]["source"], "*")

    async def test_invalid_query_exit_code(self) -> None:
        source = FakeSource("shop_a", [make_item("1", "Apple iPhone 15", 999)])
        with patch("sys.stdout", new_callable=io.StringIO) as stdout:
            code = await run_search(
                SearchQuery("   ", "AE"), _factory(source), "json", 5
            )
        self.assertEqual(code, EXIT_INVALID)
        self.assertEqual(stdout.getvalue(), "")
        self.assertEqual(source.calls, 0)


class TestCliSearch(unittest.IsolatedAsyncioTestCase):
    """cli_search() owns the HTTP session and the live registry."""

    @patch("src.cli.runner.run_search", new_callable=AsyncMock, return_value=0)
    @patch("src.cli.runner.AsyncSession")
    async def test_session_lifecycle(
        self, mock_session_cls: MagicMock, mock_run: AsyncMock,
    ) -> None:
        session = MagicMock()
        mock_session_cls.return_value.__aenter__.return_value = session

        code = await cli_search(SearchQuery("iphone", "eg"), "json", 3.0)

        self.assertEqual(code, 0)
        mock_session_cls.return_value.__aexit__.assert_awaited_once()
        query, factory, output_format, timeout = mock_run.await_args.args
        self.assertEqual(query.text, "iphone")
        self.assertEqual(factory.__self__.session, session)
        self.assertEqual((output_format, timeout), ("json", 3.0))

    async def test_unsupported_country_exit_code(self) -> None:
        code = await run_search(
            SearchQuery("iphone", "ZZ"),
            lambda country: [],
            "json",
            1,
        )
        self.assertEqual(code, EXIT_INVALID)


class TestArgumentParsing(unittest.TestCase):
    def test_defaults(self) -> None:
        args = _build_parser().parse_args(["iphone 15"])
        query = build_query(args)
        self.assertEqual(query.text, "iphone 15")
        self.assertEqual(query.country_code, "AE")
        self.assertEqual(query.filters.sort_by, SortBy.RELEVANCE)
        self.assertEqual(query.filters.price_range.max, float("inf"))
        self.assertEqual(args.output_format, "json")

    def test_all_options(self) -> None:
        args = _build_parser().parse_args([
            "iphone 15", "--country", "US", "--sort", "price_low",
            "--min-price", "100", "--max-price", "5000", "--min-rating", "4",
            "--in-stock", "--brand", "Apple", "--page", "2",
            "--page-size", "10", "--format", "table", "--timeout", "12",
        ])
        query = build_query(args)
        self.assertEqual(query.country_code, "US")
        self.assertEqual(query.filters.sort_by, SortBy.PRICE_LOW)
        self.assertEqual(query.filters.price_range.min, 100.0)
        self.assertEqual(query.filters.price_range.max, 5000.0)
        self.assertEqual(query.filters.min_rating, 4.0)
        self.assertTrue(query.filters.in_stock_only)
        self.assertEqual(query.filters.brand, "Apple")
        self.assertEqual((query.page, query.page_size), (2, 10))
        self.assertEqual(args.output_format, "table")
        self.assertEqual(args.timeout, 12.0)

    def test_invalid_sort_rejected(self) -> None:
        with patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                _build_parser().parse_args(["x", "--sort", "cheapest"])


if __name__ == "__main__":
    unittest.main()
