# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import unittest

from src.config.logging_config import setup_logging


def _close_handlers() -> None:
    root_logger = logging.getLogger("shopscout")
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        _close_handlers()

    def tearDown(self) -> None:
        _close_handlers()

    def test_setup_creates_log_file(self) -> None:
        """setup_logging returns a path that exists on disk."""
        log_path = setup_logging()
        self.assertTrue(log_path.exists())

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging()
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_file_and_console_levels(self) -> None:
        """File handler logs DEBUG; stderr only WARNING and above."""
        setup_logging()
        root_logger = logging.getLogger("shopscout")
        file_handlers = [
            h for h in root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        stream_handlers = [
            h for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)
        self.assertEqual(stream_handlers[0].level, logging.WARNING)

    def test_console_level_is_configurable(self) -> None:
        setup_logging(console_level=logging.INFO)
        root_logger = logging.getLogger("shopscout")
        stream_handlers = [
            h for h in root_logger.handlers
            if not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(stream_handlers[0].level, logging.INFO)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        """Calling setup_logging twice does not duplicate handlers."""
        setup_logging()
        root_logger = logging.getLogger("shopscout")
        count_before = len(root_logger.handlers)
        setup_logging()
        self.assertEqual(len(root_logger.handlers), count_before)

    def test_root_logger_level_is_debug(self) -> None:
        setup_logging()
        self.assertEqual(
            logging.getLogger("shopscout").level, logging.DEBUG
        )

    def test_child_logger_records_reach_file(self) -> None:
        """Per-source loggers propagate into the run's log file."""
        log_path = setup_logging()
        logging.getLogger("shopscout.noon_ae").info("hello from noon")
        for handler in logging.getLogger("shopscout").handlers:
            handler.flush()
        self.assertIn("hello from noon", log_path.read_text("utf-8"))

    def test_log_file_inside_logs_dir(self) -> None:
        log_path = setup_logging()
        self.assertEqual(log_path.parent.name, "logs")


if __name__ == "__main__":
    unittest.main()
