# src/config/logging_config.py

"""Per-run timestamped logging configuration for shopscout.

Every CLI invocation writes a dedicated log file into ``logs/`` named
after the launch time (``logs/run_20260214_153045.log``).  The whole
``shopscout.*`` logger tree (one child per source, plus orchestrator,
scoring, filters and cli) routes through that single file handler.

Only WARNING and above reach stderr, so JSON written to stdout by the
CLI stays machine-readable.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Transport libraries log every connection at DEBUG
_NOISY_LOGGERS: tuple[str, ...] = ("urllib3", "charset_normalizer", "asyncio")


def setup_logging(console_level: int = logging.WARNING) -> Path:
    """Initialise the root ``shopscout`` logger for the current run.

    Args:
        console_level: Minimum level echoed to stderr.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    root_logger = logging.getLogger("shopscout")
    root_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, embedding callers) keep the first handlers
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info("Logging initialised, log file: %s", log_file)

    return log_file
