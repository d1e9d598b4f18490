# tests/conftest.py

"""Shared pytest fixtures for the shopscout test suite."""

from collections.abc import Generator
from pathlib import Path

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_logs_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Write per-run log files under a temp dir instead of the repo."""
    original = Settings.LOGS_DIR
    Settings.LOGS_DIR = tmp_path / "logs"
    yield Settings.LOGS_DIR
    Settings.LOGS_DIR = original
