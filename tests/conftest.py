"""
Pytest configuration and fixtures for cargo-newdeps tests.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator

import pytest

from cargo_newdeps.config import reset_config

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_config_env() -> Generator[None, None, None]:
    """Keep CARGO_NEWDEPS_* variables and the config singleton out of tests."""
    original = {k: v for k, v in os.environ.items() if k.startswith("CARGO_NEWDEPS_")}
    for key in original:
        del os.environ[key]
    reset_config()

    yield

    reset_config()
    for key in [k for k in os.environ if k.startswith("CARGO_NEWDEPS_")]:
        del os.environ[key]
    os.environ.update(original)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def main_json(fixtures_dir: Path) -> Path:
    """Snapshot of the workspace before the router upgrade."""
    return fixtures_dir / "main.json"


@pytest.fixture
def router_3_json(fixtures_dir: Path) -> Path:
    """Snapshot of the workspace after upgrading router to 3.x."""
    return fixtures_dir / "router-3.json"


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Drop handlers the CLI attaches so they do not outlive a test's streams."""
    yield
    package_logger = logging.getLogger("cargo_newdeps")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
