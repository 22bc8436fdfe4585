"""
Repository-level pytest configuration.

Keeps every test on the same footing:
  - configuration is reloaded from config/config.yaml for each test, so a
    test that points the loader at its own YAML cannot leak into the next
  - loguru is configured once per session from that configuration
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from unified_dom.common.config_loader import ConfigLoader
from unified_dom.common.global_config import init_logger


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _session_logging() -> Generator[None, None, None]:
    init_logger(level="DEBUG")
    yield


@pytest.fixture(autouse=True)
def _fresh_config() -> Generator[None, None, None]:
    """Drop the configuration singleton before and after each test."""
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()
