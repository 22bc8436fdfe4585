"""
================================================================================
Root Pytest Configuration
================================================================================

This module provides the pytest configuration for the entire test suite.
It registers common markers and tags tests by the directory they live in.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - core contract and assertions"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - interactions and instrumentation"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "unit: In-process tests that need no browser"
    )
    config.addinivalue_line(
        "markers", "e2e: Tests driving a real Chromium page"
    )

    # Substrate markers
    config.addinivalue_line(
        "markers", "local: Exercises the Local (in-process document) substrate"
    )
    config.addinivalue_line(
        "markers", "remote: Exercises the Remote (Playwright) substrate"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "accessibility: Accessible name, ARIA, keyboard and contrast checks"
    )
    config.addinivalue_line(
        "markers", "instrumentation: Mutation tracking and performance heuristics"
    )
    config.addinivalue_line(
        "markers", "workflow: Multi-step workflow execution"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify collected test items.

    Adds the suite marker from the directory a test lives in, so
    ``-m unit`` and ``-m e2e`` work without per-file decoration.
    """
    for item in items:
        path = str(item.fspath)

        if "/unit/" in path:
            item.add_marker(pytest.mark.unit)

        if "/e2e/" in path:
            item.add_marker(pytest.mark.e2e)
            item.add_marker(pytest.mark.remote)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Unified DOM Testing Harness",
        "=" * 60,
        "",
    ]
