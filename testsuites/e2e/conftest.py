"""
================================================================================
E2E Pytest Configuration
================================================================================

Fixtures for tests that drive a real browser page.

- A browser is launched per test (fixtures share the function-scoped event
  loop); when no browser is installed the test is skipped, not failed.
- Pages are filled with ``page.set_content`` so no server is needed.
- A screenshot is attached to the Allure report when a test fails.

================================================================================
"""

from typing import AsyncGenerator

import allure
import pytest
from loguru import logger
from playwright.async_api import Error as PlaywrightError, Page

from testsuites.e2e.browser_manager import BrowserManager


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    manager = BrowserManager()
    try:
        await manager.start()
    except PlaywrightError as e:
        pytest.skip(f"Browser not available: {e}")
    yield manager
    await manager.close()


@pytest.fixture
async def page(request, browser_manager: BrowserManager) -> AsyncGenerator[Page, None]:
    """Fresh page in its own context; screenshots itself if the test failed."""
    page = await browser_manager.new_page()
    yield page

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        try:
            allure.attach(
                await page.screenshot(full_page=True),
                name="failure_screenshot",
                attachment_type=allure.attachment_type.PNG,
            )
        except PlaywrightError as e:
            logger.warning(f"Failed to capture screenshot on failure: {e}")
    await page.close()


@pytest.fixture
def short_settle(monkeypatch):
    """Shorten remote polling so negative assertions fail fast."""
    monkeypatch.setenv("TIMEOUTS_REMOTE_SETTLE", "0.5")
    monkeypatch.setenv("TIMEOUTS_REMOTE_LOOKUP", "0.5")


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep the call-phase report on the item for fixture teardown."""
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        item.rep_call = report
