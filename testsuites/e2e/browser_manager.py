"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle for the e2e suite.

Launch settings come from the ``browser`` section of config/config.yaml
(``BROWSER_HEADLESS=false`` shows the window). Every page gets its own
context so tests never share storage.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from unified_dom.common.config_loader import get_config


class BrowserManager:
    """
    Owns one Playwright browser and the contexts opened on it.

    Usage:
        async with BrowserManager() as manager:
            page = await manager.new_page()
            await page.set_content("<button>Go</button>")
    """

    DEFAULT_LAUNCH_ARGS: List[str] = [
        "--ignore-certificate-errors",
        "--disable-features=IsolateOrigins,site-per-process",
    ]

    def __init__(
        self,
        headless: Optional[bool] = None,
        browser_type: Optional[str] = None,
    ):
        self.headless = get_config("browser.headless", True) if headless is None else headless
        self.browser_type = browser_type or get_config("browser.type", "chromium")

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch the configured browser."""
        self._playwright = await async_playwright().start()

        if self.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        try:
            self._browser = await browser_launcher.launch(
                headless=self.headless,
                args=self.DEFAULT_LAUNCH_ARGS,
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug(f"Browser started: {self.browser_type} (headless={self.headless})")

    async def close(self) -> None:
        """Close all contexts, then the browser and Playwright."""
        for context in self._contexts:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Failed to close browser context: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create an isolated context.

        Raises:
            RuntimeError: If the browser has not been started
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options: Dict[str, Any] = {
            "viewport": {
                "width": get_config("browser.viewport_width", 1280),
                "height": get_config("browser.viewport_height", 720),
            },
            **options,
        }
        context = await self._browser.new_context(**context_options)
        self._contexts.append(context)
        return context

    async def new_page(self, context: Optional[BrowserContext] = None, **context_options: Any) -> Page:
        if context is None:
            context = await self.new_context(**context_options)
        return await context.new_page()

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


__all__ = ["BrowserManager"]
