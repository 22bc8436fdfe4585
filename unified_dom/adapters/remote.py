"""
================================================================================
Remote Substrate Adapter
================================================================================

Implements the capability contract against a Playwright locator.

Reads are probed with short timeouts so that a missing element reports
"not visible" / "not attached" instead of hanging; assertions poll those
reads up to the settle window (``timeouts.remote_settle``).

The Remote wrapper also implements the operations only a real browser can
perform: focus state, checked state, computed style, geometry, pointer
variants, screenshots and waits.

Usage:
    >>> button = create_remote_assertions(page, "[data-testid='submit']")
    >>> await button.to_be_visible()
    >>> await button.to_have_bounding_box(0, 0, 120, 32)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..common.config_loader import get_config
from ..common.reporting import attach_png
from ..core.assertions import MismatchHandler, UnifiedDOMAssertions
from ..core.contract import BoundingBox, DOMElement, Substrate
from .visual import baseline_path, count_diff_pixels


_VISIBLE_JS = """el => {
    const style = window.getComputedStyle(el);
    return style.display !== 'none'
        && style.visibility !== 'hidden'
        && parseFloat(style.opacity) !== 0;
}"""

_FOCUSED_JS = "el => el === el.ownerDocument.activeElement"

_COMPUTED_STYLE_JS = "(el, prop) => window.getComputedStyle(el).getPropertyValue(prop)"

_OUTER_HTML_JS = "el => el.outerHTML"

# Pixel tolerance when comparing bounding boxes (sub-pixel layout rounding)
BOX_TOLERANCE = 0.5


def _ms(seconds: float) -> float:
    return seconds * 1000


class PlaywrightDOMElement(DOMElement):
    """Element handle backed by a Playwright :class:`Locator`."""

    substrate = Substrate.REMOTE

    def __init__(self, locator: Locator, settle_timeout: Optional[float] = None):
        self.locator = locator
        self.settle_timeout = (
            get_config("timeouts.remote_settle", 5.0) if settle_timeout is None else settle_timeout
        )
        self.probe_timeout = get_config("timeouts.remote_probe", 0.1)
        self.read_timeout = get_config("timeouts.remote_read", 1.0)

    def __repr__(self) -> str:
        return f"PlaywrightDOMElement({self.locator!r})"

    @property
    def page(self) -> Page:
        return self.locator.page

    async def is_visible(self) -> bool:
        try:
            return bool(await self.locator.evaluate(_VISIBLE_JS, timeout=_ms(self.probe_timeout)))
        except PlaywrightTimeoutError:
            return False

    async def is_attached(self) -> bool:
        try:
            await self.locator.wait_for(state="attached", timeout=_ms(self.probe_timeout))
            return True
        except PlaywrightTimeoutError:
            return False

    async def get_text_content(self) -> str:
        return await self.locator.text_content(timeout=_ms(self.read_timeout)) or ""

    async def get_attribute(self, name: str) -> Optional[str]:
        return await self.locator.get_attribute(name, timeout=_ms(self.read_timeout))

    async def click(self) -> None:
        logger.debug(f"Remote click: {self.locator}")
        await self.locator.click()

    async def focus(self) -> None:
        await self.locator.focus()

    async def type(self, text: str) -> None:
        await self.locator.fill(text)


class PlaywrightDOMAssertions(UnifiedDOMAssertions):
    """Assertions for the Remote substrate, including browser-only operations."""

    def __init__(
        self,
        element: PlaywrightDOMElement,
        on_mismatch: Optional[MismatchHandler] = None,
        snapshot_dir: Optional[Path] = None,
    ):
        super().__init__(Substrate.REMOTE, element, on_mismatch)
        self.snapshot_dir = Path(snapshot_dir or get_config("visual.snapshot_dir", "__screenshots__"))

    @property
    def locator(self) -> Locator:
        return self._element.locator

    def _timeout_ms(self, timeout: Optional[float]) -> float:
        return _ms(self._element.settle_timeout if timeout is None else timeout)

    # =========================================================================
    # Browser-only assertions
    # =========================================================================

    async def to_be_focused(self) -> None:
        await self._expect(
            "to_be_focused", True,
            lambda: self.locator.evaluate(_FOCUSED_JS, timeout=_ms(self._element.read_timeout)),
            lambda v: v is True,
        )

    async def to_be_checked(self) -> None:
        await self._expect(
            "to_be_checked", True,
            lambda: self.locator.is_checked(timeout=_ms(self._element.read_timeout)),
            lambda v: v is True,
        )

    async def not_to_be_checked(self) -> None:
        await self._expect(
            "not_to_be_checked", False,
            lambda: self.locator.is_checked(timeout=_ms(self._element.read_timeout)),
            lambda v: v is False,
        )

    async def to_have_style(self, style: Dict[str, str]) -> None:
        """Every property in ``style`` must equal its computed value."""
        for prop, value in style.items():
            await self._expect(
                f"to_have_style({prop})", value,
                lambda prop=prop: self.get_computed_style(prop),
                lambda v, value=value: v == value,
            )

    async def to_have_bounding_box(self, x: float, y: float, width: float, height: float) -> None:
        expected = BoundingBox(x, y, width, height)

        def matches(box: Optional[BoundingBox]) -> bool:
            if box is None:
                return False
            return all(
                abs(getattr(box, f) - getattr(expected, f)) <= BOX_TOLERANCE
                for f in ("x", "y", "width", "height")
            )

        await self._expect("to_have_bounding_box", expected, self.get_bounding_box, matches)

    async def to_have_screenshot(self, name: str, threshold: float = 0.0, max_diff_pixels: int = 0) -> None:
        """
        Compare the element's screenshot against a stored baseline.

        The first run for ``name`` records the baseline and passes.
        """
        actual = await self.locator.screenshot()
        baseline = baseline_path(self.snapshot_dir, name)

        if not baseline.exists():
            baseline.parent.mkdir(parents=True, exist_ok=True)
            baseline.write_bytes(actual)
            logger.info(f"Recorded screenshot baseline: {baseline}")
            return

        diff_pixels = count_diff_pixels(baseline.read_bytes(), actual, threshold)
        if diff_pixels > max_diff_pixels:
            attach_png(actual, name=f"{name} (actual)")
            self._on_mismatch(
                f"to_have_screenshot({name})",
                f"<= {max_diff_pixels} differing pixels",
                diff_pixels,
            )

    # =========================================================================
    # Pointer and keyboard
    # =========================================================================

    async def hover(self) -> None:
        await self.locator.hover()

    async def double_click(self) -> None:
        await self.locator.dblclick()

    async def right_click(self) -> None:
        await self.locator.click(button="right")

    async def select_text(self) -> None:
        await self.locator.select_text()

    async def clear(self) -> None:
        await self.locator.clear()

    async def type_with_keyboard(self, text: str, delay: float = 0) -> None:
        """Type ``text`` key by key, pausing ``delay`` seconds between keys."""
        await self.locator.press_sequentially(text, delay=_ms(delay))

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_bounding_box(self) -> Optional[BoundingBox]:
        box = await self.locator.bounding_box(timeout=_ms(self._element.read_timeout))
        if box is None:
            return None
        return BoundingBox(box["x"], box["y"], box["width"], box["height"])

    async def get_computed_style(self, prop: str) -> str:
        return await self.locator.evaluate(_COMPUTED_STYLE_JS, prop, timeout=_ms(self._element.read_timeout))

    async def get_inner_html(self) -> str:
        return await self.locator.inner_html(timeout=_ms(self._element.read_timeout))

    async def get_outer_html(self) -> str:
        return await self.locator.evaluate(_OUTER_HTML_JS, timeout=_ms(self._element.read_timeout))

    async def scroll_into_view(self) -> None:
        await self.locator.scroll_into_view_if_needed()

    async def screenshot(self, path: Optional[str] = None) -> bytes:
        return await self.locator.screenshot(path=path)

    # =========================================================================
    # Waits
    # =========================================================================

    async def wait_for_visible(self, timeout: Optional[float] = None) -> None:
        await self.locator.wait_for(state="visible", timeout=self._timeout_ms(timeout))

    async def wait_for_hidden(self, timeout: Optional[float] = None) -> None:
        await self.locator.wait_for(state="hidden", timeout=self._timeout_ms(timeout))

    async def wait_for_detached(self, timeout: Optional[float] = None) -> None:
        await self.locator.wait_for(state="detached", timeout=self._timeout_ms(timeout))


def create_remote_assertions(
    page: Page,
    selector: str,
    on_mismatch: Optional[MismatchHandler] = None,
) -> PlaywrightDOMAssertions:
    """
    Create assertions for ``selector`` on a live page.

    The locator is lazy: nothing is resolved until the first operation.
    """
    return PlaywrightDOMAssertions(PlaywrightDOMElement(page.locator(selector).first), on_mismatch)


def wrap_locator(locator: Locator, on_mismatch: Optional[MismatchHandler] = None) -> PlaywrightDOMAssertions:
    """Create assertions around an existing locator."""
    return PlaywrightDOMAssertions(PlaywrightDOMElement(locator), on_mismatch)


__all__ = [
    "PlaywrightDOMAssertions",
    "PlaywrightDOMElement",
    "create_remote_assertions",
    "wrap_locator",
]
