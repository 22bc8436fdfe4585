"""
================================================================================
Unified DOM Assertions
================================================================================

Consistent element assertions across substrates.

An assertion wrapper pairs a substrate tag with an element handle. Each
assertion is a thin predicate over one or two capability calls; against
the Remote substrate the read is polled until it matches or the element's
settle window expires, against the Local substrate it is evaluated once.

On mismatch the wrapper calls its ``on_mismatch`` handler, resolved at
construction, which by default raises :class:`AssertionMismatchError`.

Usage:
    >>> button = await find_by_test_id(document, "submit")
    >>> await button.to_be_visible()
    >>> await button.to_have_attribute("type", "submit")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, NoReturn, Optional

from loguru import logger

from ..common.config_loader import get_config
from ..common.wait_helpers import WaitConfig, poll_until
from .contract import BoundingBox, DOMElement, Substrate
from ..errors import AssertionMismatchError, UnsupportedOperationError


MismatchHandler = Callable[[str, Any, Any], NoReturn]


def raise_mismatch(predicate: str, expected: Any, actual: Any) -> NoReturn:
    """Default mismatch handler."""
    raise AssertionMismatchError(predicate, expected, actual)


def _class_list(value: Optional[str]) -> list:
    return (value or "").split()


class UnifiedDOMAssertions:
    """
    Substrate-neutral assertion wrapper.

    Operations that only the Remote substrate can perform are declared here
    and raise :class:`UnsupportedOperationError`; the Remote wrapper
    overrides them.
    """

    def __init__(
        self,
        substrate: Substrate,
        element: DOMElement,
        on_mismatch: Optional[MismatchHandler] = None,
    ):
        self._substrate = Substrate(substrate)
        self._element = element
        self._on_mismatch = on_mismatch or raise_mismatch

    @property
    def element(self) -> DOMElement:
        """The underlying element handle."""
        return self._element

    @property
    def environment(self) -> Substrate:
        """The substrate this wrapper was created for."""
        return self._substrate

    substrate = environment

    @property
    def on_mismatch(self) -> MismatchHandler:
        return self._on_mismatch

    async def _expect(
        self,
        predicate: str,
        expected: Any,
        read: Callable[[], Awaitable[Any]],
        check: Callable[[Any], bool],
        timeout: Optional[float] = None,
    ) -> None:
        window = self._element.settle_timeout if timeout is None else timeout
        if self._substrate is Substrate.LOCAL:
            window = 0.0
        interval = get_config("timeouts.remote_poll_interval", 0.1)
        matched, actual = await poll_until(
            read,
            check,
            timeout=window,
            config=WaitConfig(initial_interval=interval, max_interval=interval * 5),
            description=predicate,
        )
        if not matched:
            logger.debug(f"{predicate} failed on {self._substrate.value}: expected {expected!r}, got {actual!r}")
            self._on_mismatch(predicate, expected, actual)

    # =========================================================================
    # Visibility and attachment
    # =========================================================================

    async def to_be_visible(self, timeout: Optional[float] = None) -> None:
        await self._expect("to_be_visible", True, self._element.is_visible, lambda v: v is True, timeout)

    async def to_be_hidden(self, timeout: Optional[float] = None) -> None:
        await self._expect("to_be_hidden", False, self._element.is_visible, lambda v: v is False, timeout)

    async def to_be_in_document(self) -> None:
        await self._expect("to_be_in_document", True, self._element.is_attached, lambda v: v is True)

    async def not_to_be_in_document(self) -> None:
        await self._expect("not_to_be_in_document", False, self._element.is_attached, lambda v: v is False)

    # =========================================================================
    # Attributes and text
    # =========================================================================

    async def to_have_attribute(self, name: str, value: Optional[str] = None) -> None:
        """
        Without ``value`` the attribute only has to be present; with it the
        attribute must literally equal ``value``.
        """
        read = lambda: self._element.get_attribute(name)  # noqa: E731
        if value is None:
            await self._expect(f"to_have_attribute({name})", "<present>", read, lambda v: v is not None)
        else:
            await self._expect(f"to_have_attribute({name})", value, read, lambda v: v == value)

    async def not_to_have_attribute(self, name: str) -> None:
        await self._expect(
            f"not_to_have_attribute({name})", None,
            lambda: self._element.get_attribute(name),
            lambda v: v is None,
        )

    async def to_have_text_content(self, text: str) -> None:
        await self._expect("to_have_text_content", text, self._element.get_text_content, lambda v: v == text)

    async def to_contain_text(self, text: str) -> None:
        await self._expect("to_contain_text", text, self._element.get_text_content, lambda v: text in (v or ""))

    async def to_have_class(self, class_name: str) -> None:
        await self._expect(
            "to_have_class", class_name,
            lambda: self._element.get_attribute("class"),
            lambda v: class_name in _class_list(v),
        )

    async def to_have_classes(self, *class_names: str) -> None:
        for class_name in class_names:
            await self.to_have_class(class_name)

    async def to_have_role(self, role: str) -> None:
        await self._expect(
            "to_have_role", role,
            lambda: self._element.get_attribute("role"),
            lambda v: v == role,
        )

    async def to_be_enabled(self) -> None:
        await self._expect(
            "to_be_enabled", None,
            lambda: self._element.get_attribute("disabled"),
            lambda v: v is None,
        )

    async def to_be_disabled(self) -> None:
        await self._expect(
            "to_be_disabled", "<present>",
            lambda: self._element.get_attribute("disabled"),
            lambda v: v is not None,
        )

    # =========================================================================
    # Interactions
    # =========================================================================

    async def click(self) -> None:
        await self._element.click()

    async def focus(self) -> None:
        await self._element.focus()

    async def type(self, text: str) -> None:
        await self._element.type(text)

    # =========================================================================
    # Remote-only operations
    # =========================================================================

    def _unsupported(self, operation: str) -> NoReturn:
        raise UnsupportedOperationError(operation, self._substrate)

    async def to_be_focused(self) -> None:
        self._unsupported("to_be_focused")

    async def to_be_checked(self) -> None:
        self._unsupported("to_be_checked")

    async def not_to_be_checked(self) -> None:
        self._unsupported("not_to_be_checked")

    async def to_have_style(self, style: Dict[str, str]) -> None:
        self._unsupported("to_have_style")

    async def to_have_bounding_box(self, x: float, y: float, width: float, height: float) -> None:
        self._unsupported("to_have_bounding_box")

    async def to_have_screenshot(self, name: str, threshold: float = 0.0, max_diff_pixels: int = 0) -> None:
        self._unsupported("to_have_screenshot")

    async def hover(self) -> None:
        self._unsupported("hover")

    async def double_click(self) -> None:
        self._unsupported("double_click")

    async def right_click(self) -> None:
        self._unsupported("right_click")

    async def select_text(self) -> None:
        self._unsupported("select_text")

    async def clear(self) -> None:
        self._unsupported("clear")

    async def get_bounding_box(self) -> Optional[BoundingBox]:
        self._unsupported("get_bounding_box")

    async def get_computed_style(self, prop: str) -> str:
        self._unsupported("get_computed_style")

    async def wait_for_visible(self, timeout: Optional[float] = None) -> None:
        self._unsupported("wait_for_visible")

    async def wait_for_hidden(self, timeout: Optional[float] = None) -> None:
        self._unsupported("wait_for_hidden")

    async def wait_for_detached(self, timeout: Optional[float] = None) -> None:
        self._unsupported("wait_for_detached")

    async def type_with_keyboard(self, text: str, delay: float = 0) -> None:
        self._unsupported("type_with_keyboard")

    async def get_inner_html(self) -> str:
        self._unsupported("get_inner_html")

    async def get_outer_html(self) -> str:
        self._unsupported("get_outer_html")

    async def scroll_into_view(self) -> None:
        self._unsupported("scroll_into_view")

    async def screenshot(self, path: Optional[str] = None) -> bytes:
        self._unsupported("screenshot")


__all__ = [
    "MismatchHandler",
    "UnifiedDOMAssertions",
    "raise_mismatch",
]
