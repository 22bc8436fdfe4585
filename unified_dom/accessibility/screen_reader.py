"""
================================================================================
Screen Reader Semantics
================================================================================

Accessible name and description resolution and live-region detection.

Name resolution stops at the first non-empty result:
    1. ``aria-label``
    2. ``aria-labelledby`` targets' text
    3. text of a ``<label for=id>`` pointing at the element
    4. the element's own text

Description resolution: ``aria-describedby`` targets' text, else
``title``, else absent (None).

Resolved text is returned as written; whitespace only counts toward
emptiness.
Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from ..core.assertions import UnifiedDOMAssertions
from .snapshot import ElementSnapshot, snapshot


# Roles announced without an explicit aria-live
ANNOUNCED_ROLES = frozenset({"alert", "status", "log", "marquee", "timer"})


def resolve_accessible_name(element: ElementSnapshot) -> str:
    candidates = (
        element.get("aria-label"),
        element.labelledby_text,
        element.label_text,
        element.text,
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate
    return ""


def resolve_accessible_description(element: ElementSnapshot) -> Optional[str]:
    if element.describedby_text is not None:
        return element.describedby_text
    title = element.get("title")
    if title is not None:
        return title
    return None


def is_announced_role(aria_live: Optional[str], role: Optional[str]) -> bool:
    if aria_live is not None and aria_live != "off":
        return True
    return role in ANNOUNCED_ROLES


class ScreenReaderTesting:
    """Screen reader semantics of one element."""

    def __init__(self, element: UnifiedDOMAssertions):
        self.element = element

    async def get_accessible_name(self) -> str:
        return resolve_accessible_name(await snapshot(self.element))

    async def get_accessible_description(self) -> Optional[str]:
        return resolve_accessible_description(await snapshot(self.element))

    async def is_announced(self) -> bool:
        handle = self.element.element
        return is_announced_role(
            await handle.get_attribute("aria-live"),
            await handle.get_attribute("role"),
        )

    async def assert_accessible_name(self, expected: str) -> None:
        actual = await self.get_accessible_name()
        if actual != expected:
            self.element.on_mismatch("accessible_name", expected, actual)

    async def assert_accessible_description(self, expected: Optional[str]) -> None:
        actual = await self.get_accessible_description()
        if actual != expected:
            self.element.on_mismatch("accessible_description", expected, actual)

    async def assert_announced(self) -> None:
        if not await self.is_announced():
            self.element.on_mismatch("announced", True, False)


def create_screen_reader_testing(element: UnifiedDOMAssertions) -> ScreenReaderTesting:
    return ScreenReaderTesting(element)


async def to_have_accessible_name(element: UnifiedDOMAssertions, expected_name: str) -> None:
    await ScreenReaderTesting(element).assert_accessible_name(expected_name)


async def to_have_accessible_description(element: UnifiedDOMAssertions, expected_description: Optional[str]) -> None:
    await ScreenReaderTesting(element).assert_accessible_description(expected_description)


async def to_have_role(element: UnifiedDOMAssertions, expected_role: str) -> None:
    await element.to_have_role(expected_role)


async def to_announce_text(live_region: UnifiedDOMAssertions, expected_text: str) -> None:
    """The region must be announced and currently hold ``expected_text``."""
    await ScreenReaderTesting(live_region).assert_announced()
    logger.debug(f"Checking live region text: {expected_text!r}")
    await live_region.to_have_text_content(expected_text)


__all__ = [
    "ANNOUNCED_ROLES",
    "ScreenReaderTesting",
    "create_screen_reader_testing",
    "is_announced_role",
    "resolve_accessible_description",
    "resolve_accessible_name",
    "to_announce_text",
    "to_have_accessible_description",
    "to_have_accessible_name",
    "to_have_role",
]
