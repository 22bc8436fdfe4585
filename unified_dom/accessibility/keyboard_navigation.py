"""
Keyboard navigation checks: tab order, shortcuts and Escape handling.

The Local substrate has no browser focus engine, so Tab is emulated by
dispatching the key on the active element and moving focus to the next
focusable element in tree order (wrapping at the end).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from loguru import logger
from playwright.async_api import Page

from ..document import DOMEvent, LocalDocument
from ..interactions.keyboard import focusable_elements, key_code, key_combo


@dataclass(frozen=True)
class KeyboardNavigationResult:
    tab_order: Tuple[str, ...]
    expected_order: Tuple[str, ...]
    passes: bool
    issues: Tuple[str, ...] = ()


@dataclass
class KeyboardShortcut:
    """A key combination and the check that it had its effect."""
    key: str
    expected_action: Callable[[], Awaitable[bool]]
    modifiers: Sequence[str] = ()


class KeyboardNavigationTesting:
    """Keyboard behavior of a whole document or page."""

    def __init__(self, root: Union[LocalDocument, Page]):
        self.root = root

    @property
    def is_local(self) -> bool:
        return isinstance(self.root, LocalDocument)

    async def test_tab_order(self, expected_order: Sequence[str]) -> KeyboardNavigationResult:
        """
        Press Tab once per expected entry and record the focused element's id
        (``"unknown"`` when it has none).
        """
        actual: List[str] = []
        for _ in expected_order:
            await self._press("Tab")
            actual.append(await self._active_id() or "unknown")

        expected = tuple(expected_order)
        passes = tuple(actual) == expected
        issues = () if passes else (
            f"Expected tab order: {', '.join(expected)}, but got: {', '.join(actual)}",
        )
        if not passes:
            logger.warning(issues[0])
        return KeyboardNavigationResult(tuple(actual), expected, passes, issues)

    async def test_keyboard_shortcuts(self, shortcuts: Sequence[KeyboardShortcut]) -> bool:
        """Press each shortcut in turn; stops at the first whose check fails."""
        for shortcut in shortcuts:
            await self._press(shortcut.key, shortcut.modifiers)
            if not await shortcut.expected_action():
                logger.warning(f"Shortcut had no effect: {key_combo(shortcut.key, shortcut.modifiers)}")
                return False
        return True

    async def test_escape_key_behavior(self) -> bool:
        """After Escape no ``[role=dialog]`` may remain displayed."""
        await self._press("Escape")
        if self.is_local:
            dialogs = self.root.query_selector_all('[role="dialog"]')
            return all(self.root.computed_style(d).get("display") == "none" for d in dialogs)
        return await self.root.locator('[role="dialog"]:visible').count() == 0

    async def _press(self, key: str, modifiers: Sequence[str] = ()) -> None:
        if not self.is_local:
            await self.root.keyboard.press(key_combo(key, modifiers))
            return

        document = self.root
        active = document.active_element
        allowed = document.dispatch_event(active, DOMEvent(
            "keydown",
            key=key,
            code=key_code(key),
            ctrl_key="Control" in modifiers,
            shift_key="Shift" in modifiers,
            alt_key="Alt" in modifiers,
            meta_key="Meta" in modifiers,
        ))
        if key == "Tab" and allowed:
            self._move_focus(document, backwards="Shift" in modifiers)

    @staticmethod
    def _move_focus(document: LocalDocument, backwards: bool = False) -> None:
        candidates = focusable_elements(document)
        if not candidates:
            return
        active = document.active_element
        index = next((i for i, node in enumerate(candidates) if node is active), None)
        if index is None:
            target = candidates[-1] if backwards else candidates[0]
        else:
            target = candidates[(index + (-1 if backwards else 1)) % len(candidates)]
        document.focus(target)

    async def _active_id(self) -> Optional[str]:
        if self.is_local:
            active = self.root.active_element
            return active.get("id") if active is not self.root.body else None
        return await self.root.evaluate(
            "() => (document.activeElement && document.activeElement.id) || null"
        )


def create_keyboard_navigation_testing(root: Union[LocalDocument, Page]) -> KeyboardNavigationTesting:
    return KeyboardNavigationTesting(root)


__all__ = [
    "KeyboardNavigationResult",
    "KeyboardNavigationTesting",
    "KeyboardShortcut",
    "create_keyboard_navigation_testing",
]
