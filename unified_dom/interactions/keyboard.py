# ================================================================================
# Keyboard Interactions
# ================================================================================
#
# Key presses, shortcuts and focus traversal for both substrates.
#
# Key Features:
#   - Local: keydown + keyup pair carrying key, code and modifier flags
#   - Remote: a single Playwright press with a "Control+a" style combo
#   - Composite shortcuts (tab, shift-tab, select-all, clipboard, undo/redo)
#   - Character-by-character typing with an optional delay
#   - Tab-order traversal returning the newly focused element
#
# ================================================================================

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import allure
from bs4 import Tag
from loguru import logger

from ..adapters.local import LocalDOMElement
from ..adapters.remote import wrap_locator
from ..core.assertions import UnifiedDOMAssertions
from ..core.contract import Substrate
from ..document import DOMEvent, LocalDocument


MODIFIERS = ("Control", "Shift", "Alt", "Meta")

KEY_CODES = {
    "Enter": "Enter",
    "Escape": "Escape",
    "Tab": "Tab",
    "ArrowUp": "ArrowUp",
    "ArrowDown": "ArrowDown",
    "ArrowLeft": "ArrowLeft",
    "ArrowRight": "ArrowRight",
    "a": "KeyA",
    "c": "KeyC",
    "v": "KeyV",
    "x": "KeyX",
    "z": "KeyZ",
    "y": "KeyY",
}

ARROW_KEYS = {
    "up": "ArrowUp",
    "down": "ArrowDown",
    "left": "ArrowLeft",
    "right": "ArrowRight",
}

FOCUSABLE_SELECTOR = 'a[href], button, input, textarea, select, [tabindex]:not([tabindex="-1"])'


def key_code(key: str) -> str:
    """Physical key code for ``key``; unknown keys map to themselves."""
    return KEY_CODES.get(key, key)


def key_combo(key: str, modifiers: Sequence[str] = ()) -> str:
    """Playwright combo string, e.g. ``Control+Shift+z``."""
    return "+".join([*modifiers, key])


@dataclass
class KeyboardOptions:
    """
    Attributes:
        timeout: Seconds allowed per press (remote only)
        delay: Seconds to pause between keys when typing a sequence
        modifiers: Modifiers held for every key
    """
    timeout: Optional[float] = None
    delay: float = 0.0
    modifiers: List[str] = field(default_factory=list)


class KeyboardInteractions:
    """
    Keyboard input aimed at one element.

    Example:
        keys = KeyboardInteractions(search_box)
        await keys.type_sequence("hello")
        await keys.select_all()
        await keys.press_enter()
    """

    def __init__(self, element: UnifiedDOMAssertions):
        self.element = element

    @property
    def environment(self) -> Substrate:
        return self.element.environment

    async def press_key(self, key: str, modifiers: Optional[Sequence[str]] = None,
                        timeout: Optional[float] = None) -> None:
        modifiers = list(modifiers or [])
        unknown = [m for m in modifiers if m not in MODIFIERS]
        if unknown:
            raise ValueError(f"Unknown modifiers: {unknown}")

        if self.environment is Substrate.REMOTE:
            await self.element.element.locator.press(
                key_combo(key, modifiers),
                timeout=timeout * 1000 if timeout is not None else None,
            )
            return

        handle = self.element.element
        flags = {
            "ctrl_key": "Control" in modifiers,
            "shift_key": "Shift" in modifiers,
            "alt_key": "Alt" in modifiers,
            "meta_key": "Meta" in modifiers,
        }
        for event_type in ("keydown", "keyup"):
            handle.document.dispatch_event(
                handle.node, DOMEvent(event_type, key=key, code=key_code(key), **flags)
            )
        logger.trace(f"Local key press {key_combo(key, modifiers)} on {handle!r}")

    async def type_sequence(self, sequence: str, options: Optional[KeyboardOptions] = None) -> None:
        """Press each character of ``sequence`` in order."""
        options = options or KeyboardOptions()
        with allure.step(f"Type sequence: {sequence}"):
            for char in sequence:
                await self.press_key(char, options.modifiers, options.timeout)
                if options.delay:
                    await asyncio.sleep(options.delay)

    async def navigate_with_keyboard(self, direction: str) -> None:
        """Press the arrow key for ``direction`` (up, down, left, right)."""
        try:
            key = ARROW_KEYS[direction]
        except KeyError:
            raise ValueError(f"Unknown direction: {direction}") from None
        await self.press_key(key)

    async def press_enter(self) -> None:
        await self.press_key("Enter")

    async def press_escape(self) -> None:
        await self.press_key("Escape")

    async def press_tab(self) -> None:
        await self.press_key("Tab")

    async def press_shift_tab(self) -> None:
        await self.press_key("Tab", ["Shift"])

    async def select_all(self) -> None:
        await self.press_key("a", ["Control"])

    async def copy(self) -> None:
        await self.press_key("c", ["Control"])

    async def paste(self) -> None:
        await self.press_key("v", ["Control"])

    async def cut(self) -> None:
        await self.press_key("x", ["Control"])

    async def undo(self) -> None:
        await self.press_key("z", ["Control"])

    async def redo(self) -> None:
        await self.press_key("y", ["Control"])


def create_keyboard_interactions(element: UnifiedDOMAssertions) -> KeyboardInteractions:
    return KeyboardInteractions(element)


def focusable_elements(document: LocalDocument) -> List[Tag]:
    """Focusable elements of ``document`` in tree order, skipping disabled and hidden ones."""
    focusable = []
    for node in document.query_selector_all(FOCUSABLE_SELECTOR):
        if node.has_attr("disabled") or node.has_attr("hidden"):
            continue
        if "hidden" in (node.get("class") or "").split():
            continue
        if document.computed_style(node).get("display") == "none":
            continue
        focusable.append(node)
    return focusable


async def simulate_tab_navigation(current: UnifiedDOMAssertions, shift: bool = False) -> UnifiedDOMAssertions:
    """
    Move focus to the next (or, with ``shift``, previous) focusable element.

    Local traversal follows tree order and wraps around at either end; Remote
    presses Tab in the browser and wraps whatever element ends up focused.

    Returns:
        Assertions for the newly focused element

    Raises:
        LookupError: When the document has no focusable element
    """
    if current.environment is Substrate.REMOTE:
        locator = current.element.locator
        await locator.press("Shift+Tab" if shift else "Tab")
        return wrap_locator(locator.page.locator("*:focus").first, current.on_mismatch)

    handle = current.element
    document = handle.document
    candidates = focusable_elements(document)
    if not candidates:
        raise LookupError("No focusable element found")

    index = next((i for i, node in enumerate(candidates) if node is handle.node), -1)
    if shift:
        next_index = index - 1 if index > 0 else len(candidates) - 1
    else:
        next_index = (index + 1) % len(candidates)

    target = candidates[next_index]
    document.focus(target)
    return UnifiedDOMAssertions(Substrate.LOCAL, LocalDOMElement(target, document), current.on_mismatch)
