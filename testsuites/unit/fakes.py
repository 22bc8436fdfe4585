"""
In-memory stand-ins for the Playwright objects the Remote adapter touches.

Only the calls the harness makes are implemented; every call is recorded
on ``calls`` so tests can assert on what was sent to the browser.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from unified_dom.adapters.remote import (
    _COMPUTED_STYLE_JS,
    _FOCUSED_JS,
    _OUTER_HTML_JS,
    _VISIBLE_JS,
)


class FakeMouse:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    async def down(self) -> None:
        self.calls.append(("down",))

    async def move(self, x: float, y: float) -> None:
        self.calls.append(("move", x, y))

    async def up(self) -> None:
        self.calls.append(("up",))


class FakeKeyboard:
    def __init__(self) -> None:
        self.presses: List[str] = []

    async def press(self, combo: str) -> None:
        self.presses.append(combo)


class FakeLocator:
    """
    A single element on a fake page.

    ``visible`` may be a list of booleans: each visibility probe consumes
    one entry and the last entry repeats, which models an element that
    settles after a few polls.
    """

    def __init__(
        self,
        page: "FakePage",
        selector: str,
        attached: bool = True,
        visible: Any = True,
        text: str = "",
        attributes: Optional[Dict[str, str]] = None,
        checked: bool = False,
        focused: bool = False,
        box: Optional[Dict[str, float]] = None,
        style: Optional[Dict[str, str]] = None,
        png: bytes = b"",
        evaluate_result: Any = None,
    ):
        self.page = page
        self.selector = selector
        self.attached = attached
        self._visible = list(visible) if isinstance(visible, (list, tuple)) else [visible]
        self.text = text
        self.attributes = dict(attributes or {})
        self.checked = checked
        self.focused = focused
        self.box = box
        self.style = dict(style or {})
        self.png = png
        self.evaluate_result = evaluate_result
        self.timeouts: Dict[str, Optional[float]] = {}
        self.calls: List[tuple] = []

    def __repr__(self) -> str:
        return f"FakeLocator({self.selector!r})"

    @property
    def first(self) -> "FakeLocator":
        return self

    def _require_attached(self) -> None:
        if not self.attached:
            raise PlaywrightTimeoutError(f"Timeout waiting for {self.selector}")

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        self.calls.append(("wait_for", state, timeout))
        if state == "attached":
            self._require_attached()
        elif state == "detached" and self.attached:
            raise PlaywrightTimeoutError(f"{self.selector} still attached")

    async def evaluate(self, expression: str, arg: Any = None, timeout: Optional[float] = None) -> Any:
        self.calls.append(("evaluate", expression, arg))
        self.timeouts[expression] = timeout
        self._require_attached()
        if expression == _VISIBLE_JS:
            value = self._visible[0]
            if len(self._visible) > 1:
                self._visible.pop(0)
            return value
        if expression == _FOCUSED_JS:
            return self.focused
        if expression == _COMPUTED_STYLE_JS:
            return self.style.get(arg, "")
        if expression == _OUTER_HTML_JS:
            return f"<div>{self.text}</div>"
        return self.evaluate_result

    async def text_content(self, timeout: Optional[float] = None) -> Optional[str]:
        self._require_attached()
        return self.text

    async def get_attribute(self, name: str, timeout: Optional[float] = None) -> Optional[str]:
        self._require_attached()
        return self.attributes.get(name)

    async def is_checked(self, timeout: Optional[float] = None) -> bool:
        self._require_attached()
        return self.checked

    async def bounding_box(self, timeout: Optional[float] = None) -> Optional[Dict[str, float]]:
        return self.box

    async def inner_html(self, timeout: Optional[float] = None) -> str:
        return self.text

    async def screenshot(self, path: Optional[str] = None) -> bytes:
        self.calls.append(("screenshot", path))
        return self.png

    async def click(self, **kwargs: Any) -> None:
        self.calls.append(("click", kwargs))

    async def dblclick(self) -> None:
        self.calls.append(("dblclick",))

    async def hover(self, **kwargs: Any) -> None:
        self.calls.append(("hover", kwargs))

    async def focus(self) -> None:
        self.calls.append(("focus",))
        self.focused = True

    async def fill(self, text: str) -> None:
        self.calls.append(("fill", text))

    async def clear(self) -> None:
        self.calls.append(("clear",))

    async def select_text(self) -> None:
        self.calls.append(("select_text",))

    async def press(self, combo: str, timeout: Optional[float] = None) -> None:
        self.calls.append(("press", combo, timeout))

    async def press_sequentially(self, text: str, delay: float = 0) -> None:
        self.calls.append(("press_sequentially", text, delay))

    async def scroll_into_view_if_needed(self) -> None:
        self.calls.append(("scroll_into_view_if_needed",))

    async def drag_to(self, target: "FakeLocator", **kwargs: Any) -> None:
        self.calls.append(("drag_to", target, kwargs))


class FakePage:
    """
    A page whose ``locator()`` / ``get_by_*`` calls resolve to registered
    FakeLocators; unknown queries resolve to a detached locator.
    """

    def __init__(self) -> None:
        self.mouse = FakeMouse()
        self.keyboard = FakeKeyboard()
        self.locators: Dict[str, FakeLocator] = {}
        self.queries: List[str] = []
        self.evaluate_results: Dict[str, Any] = {}
        self.evaluations: List[tuple] = []

    def add(self, selector: str, **kwargs: Any) -> FakeLocator:
        locator = FakeLocator(self, selector, **kwargs)
        self.locators[selector] = locator
        return locator

    def _lookup(self, key: str) -> FakeLocator:
        self.queries.append(key)
        return self.locators.get(key) or FakeLocator(self, key, attached=False)

    def locator(self, selector: str) -> FakeLocator:
        return self._lookup(selector)

    def get_by_text(self, text: str, exact: bool = False) -> FakeLocator:
        return self._lookup(f"text={text}" if exact else f"text~={text}")

    def get_by_label(self, label: str, exact: bool = False) -> FakeLocator:
        return self._lookup(f"label={label}")

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.evaluations.append((expression, arg))
        for needle, result in self.evaluate_results.items():
            if needle in expression:
                return result(arg) if callable(result) else result
        return None
