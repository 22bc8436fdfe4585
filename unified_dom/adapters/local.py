"""
================================================================================
Local Substrate Adapter
================================================================================

Implements the capability contract against a :class:`LocalDocument`.

Every call is synchronous work wrapped in a coroutine for contract
symmetry; nothing here suspends. Visibility is decided from style alone
because the in-process document has no layout engine.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from ..core.assertions import MismatchHandler, UnifiedDOMAssertions
from ..core.contract import DOMElement, Substrate
from ..document import DOMEvent, LocalDocument, node_name


def _is_zero_opacity(value: Optional[str]) -> bool:
    if value is None:
        return False
    value = value.strip()
    try:
        if value.endswith("%"):
            return float(value[:-1]) == 0
        return float(value) == 0
    except ValueError:
        return False


class LocalDOMElement(DOMElement):
    """Element handle wrapping a node borrowed from a :class:`LocalDocument`."""

    substrate = Substrate.LOCAL
    settle_timeout = 0.0

    def __init__(self, node: Any, document: LocalDocument):
        self.node = node
        self.document = document

    def __repr__(self) -> str:
        return f"LocalDOMElement(<{node_name(self.node).lower()}>)"

    async def is_visible(self) -> bool:
        if self.node is None:
            return False
        style = self.document.computed_style(self.node)
        hidden = (
            style.get("display") == "none"
            or style.get("visibility") == "hidden"
            or _is_zero_opacity(style.get("opacity"))
        )
        return not hidden

    async def is_attached(self) -> bool:
        return self.document.contains(self.node)

    async def get_text_content(self) -> str:
        return self.document.text_content(self.node)

    async def get_attribute(self, name: str) -> Optional[str]:
        value = self.node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    async def click(self) -> None:
        logger.debug(f"Local click: {self!r}")
        self.document.click(self.node)

    async def focus(self) -> None:
        self.document.focus(self.node)

    async def type(self, text: str) -> None:
        """Set the value of an input/textarea and fire input + change."""
        if self.node.name not in ("input", "textarea"):
            logger.debug(f"Ignoring type() on non-editable {self!r}")
            return
        self.document.set_value(self.node, text)
        self.document.dispatch_event(self.node, DOMEvent("input"))
        self.document.dispatch_event(self.node, DOMEvent("change"))


def create_local_assertions(
    node: Any,
    document: LocalDocument,
    on_mismatch: Optional[MismatchHandler] = None,
) -> UnifiedDOMAssertions:
    """Create assertions for a node of an in-process document."""
    return UnifiedDOMAssertions(Substrate.LOCAL, LocalDOMElement(node, document), on_mismatch)


__all__ = [
    "LocalDOMElement",
    "create_local_assertions",
]
