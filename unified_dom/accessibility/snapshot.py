"""
================================================================================
Accessibility Snapshots
================================================================================

Reads everything the accessibility checks need about an element in one
pass, so the name/description/ARIA/contrast rules are written once in
Python and applied to both substrates.

    - Local: read from the LocalDocument tree (styles via computed_style,
      colors inherited by walking ancestors).
    - Remote: read with a single ``locator.evaluate`` call.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import soupsieve
from bs4 import BeautifulSoup, Tag

from ..core.assertions import UnifiedDOMAssertions
from ..core.contract import Substrate
from ..document import LocalDocument


TRANSPARENT = ("transparent", "rgba(0, 0, 0, 0)")


@dataclass(frozen=True)
class ElementSnapshot:
    """
    Attributes:
        tag: Lower-case tag name
        attributes: Attribute name -> value
        text: textContent
        labelledby_text: Joined text of the aria-labelledby targets, if any exist
        describedby_text: Joined text of the aria-describedby targets, if any exist
        label_text: Text of a ``<label for=id>`` pointing at the element
        color: Effective foreground color
        background_color: First non-transparent background on the ancestor chain
    """
    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    labelledby_text: Optional[str] = None
    describedby_text: Optional[str] = None
    label_text: Optional[str] = None
    color: Optional[str] = None
    background_color: Optional[str] = None

    def get(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    @property
    def label(self) -> str:
        """``tag#id`` style identifier for messages."""
        element_id = self.attributes.get("id")
        return f"{self.tag}#{element_id}" if element_id else self.tag

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementSnapshot":
        return cls(
            tag=data["tag"],
            attributes=dict(data.get("attributes") or {}),
            text=data.get("text") or "",
            labelledby_text=data.get("labelledbyText"),
            describedby_text=data.get("describedbyText"),
            label_text=data.get("labelText"),
            color=data.get("color"),
            background_color=data.get("backgroundColor"),
        )


# ================================================================================
# Local
# ================================================================================

def _attribute_text(value: Any) -> str:
    return " ".join(value) if isinstance(value, list) else str(value)


def _referenced_text(document: LocalDocument, ids: Optional[str]) -> Optional[str]:
    if not ids:
        return None
    texts = []
    for element_id in ids.split():
        target = document.get_element_by_id(element_id)
        if target is not None:
            texts.append(target.get_text())
    return " ".join(texts) if texts else None


def _inherited_style(document: LocalDocument, node: Tag, prop: str, skip: tuple = ()) -> Optional[str]:
    for current in [node, *node.parents]:
        if isinstance(current, BeautifulSoup) or not isinstance(current, Tag):
            break
        value = document.computed_style(current).get(prop)
        if value and value.strip().lower() not in skip:
            return value.strip()
    return None


def local_snapshot(document: LocalDocument, node: Tag) -> ElementSnapshot:
    attributes = {name: _attribute_text(value) for name, value in node.attrs.items()}

    label_text = None
    element_id = attributes.get("id")
    if element_id:
        for label in document.query_selector_all("label"):
            if label.get("for") == element_id:
                label_text = label.get_text()
                break

    return ElementSnapshot(
        tag=node.name.lower(),
        attributes=attributes,
        text=node.get_text(),
        labelledby_text=_referenced_text(document, attributes.get("aria-labelledby")),
        describedby_text=_referenced_text(document, attributes.get("aria-describedby")),
        label_text=label_text,
        color=_inherited_style(document, node, "color"),
        background_color=_inherited_style(document, node, "background-color", TRANSPARENT),
    )


def local_subtree(document: LocalDocument, node: Tag, selector: str) -> List[Tag]:
    """``node`` itself (when it matches) followed by matching descendants."""
    matches = [node] if soupsieve.match(selector, node) else []
    return matches + list(node.select(selector))


# ================================================================================
# Remote
# ================================================================================

_SNAPSHOT_JS = """
const __udSnapshot = (node) => {
    const textOf = (ids) => {
        if (!ids) return null;
        const texts = ids.split(/\\s+/).filter(Boolean)
            .map(id => document.getElementById(id))
            .filter(Boolean)
            .map(el => el.textContent || '');
        return texts.length ? texts.join(' ') : null;
    };
    const attributes = {};
    for (const attr of node.attributes) attributes[attr.name] = attr.value;
    let labelText = null;
    if (node.id) {
        const label = Array.from(document.querySelectorAll('label')).find(l => l.htmlFor === node.id);
        if (label) labelText = label.textContent || '';
    }
    let background = null;
    for (let current = node; current && current.nodeType === 1; current = current.parentElement) {
        const value = window.getComputedStyle(current).backgroundColor;
        if (value && value !== 'transparent' && value !== 'rgba(0, 0, 0, 0)') { background = value; break; }
    }
    return {
        tag: node.tagName.toLowerCase(),
        attributes,
        text: node.textContent || '',
        labelledbyText: textOf(node.getAttribute('aria-labelledby')),
        describedbyText: textOf(node.getAttribute('aria-describedby')),
        labelText,
        color: window.getComputedStyle(node).color,
        backgroundColor: background,
    };
};
"""

_ELEMENT_JS = "(el) => {" + _SNAPSHOT_JS + "return __udSnapshot(el); }"

_SUBTREE_JS = (
    "(el, selector) => {" + _SNAPSHOT_JS
    + "const nodes = (el.matches(selector) ? [el] : []).concat(Array.from(el.querySelectorAll(selector)));"
    + "return nodes.map(__udSnapshot); }"
)


async def snapshot(element: UnifiedDOMAssertions) -> ElementSnapshot:
    """Snapshot of the element behind an assertion wrapper."""
    handle = element.element
    if element.environment is Substrate.REMOTE:
        return ElementSnapshot.from_dict(await handle.locator.evaluate(_ELEMENT_JS))
    return local_snapshot(handle.document, handle.node)


async def subtree_snapshots(element: UnifiedDOMAssertions, selector: str) -> List[ElementSnapshot]:
    """Snapshots of the element and its descendants matching ``selector``."""
    handle = element.element
    if element.environment is Substrate.REMOTE:
        raw = await handle.locator.evaluate(_SUBTREE_JS, selector)
        return [ElementSnapshot.from_dict(item) for item in raw]
    return [local_snapshot(handle.document, node) for node in local_subtree(handle.document, handle.node, selector)]


__all__ = [
    "ElementSnapshot",
    "local_snapshot",
    "local_subtree",
    "snapshot",
    "subtree_snapshots",
]
