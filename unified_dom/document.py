"""
================================================================================
Local Document
================================================================================

In-process, synchronously readable document used by the Local substrate.

A ``LocalDocument`` wraps a BeautifulSoup tree and routes every structural,
attribute and text change through itself so that mutation observers,
event listeners and focus tracking behave like a lightweight browser DOM.
Nodes are plain bs4 ``Tag`` / ``NavigableString`` objects; the document is
owned by whoever created it, the harness only borrows node references.

Usage:
    >>> doc = LocalDocument('<div id="app"><button>Go</button></div>')
    >>> app = doc.get_element_by_id("app")
    >>> doc.append_child(app, doc.create_element("span", text="hi"))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Doctype, NavigableString, Tag
from loguru import logger
from soupsieve import SelectorSyntaxError


# `selector { declarations }` pairs inside <style> blocks
_STYLE_RULE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_CSS_COMMENT = re.compile(r"/\*.*?\*/", re.S)


def node_name(node: Any) -> str:
    """DOM-style nodeName: upper-case tag name, ``#text`` or ``#document``."""
    if isinstance(node, BeautifulSoup):
        return "#document"
    if isinstance(node, Tag):
        return node.name.upper()
    if isinstance(node, NavigableString):
        return "#text"
    return type(node).__name__


def css_string(value: str) -> str:
    """Quote ``value`` for use inside a CSS attribute selector."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def normalize_text(text: str) -> str:
    return " ".join(text.split())


def parse_declarations(text: str) -> Dict[str, str]:
    """Parse ``a: b; c: d`` into a dict with lower-case property names."""
    declarations: Dict[str, str] = {}
    for chunk in text.split(";"):
        if ":" not in chunk:
            continue
        prop, _, value = chunk.partition(":")
        value = value.replace("!important", "").strip()
        if prop.strip() and value:
            declarations[prop.strip().lower()] = value
    return declarations


# ================================================================================
# Events
# ================================================================================

class DataTransfer:
    """Synthetic drag payload carried by drag events."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self.drop_effect = "none"
        self.effect_allowed = "all"

    def set_data(self, fmt: str, data: str) -> None:
        self._data[fmt] = data

    def get_data(self, fmt: str) -> str:
        return self._data.get(fmt, "")

    def clear_data(self, fmt: Optional[str] = None) -> None:
        if fmt is None:
            self._data.clear()
        else:
            self._data.pop(fmt, None)

    @property
    def types(self) -> List[str]:
        return list(self._data)


@dataclass
class DOMEvent:
    """
    Event dispatched through a :class:`LocalDocument`.

    Carries the union of the keyboard, mouse and drag fields the harness
    needs; unused fields keep their defaults.
    """
    type: str
    bubbles: bool = True
    cancelable: bool = True
    key: Optional[str] = None
    code: Optional[str] = None
    ctrl_key: bool = False
    shift_key: bool = False
    alt_key: bool = False
    meta_key: bool = False
    client_x: Optional[float] = None
    client_y: Optional[float] = None
    data_transfer: Optional[DataTransfer] = None
    target: Any = None
    current_target: Any = None
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        if self.cancelable:
            self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


EventHandler = Callable[[DOMEvent], Any]


# ================================================================================
# Mutation Observation
# ================================================================================

@dataclass(frozen=True)
class MutationRecord:
    """
    A single observed change.

    Attributes:
        type: "childList", "attributes" or "characterData"
        target: Node whose children, attributes or data changed
        added_nodes: Nodes inserted (childList only)
        removed_nodes: Nodes removed (childList only)
        attribute_name: Changed attribute (attributes only)
        old_value: Previous attribute value or text data
        timestamp: ``time.monotonic()`` when the change happened
    """
    type: str
    target: Any
    added_nodes: Tuple[Any, ...] = ()
    removed_nodes: Tuple[Any, ...] = ()
    attribute_name: Optional[str] = None
    old_value: Optional[str] = None
    timestamp: float = field(default_factory=time.monotonic)

    @property
    def target_name(self) -> str:
        return node_name(self.target)


@dataclass(frozen=True)
class _ObserverOptions:
    child_list: bool = True
    attributes: bool = True
    character_data: bool = True
    subtree: bool = True

    def accepts(self, record_type: str) -> bool:
        return {
            "childList": self.child_list,
            "attributes": self.attributes,
            "characterData": self.character_data,
        }.get(record_type, False)


class MutationObserver:
    """
    Observer over a :class:`LocalDocument`.

    Records are queued and delivered to ``callback(records, observer)`` in
    one batch per event-loop turn. Outside a running loop they stay queued
    until :meth:`take_records` is called.
    """

    def __init__(self, document: "LocalDocument", callback: Callable[[List[MutationRecord], "MutationObserver"], Any]):
        self._document = document
        self._callback = callback
        self._queue: List[MutationRecord] = []
        self._scheduled = False

    def observe(
        self,
        target: Any = None,
        *,
        child_list: bool = True,
        attributes: bool = True,
        character_data: bool = True,
        subtree: bool = True,
    ) -> None:
        """Start observing ``target`` (defaults to ``<body>``)."""
        options = _ObserverOptions(child_list, attributes, character_data, subtree)
        self._document._register(self, target if target is not None else self._document.body, options)

    def disconnect(self) -> None:
        self._document._unregister(self)
        self._queue = []

    def take_records(self) -> List[MutationRecord]:
        """Return and clear records not yet delivered."""
        records, self._queue = self._queue, []
        return records

    def _enqueue(self, record: MutationRecord) -> None:
        self._queue.append(record)
        if self._scheduled:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._scheduled = True
        loop.call_soon(self._deliver)

    def _deliver(self) -> None:
        self._scheduled = False
        records = self.take_records()
        if records:
            self._callback(records, self)


# ================================================================================
# Document
# ================================================================================

class LocalDocument:
    """
    Observable in-process document over a BeautifulSoup tree.

    Always exposes ``html``, ``head`` and ``body`` elements; markup without
    them is wrapped into ``<body>``.
    """

    def __init__(self, markup: str = "", parser: str = "html.parser"):
        self.soup = BeautifulSoup(markup, parser, multi_valued_attributes=None)
        self._ensure_skeleton()
        self._observers: List[Tuple[MutationObserver, Any, _ObserverOptions]] = []
        # id(node) -> (node, ...) so entries keep their node alive and ids stay unique
        self._listeners: Dict[int, Tuple[Any, Dict[str, List[EventHandler]]]] = {}
        self._values: Dict[int, Tuple[Any, str]] = {}
        self._active: Optional[Tag] = None

    def _ensure_skeleton(self) -> None:
        soup = self.soup
        html = soup.find("html")
        if html is None:
            html = soup.new_tag("html")
            body = soup.new_tag("body")
            for child in list(soup.contents):
                if isinstance(child, Doctype):
                    continue
                body.append(child.extract())
            html.append(soup.new_tag("head"))
            html.append(body)
            soup.append(html)
            return

        if html.find("head", recursive=False) is None:
            html.insert(0, soup.new_tag("head"))
        if html.find("body", recursive=False) is None:
            body = soup.new_tag("body")
            for child in list(html.contents):
                if isinstance(child, Tag) and child.name == "head":
                    continue
                body.append(child.extract())
            html.append(body)

    # ------------------------------------------------------------------
    # Tree access
    # ------------------------------------------------------------------

    @property
    def html(self) -> Tag:
        return self.soup.find("html")

    @property
    def head(self) -> Tag:
        return self.html.find("head", recursive=False)

    @property
    def body(self) -> Tag:
        return self.html.find("body", recursive=False)

    def get_element_by_id(self, element_id: str) -> Optional[Tag]:
        return self.soup.find(attrs={"id": element_id})

    def query_selector(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def query_selector_all(self, selector: str) -> List[Tag]:
        return list(self.soup.select(selector))

    def find_by_text(self, text: str, exact: bool = True) -> Optional[Tag]:
        """
        Innermost element under ``<body>`` whose normalized text equals
        (or, with ``exact=False``, contains) ``text``.
        """
        wanted = normalize_text(text)

        def matches(tag: Tag) -> bool:
            content = normalize_text(tag.get_text())
            return content == wanted if exact else wanted in content

        candidates = [
            tag for tag in self.body.find_all(True)
            if tag.name not in ("script", "style") and matches(tag)
        ]
        for candidate in candidates:
            if not any(
                other is not candidate and _is_ancestor(candidate, other)
                for other in candidates
            ):
                return candidate
        return None

    def contains(self, node: Any) -> bool:
        """True when ``node`` is ``<body>`` or one of its descendants."""
        body = self.body
        return node is body or _is_ancestor(body, node)

    def text_content(self, node: Any) -> str:
        if isinstance(node, Tag):
            return node.get_text()
        return str(node) if node is not None else ""

    def element_count(self) -> int:
        return len(self.soup.find_all(True))

    def serialized_size(self) -> int:
        return len(str(self.soup))

    def serialize(self) -> str:
        return str(self.soup)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_element(self, tag_name: str, attrs: Optional[Dict[str, str]] = None, text: Optional[str] = None) -> Tag:
        element = self.soup.new_tag(tag_name, attrs=dict(attrs or {}))
        if text:
            element.append(NavigableString(text))
        return element

    def create_text_node(self, text: str) -> NavigableString:
        return NavigableString(text)

    def append_child(self, parent: Tag, child: Any) -> Any:
        if child.parent is not None:
            self.remove_child(child.parent, child)
        parent.append(child)
        self._notify(MutationRecord("childList", parent, added_nodes=(child,)))
        return child

    def insert_before(self, parent: Tag, child: Any, reference: Any) -> Any:
        if reference is None:
            return self.append_child(parent, child)
        if reference.parent is not parent:
            raise ValueError("reference node is not a child of parent")
        if child.parent is not None:
            self.remove_child(child.parent, child)
        reference.insert_before(child)
        self._notify(MutationRecord("childList", parent, added_nodes=(child,)))
        return child

    def remove_child(self, parent: Tag, child: Any) -> Any:
        if child.parent is not parent:
            raise ValueError("node is not a child of parent")
        if self._active is not None and (self._active is child or _is_ancestor(child, self._active)):
            self._active = None
        child.extract()
        self._notify(MutationRecord("childList", parent, removed_nodes=(child,)))
        return child

    def remove(self, node: Any) -> None:
        if node.parent is not None:
            self.remove_child(node.parent, node)

    def set_attribute(self, node: Tag, name: str, value: Any) -> None:
        old = node.get(name)
        node[name] = str(value)
        self._notify(MutationRecord("attributes", node, attribute_name=name, old_value=old))

    def remove_attribute(self, node: Tag, name: str) -> None:
        if name not in node.attrs:
            return
        old = node.get(name)
        del node[name]
        self._notify(MutationRecord("attributes", node, attribute_name=name, old_value=old))

    def set_text(self, node: Tag, text: str) -> None:
        """Replace all children with one text node (``textContent`` setter)."""
        removed = tuple(node.contents)
        for child in removed:
            child.extract()
        added: Tuple[Any, ...] = ()
        if text:
            string = NavigableString(text)
            node.append(string)
            added = (string,)
        if removed or added:
            self._notify(MutationRecord("childList", node, added_nodes=added, removed_nodes=removed))

    def set_data(self, text_node: NavigableString, data: str) -> NavigableString:
        """Change a text node's data; returns the node now in the tree."""
        replacement = NavigableString(data)
        text_node.replace_with(replacement)
        self._notify(MutationRecord("characterData", replacement, old_value=str(text_node)))
        return replacement

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def _register(self, observer: MutationObserver, target: Any, options: _ObserverOptions) -> None:
        self._observers = [entry for entry in self._observers if entry[0] is not observer]
        self._observers.append((observer, target, options))

    def _unregister(self, observer: MutationObserver) -> None:
        self._observers = [entry for entry in self._observers if entry[0] is not observer]

    def _notify(self, record: MutationRecord) -> None:
        for observer, target, options in list(self._observers):
            if not options.accepts(record.type):
                continue
            if record.target is target or (options.subtree and _is_ancestor(target, record.target)):
                observer._enqueue(record)

    # ------------------------------------------------------------------
    # Events and focus
    # ------------------------------------------------------------------

    def add_event_listener(self, node: Any, event_type: str, handler: EventHandler) -> None:
        _, handlers = self._listeners.setdefault(id(node), (node, {}))
        handlers.setdefault(event_type, []).append(handler)

    def remove_event_listener(self, node: Any, event_type: str, handler: EventHandler) -> None:
        entry = self._listeners.get(id(node))
        if entry and handler in entry[1].get(event_type, []):
            entry[1][event_type].remove(handler)

    def dispatch_event(self, node: Any, event: DOMEvent) -> bool:
        """
        Dispatch ``event`` at ``node`` and bubble it through the ancestors.

        Returns:
            False if a handler called ``prevent_default()``
        """
        event.target = node
        path = [node] + (list(node.parents) if event.bubbles else [])
        for current in path:
            entry = self._listeners.get(id(current))
            if entry is None or entry[0] is not current:
                continue
            event.current_target = current
            for handler in list(entry[1].get(event.type, [])):
                handler(event)
            if event.propagation_stopped:
                break
        logger.trace(f"Dispatched {event.type} on {node_name(node)}")
        return not event.default_prevented

    def click(self, node: Tag) -> None:
        self.dispatch_event(node, DOMEvent("click"))

    @property
    def active_element(self) -> Tag:
        if self._active is not None and self.contains(self._active):
            return self._active
        return self.body

    def focus(self, node: Tag) -> None:
        previous = self._active
        if previous is node:
            return
        self._active = node
        if previous is not None:
            self.dispatch_event(previous, DOMEvent("blur", bubbles=False, cancelable=False))
            self.dispatch_event(previous, DOMEvent("focusout", cancelable=False))
        self.dispatch_event(node, DOMEvent("focus", bubbles=False, cancelable=False))
        self.dispatch_event(node, DOMEvent("focusin", cancelable=False))

    def blur(self, node: Tag) -> None:
        if self._active is node:
            self._active = None
            self.dispatch_event(node, DOMEvent("blur", bubbles=False, cancelable=False))
            self.dispatch_event(node, DOMEvent("focusout", cancelable=False))

    # ------------------------------------------------------------------
    # Form values and style
    # ------------------------------------------------------------------

    def get_value(self, node: Tag) -> str:
        stored = self._values.get(id(node))
        if stored is not None and stored[0] is node:
            return stored[1]
        if node.name == "textarea":
            return node.get_text()
        return node.get("value") or ""

    def set_value(self, node: Tag, value: str) -> None:
        self._values[id(node)] = (node, value)

    def computed_style(self, node: Tag) -> Dict[str, str]:
        """
        Approximate computed style: ``hidden`` attribute, then ``<style>``
        rules in document order, then the inline ``style`` attribute.
        Selector specificity and inheritance are not modelled.
        """
        style: Dict[str, str] = {}
        if not isinstance(node, Tag):
            return style
        if node.has_attr("hidden"):
            style["display"] = "none"

        for sheet in self.soup.find_all("style"):
            css = _CSS_COMMENT.sub("", sheet.get_text())
            for selector, body in _STYLE_RULE.findall(css):
                selector = selector.strip()
                if not selector or selector.startswith("@"):
                    continue
                try:
                    matched = any(match is node for match in self.soup.select(selector))
                except SelectorSyntaxError:
                    logger.debug(f"Skipping unsupported selector in stylesheet: {selector}")
                    continue
                if matched:
                    style.update(parse_declarations(body))

        style.update(parse_declarations(node.get("style") or ""))
        return style


def _is_ancestor(ancestor: Any, node: Any) -> bool:
    parents = getattr(node, "parents", None)
    if parents is None:
        return False
    return any(parent is ancestor for parent in parents)


__all__ = [
    "DataTransfer",
    "DOMEvent",
    "LocalDocument",
    "MutationObserver",
    "MutationRecord",
    "css_string",
    "node_name",
    "normalize_text",
    "parse_declarations",
]
