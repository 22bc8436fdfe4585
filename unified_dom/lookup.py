"""
================================================================================
Element Lookup Factories
================================================================================

One ``find_by_*`` coroutine per search criterion. Each accepts either a
:class:`LocalDocument` or a Playwright :class:`Page` as its root and
returns a fresh assertion wrapper for the substrate behind that root.

Lookups never hand back an empty wrapper:
    - Local: no match raises :class:`ElementNotFoundError` immediately.
    - Remote: the first match must attach within ``timeouts.remote_lookup``
      seconds, otherwise :class:`ElementNotFoundError` is raised.

Usage:
    >>> submit = await find_by_test_id(doc, "submit")
    >>> await submit.to_be_visible()
    >>> title = await find_by_role(page, "heading")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Callable, Optional, Union

from bs4 import Tag
from loguru import logger
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .adapters.local import create_local_assertions
from .adapters.remote import wrap_locator
from .common.config_loader import get_config
from .core.assertions import MismatchHandler, UnifiedDOMAssertions
from .errors import ElementNotFoundError
from .document import LocalDocument, css_string


Root = Union[LocalDocument, Page]


def _attribute_selector(name: str, value: str) -> str:
    return f"[{name}={css_string(value)}]"


async def _resolve(
    root: Root,
    criterion: str,
    value: str,
    local: Callable[[LocalDocument], Optional[Tag]],
    remote: Callable[[Page], Locator],
    on_mismatch: Optional[MismatchHandler] = None,
) -> UnifiedDOMAssertions:
    if isinstance(root, LocalDocument):
        node = local(root)
        if node is None:
            raise ElementNotFoundError(criterion, value)
        logger.debug(f"Found local element by {criterion}: {value}")
        return create_local_assertions(node, root, on_mismatch)

    locator = remote(root).first
    timeout = get_config("timeouts.remote_lookup", 5.0)
    try:
        await locator.wait_for(state="attached", timeout=timeout * 1000)
    except PlaywrightTimeoutError as e:
        raise ElementNotFoundError(criterion, value, f"not attached within {timeout}s") from e
    logger.debug(f"Found remote element by {criterion}: {value}")
    return wrap_locator(locator, on_mismatch)


def _by_selector(root: Root, criterion: str, value: str, selector: str,
                 on_mismatch: Optional[MismatchHandler] = None):
    return _resolve(
        root, criterion, value,
        lambda doc: doc.query_selector(selector),
        lambda page: page.locator(selector),
        on_mismatch,
    )


async def find_by_id(root: Root, element_id: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _resolve(
        root, "id", element_id,
        lambda doc: doc.get_element_by_id(element_id),
        lambda page: page.locator(_attribute_selector("id", element_id)),
        on_mismatch,
    )


async def find_by_test_id(root: Root, test_id: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "test id", test_id, _attribute_selector("data-testid", test_id), on_mismatch)


async def find_by_class(root: Root, class_name: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "class", class_name, f"[class~={css_string(class_name)}]", on_mismatch)


async def find_by_role(root: Root, role: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    """Explicit ``role`` attribute; implicit roles are not inferred."""
    return await _by_selector(root, "role", role, _attribute_selector("role", role), on_mismatch)


async def find_by_label(root: Root, label: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    """
    Element labelled ``label``: an exact ``aria-label`` first, then the
    control associated with a ``<label>`` whose text equals ``label``.
    """
    def local(doc: LocalDocument) -> Optional[Tag]:
        node = doc.query_selector(_attribute_selector("aria-label", label))
        if node is not None:
            return node
        for label_node in doc.query_selector_all("label"):
            if " ".join(label_node.get_text().split()) != label:
                continue
            target = label_node.get("for")
            if target:
                control = doc.get_element_by_id(target)
                if control is None:
                    continue
                return control
            nested = label_node.find(["input", "select", "textarea", "button"])
            if nested is not None:
                return nested
        return None

    return await _resolve(
        root, "label", label, local,
        lambda page: page.get_by_label(label, exact=True),
        on_mismatch,
    )


async def find_by_placeholder(root: Root, placeholder: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "placeholder", placeholder, _attribute_selector("placeholder", placeholder), on_mismatch)


async def find_by_title(root: Root, title: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "title", title, _attribute_selector("title", title), on_mismatch)


async def find_by_value(root: Root, value: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "value", value, _attribute_selector("value", value), on_mismatch)


async def find_by_name(root: Root, name: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "name", name, _attribute_selector("name", name), on_mismatch)


async def find_by_type(root: Root, type_: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "type", type_, _attribute_selector("type", type_), on_mismatch)


async def find_by_tag(root: Root, tag: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "tag", tag, tag, on_mismatch)


async def find_by_selector(root: Root, selector: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await _by_selector(root, "selector", selector, selector, on_mismatch)


async def find_by_text(root: Root, text: str, exact: bool = True,
                       on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    """Innermost element whose whitespace-normalized text matches ``text``."""
    criterion = "text" if exact else "partial text"
    return await _resolve(
        root, criterion, text,
        lambda doc: doc.find_by_text(text, exact=exact),
        lambda page: page.get_by_text(text, exact=exact),
        on_mismatch,
    )


async def find_by_exact_text(root: Root, text: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await find_by_text(root, text, exact=True, on_mismatch=on_mismatch)


async def find_by_partial_text(root: Root, text: str, on_mismatch: Optional[MismatchHandler] = None) -> UnifiedDOMAssertions:
    return await find_by_text(root, text, exact=False, on_mismatch=on_mismatch)


__all__ = [
    "find_by_class",
    "find_by_exact_text",
    "find_by_id",
    "find_by_label",
    "find_by_name",
    "find_by_partial_text",
    "find_by_placeholder",
    "find_by_role",
    "find_by_selector",
    "find_by_tag",
    "find_by_test_id",
    "find_by_text",
    "find_by_title",
    "find_by_type",
    "find_by_value",
]
