"""
Substrate adapters.

    local   -- in-process LocalDocument nodes
    remote  -- Playwright locators on a live page
"""

from .local import LocalDOMElement, create_local_assertions
from .remote import (
    PlaywrightDOMAssertions,
    PlaywrightDOMElement,
    create_remote_assertions,
    wrap_locator,
)

__all__ = [
    "LocalDOMElement",
    "PlaywrightDOMAssertions",
    "PlaywrightDOMElement",
    "create_local_assertions",
    "create_remote_assertions",
    "wrap_locator",
]
