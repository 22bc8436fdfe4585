"""
================================================================================
Capability Contract
================================================================================

The minimal asynchronous operation set every element handle must support,
regardless of the substrate behind it.

Every method is a coroutine even when the substrate answers synchronously,
so test code can ``await`` the same calls against an in-process document
and against a remote browser.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Substrate(str, Enum):
    """Execution environment backing an element handle."""
    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class BoundingBox:
    """Element box in CSS pixels."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Position:
    """Point relative to an element's top-left corner."""
    x: float
    y: float


class DOMElement(ABC):
    """
    Base element interface that all substrate adapters implement.

    Attributes:
        substrate: The substrate tag; fixed for the handle's lifetime.
        settle_timeout: Seconds assertions may poll before failing.
            Zero means a single immediate evaluation.
    """

    substrate: Substrate
    settle_timeout: float = 0.0

    @abstractmethod
    async def is_visible(self) -> bool:
        """True unless display is none, visibility is hidden or opacity is 0."""

    @abstractmethod
    async def is_attached(self) -> bool:
        """True while the element is part of the document."""

    @abstractmethod
    async def get_text_content(self) -> str:
        ...

    @abstractmethod
    async def get_attribute(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    async def click(self) -> None:
        ...

    @abstractmethod
    async def focus(self) -> None:
        ...

    @abstractmethod
    async def type(self, text: str) -> None:
        """Replace the element's value with ``text``."""


__all__ = [
    "BoundingBox",
    "DOMElement",
    "Position",
    "Substrate",
]
