"""
================================================================================
Document Probes
================================================================================

Substrate-neutral readings used by the instrumentation engines.

A probe answers the same questions for both substrates: how many elements
the document holds, how large its serialization is, how much heap is in
use, and which mutations happened while observation was on.

Heap readings are best effort:
    - Local reads ``tracemalloc`` when tracing is active, else reports 0.
    - Remote reads ``performance.memory.usedJSHeapSize`` (Chromium only),
      else reports 0.

Remote mutation timestamps are taken when the observer callback runs, so
records delivered in one batch share a timestamp.

One observation runs per document at a time; starting a second one raises
:class:`InvalidLifecycleError` and leaves the running one untouched.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import tracemalloc
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from playwright.async_api import Page

from ..core.contract import Substrate
from ..errors import InvalidLifecycleError, UnsupportedOperationError
from ..document import DOMEvent, LocalDocument, MutationObserver, MutationRecord


@dataclass(frozen=True)
class ObservedMutation:
    """
    One mutation as seen by a probe.

    Attributes:
        type: "childList", "attributes" or "characterData"
        target_name: nodeName of the mutated node (``DIV``, ``#text``)
        added_nodes: Number of nodes inserted
        removed_nodes: Number of nodes removed
        timestamp: Seconds on a clock that is monotonic within one session
    """
    type: str
    target_name: str
    added_nodes: int = 0
    removed_nodes: int = 0
    timestamp: float = 0.0

    @classmethod
    def from_record(cls, record: MutationRecord) -> "ObservedMutation":
        return cls(
            type=record.type,
            target_name=record.target_name,
            added_nodes=len(record.added_nodes),
            removed_nodes=len(record.removed_nodes),
            timestamp=record.timestamp,
        )


class DocumentProbe(ABC):
    """Readings and mutation observation over one document."""

    substrate: Substrate

    @abstractmethod
    async def element_count(self) -> int:
        ...

    @abstractmethod
    async def dom_size(self) -> int:
        """Length of the serialized document."""

    @abstractmethod
    async def memory_usage(self) -> int:
        """Heap bytes in use; 0 when the substrate cannot tell."""

    @abstractmethod
    async def start_observing(self) -> None:
        ...

    @abstractmethod
    async def observed_count(self) -> int:
        """Mutations delivered so far in the current observation."""

    @abstractmethod
    async def stop_observing(self) -> List[ObservedMutation]:
        """End observation and return every mutation it saw, including undelivered ones."""

    @abstractmethod
    async def run_dom_manipulation(self, operations: int) -> None:
        """Append ``operations`` divs to a fresh container, then remove the container."""

    @abstractmethod
    async def run_event_dispatch(self, events: int) -> int:
        """Click a fresh element ``events`` times; returns handler invocations."""

    async def performance_entries(self, entry_type: str) -> List[Dict[str, Any]]:
        raise UnsupportedOperationError("performance_entries", self.substrate)

    async def navigation_timing(self) -> Optional[Dict[str, Any]]:
        raise UnsupportedOperationError("navigation_timing", self.substrate)


class LocalDocumentProbe(DocumentProbe):
    substrate = Substrate.LOCAL

    def __init__(self, document: LocalDocument):
        self.document = document
        self._observer: Optional[MutationObserver] = None
        self._delivered: List[MutationRecord] = []
        self._warned_memory = False

    async def element_count(self) -> int:
        return self.document.element_count()

    async def dom_size(self) -> int:
        return self.document.serialized_size()

    async def memory_usage(self) -> int:
        if tracemalloc.is_tracing():
            current, _peak = tracemalloc.get_traced_memory()
            return current
        if not self._warned_memory:
            logger.warning("tracemalloc is not tracing; local memory readings report 0")
            self._warned_memory = True
        return 0

    async def start_observing(self) -> None:
        if self._observer is not None:
            raise InvalidLifecycleError("A mutation observer is already active on this document")
        self._delivered = []
        self._observer = MutationObserver(self.document, lambda records, _observer: self._delivered.extend(records))
        self._observer.observe(self.document.body)

    async def observed_count(self) -> int:
        return len(self._delivered)

    async def stop_observing(self) -> List[ObservedMutation]:
        records = list(self._delivered)
        if self._observer is not None:
            records.extend(self._observer.take_records())
            self._observer.disconnect()
            self._observer = None
        self._delivered = []
        return [ObservedMutation.from_record(record) for record in records]

    async def run_dom_manipulation(self, operations: int) -> None:
        doc = self.document
        container = doc.append_child(doc.body, doc.create_element("div"))
        for i in range(operations):
            doc.append_child(container, doc.create_element("div", text=f"Element {i}"))
        doc.remove_child(doc.body, container)

    async def run_event_dispatch(self, events: int) -> int:
        doc = self.document
        element = doc.append_child(doc.body, doc.create_element("div"))
        count = 0

        def on_click(_event: DOMEvent) -> None:
            nonlocal count
            count += 1

        doc.add_event_listener(element, "click", on_click)
        for _ in range(events):
            doc.click(element)
        doc.remove_event_listener(element, "click", on_click)
        doc.remove_child(doc.body, element)
        return count


# ================================================================================
# Remote
# ================================================================================

_START_OBSERVING_JS = """() => {
    if (window.__udObserver) return false;
    window.__udMutations = [];
    window.__udToRecord = (m, t) => ({
        type: m.type,
        target: m.target.nodeName,
        added: m.addedNodes.length,
        removed: m.removedNodes.length,
        timestamp: t,
    });
    window.__udObserver = new MutationObserver(list => {
        const t = performance.now();
        for (const m of list) window.__udMutations.push(window.__udToRecord(m, t));
    });
    window.__udObserver.observe(document.body, {
        childList: true,
        subtree: true,
        attributes: true,
        attributeOldValue: true,
        characterData: true,
        characterDataOldValue: true,
    });
    return true;
}"""

_STOP_OBSERVING_JS = """() => {
    const records = window.__udMutations || [];
    const observer = window.__udObserver;
    if (observer) {
        const t = performance.now();
        for (const m of observer.takeRecords()) records.push(window.__udToRecord(m, t));
        observer.disconnect();
    }
    delete window.__udObserver;
    delete window.__udMutations;
    return records;
}"""

_DOM_MANIPULATION_JS = """(operations) => {
    const container = document.createElement('div');
    document.body.appendChild(container);
    for (let i = 0; i < operations; i++) {
        const element = document.createElement('div');
        element.textContent = `Element ${i}`;
        container.appendChild(element);
    }
    document.body.removeChild(container);
}"""

_EVENT_DISPATCH_JS = """(events) => {
    const element = document.createElement('div');
    document.body.appendChild(element);
    let count = 0;
    const handler = () => { count++; };
    element.addEventListener('click', handler);
    for (let i = 0; i < events; i++) element.click();
    element.removeEventListener('click', handler);
    document.body.removeChild(element);
    return count;
}"""


class RemoteDocumentProbe(DocumentProbe):
    substrate = Substrate.REMOTE

    def __init__(self, page: Page):
        self.page = page

    async def element_count(self) -> int:
        return await self.page.evaluate("() => document.querySelectorAll('*').length")

    async def dom_size(self) -> int:
        return await self.page.evaluate("() => new XMLSerializer().serializeToString(document).length")

    async def memory_usage(self) -> int:
        return await self.page.evaluate(
            "() => (performance.memory && performance.memory.usedJSHeapSize) || 0"
        )

    async def start_observing(self) -> None:
        if await self.page.evaluate(_START_OBSERVING_JS) is False:
            raise InvalidLifecycleError("A mutation observer is already active on this page")

    async def observed_count(self) -> int:
        return await self.page.evaluate("() => (window.__udMutations || []).length")

    async def stop_observing(self) -> List[ObservedMutation]:
        raw = await self.page.evaluate(_STOP_OBSERVING_JS)
        return [
            ObservedMutation(
                type=item["type"],
                target_name=item["target"],
                added_nodes=item["added"],
                removed_nodes=item["removed"],
                timestamp=item["timestamp"] / 1000,
            )
            for item in raw
        ]

    async def run_dom_manipulation(self, operations: int) -> None:
        await self.page.evaluate(_DOM_MANIPULATION_JS, operations)

    async def run_event_dispatch(self, events: int) -> int:
        return await self.page.evaluate(_EVENT_DISPATCH_JS, events)

    async def performance_entries(self, entry_type: str) -> List[Dict[str, Any]]:
        return await self.page.evaluate(
            "(type) => performance.getEntriesByType(type).map(e => e.toJSON())",
            entry_type,
        )

    async def navigation_timing(self) -> Optional[Dict[str, Any]]:
        entries = await self.performance_entries("navigation")
        return entries[0] if entries else None


def create_probe(root: Union[LocalDocument, Page]) -> DocumentProbe:
    """Probe for a LocalDocument or a Playwright page."""
    if isinstance(root, LocalDocument):
        return LocalDocumentProbe(root)
    return RemoteDocumentProbe(root)


__all__ = [
    "DocumentProbe",
    "LocalDocumentProbe",
    "ObservedMutation",
    "RemoteDocumentProbe",
    "create_probe",
]
