"""
================================================================================
DOM Mutation Tracker
================================================================================

Brackets one observation session over the document body and summarizes
what changed.

Lifecycle: idle -> tracking -> idle. Starting twice or stopping while idle
raises :class:`InvalidLifecycleError`.

Rates are approximate. The average divides by the wall-clock session
length; the peak is the largest number of mutations whose timestamps fall
inside any one-second window. Records are delivered in batches, so a
mid-session count may lag by one batch.

Usage:
    >>> tracker = DOMMutationTracker(LocalDocumentProbe(doc))
    >>> await tracker.start_tracking()
    >>> ...  # mutate the document
    >>> summary = await tracker.stop_tracking()
    >>> summary.added_nodes

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from loguru import logger

from ..errors import InvalidLifecycleError
from .probes import DocumentProbe, ObservedMutation


# Sliding window for the peak rate, in seconds
PEAK_WINDOW = 1.0


@dataclass(frozen=True)
class MutationSummary:
    total_mutations: int
    added_nodes: int
    removed_nodes: int
    attribute_changes: int
    text_changes: int
    mutations_by_type: Dict[str, int] = field(default_factory=dict)
    mutations_by_element: Dict[str, int] = field(default_factory=dict)
    average_mutations_per_second: float = 0.0
    peak_mutations_per_second: float = 0.0
    duration: float = 0.0


def peak_mutations_per_second(timestamps: Sequence[float], window: float = PEAK_WINDOW) -> float:
    """
    Largest number of timestamps inside any ``window``-second span,
    scaled to a per-second rate.
    """
    if not timestamps:
        return 0.0
    ordered = sorted(timestamps)
    best = 0
    start = 0
    for end, stamp in enumerate(ordered):
        while stamp - ordered[start] >= window:
            start += 1
        best = max(best, end - start + 1)
    return best / window


def summarize_mutations(mutations: Sequence[ObservedMutation], duration: float) -> MutationSummary:
    by_type = Counter(m.type for m in mutations)
    by_element = Counter(m.target_name for m in mutations)
    total = len(mutations)

    return MutationSummary(
        total_mutations=total,
        added_nodes=sum(m.added_nodes for m in mutations if m.type == "childList"),
        removed_nodes=sum(m.removed_nodes for m in mutations if m.type == "childList"),
        attribute_changes=by_type.get("attributes", 0),
        text_changes=by_type.get("characterData", 0),
        mutations_by_type=dict(by_type),
        mutations_by_element=dict(by_element),
        average_mutations_per_second=total / duration if duration > 0 else 0.0,
        peak_mutations_per_second=peak_mutations_per_second([m.timestamp for m in mutations]),
        duration=duration,
    )


class DOMMutationTracker:
    """One mutation session at a time over a probe's document."""

    def __init__(self, probe: DocumentProbe):
        self.probe = probe
        self._tracking = False
        self._start_time = 0.0

    def is_active(self) -> bool:
        return self._tracking

    async def start_tracking(self) -> None:
        if self._tracking:
            raise InvalidLifecycleError("Mutation tracking is already active")
        self._tracking = True
        self._start_time = time.monotonic()
        try:
            await self.probe.start_observing()
        except Exception:
            self._tracking = False
            raise
        logger.debug(f"Mutation tracking started on {self.probe.substrate.value} substrate")

    async def stop_tracking(self) -> MutationSummary:
        if not self._tracking:
            raise InvalidLifecycleError("Mutation tracking is not active")
        try:
            mutations: List[ObservedMutation] = await self.probe.stop_observing()
        finally:
            self._tracking = False

        summary = summarize_mutations(mutations, time.monotonic() - self._start_time)
        logger.info(
            f"Mutation tracking stopped: {summary.total_mutations} mutations, "
            f"+{summary.added_nodes}/-{summary.removed_nodes} nodes"
        )
        return summary

    async def current_mutation_count(self) -> int:
        """Mutations delivered so far; 0 while idle."""
        if not self._tracking:
            return 0
        return await self.probe.observed_count()


def create_dom_mutation_tracker(probe: DocumentProbe) -> DOMMutationTracker:
    return DOMMutationTracker(probe)


__all__ = [
    "DOMMutationTracker",
    "MutationSummary",
    "PEAK_WINDOW",
    "create_dom_mutation_tracker",
    "peak_mutations_per_second",
    "summarize_mutations",
]
