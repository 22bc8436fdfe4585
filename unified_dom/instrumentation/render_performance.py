"""
================================================================================
Render Performance and Memory Leak Heuristics
================================================================================

Measures how long actions take and how they change the document, scores
repeated measurements, and samples memory over time to flag likely leaks.

Scoring:
    - Render time and memory delta are scored 0-100 independently: 100 up
      to the acceptable threshold, falling linearly to 0 at the "poor"
      value. The performance score is their rounded mean.
    - The leak score adds the weight of each exceeded check (memory growth
      per snapshot, element growth per snapshot, total memory growth),
      capped at 100. A leak is flagged above ``has_leak_above``.

Both are heuristics. Heap readings are best effort (see probes) and an
unavailable reading counts as zero rather than failing the caller.

Usage:
    >>> perf = RenderPerformanceTesting(LocalDocumentProbe(doc))
    >>> report = await perf.test_render_performance(5, render_list)
    >>> report.performance_score
    100

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import math
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from ..common.reporting import attach_json
from .mutation_tracker import DOMMutationTracker
from .probes import DocumentProbe
from .thresholds import LeakThresholds, PerformanceThresholds


Action = Callable[[], Awaitable[Any]]

RECOMMEND_RENDER = "Consider optimizing render performance - average render time is high"
RECOMMEND_MEMORY = "Consider optimizing memory usage - high memory delta detected"
RECOMMEND_LOW_SCORE = "Overall performance score is low - consider comprehensive optimization"
RECOMMEND_OK = "Performance is within acceptable limits"

LEAK_INSUFFICIENT_DATA = "Insufficient data to detect memory leaks"
LEAK_DETECTED = "Memory leak detected - investigate event listeners and DOM references"
LEAK_MEMORY_GROWTH = "High memory growth detected - check for unremoved event listeners"
LEAK_ELEMENT_GROWTH = "DOM elements are not being properly cleaned up"
LEAK_NONE = "No memory leaks detected"


@dataclass(frozen=True)
class RenderMetrics:
    """
    One bracketed action.

    Attributes:
        render_time: Milliseconds spent in the action
        memory_delta: Heap bytes after minus before
        timestamp: Epoch seconds when the measurement finished
        element_count: Element count after minus before
        dom_size: Serialized size after minus before
    """
    render_time: float
    memory_delta: int
    timestamp: float
    element_count: int
    dom_size: int


@dataclass(frozen=True)
class PerformanceReport:
    average_render_time: float
    min_render_time: float
    max_render_time: float
    average_memory_delta: float
    total_memory_delta: int
    performance_score: int
    recommendations: Tuple[str, ...] = ()
    metrics: Tuple[RenderMetrics, ...] = ()


@dataclass(frozen=True)
class MemorySnapshot:
    """``timestamp`` is seconds since sampling started."""
    timestamp: float
    memory: int
    element_count: int


@dataclass(frozen=True)
class MemoryLeakResult:
    has_leak: bool
    leak_score: int
    memory_growth: int
    element_growth: int = 0
    recommendations: Tuple[str, ...] = ()
    snapshots: Tuple[MemorySnapshot, ...] = ()


def _js_round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _linear_score(value: float, acceptable: float, poor: float) -> float:
    if value <= acceptable:
        return 100.0
    if poor <= acceptable:
        return 0.0
    return max(0.0, 100.0 * (poor - value) / (poor - acceptable))


def calculate_performance_score(
    average_render_time: float,
    average_memory_delta: float,
    thresholds: Optional[PerformanceThresholds] = None,
) -> int:
    thresholds = thresholds or PerformanceThresholds.from_config()
    render_score = _linear_score(
        average_render_time, thresholds.render_time_threshold_ms, thresholds.render_time_poor_ms
    )
    memory_score = _linear_score(
        average_memory_delta, thresholds.memory_threshold_bytes, thresholds.memory_poor_bytes
    )
    return _js_round((render_score + memory_score) / 2)


def performance_recommendations(
    average_render_time: float,
    average_memory_delta: float,
    score: int,
    thresholds: Optional[PerformanceThresholds] = None,
) -> List[str]:
    thresholds = thresholds or PerformanceThresholds.from_config()
    recommendations = []
    if average_render_time > thresholds.render_time_threshold_ms:
        recommendations.append(RECOMMEND_RENDER)
    if average_memory_delta > thresholds.memory_threshold_bytes:
        recommendations.append(RECOMMEND_MEMORY)
    if score < thresholds.low_score_threshold:
        recommendations.append(RECOMMEND_LOW_SCORE)
    return recommendations or [RECOMMEND_OK]


def analyze_performance_metrics(
    metrics: Sequence[RenderMetrics],
    thresholds: Optional[PerformanceThresholds] = None,
) -> PerformanceReport:
    """
    Aggregate measurements into a report.

    Raises:
        ValueError: If ``metrics`` is empty
    """
    if not metrics:
        raise ValueError("At least one measurement is required")
    thresholds = thresholds or PerformanceThresholds.from_config()

    render_times = [m.render_time for m in metrics]
    memory_deltas = [m.memory_delta for m in metrics]
    average_render = sum(render_times) / len(render_times)
    total_memory = sum(memory_deltas)
    average_memory = total_memory / len(memory_deltas)

    score = calculate_performance_score(average_render, average_memory, thresholds)
    return PerformanceReport(
        average_render_time=average_render,
        min_render_time=min(render_times),
        max_render_time=max(render_times),
        average_memory_delta=average_memory,
        total_memory_delta=total_memory,
        performance_score=score,
        recommendations=tuple(performance_recommendations(average_render, average_memory, score, thresholds)),
        metrics=tuple(metrics),
    )


def calculate_leak_score(
    memory_growth: float,
    element_growth: float,
    snapshot_count: int,
    thresholds: Optional[LeakThresholds] = None,
) -> int:
    thresholds = thresholds or LeakThresholds.from_config()
    memory_per_snapshot = memory_growth / snapshot_count
    elements_per_snapshot = element_growth / snapshot_count

    score = 0
    if memory_per_snapshot > thresholds.memory_growth_per_snapshot_bytes:
        score += thresholds.memory_growth_per_snapshot_weight
    if elements_per_snapshot > thresholds.element_growth_per_snapshot:
        score += thresholds.element_growth_per_snapshot_weight
    if memory_growth > thresholds.total_memory_growth_bytes:
        score += thresholds.total_memory_growth_weight
    return min(100, score)


def analyze_memory_leaks(
    snapshots: Sequence[MemorySnapshot],
    thresholds: Optional[LeakThresholds] = None,
) -> MemoryLeakResult:
    """Compare the first and last snapshot; fewer than two is insufficient data."""
    if len(snapshots) < 2:
        return MemoryLeakResult(
            has_leak=False,
            leak_score=0,
            memory_growth=0,
            recommendations=(LEAK_INSUFFICIENT_DATA,),
            snapshots=tuple(snapshots),
        )
    thresholds = thresholds or LeakThresholds.from_config()

    first, last = snapshots[0], snapshots[-1]
    memory_growth = last.memory - first.memory
    element_growth = last.element_count - first.element_count
    score = calculate_leak_score(memory_growth, element_growth, len(snapshots), thresholds)
    has_leak = score > thresholds.has_leak_above

    if has_leak:
        recommendations = [LEAK_DETECTED]
        if memory_growth > 0:
            recommendations.append(LEAK_MEMORY_GROWTH)
        if element_growth > 0:
            recommendations.append(LEAK_ELEMENT_GROWTH)
    else:
        recommendations = [LEAK_NONE]

    return MemoryLeakResult(
        has_leak=has_leak,
        leak_score=score,
        memory_growth=memory_growth,
        element_growth=element_growth,
        recommendations=tuple(recommendations),
        snapshots=tuple(snapshots),
    )


class RenderPerformanceTesting:
    """Render timing and memory sampling over one probe."""

    def __init__(
        self,
        probe: DocumentProbe,
        thresholds: Optional[PerformanceThresholds] = None,
        leak_thresholds: Optional[LeakThresholds] = None,
    ):
        self.probe = probe
        self.thresholds = thresholds or PerformanceThresholds.from_config()
        self.leak_thresholds = leak_thresholds or LeakThresholds.from_config()

    async def measure_render_time(self, action: Action) -> RenderMetrics:
        """
        Bracket ``action`` with before/after readings.

        The clock runs only around the action itself so probe round trips
        are not counted as render time.
        """
        memory_before = await self.probe.memory_usage()
        count_before = await self.probe.element_count()
        size_before = await self.probe.dom_size()

        start = time.perf_counter()
        await action()
        render_time = (time.perf_counter() - start) * 1000

        memory_after = await self.probe.memory_usage()
        count_after = await self.probe.element_count()
        size_after = await self.probe.dom_size()

        return RenderMetrics(
            render_time=render_time,
            memory_delta=memory_after - memory_before,
            timestamp=time.time(),
            element_count=count_after - count_before,
            dom_size=size_after - size_before,
        )

    async def test_render_performance(self, iterations: int, action: Action) -> PerformanceReport:
        """Measure ``action`` ``iterations`` times, settling between runs."""
        if iterations < 1:
            raise ValueError("iterations must be at least 1")

        metrics = []
        for _ in range(iterations):
            metrics.append(await self.measure_render_time(action))
            await asyncio.sleep(self.thresholds.settle_delay)

        report = analyze_performance_metrics(metrics, self.thresholds)
        logger.info(
            f"Render performance over {iterations} iterations: "
            f"avg {report.average_render_time:.2f}ms, score {report.performance_score}"
        )
        attach_json(report, name="Render performance report")
        return report

    async def test_memory_usage(self, duration: float = 10.0, interval: float = 1.0) -> MemoryLeakResult:
        """
        Sample memory and element count every ``interval`` seconds until
        ``duration`` seconds have passed. Blocks for the whole duration.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")

        snapshots: List[MemorySnapshot] = []
        start = time.monotonic()
        while True:
            await asyncio.sleep(interval)
            elapsed = time.monotonic() - start
            snapshots.append(MemorySnapshot(
                timestamp=elapsed,
                memory=await self.probe.memory_usage(),
                element_count=await self.probe.element_count(),
            ))
            if elapsed >= duration:
                break

        result = analyze_memory_leaks(snapshots, self.leak_thresholds)
        logger.info(f"Memory sampling: {len(snapshots)} snapshots, leak score {result.leak_score}")
        attach_json(result, name="Memory leak analysis")
        return result

    async def test_dom_manipulation_performance(self, operations: int = 1000) -> RenderMetrics:
        return await self.measure_render_time(lambda: self.probe.run_dom_manipulation(operations))

    async def test_event_handling_performance(self, events: int = 1000) -> RenderMetrics:
        return await self.measure_render_time(lambda: self.probe.run_event_dispatch(events))


def create_render_performance_testing(probe: DocumentProbe) -> RenderPerformanceTesting:
    return RenderPerformanceTesting(probe)


# ================================================================================
# Monitoring helpers
# ================================================================================

class PerformanceMonitoringUtils:
    """
    Point-in-time readings. Timing entries exist only on the Remote
    substrate; Local probes raise UnsupportedOperationError for them.
    """

    def __init__(self, probe: DocumentProbe):
        self.probe = probe

    async def get_current_memory_usage(self) -> int:
        return await self.probe.memory_usage()

    async def get_current_element_count(self) -> int:
        return await self.probe.element_count()

    async def get_current_dom_size(self) -> int:
        return await self.probe.dom_size()

    async def get_performance_timing(self) -> Optional[Dict[str, Any]]:
        return await self.probe.navigation_timing()

    async def get_resource_timing(self) -> List[Dict[str, Any]]:
        return await self.probe.performance_entries("resource")

    async def get_paint_timing(self) -> List[Dict[str, Any]]:
        return await self.probe.performance_entries("paint")

    async def get_layout_shift(self) -> List[Dict[str, Any]]:
        return await self.probe.performance_entries("layout-shift")

    async def get_largest_contentful_paint(self) -> List[Dict[str, Any]]:
        return await self.probe.performance_entries("largest-contentful-paint")

    async def get_first_input_delay(self) -> List[Dict[str, Any]]:
        return await self.probe.performance_entries("first-input")

    async def get_cumulative_layout_shift(self) -> float:
        shifts = await self.get_layout_shift()
        return sum(entry.get("value") or 0 for entry in shifts)


async def measure_performance(operation: Action) -> float:
    """Milliseconds taken by ``operation``."""
    start = time.perf_counter()
    await operation()
    return (time.perf_counter() - start) * 1000


async def track_dom_mutations(probe: DocumentProbe, operation: Action) -> int:
    """
    Number of mutations observed while ``operation`` runs.

    When the observer saw nothing, the change in element count is reported
    instead. Raises :class:`InvalidLifecycleError` if the probe is already
    observing.
    """
    count_before = await probe.element_count()
    tracker = DOMMutationTracker(probe)
    await tracker.start_tracking()
    try:
        await operation()
    finally:
        summary = await tracker.stop_tracking()

    if summary.total_mutations:
        return summary.total_mutations
    return abs(await probe.element_count() - count_before)


async def measure_memory_usage(probe: DocumentProbe, operation: Action) -> int:
    """Heap delta across ``operation``; an approximation (0 when unavailable)."""
    before = await probe.memory_usage()
    await operation()
    return await probe.memory_usage() - before


async def get_dom_element_count(probe: DocumentProbe) -> int:
    return await probe.element_count()


__all__ = [
    "MemoryLeakResult",
    "MemorySnapshot",
    "PerformanceMonitoringUtils",
    "PerformanceReport",
    "RenderMetrics",
    "RenderPerformanceTesting",
    "analyze_memory_leaks",
    "analyze_performance_metrics",
    "calculate_leak_score",
    "calculate_performance_score",
    "create_render_performance_testing",
    "get_dom_element_count",
    "measure_memory_usage",
    "measure_performance",
    "performance_recommendations",
    "track_dom_mutations",
]
