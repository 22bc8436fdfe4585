"""
Mutation tracking, render-performance scoring and memory-leak heuristics.
"""

from .mutation_tracker import DOMMutationTracker, MutationSummary, create_dom_mutation_tracker
from .probes import (
    DocumentProbe,
    LocalDocumentProbe,
    ObservedMutation,
    RemoteDocumentProbe,
    create_probe,
)
from .render_performance import (
    MemoryLeakResult,
    MemorySnapshot,
    PerformanceMonitoringUtils,
    PerformanceReport,
    RenderMetrics,
    RenderPerformanceTesting,
    analyze_memory_leaks,
    analyze_performance_metrics,
    create_render_performance_testing,
    get_dom_element_count,
    measure_memory_usage,
    measure_performance,
    track_dom_mutations,
)
from .thresholds import LeakThresholds, PerformanceThresholds

__all__ = [
    "DOMMutationTracker",
    "DocumentProbe",
    "LeakThresholds",
    "LocalDocumentProbe",
    "MemoryLeakResult",
    "MemorySnapshot",
    "MutationSummary",
    "ObservedMutation",
    "PerformanceMonitoringUtils",
    "PerformanceReport",
    "PerformanceThresholds",
    "RemoteDocumentProbe",
    "RenderMetrics",
    "RenderPerformanceTesting",
    "analyze_memory_leaks",
    "analyze_performance_metrics",
    "create_dom_mutation_tracker",
    "create_probe",
    "create_render_performance_testing",
    "get_dom_element_count",
    "measure_memory_usage",
    "measure_performance",
    "track_dom_mutations",
]
