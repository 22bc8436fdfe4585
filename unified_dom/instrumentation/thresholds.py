"""
Scoring constants for the render-performance and leak heuristics.

Both sets default to the values under ``performance.*`` and ``leak.*`` in
config/config.yaml (environment variables override them, e.g.
``LEAK_HAS_LEAK_ABOVE=60``). Engines accept an explicit instance for
per-test tuning.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from ..common.config_loader import get_config


def _from_section(cls: type, section: str):
    values = {f.name: get_config(f"{section}.{f.name}", f.default) for f in fields(cls)}
    return cls(**values)


@dataclass(frozen=True)
class PerformanceThresholds:
    """
    Attributes:
        render_time_threshold_ms: Average render time still scored 100
        render_time_poor_ms: Average render time scored 0
        memory_threshold_bytes: Average memory delta still scored 100
        memory_poor_bytes: Average memory delta scored 0
        low_score_threshold: Scores below this get a comprehensive-optimization hint
        settle_delay: Seconds to wait between render iterations
    """
    render_time_threshold_ms: float = 100.0
    render_time_poor_ms: float = 1000.0
    memory_threshold_bytes: float = 1_000_000
    memory_poor_bytes: float = 10_000_000
    low_score_threshold: float = 70
    settle_delay: float = 0.1

    @classmethod
    def from_config(cls) -> "PerformanceThresholds":
        return _from_section(cls, "performance")


@dataclass(frozen=True)
class LeakThresholds:
    """
    Three independent weighted checks; the weights add up to the leak score.

    Attributes:
        memory_growth_per_snapshot_bytes: Growth per snapshot that triggers its weight
        memory_growth_per_snapshot_weight: Score added when it is exceeded
        element_growth_per_snapshot: Element growth per snapshot that triggers its weight
        element_growth_per_snapshot_weight: Score added when it is exceeded
        total_memory_growth_bytes: Total growth that triggers its weight
        total_memory_growth_weight: Score added when it is exceeded
        has_leak_above: Scores strictly above this flag a leak
    """
    memory_growth_per_snapshot_bytes: float = 100_000
    memory_growth_per_snapshot_weight: int = 40
    element_growth_per_snapshot: float = 10
    element_growth_per_snapshot_weight: int = 30
    total_memory_growth_bytes: float = 1_000_000
    total_memory_growth_weight: int = 30
    has_leak_above: int = 50

    @classmethod
    def from_config(cls) -> "LeakThresholds":
        return _from_section(cls, "leak")


__all__ = ["LeakThresholds", "PerformanceThresholds"]
