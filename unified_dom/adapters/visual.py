"""
Pixel comparison for element screenshots.

Baselines are plain PNG files; the first run records the baseline and
later runs compare against it with Pillow.
"""

from __future__ import annotations

import io
from pathlib import Path

from loguru import logger
from PIL import Image, ImageChops


def count_diff_pixels(baseline_png: bytes, actual_png: bytes, threshold: float = 0.0) -> int:
    """
    Number of pixels whose largest channel difference exceeds ``threshold``.

    Args:
        baseline_png: Expected image bytes
        actual_png: Captured image bytes
        threshold: Tolerated per-channel difference as a 0..1 fraction

    Returns:
        Differing pixel count; every pixel of the larger image when sizes differ
    """
    baseline = Image.open(io.BytesIO(baseline_png)).convert("RGBA")
    actual = Image.open(io.BytesIO(actual_png)).convert("RGBA")

    if baseline.size != actual.size:
        logger.debug(f"Screenshot size changed: {baseline.size} -> {actual.size}")
        return max(baseline.width * baseline.height, actual.width * actual.height)

    limit = max(0.0, min(1.0, threshold)) * 255
    red, green, blue, alpha = ImageChops.difference(baseline, actual).split()
    largest = ImageChops.lighter(ImageChops.lighter(red, green), ImageChops.lighter(blue, alpha))
    mask = largest.point(lambda value: 255 if value > limit else 0)
    return mask.histogram()[255]


def baseline_path(snapshot_dir: Path, name: str) -> Path:
    filename = name if name.endswith(".png") else f"{name}.png"
    return Path(snapshot_dir) / filename


__all__ = ["baseline_path", "count_diff_pixels"]
