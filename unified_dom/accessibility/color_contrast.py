"""
================================================================================
Color Contrast
================================================================================

WCAG 2 contrast ratio between an element's text color and the background
it sits on.

Colors are parsed with Pillow's ``ImageColor`` (hex, rgb(), hsl(), named
colors); ``rgba()`` with fractional alpha is handled here and blended over
the background. A missing foreground is treated as black and a missing or
transparent background as white, which is what an unstyled page renders.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from loguru import logger
from PIL import ImageColor

from ..core.assertions import UnifiedDOMAssertions
from .snapshot import ElementSnapshot, snapshot, subtree_snapshots


REQUIRED_RATIOS = {"AA": 4.5, "AAA": 7.0}

DEFAULT_FOREGROUND = "rgb(0, 0, 0)"
DEFAULT_BACKGROUND = "rgb(255, 255, 255)"

TEXT_ELEMENT_SELECTOR = "p, span, a, button, label, li, td, th, h1, h2, h3, h4, h5, h6"

_RGBA = re.compile(
    r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+%?)\s*)?\)$",
    re.I,
)

RGBA = Tuple[float, float, float, float]


@dataclass(frozen=True)
class ContrastResult:
    contrast_ratio: float
    required_ratio: float
    passes: bool
    level: str
    foreground_color: str
    background_color: str
    element: str


def parse_color(value: str) -> RGBA:
    """
    Parse a CSS color into ``(r, g, b, alpha)`` with channels 0-255 and
    alpha 0-1.

    Raises:
        ValueError: For colors neither this parser nor Pillow understands
    """
    value = value.strip()
    if value.lower() == "transparent":
        return (0.0, 0.0, 0.0, 0.0)

    match = _RGBA.match(value)
    if match:
        r, g, b, alpha = match.groups()
        if alpha is None:
            a = 1.0
        elif alpha.endswith("%"):
            a = float(alpha[:-1]) / 100
        else:
            a = float(alpha)
        return (float(r), float(g), float(b), max(0.0, min(1.0, a)))

    rgb = ImageColor.getrgb(value)
    a = rgb[3] / 255 if len(rgb) == 4 else 1.0
    return (float(rgb[0]), float(rgb[1]), float(rgb[2]), a)


def _blend(top: RGBA, bottom: RGBA) -> RGBA:
    alpha = top[3]
    return (
        top[0] * alpha + bottom[0] * (1 - alpha),
        top[1] * alpha + bottom[1] * (1 - alpha),
        top[2] * alpha + bottom[2] * (1 - alpha),
        1.0,
    )


def relative_luminance(color: RGBA) -> float:
    def channel(value: float) -> float:
        c = value / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(v) for v in color[:3])
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(foreground: str, background: str) -> float:
    """Ratio in 1..21; translucent colors are composited over white."""
    white = parse_color(DEFAULT_BACKGROUND)
    bg = _blend(parse_color(background), white)
    fg = _blend(parse_color(foreground), bg)

    lighter, darker = sorted((relative_luminance(fg), relative_luminance(bg)), reverse=True)
    return (lighter + 0.05) / (darker + 0.05)


def evaluate_contrast(element: ElementSnapshot, level: str = "AA") -> ContrastResult:
    try:
        required = REQUIRED_RATIOS[level]
    except KeyError:
        raise ValueError(f"Unknown WCAG level: {level}") from None

    foreground = element.color or DEFAULT_FOREGROUND
    background = element.background_color or DEFAULT_BACKGROUND
    ratio = contrast_ratio(foreground, background)

    return ContrastResult(
        contrast_ratio=round(ratio, 2),
        required_ratio=required,
        passes=ratio >= required,
        level=level,
        foreground_color=foreground,
        background_color=background,
        element=element.tag.upper(),
    )


class ColorContrastTesting:
    def __init__(self, element: UnifiedDOMAssertions):
        self.element = element

    async def test_color_contrast(self, level: str = "AA") -> ContrastResult:
        return evaluate_contrast(await snapshot(self.element), level)

    async def test_all_text_elements(self, level: str = "AA") -> List[ContrastResult]:
        """Contrast of every text-bearing element in the subtree that has text."""
        results = []
        for element in await subtree_snapshots(self.element, TEXT_ELEMENT_SELECTOR):
            if element.text.strip():
                results.append(evaluate_contrast(element, level))
        failing = sum(1 for r in results if not r.passes)
        if failing:
            logger.warning(f"{failing}/{len(results)} text elements fail {level} contrast")
        return results


def create_color_contrast_testing(element: UnifiedDOMAssertions) -> ColorContrastTesting:
    return ColorContrastTesting(element)


async def to_have_sufficient_color_contrast(element: UnifiedDOMAssertions, min_contrast_ratio: Optional[float] = None) -> None:
    """Contrast must reach ``min_contrast_ratio`` (WCAG AA when omitted)."""
    required = REQUIRED_RATIOS["AA"] if min_contrast_ratio is None else min_contrast_ratio
    result = evaluate_contrast(await snapshot(element), "AA")
    if result.contrast_ratio < required:
        element.on_mismatch("sufficient_color_contrast", f">= {required}", result.contrast_ratio)


__all__ = [
    "ColorContrastTesting",
    "ContrastResult",
    "REQUIRED_RATIOS",
    "contrast_ratio",
    "create_color_contrast_testing",
    "evaluate_contrast",
    "parse_color",
    "relative_luminance",
    "to_have_sufficient_color_contrast",
]
