"""
Accessible name/description resolution, ARIA validation, keyboard
navigation and color contrast checks.
"""

from .aria_validation import (
    ARIAComplianceTesting,
    ARIAIssue,
    ARIAValidationResult,
    create_aria_compliance_testing,
    validate_snapshot,
)
from .color_contrast import (
    ColorContrastTesting,
    ContrastResult,
    contrast_ratio,
    create_color_contrast_testing,
    to_have_sufficient_color_contrast,
)
from .keyboard_navigation import (
    KeyboardNavigationResult,
    KeyboardNavigationTesting,
    KeyboardShortcut,
    create_keyboard_navigation_testing,
)
from .screen_reader import (
    ScreenReaderTesting,
    create_screen_reader_testing,
    to_announce_text,
    to_have_accessible_description,
    to_have_accessible_name,
    to_have_role,
)
from .snapshot import ElementSnapshot

__all__ = [
    "ARIAComplianceTesting",
    "ARIAIssue",
    "ARIAValidationResult",
    "ColorContrastTesting",
    "ContrastResult",
    "ElementSnapshot",
    "KeyboardNavigationResult",
    "KeyboardNavigationTesting",
    "KeyboardShortcut",
    "ScreenReaderTesting",
    "contrast_ratio",
    "create_aria_compliance_testing",
    "create_color_contrast_testing",
    "create_keyboard_navigation_testing",
    "create_screen_reader_testing",
    "to_announce_text",
    "to_have_accessible_description",
    "to_have_accessible_name",
    "to_have_role",
    "to_have_sufficient_color_contrast",
    "validate_snapshot",
]
