"""
================================================================================
ARIA Compliance
================================================================================

Structural ARIA checks driven by two tables:

    REQUIRED_ATTRIBUTES -- companion attributes a role cannot do without
    VALID_VALUES        -- enumerated literal values for token attributes

Every missing companion and every out-of-table value is one issue; the
score starts at 100 and loses ``accessibility.issue_penalty`` per issue,
floored at 0.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..common.config_loader import get_config
from ..core.assertions import UnifiedDOMAssertions
from .screen_reader import ANNOUNCED_ROLES
from .snapshot import ElementSnapshot, snapshot, subtree_snapshots


REQUIRED_ATTRIBUTES: Dict[str, Tuple[str, ...]] = {
    "slider": ("aria-valuemin", "aria-valuemax", "aria-valuenow"),
    "progressbar": ("aria-valuemin", "aria-valuemax", "aria-valuenow"),
    "scrollbar": ("aria-controls", "aria-valuenow"),
    "meter": ("aria-valuenow",),
    "tab": ("aria-selected",),
    "tabpanel": ("aria-labelledby",),
    "dialog": ("aria-labelledby",),
    "combobox": ("aria-expanded",),
    "heading": ("aria-level",),
}

_BOOLEAN = ("true", "false")
_TRISTATE = ("true", "false", "mixed")

VALID_VALUES: Dict[str, Tuple[str, ...]] = {
    "aria-live": ("polite", "assertive", "off"),
    "aria-expanded": _BOOLEAN,
    "aria-selected": _BOOLEAN,
    "aria-checked": _TRISTATE,
    "aria-pressed": _TRISTATE,
    "aria-sort": ("ascending", "descending", "none", "other"),
    "aria-orientation": ("horizontal", "vertical"),
    "aria-hidden": _BOOLEAN,
    "aria-disabled": _BOOLEAN,
    "aria-busy": _BOOLEAN,
    "aria-atomic": _BOOLEAN,
    "aria-modal": _BOOLEAN,
    "aria-multiline": _BOOLEAN,
    "aria-multiselectable": _BOOLEAN,
    "aria-readonly": _BOOLEAN,
    "aria-required": _BOOLEAN,
    "aria-invalid": ("true", "false", "grammar", "spelling"),
    "aria-haspopup": ("true", "false", "menu", "listbox", "tree", "grid", "dialog"),
    "aria-current": ("page", "step", "location", "date", "time", "true", "false"),
    "aria-autocomplete": ("inline", "list", "both", "none"),
}

VALID_LANDMARK_ROLES = frozenset({
    "banner",
    "complementary",
    "contentinfo",
    "form",
    "main",
    "navigation",
    "region",
    "search",
})

LIVE_REGION_SELECTOR = "[aria-live], " + ", ".join(f'[role="{role}"]' for role in sorted(ANNOUNCED_ROLES))
LANDMARK_SELECTOR = "header, footer, nav, main, aside, section, form, " + ", ".join(
    f'[role="{role}"]' for role in sorted(VALID_LANDMARK_ROLES)
)
FORM_CONTROL_SELECTOR = 'input:not([type="hidden"]), select, textarea'


@dataclass(frozen=True)
class ARIAIssue:
    type: str
    severity: str
    message: str
    attribute: Optional[str] = None
    role: Optional[str] = None
    value: Optional[str] = None
    element: Optional[str] = None


@dataclass(frozen=True)
class ARIAValidationResult:
    valid: bool
    issues: Tuple[ARIAIssue, ...]
    score: int


def required_attributes_for_role(role: str) -> Tuple[str, ...]:
    return REQUIRED_ATTRIBUTES.get(role, ())


def is_valid_aria_value(attribute: str, value: str) -> bool:
    allowed = VALID_VALUES.get(attribute)
    return allowed is None or value in allowed


def validate_snapshot(element: ElementSnapshot, penalty: Optional[int] = None) -> ARIAValidationResult:
    """Validate one element's role companions and ARIA values."""
    if penalty is None:
        penalty = get_config("accessibility.issue_penalty", 10)

    issues: List[ARIAIssue] = []
    role = element.get("role")
    if role:
        for attribute in required_attributes_for_role(role):
            if not element.get(attribute):
                issues.append(ARIAIssue(
                    type="missing_required_attribute",
                    severity="error",
                    message=f"Missing required attribute: {attribute} for role: {role}",
                    attribute=attribute,
                    role=role,
                    element=element.tag.upper(),
                ))

    for name, value in element.attributes.items():
        if name.startswith("aria-") and not is_valid_aria_value(name, value):
            issues.append(ARIAIssue(
                type="invalid_aria_value",
                severity="error",
                message=f'Invalid ARIA value: {name}="{value}"',
                attribute=name,
                value=value,
                element=element.tag.upper(),
            ))

    return ARIAValidationResult(
        valid=not issues,
        issues=tuple(issues),
        score=max(0, 100 - len(issues) * penalty),
    )


class ARIAComplianceTesting:
    """ARIA checks for one element and, for the scans, its subtree."""

    def __init__(self, element: UnifiedDOMAssertions, penalty: Optional[int] = None):
        self.element = element
        self.penalty = penalty

    async def validate_aria_structure(self) -> ARIAValidationResult:
        return validate_snapshot(await snapshot(self.element), self.penalty)

    async def test_aria_live_regions(self) -> bool:
        """Every live region uses a valid politeness value (implicit roles count as valid)."""
        for region in await subtree_snapshots(self.element, LIVE_REGION_SELECTOR):
            politeness = region.get("aria-live")
            if politeness is not None and politeness not in VALID_VALUES["aria-live"]:
                return False
        return True

    async def test_aria_landmarks(self) -> bool:
        """Landmark elements with an explicit role use a landmark role."""
        for landmark in await subtree_snapshots(self.element, LANDMARK_SELECTOR):
            role = landmark.get("role")
            if role and role not in VALID_LANDMARK_ROLES:
                return False
        return True

    async def test_aria_form_controls(self) -> bool:
        """Every form control has aria-label, aria-labelledby or a ``<label for>``."""
        for control in await subtree_snapshots(self.element, FORM_CONTROL_SELECTOR):
            if control.get("aria-label") or control.get("aria-labelledby"):
                continue
            if control.label_text is None:
                return False
        return True


def create_aria_compliance_testing(element: UnifiedDOMAssertions) -> ARIAComplianceTesting:
    return ARIAComplianceTesting(element)


__all__ = [
    "ARIAComplianceTesting",
    "ARIAIssue",
    "ARIAValidationResult",
    "REQUIRED_ATTRIBUTES",
    "VALID_LANDMARK_ROLES",
    "VALID_VALUES",
    "create_aria_compliance_testing",
    "is_valid_aria_value",
    "required_attributes_for_role",
    "validate_snapshot",
]
