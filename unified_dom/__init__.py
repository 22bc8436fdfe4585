"""
================================================================================
Unified DOM Testing Harness
================================================================================

One assertion and interaction vocabulary for two substrates:

    Local   -- an in-process LocalDocument (BeautifulSoup tree)
    Remote  -- a live browser page driven through Playwright

Plus mutation tracking, render-performance and memory-leak heuristics,
and accessibility checks that run unchanged on either substrate.

Usage:
    >>> from unified_dom import LocalDocument, find_by_test_id
    >>> doc = LocalDocument('<button data-testid="go">Go</button>')
    >>> button = await find_by_test_id(doc, "go")
    >>> await button.to_have_text_content("Go")

================================================================================
"""

from .accessibility import (
    ARIAComplianceTesting,
    ColorContrastTesting,
    KeyboardNavigationTesting,
    ScreenReaderTesting,
    create_aria_compliance_testing,
    create_color_contrast_testing,
    create_keyboard_navigation_testing,
    create_screen_reader_testing,
    to_announce_text,
    to_have_accessible_description,
    to_have_accessible_name,
    to_have_sufficient_color_contrast,
)
from .adapters import (
    LocalDOMElement,
    PlaywrightDOMAssertions,
    PlaywrightDOMElement,
    create_local_assertions,
    create_remote_assertions,
)
from .common import get_config, init_logger
from .core import (
    AssertionMismatchError,
    ConfigurationError,
    BoundingBox,
    DOMElement,
    ElementNotFoundError,
    HarnessError,
    InvalidLifecycleError,
    Position,
    StepTimeoutError,
    Substrate,
    UnifiedDOMAssertions,
    UnsupportedOperationError,
    WorkflowAbortedError,
)
from .document import DOMEvent, LocalDocument, MutationObserver
from .instrumentation import (
    DOMMutationTracker,
    LocalDocumentProbe,
    RemoteDocumentProbe,
    RenderPerformanceTesting,
    create_dom_mutation_tracker,
    create_probe,
    create_render_performance_testing,
)
from .interactions import (
    WORKFLOW_PATTERNS,
    DragDropInteractions,
    KeyboardInteractions,
    MultiStepWorkflow,
    WorkflowStep,
    create_drag_drop_interactions,
    create_keyboard_interactions,
    create_multi_step_workflow,
    simulate_drag_and_drop,
    simulate_tab_navigation,
)
from .lookup import (
    find_by_class,
    find_by_exact_text,
    find_by_id,
    find_by_label,
    find_by_name,
    find_by_partial_text,
    find_by_placeholder,
    find_by_role,
    find_by_selector,
    find_by_tag,
    find_by_test_id,
    find_by_text,
    find_by_title,
    find_by_type,
    find_by_value,
)

__version__ = "0.1.0"

__all__ = [
    "ARIAComplianceTesting",
    "AssertionMismatchError",
    "BoundingBox",
    "ColorContrastTesting",
    "ConfigurationError",
    "DOMElement",
    "DOMEvent",
    "DOMMutationTracker",
    "DragDropInteractions",
    "ElementNotFoundError",
    "HarnessError",
    "InvalidLifecycleError",
    "KeyboardInteractions",
    "KeyboardNavigationTesting",
    "LocalDOMElement",
    "LocalDocument",
    "LocalDocumentProbe",
    "MultiStepWorkflow",
    "MutationObserver",
    "PlaywrightDOMAssertions",
    "PlaywrightDOMElement",
    "Position",
    "RemoteDocumentProbe",
    "RenderPerformanceTesting",
    "ScreenReaderTesting",
    "StepTimeoutError",
    "Substrate",
    "UnifiedDOMAssertions",
    "UnsupportedOperationError",
    "WORKFLOW_PATTERNS",
    "WorkflowAbortedError",
    "WorkflowStep",
    "create_aria_compliance_testing",
    "create_color_contrast_testing",
    "create_dom_mutation_tracker",
    "create_drag_drop_interactions",
    "create_keyboard_interactions",
    "create_keyboard_navigation_testing",
    "create_local_assertions",
    "create_multi_step_workflow",
    "create_probe",
    "create_remote_assertions",
    "create_render_performance_testing",
    "create_screen_reader_testing",
    "find_by_class",
    "find_by_exact_text",
    "find_by_id",
    "find_by_label",
    "find_by_name",
    "find_by_partial_text",
    "find_by_placeholder",
    "find_by_role",
    "find_by_selector",
    "find_by_tag",
    "find_by_test_id",
    "find_by_text",
    "find_by_title",
    "find_by_type",
    "find_by_value",
    "get_config",
    "init_logger",
    "simulate_drag_and_drop",
    "simulate_tab_navigation",
    "to_announce_text",
    "to_have_accessible_description",
    "to_have_accessible_name",
    "to_have_sufficient_color_contrast",
]
