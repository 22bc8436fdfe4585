"""
Capability contract, assertion core and error hierarchy.
"""

from .assertions import MismatchHandler, UnifiedDOMAssertions, raise_mismatch
from .contract import BoundingBox, DOMElement, Position, Substrate
from ..errors import (
    AssertionMismatchError,
    ConfigurationError,
    ElementNotFoundError,
    HarnessError,
    InvalidLifecycleError,
    StepTimeoutError,
    UnsupportedOperationError,
    WorkflowAbortedError,
)

__all__ = [
    "AssertionMismatchError",
    "BoundingBox",
    "ConfigurationError",
    "DOMElement",
    "ElementNotFoundError",
    "HarnessError",
    "InvalidLifecycleError",
    "MismatchHandler",
    "Position",
    "StepTimeoutError",
    "Substrate",
    "UnifiedDOMAssertions",
    "UnsupportedOperationError",
    "WorkflowAbortedError",
    "raise_mismatch",
]
