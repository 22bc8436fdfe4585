"""
Exception hierarchy for the unified DOM harness.

Every error raised by the harness derives from :class:`HarnessError` so
callers can catch harness failures separately from errors raised by the
code under test.
"""

from __future__ import annotations

from typing import Any, List, Optional


class HarnessError(Exception):
    """Base class for all harness errors."""
    pass


class ConfigurationError(HarnessError):
    """Raised when configuration loading or access fails."""
    pass


class ElementNotFoundError(HarnessError):
    """Raised when an element lookup finds nothing."""

    def __init__(self, criterion: str, value: Any, detail: str = ""):
        self.criterion = criterion
        self.value = value
        message = f'Element with {criterion} "{value}" not found'
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class AssertionMismatchError(AssertionError, HarnessError):
    """
    Raised when an assertion's expected and actual values diverge.

    Subclasses ``AssertionError`` so pytest renders it as a plain test
    failure rather than an error.
    """

    def __init__(self, predicate: str, expected: Any, actual: Any, message: str = ""):
        self.predicate = predicate
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"{predicate}: expected {expected!r}, got {actual!r}"
        )


class InvalidLifecycleError(HarnessError):
    """Raised on double-start or stop-without-start of a tracking session."""
    pass


class StepTimeoutError(HarnessError):
    """
    Raised when a workflow step exceeds its allotted time.

    The underlying action is NOT cancelled and may still complete later.
    """

    def __init__(self, step: str, timeout: float):
        self.step = step
        self.timeout = timeout
        super().__init__(f'Step "{step}" timed out after {timeout * 1000:.0f}ms')


class WorkflowAbortedError(HarnessError):
    """Raised when a required workflow step fails."""

    def __init__(self, step: str, results: List[Any], total_time: float, cause: Optional[BaseException] = None):
        self.step = step
        self.results = results
        self.total_time = total_time
        self.cause = cause
        super().__init__(f"Required step failed: {step}")


class UnsupportedOperationError(HarnessError):
    """Raised when a substrate-exclusive capability is used on the wrong substrate."""

    def __init__(self, operation: str, substrate: Any):
        self.operation = operation
        self.substrate = substrate
        name = getattr(substrate, "value", substrate)
        super().__init__(f'Operation "{operation}" is not supported on the {name} substrate')


__all__ = [
    "HarnessError",
    "ConfigurationError",
    "ElementNotFoundError",
    "AssertionMismatchError",
    "InvalidLifecycleError",
    "StepTimeoutError",
    "WorkflowAbortedError",
    "UnsupportedOperationError",
]
