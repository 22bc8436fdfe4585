"""
================================================================================
Multi-Step Workflows
================================================================================

Ordered, named steps executed front-to-back with per-step timeouts.

Timeouts are races, not cancellations: when a step loses the race against
its timeout the step is recorded as failed with :class:`StepTimeoutError`,
but its action keeps running in the background and may still complete
later. Late failures of such orphaned actions are logged, never raised.

A failing required step aborts the run with :class:`WorkflowAbortedError`
carrying every result gathered so far; a failing optional step is recorded
and execution continues.

Usage:
    >>> workflow = (
    ...     MultiStepWorkflow()
    ...     .add_step("open_menu", menu.click)
    ...     .add_step("dismiss_banner", banner_close.click, required=False)
    ...     .add_step("verify", lambda: panel.to_be_visible(), timeout=5.0)
    ... )
    >>> result = await workflow.execute()

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Set, Union

import allure
from loguru import logger

from ..common.config_loader import get_config
from ..core.assertions import UnifiedDOMAssertions
from ..errors import StepTimeoutError, WorkflowAbortedError


StepAction = Callable[[], Awaitable[Any]]


@dataclass
class WorkflowStep:
    """
    A single workflow step.

    Attributes:
        name: Unique within its workflow
        action: Coroutine function run once per execution
        required: Whether a failure aborts the workflow
        timeout: Seconds before the step is considered failed;
            ``timeouts.workflow_step`` when omitted
    """
    name: str
    action: StepAction
    required: bool = True
    timeout: Optional[float] = None


@dataclass(frozen=True)
class StepResult:
    """Outcome of one step; ``execution_time`` is in seconds."""
    step: str
    success: bool
    result: Any = None
    error: Optional[BaseException] = None
    execution_time: float = 0.0


@dataclass(frozen=True)
class WorkflowResult:
    """Outcome of a completed run; ``total_time`` is in seconds."""
    success: bool
    results: List[StepResult] = field(default_factory=list)
    total_time: float = 0.0

    @property
    def failed_steps(self) -> List[str]:
        return [r.step for r in self.results if not r.success]


class MultiStepWorkflow:
    """Ordered list of steps; mutable only by appending or clearing."""

    def __init__(self) -> None:
        self._steps: List[WorkflowStep] = []
        # Timed-out actions still running; referenced so they are not collected
        self._orphans: Set[asyncio.Future] = set()

    def add_step(
        self,
        step: Union[WorkflowStep, str],
        action: Optional[StepAction] = None,
        required: bool = True,
        timeout: Optional[float] = None,
    ) -> "MultiStepWorkflow":
        """
        Append a step, either as a :class:`WorkflowStep` or by name and action.

        Returns:
            The workflow itself, for chaining

        Raises:
            ValueError: If a step with the same name already exists
        """
        if not isinstance(step, WorkflowStep):
            if action is None:
                raise ValueError(f"Step {step!r} needs an action")
            step = WorkflowStep(step, action, required, timeout)

        if any(existing.name == step.name for existing in self._steps):
            raise ValueError(f"Duplicate workflow step name: {step.name}")

        self._steps.append(step)
        return self

    @property
    def steps(self) -> List[WorkflowStep]:
        return list(self._steps)

    @property
    def step_count(self) -> int:
        return len(self._steps)

    @property
    def required_step_count(self) -> int:
        return sum(1 for step in self._steps if step.required)

    @property
    def pending_actions(self) -> int:
        """Timed-out actions that have not finished yet."""
        return len(self._orphans)

    def clear(self) -> None:
        self._steps = []

    async def execute(self) -> WorkflowResult:
        """
        Run every step in order, exactly once.

        Raises:
            WorkflowAbortedError: When a required step fails
        """
        start = time.monotonic()
        results: List[StepResult] = []
        logger.info(f"Executing workflow with {self.step_count} steps ({self.required_step_count} required)")

        for step in list(self._steps):
            step_start = time.monotonic()
            try:
                with allure.step(f"Workflow step: {step.name}"):
                    value = await self._execute_step_with_timeout(step)
            except Exception as e:
                elapsed = time.monotonic() - step_start
                results.append(StepResult(step.name, False, error=e, execution_time=elapsed))

                if step.required:
                    total = time.monotonic() - start
                    logger.error(f"Required step failed: {step.name}: {e}")
                    raise WorkflowAbortedError(step.name, results, total, cause=e) from e

                logger.warning(f"Optional step failed: {step.name}: {e}")
                continue

            elapsed = time.monotonic() - step_start
            results.append(StepResult(step.name, True, result=value, execution_time=elapsed))
            logger.info(f"Step passed: {step.name} ({elapsed * 1000:.0f}ms)")

        total = time.monotonic() - start
        logger.info(f"Workflow completed in {total * 1000:.0f}ms")
        return WorkflowResult(True, results, total)

    async def _execute_step_with_timeout(self, step: WorkflowStep) -> Any:
        timeout = step.timeout if step.timeout is not None else get_config("timeouts.workflow_step", 30.0)
        task = asyncio.ensure_future(step.action())

        done, _ = await asyncio.wait({task}, timeout=timeout)
        if task in done:
            return task.result()

        # Leave the action running; only stop waiting for it.
        self._orphans.add(task)
        task.add_done_callback(self._orphan_finished)
        raise StepTimeoutError(step.name, timeout)

    def _orphan_finished(self, task: asyncio.Future) -> None:
        self._orphans.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Timed-out workflow action failed later: {error!r}")
        else:
            logger.debug("Timed-out workflow action completed later")


def create_multi_step_workflow() -> MultiStepWorkflow:
    return MultiStepWorkflow()


class WorkflowPatterns:
    """Ready-made workflows for common user journeys."""

    @staticmethod
    def login(
        email_input: UnifiedDOMAssertions,
        password_input: UnifiedDOMAssertions,
        login_button: UnifiedDOMAssertions,
        dashboard: UnifiedDOMAssertions,
        email: str = "user@example.com",
        password: str = "password123",
    ) -> MultiStepWorkflow:
        async def fill_email():
            await email_input.type(email)
            return {"message": "Email filled"}

        async def fill_password():
            await password_input.type(password)
            return {"message": "Password filled"}

        async def click_login():
            await login_button.click()
            return {"message": "Login button clicked"}

        async def verify_dashboard():
            await dashboard.to_be_visible()
            return {"message": "Dashboard visible"}

        return (
            create_multi_step_workflow()
            .add_step("fill_email", fill_email)
            .add_step("fill_password", fill_password)
            .add_step("click_login", click_login)
            .add_step("verify_dashboard", verify_dashboard, timeout=10.0)
        )

    @staticmethod
    def form_submission(
        form: UnifiedDOMAssertions,
        submit_button: UnifiedDOMAssertions,
        success_message: UnifiedDOMAssertions,
        fill: Optional[Callable[[UnifiedDOMAssertions], Awaitable[Any]]] = None,
    ) -> MultiStepWorkflow:
        """``fill`` receives ``form`` and populates its fields; omitted, nothing is filled."""

        async def fill_form():
            if fill is not None:
                await fill(form)
            return {"message": "Form filled"}

        async def submit_form():
            await submit_button.click()
            return {"message": "Form submitted"}

        async def verify_success():
            await success_message.to_be_visible()
            return {"message": "Success message visible"}

        return (
            create_multi_step_workflow()
            .add_step("fill_form", fill_form)
            .add_step("submit_form", submit_form)
            .add_step("verify_success", verify_success, timeout=5.0)
        )

    @staticmethod
    def navigation(
        current_page: UnifiedDOMAssertions,
        target_link: UnifiedDOMAssertions,
        target_page: UnifiedDOMAssertions,
    ) -> MultiStepWorkflow:
        async def verify_current_page():
            await current_page.to_be_visible()
            return {"message": "Current page verified"}

        async def click_navigation_link():
            await target_link.click()
            return {"message": "Navigation link clicked"}

        async def verify_target_page():
            await target_page.to_be_visible()
            return {"message": "Target page loaded"}

        return (
            create_multi_step_workflow()
            .add_step("verify_current_page", verify_current_page)
            .add_step("click_navigation_link", click_navigation_link)
            .add_step("verify_target_page", verify_target_page, timeout=10.0)
        )


WORKFLOW_PATTERNS = WorkflowPatterns()


__all__ = [
    "MultiStepWorkflow",
    "StepResult",
    "WORKFLOW_PATTERNS",
    "WorkflowPatterns",
    "WorkflowResult",
    "WorkflowStep",
    "create_multi_step_workflow",
]
