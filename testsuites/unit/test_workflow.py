import asyncio

import pytest

from unified_dom.errors import AssertionMismatchError, StepTimeoutError, WorkflowAbortedError
from unified_dom.document import LocalDocument
from unified_dom.interactions.workflow import (
    WORKFLOW_PATTERNS,
    MultiStepWorkflow,
    WorkflowStep,
    create_multi_step_workflow,
)
from unified_dom.lookup import find_by_id


def recorder(calls, name, result=None, error=None):
    async def action():
        calls.append(name)
        if error is not None:
            raise error
        return result
    return action


@pytest.mark.asyncio
async def test_required_failure_aborts_with_partial_results():
    calls = []
    workflow = (
        create_multi_step_workflow()
        .add_step("one", recorder(calls, "one", result=1))
        .add_step("two", recorder(calls, "two", error=RuntimeError("boom")))
        .add_step("three", recorder(calls, "three"))
    )

    with pytest.raises(WorkflowAbortedError) as exc:
        await workflow.execute()

    results = exc.value.results
    assert calls == ["one", "two"]
    assert [(r.step, r.success) for r in results] == [("one", True), ("two", False)]
    assert results[0].result == 1
    assert isinstance(results[1].error, RuntimeError)
    assert exc.value.step == "two"
    assert isinstance(exc.value.cause, RuntimeError)
    assert exc.value.total_time >= 0


@pytest.mark.asyncio
async def test_optional_failure_is_recorded_and_execution_continues():
    calls = []
    workflow = (
        MultiStepWorkflow()
        .add_step("one", recorder(calls, "one"))
        .add_step("two", recorder(calls, "two", error=RuntimeError("boom")), required=False)
        .add_step("three", recorder(calls, "three"))
    )

    result = await workflow.execute()

    assert calls == ["one", "two", "three"]
    assert [(r.step, r.success) for r in result.results] == [
        ("one", True), ("two", False), ("three", True),
    ]
    assert result.success is True
    assert result.failed_steps == ["two"]


@pytest.mark.asyncio
async def test_timeout_fails_the_step_without_cancelling_the_action():
    finished = asyncio.Event()

    async def slow():
        await asyncio.sleep(0.2)
        finished.set()
        return "late"

    workflow = MultiStepWorkflow().add_step("slow", slow, required=False, timeout=0.05)

    result = await workflow.execute()

    step = result.results[0]
    assert step.success is False
    assert isinstance(step.error, StepTimeoutError)
    assert step.error.timeout == 0.05
    assert "timed out after 50ms" in str(step.error)
    assert workflow.pending_actions == 1

    await asyncio.wait_for(finished.wait(), timeout=2.0)
    await asyncio.sleep(0.05)
    assert workflow.pending_actions == 0


@pytest.mark.asyncio
async def test_required_timeout_aborts():
    async def never():
        await asyncio.sleep(0.3)

    workflow = MultiStepWorkflow().add_step(WorkflowStep("stuck", never, timeout=0.05))

    with pytest.raises(WorkflowAbortedError) as exc:
        await workflow.execute()
    assert isinstance(exc.value.cause, StepTimeoutError)

    await asyncio.sleep(0.35)


@pytest.mark.asyncio
async def test_default_step_timeout_comes_from_config(monkeypatch):
    monkeypatch.setenv("TIMEOUTS_WORKFLOW_STEP", "0.05")

    async def slow():
        await asyncio.sleep(0.2)

    workflow = MultiStepWorkflow().add_step("slow", slow, required=False)
    result = await workflow.execute()

    assert isinstance(result.results[0].error, StepTimeoutError)
    await asyncio.sleep(0.25)


def test_duplicate_names_are_rejected():
    workflow = MultiStepWorkflow().add_step("a", recorder([], "a"))

    with pytest.raises(ValueError):
        workflow.add_step("a", recorder([], "a"))
    with pytest.raises(ValueError):
        workflow.add_step("b")


def test_step_counts_and_clear():
    workflow = (
        MultiStepWorkflow()
        .add_step("a", recorder([], "a"))
        .add_step("b", recorder([], "b"), required=False)
    )

    assert workflow.step_count == 2
    assert workflow.required_step_count == 1
    assert [s.name for s in workflow.steps] == ["a", "b"]

    workflow.clear()
    assert workflow.step_count == 0


@pytest.mark.asyncio
async def test_steps_run_once_per_execution():
    calls = []
    workflow = MultiStepWorkflow().add_step("a", recorder(calls, "a"))

    await workflow.execute()
    await workflow.execute()

    assert calls == ["a", "a"]


# ================================================================================
# Patterns
# ================================================================================

LOGIN = """
<input id="email"><input id="password" type="password">
<button id="login">Log in</button>
<div id="dashboard" style="display:none">Welcome</div>
"""


@pytest.mark.asyncio
async def test_login_pattern_fills_clicks_and_verifies():
    doc = LocalDocument(LOGIN)
    dashboard_node = doc.get_element_by_id("dashboard")
    doc.add_event_listener(
        doc.get_element_by_id("login"), "click",
        lambda e: doc.set_attribute(dashboard_node, "style", "display:block"),
    )

    workflow = WORKFLOW_PATTERNS.login(
        await find_by_id(doc, "email"),
        await find_by_id(doc, "password"),
        await find_by_id(doc, "login"),
        await find_by_id(doc, "dashboard"),
        email="qa@example.com",
    )
    result = await workflow.execute()

    assert [r.step for r in result.results] == ["fill_email", "fill_password", "click_login", "verify_dashboard"]
    assert result.results[-1].result == {"message": "Dashboard visible"}
    assert doc.get_value(doc.get_element_by_id("email")) == "qa@example.com"
    assert doc.get_value(doc.get_element_by_id("password")) == "password123"


@pytest.mark.asyncio
async def test_login_pattern_aborts_when_dashboard_never_shows():
    doc = LocalDocument(LOGIN)

    workflow = WORKFLOW_PATTERNS.login(
        await find_by_id(doc, "email"),
        await find_by_id(doc, "password"),
        await find_by_id(doc, "login"),
        await find_by_id(doc, "dashboard"),
    )

    with pytest.raises(WorkflowAbortedError) as exc:
        await workflow.execute()
    assert exc.value.step == "verify_dashboard"
    assert isinstance(exc.value.cause, AssertionMismatchError)
    assert len(exc.value.results) == 4


@pytest.mark.asyncio
async def test_form_submission_pattern_uses_fill_callback():
    doc = LocalDocument(
        '<form id="f"><input id="n"></form><button id="s">Send</button><p id="ok">Thanks</p>'
    )
    filled = []

    async def fill(form):
        filled.append(form.element.node.get("id"))

    workflow = WORKFLOW_PATTERNS.form_submission(
        await find_by_id(doc, "f"), await find_by_id(doc, "s"), await find_by_id(doc, "ok"), fill=fill,
    )
    result = await workflow.execute()

    assert filled == ["f"]
    assert [s.timeout for s in workflow.steps] == [None, None, 5.0]
    assert result.failed_steps == []


@pytest.mark.asyncio
async def test_navigation_pattern_step_names():
    doc = LocalDocument('<main id="home">Home</main><a id="link" href="/next">Next</a><main id="next">Next</main>')

    workflow = WORKFLOW_PATTERNS.navigation(
        await find_by_id(doc, "home"), await find_by_id(doc, "link"), await find_by_id(doc, "next"),
    )
    result = await workflow.execute()

    assert [r.step for r in result.results] == ["verify_current_page", "click_navigation_link", "verify_target_page"]
    assert workflow.steps[-1].timeout == 10.0
