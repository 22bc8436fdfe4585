import pytest

from unified_dom.adapters.local import LocalDOMElement, create_local_assertions
from unified_dom.core.contract import Substrate
from unified_dom.errors import AssertionMismatchError, UnsupportedOperationError
from unified_dom.document import LocalDocument


MARKUP = """
<style>.gone { visibility: hidden }</style>
<div id="plain" class="card primary" role="region" data-x="v">Hello <b>there</b></div>
<div id="none" style="display:none">hidden</div>
<div id="ghost" class="gone">ghost</div>
<div id="clear" style="opacity: 0">clear</div>
<input id="name" value="old">
<button id="off" disabled>Off</button>
"""


@pytest.fixture
def doc():
    return LocalDocument(MARKUP)


def wrap(doc, element_id, **kwargs):
    return create_local_assertions(doc.get_element_by_id(element_id), doc, **kwargs)


@pytest.mark.asyncio
async def test_display_none_is_hidden_not_visible(doc):
    hidden = wrap(doc, "none")

    await hidden.to_be_hidden()
    with pytest.raises(AssertionMismatchError) as exc:
        await hidden.to_be_visible()
    assert exc.value.predicate == "to_be_visible"


@pytest.mark.asyncio
async def test_unstyled_element_is_visible_not_hidden(doc):
    plain = wrap(doc, "plain")

    await plain.to_be_visible()
    with pytest.raises(AssertionMismatchError):
        await plain.to_be_hidden()


@pytest.mark.asyncio
@pytest.mark.parametrize("element_id", ["ghost", "clear"])
async def test_visibility_hidden_and_zero_opacity_are_hidden(doc, element_id):
    await wrap(doc, element_id).to_be_hidden()


@pytest.mark.asyncio
async def test_attribute_with_value_requires_literal_equality(doc):
    plain = wrap(doc, "plain")

    await plain.to_have_attribute("data-x", "v")
    with pytest.raises(AssertionMismatchError) as exc:
        await plain.to_have_attribute("data-x", "V")
    assert exc.value.expected == "V"
    assert exc.value.actual == "v"


@pytest.mark.asyncio
async def test_attribute_without_value_requires_presence_only(doc):
    plain = wrap(doc, "plain")

    await plain.to_have_attribute("data-x")
    await plain.not_to_have_attribute("data-y")
    with pytest.raises(AssertionMismatchError):
        await plain.to_have_attribute("data-y")
    with pytest.raises(AssertionMismatchError):
        await plain.not_to_have_attribute("data-x")


@pytest.mark.asyncio
async def test_text_class_and_role(doc):
    plain = wrap(doc, "plain")

    await plain.to_have_text_content("Hello there")
    await plain.to_contain_text("there")
    await plain.to_have_class("card")
    await plain.to_have_classes("card", "primary")
    await plain.to_have_role("region")
    with pytest.raises(AssertionMismatchError):
        await plain.to_have_class("car")
    with pytest.raises(AssertionMismatchError):
        await plain.to_have_role("button")


@pytest.mark.asyncio
async def test_enabled_and_disabled(doc):
    await wrap(doc, "name").to_be_enabled()
    await wrap(doc, "off").to_be_disabled()
    with pytest.raises(AssertionMismatchError):
        await wrap(doc, "off").to_be_enabled()


@pytest.mark.asyncio
async def test_in_document_follows_detachment(doc):
    plain = wrap(doc, "plain")
    await plain.to_be_in_document()

    doc.remove(doc.get_element_by_id("plain"))

    await plain.not_to_be_in_document()
    with pytest.raises(AssertionMismatchError):
        await plain.to_be_in_document()


@pytest.mark.asyncio
async def test_type_sets_value_and_fires_input_events(doc):
    field = wrap(doc, "name")
    node = doc.get_element_by_id("name")
    events = []
    doc.add_event_listener(node, "input", lambda e: events.append("input"))
    doc.add_event_listener(node, "change", lambda e: events.append("change"))

    await field.type("new value")

    assert doc.get_value(node) == "new value"
    assert events == ["input", "change"]


@pytest.mark.asyncio
async def test_click_and_focus_reach_the_document(doc):
    button = wrap(doc, "off")
    node = doc.get_element_by_id("off")
    clicks = []
    doc.add_event_listener(node, "click", clicks.append)

    await button.click()
    await button.focus()

    assert len(clicks) == 1
    assert doc.active_element is node


@pytest.mark.asyncio
async def test_injected_mismatch_handler_replaces_raising(doc):
    failures = []
    hidden = wrap(doc, "none", on_mismatch=lambda *args: failures.append(args))

    await hidden.to_be_visible()

    assert failures == [("to_be_visible", True, False)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "operation, args",
    [
        ("to_be_focused", ()),
        ("to_be_checked", ()),
        ("to_have_style", ({"color": "red"},)),
        ("to_have_bounding_box", (0, 0, 10, 10)),
        ("hover", ()),
        ("double_click", ()),
        ("get_computed_style", ("color",)),
        ("wait_for_visible", ()),
        ("screenshot", ()),
    ],
)
async def test_remote_only_operations_raise_on_local(doc, operation, args):
    plain = wrap(doc, "plain")

    with pytest.raises(UnsupportedOperationError) as exc:
        await getattr(plain, operation)(*args)
    assert exc.value.operation == operation
    assert exc.value.substrate is Substrate.LOCAL


def test_wrapper_exposes_its_substrate(doc):
    plain = wrap(doc, "plain")

    assert plain.environment is Substrate.LOCAL
    assert plain.substrate is Substrate.LOCAL
    assert isinstance(plain.element, LocalDOMElement)
    assert plain.element.settle_timeout == 0.0
