import pytest

from unified_dom.adapters.local import create_local_assertions
from unified_dom.core.contract import Position, Substrate
from unified_dom.errors import UnsupportedOperationError
from unified_dom.document import LocalDocument
from unified_dom.interactions.drag_drop import (
    DragDropInteractions,
    DragDropOptions,
    simulate_drag_and_drop,
)
from unified_dom.interactions.keyboard import (
    KeyboardInteractions,
    KeyboardOptions,
    focusable_elements,
    simulate_tab_navigation,
)
from unified_dom.lookup import find_by_id, find_by_test_id

from .fakes import FakePage


BOARD = """
<div id="card" draggable="true">Card</div>
<div id="column">Column</div>
"""

FORM = """
<a id="home" href="/">Home</a>
<a id="anchor">not focusable</a>
<input id="first">
<button id="disabled" disabled>x</button>
<input id="invisible" style="display: none">
<span id="custom" tabindex="0">custom</span>
<span id="skipped" tabindex="-1">skipped</span>
<textarea id="last"></textarea>
"""


def record(doc, node, types):
    events = []
    for event_type in types:
        doc.add_event_listener(node, event_type, events.append)
    return events


# ================================================================================
# Drag and drop
# ================================================================================

@pytest.mark.asyncio
async def test_local_drag_fires_canonical_sequence_with_shared_payload():
    doc = LocalDocument(BOARD)
    card, column = doc.get_element_by_id("card"), doc.get_element_by_id("column")
    source_events = record(doc, card, ["dragstart", "dragover", "drop", "dragend"])
    target_events = record(doc, column, ["dragstart", "dragover", "drop", "dragend"])
    doc.add_event_listener(card, "dragstart", lambda e: e.data_transfer.set_data("text/plain", "card"))

    await simulate_drag_and_drop(await find_by_id(doc, "card"), await find_by_id(doc, "column"))

    assert [e.type for e in source_events] == ["dragstart", "dragend"]
    assert [e.type for e in target_events] == ["dragover", "drop"]
    payloads = {id(e.data_transfer) for e in source_events + target_events}
    assert len(payloads) == 1
    assert target_events[1].data_transfer.get_data("text/plain") == "card"


@pytest.mark.asyncio
async def test_local_coordinate_drag_uses_mouse_events():
    doc = LocalDocument(BOARD)
    card = doc.get_element_by_id("card")
    events = record(doc, card, ["mousedown", "mousemove", "mouseup"])

    await DragDropInteractions(await find_by_id(doc, "card")).drag_to_coordinates(120, 40)

    assert [(e.type, e.client_x, e.client_y) for e in events] == [
        ("mousedown", 0, 0),
        ("mousemove", 120, 40),
        ("mouseup", 120, 40),
    ]


@pytest.mark.asyncio
async def test_local_drag_rejects_pointer_positions():
    doc = LocalDocument(BOARD)
    dnd = DragDropInteractions(await find_by_id(doc, "card"))
    options = DragDropOptions(source_position=Position(5, 5))

    with pytest.raises(UnsupportedOperationError):
        await dnd.drag_to(await find_by_id(doc, "column"), options)
    with pytest.raises(UnsupportedOperationError):
        await dnd.drag_to_coordinates(10, 10, options)


@pytest.mark.asyncio
async def test_drag_across_substrates_is_rejected():
    doc = LocalDocument(BOARD)
    page = FakePage()
    page.add('[id="column"]')

    with pytest.raises(ValueError):
        await DragDropInteractions(await find_by_id(doc, "card")).drag_to(await find_by_id(page, "column"))


@pytest.mark.asyncio
async def test_remote_drag_passes_options_to_playwright():
    page = FakePage()
    card = page.add('[id="card"]')
    column = page.add('[id="column"]')
    options = DragDropOptions(timeout=2.0, force=True, target_position=Position(1, 2))

    await DragDropInteractions(await find_by_id(page, "card")).drag_to(await find_by_id(page, "column"), options)

    name, target, kwargs = next(c for c in card.calls if c[0] == "drag_to")
    assert target is column
    assert kwargs == {
        "force": True,
        "no_wait_after": False,
        "timeout": 2000.0,
        "source_position": None,
        "target_position": {"x": 1, "y": 2},
    }


@pytest.mark.asyncio
async def test_remote_coordinate_drag_drives_the_mouse():
    page = FakePage()
    page.add('[id="card"]')

    await DragDropInteractions(await find_by_id(page, "card")).drag_to_coordinates(300, 120)

    assert page.mouse.calls == [("down",), ("move", 300, 120), ("up",)]


# ================================================================================
# Keyboard
# ================================================================================

@pytest.mark.asyncio
async def test_local_press_key_dispatches_keydown_and_keyup_with_modifiers():
    doc = LocalDocument('<input id="q">')
    node = doc.get_element_by_id("q")
    events = record(doc, node, ["keydown", "keyup"])

    await KeyboardInteractions(await find_by_id(doc, "q")).select_all()

    assert [(e.type, e.key, e.code, e.ctrl_key, e.shift_key) for e in events] == [
        ("keydown", "a", "KeyA", True, False),
        ("keyup", "a", "KeyA", True, False),
    ]


@pytest.mark.asyncio
async def test_type_sequence_presses_every_character():
    doc = LocalDocument('<input id="q">')
    node = doc.get_element_by_id("q")
    keys = []
    doc.add_event_listener(node, "keydown", lambda e: keys.append(e.key))

    await KeyboardInteractions(await find_by_id(doc, "q")).type_sequence("hey", KeyboardOptions(delay=0.01))

    assert keys == ["h", "e", "y"]


@pytest.mark.asyncio
async def test_unknown_modifier_and_direction_are_rejected():
    doc = LocalDocument('<input id="q">')
    keys = KeyboardInteractions(await find_by_id(doc, "q"))

    with pytest.raises(ValueError):
        await keys.press_key("a", ["Hyper"])
    with pytest.raises(ValueError):
        await keys.navigate_with_keyboard("diagonal")


@pytest.mark.asyncio
async def test_remote_shortcuts_become_playwright_combos():
    page = FakePage()
    locator = page.add('[data-testid="editor"]')
    keys = KeyboardInteractions(await find_by_test_id(page, "editor"))

    await keys.press_shift_tab()
    await keys.redo()
    await keys.navigate_with_keyboard("left")
    await keys.press_key("Enter", timeout=1.0)

    presses = [c[1:] for c in locator.calls if c[0] == "press"]
    assert presses == [
        ("Shift+Tab", None),
        ("Control+y", None),
        ("ArrowLeft", None),
        ("Enter", 1000.0),
    ]


# ================================================================================
# Tab navigation
# ================================================================================

def test_focusable_elements_skip_disabled_hidden_and_negative_tabindex():
    doc = LocalDocument(FORM)

    ids = [node.get("id") for node in focusable_elements(doc)]

    assert ids == ["home", "first", "custom", "last"]


@pytest.mark.asyncio
async def test_tab_navigation_moves_forward_and_wraps():
    doc = LocalDocument(FORM)
    current = await find_by_id(doc, "custom")

    nxt = await simulate_tab_navigation(current)
    assert nxt.element.node.get("id") == "last"
    assert doc.active_element is nxt.element.node

    wrapped = await simulate_tab_navigation(nxt)
    assert wrapped.element.node.get("id") == "home"


@pytest.mark.asyncio
async def test_shift_tab_moves_backward_and_wraps():
    doc = LocalDocument(FORM)

    previous = await simulate_tab_navigation(await find_by_id(doc, "home"), shift=True)
    assert previous.element.node.get("id") == "last"

    # an element outside the tab order starts from the end when going backward
    from_outside = await simulate_tab_navigation(await find_by_id(doc, "anchor"), shift=True)
    assert from_outside.element.node.get("id") == "last"


@pytest.mark.asyncio
async def test_tab_navigation_keeps_the_mismatch_handler():
    doc = LocalDocument(FORM)
    failures = []
    start = create_local_assertions(doc.get_element_by_id("home"), doc, lambda *a: failures.append(a))

    nxt = await simulate_tab_navigation(start)
    await nxt.to_have_attribute("id", "nope")

    assert nxt.environment is Substrate.LOCAL
    assert failures == [("to_have_attribute(id)", "nope", "first")]


@pytest.mark.asyncio
async def test_tab_navigation_without_focusable_elements():
    doc = LocalDocument("<p id='p'>text only</p>")

    with pytest.raises(LookupError):
        await simulate_tab_navigation(await find_by_id(doc, "p"))


@pytest.mark.asyncio
async def test_remote_tab_navigation_wraps_the_focused_element():
    page = FakePage()
    locator = page.add('[id="home"]')

    nxt = await simulate_tab_navigation(await find_by_id(page, "home"))

    assert ("press", "Tab", None) in locator.calls
    assert nxt.environment is Substrate.REMOTE
    assert page.queries[-1] == "*:focus"
