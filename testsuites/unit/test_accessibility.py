import pytest

from unified_dom.accessibility.aria_validation import (
    FORM_CONTROL_SELECTOR,
    ARIAComplianceTesting,
    validate_snapshot,
)
from unified_dom.accessibility.color_contrast import (
    ColorContrastTesting,
    contrast_ratio,
    evaluate_contrast,
    parse_color,
    to_have_sufficient_color_contrast,
)
from unified_dom.accessibility.keyboard_navigation import KeyboardNavigationTesting, KeyboardShortcut
from unified_dom.accessibility.screen_reader import (
    ScreenReaderTesting,
    to_announce_text,
    to_have_accessible_description,
    to_have_accessible_name,
)
from unified_dom.accessibility.snapshot import ElementSnapshot, snapshot
from unified_dom.adapters.local import create_local_assertions
from unified_dom.adapters.remote import create_remote_assertions
from unified_dom.errors import AssertionMismatchError
from unified_dom.document import LocalDocument
from unified_dom.lookup import find_by_id

from .fakes import FakePage


async def element(markup, element_id, on_mismatch=None):
    doc = LocalDocument(markup)
    if on_mismatch is None:
        return await find_by_id(doc, element_id)
    return create_local_assertions(doc.get_element_by_id(element_id), doc, on_mismatch)


# ================================================================================
# Accessible name and description
# ================================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "markup, expected",
    [
        ('<button id="x" aria-label="A">B</button>', "A"),
        ('<button id="x" aria-label="  ">Fallback</button>', "Fallback"),
        ('<span id="lbl">Billing   address</span><input id="x" aria-labelledby="lbl">', "Billing   address"),
        ('<span id="a">First</span><span id="b">Last</span><input id="x" aria-labelledby="a missing b">', "First Last"),
        ('<label for="x">Email address</label><input id="x">', "Email address"),
        ('<button id="x">\n  Save\n  changes\n</button>', "\n  Save\n  changes\n"),
        ('<button id="x" aria-label=" Close ">X</button>', " Close "),
        ('<div id="x"></div>', ""),
    ],
)
async def test_accessible_name_resolution_order(markup, expected):
    assert await ScreenReaderTesting(await element(markup, "x")).get_accessible_name() == expected


@pytest.mark.asyncio
async def test_aria_label_wins_over_label_element():
    button = await element('<label for="x">C</label><input id="x" aria-label="A">', "x")

    await to_have_accessible_name(button, "A")
    with pytest.raises(AssertionMismatchError) as exc:
        await to_have_accessible_name(button, "C")
    assert exc.value.predicate == "accessible_name"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "markup, expected",
    [
        ('<input id="x">', None),
        ('<input id="x" title="Tip">', "Tip"),
        ('<p id="help">We never share it.</p><input id="x" title="Tip" aria-describedby="help">', "We never share it."),
    ],
)
async def test_accessible_description(markup, expected):
    field = await element(markup, "x")

    assert await ScreenReaderTesting(field).get_accessible_description() == expected
    await to_have_accessible_description(field, expected)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "attributes, announced",
    [
        ('aria-live="polite"', True),
        ('aria-live="assertive"', True),
        ('aria-live="off"', False),
        ('role="status"', True),
        ('role="alert"', True),
        ('role="button"', False),
        ("", False),
    ],
)
async def test_announced_regions(attributes, announced):
    region = await element(f'<div id="x" {attributes}>Saved</div>', "x")

    assert await ScreenReaderTesting(region).is_announced() is announced


@pytest.mark.asyncio
async def test_announce_text_requires_a_live_region():
    await to_announce_text(await element('<div id="x" role="status">3 results</div>', "x"), "3 results")

    failures = []
    plain = await element('<div id="x">3 results</div>', "x", lambda *a: failures.append(a))
    await to_announce_text(plain, "3 results")
    assert failures == [("announced", True, False)]


# ================================================================================
# ARIA validation
# ================================================================================

@pytest.mark.asyncio
async def test_slider_without_valuenow_is_reported():
    slider = await element('<div id="x" role="slider" aria-valuemin="0" aria-valuemax="100"></div>', "x")

    result = await ARIAComplianceTesting(slider).validate_aria_structure()

    assert result.valid is False
    assert result.score == 90
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.type == "missing_required_attribute"
    assert issue.message == "Missing required attribute: aria-valuenow for role: slider"
    assert issue.element == "DIV"


@pytest.mark.asyncio
async def test_complete_slider_is_valid():
    slider = await element(
        '<div id="x" role="slider" aria-valuemin="0" aria-valuemax="100" aria-valuenow="40"></div>', "x"
    )

    result = await ARIAComplianceTesting(slider).validate_aria_structure()

    assert result.valid is True
    assert result.issues == ()
    assert result.score == 100


def test_invalid_values_each_cost_the_penalty():
    node = ElementSnapshot("div", {"aria-expanded": "yes", "aria-live": "loud", "aria-label": "free text"})

    result = validate_snapshot(node)

    assert [i.attribute for i in result.issues] == ["aria-expanded", "aria-live"]
    assert result.issues[0].message == 'Invalid ARIA value: aria-expanded="yes"'
    assert result.score == 80


def test_penalty_comes_from_config_and_score_is_floored(monkeypatch):
    node = ElementSnapshot("div", {"role": "slider"})

    monkeypatch.setenv("ACCESSIBILITY_ISSUE_PENALTY", "25")
    assert validate_snapshot(node).score == 25
    assert validate_snapshot(node, penalty=50).score == 0


@pytest.mark.asyncio
async def test_live_regions_use_valid_politeness():
    good = await element('<section id="x"><div aria-live="polite"></div><div role="log"></div></section>', "x")
    bad = await element('<section id="x"><div aria-live="loud"></div></section>', "x")

    assert await ARIAComplianceTesting(good).test_aria_live_regions() is True
    assert await ARIAComplianceTesting(bad).test_aria_live_regions() is False


@pytest.mark.asyncio
async def test_landmarks_use_landmark_roles():
    good = await element('<div id="x"><header></header><nav role="navigation"></nav><main></main></div>', "x")
    bad = await element('<div id="x"><section role="button"></section></div>', "x")

    assert await ARIAComplianceTesting(good).test_aria_landmarks() is True
    assert await ARIAComplianceTesting(bad).test_aria_landmarks() is False


@pytest.mark.asyncio
async def test_form_controls_need_a_label():
    labelled = (
        '<form id="x"><label for="a">A</label><input id="a">'
        '<input aria-label="B"><input type="hidden"></form>'
    )
    unlabelled = labelled.replace("</form>", "<select></select></form>")

    assert await ARIAComplianceTesting(await element(labelled, "x")).test_aria_form_controls() is True
    assert await ARIAComplianceTesting(await element(unlabelled, "x")).test_aria_form_controls() is False


# ================================================================================
# Keyboard navigation
# ================================================================================

TAB_PAGE = '<input id="first"><button id="second">Go</button><a id="third" href="#">More</a>'


@pytest.mark.asyncio
async def test_tab_order_matches():
    result = await KeyboardNavigationTesting(LocalDocument(TAB_PAGE)).test_tab_order(["first", "second", "third"])

    assert result.passes is True
    assert result.tab_order == ("first", "second", "third")
    assert result.issues == ()


@pytest.mark.asyncio
async def test_tab_order_mismatch_is_described():
    result = await KeyboardNavigationTesting(LocalDocument(TAB_PAGE)).test_tab_order(["first", "third"])

    assert result.passes is False
    assert result.issues == ("Expected tab order: first, third, but got: first, second",)


@pytest.mark.asyncio
async def test_tab_order_reports_unknown_when_focus_does_not_move():
    doc = LocalDocument(TAB_PAGE)
    doc.add_event_listener(doc.body, "keydown", lambda e: e.prevent_default())

    result = await KeyboardNavigationTesting(doc).test_tab_order(["first"])

    assert result.tab_order == ("unknown",)


@pytest.mark.asyncio
async def test_escape_must_close_dialogs():
    doc = LocalDocument('<div id="d" role="dialog">Confirm?</div>')
    navigation = KeyboardNavigationTesting(doc)

    assert await navigation.test_escape_key_behavior() is False

    dialog = doc.get_element_by_id("d")
    doc.add_event_listener(
        doc.body, "keydown",
        lambda e: e.key == "Escape" and doc.set_attribute(dialog, "style", "display: none"),
    )
    assert await navigation.test_escape_key_behavior() is True


@pytest.mark.asyncio
async def test_keyboard_shortcuts_stop_at_first_failure():
    doc = LocalDocument(TAB_PAGE)
    saved = []
    doc.add_event_listener(doc.body, "keydown", lambda e: e.ctrl_key and e.key == "s" and saved.append(e.key))

    async def was_saved():
        return bool(saved)

    async def never():
        return False

    navigation = KeyboardNavigationTesting(doc)

    assert await navigation.test_keyboard_shortcuts([KeyboardShortcut("s", was_saved, ["Control"])]) is True
    assert await navigation.test_keyboard_shortcuts([
        KeyboardShortcut("k", never, ["Control"]),
        KeyboardShortcut("s", was_saved, ["Control"]),
    ]) is False
    assert saved == ["s"]


# ================================================================================
# Color contrast
# ================================================================================

def test_black_on_white_is_the_maximum_ratio():
    assert contrast_ratio("#000000", "#ffffff") == pytest.approx(21.0)
    assert contrast_ratio("white", "white") == pytest.approx(1.0)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("rgb(10, 20, 30)", (10.0, 20.0, 30.0, 1.0)),
        ("rgba(255, 0, 0, 0.5)", (255.0, 0.0, 0.0, 0.5)),
        ("rgba(255, 0, 0, 25%)", (255.0, 0.0, 0.0, 0.25)),
        ("transparent", (0.0, 0.0, 0.0, 0.0)),
        ("#ffffff", (255.0, 255.0, 255.0, 1.0)),
        ("black", (0.0, 0.0, 0.0, 1.0)),
    ],
)
def test_parse_color(value, expected):
    assert parse_color(value) == expected


def test_parse_color_rejects_garbage():
    with pytest.raises(ValueError):
        parse_color("not-a-color")


def test_levels():
    grey = ElementSnapshot("p", color="#767676", background_color="#ffffff")

    aa = evaluate_contrast(grey, "AA")
    aaa = evaluate_contrast(grey, "AAA")

    assert aa.passes is True
    assert aa.required_ratio == 4.5
    assert aaa.passes is False
    assert aaa.required_ratio == 7.0
    assert aa.contrast_ratio == pytest.approx(4.54, abs=0.01)
    with pytest.raises(ValueError):
        evaluate_contrast(grey, "A")


def test_missing_colors_default_to_black_on_white():
    result = evaluate_contrast(ElementSnapshot("span"))

    assert result.contrast_ratio == 21.0
    assert result.foreground_color == "rgb(0, 0, 0)"
    assert result.background_color == "rgb(255, 255, 255)"
    assert result.element == "SPAN"


@pytest.mark.asyncio
async def test_local_colors_are_inherited_from_ancestors():
    paragraph = await element(
        '<div style="background-color: #000000; color: #ffffff">'
        '<p id="x" style="background-color: transparent">Hi</p></div>',
        "x",
    )

    captured = await snapshot(paragraph)
    result = await ColorContrastTesting(paragraph).test_color_contrast()

    assert captured.color == "#ffffff"
    assert captured.background_color == "#000000"
    assert result.contrast_ratio == 21.0


@pytest.mark.asyncio
async def test_sufficient_contrast_assertion():
    failures = []
    faint = await element('<p id="x" style="color: #999999">x</p>', "x", lambda *a: failures.append(a))

    await to_have_sufficient_color_contrast(faint)
    await to_have_sufficient_color_contrast(faint, min_contrast_ratio=2.0)

    assert len(failures) == 1
    predicate, expected, actual = failures[0]
    assert predicate == "sufficient_color_contrast"
    assert expected == ">= 4.5"
    assert actual < 4.5


@pytest.mark.asyncio
async def test_all_text_elements_skips_empty_ones():
    container = await element(
        '<div id="x"><p style="color: #ffffff">White</p><span>Black</span><li></li></div>', "x"
    )

    results = await ColorContrastTesting(container).test_all_text_elements()

    assert [r.element for r in results] == ["P", "SPAN"]
    assert [r.passes for r in results] == [False, True]


# ================================================================================
# Remote snapshots
# ================================================================================

@pytest.mark.asyncio
async def test_remote_snapshot_is_read_in_one_evaluate():
    page = FakePage()
    locator = page.add("#close", evaluate_result={
        "tag": "button",
        "attributes": {"aria-label": "Close dialog", "title": "Close"},
        "text": "X",
        "labelledbyText": None,
        "describedbyText": None,
        "labelText": None,
        "color": "rgb(0, 0, 0)",
        "backgroundColor": None,
    })
    button = create_remote_assertions(page, "#close")
    screen_reader = ScreenReaderTesting(button)

    assert await screen_reader.get_accessible_name() == "Close dialog"
    assert await screen_reader.get_accessible_description() == "Close"
    assert (await ColorContrastTesting(button).test_color_contrast()).contrast_ratio == 21.0
    assert sum(1 for c in locator.calls if c[0] == "evaluate") == 3


@pytest.mark.asyncio
async def test_remote_subtree_scan_passes_the_selector():
    page = FakePage()
    locator = page.add("#form", evaluate_result=[
        {"tag": "input", "attributes": {"id": "a"}, "labelText": "Name"},
        {"tag": "input", "attributes": {"id": "b"}},
    ])

    assert await ARIAComplianceTesting(create_remote_assertions(page, "#form")).test_aria_form_controls() is False
    assert locator.calls[-1][2] == FORM_CONTROL_SELECTOR
