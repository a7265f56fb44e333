import pytest

from smart_locator.locator import document_model
from smart_locator.locator.document_model import GeometryError, Rect
from smart_locator.locator.page_snapshot import parse_dom_snapshot
from smart_locator.locator.text_sources import SOURCE_KINDS, extract_text_sources


def test_text_content_keeps_document_order(page):
    para = page.add("p", "Hello ")
    page.add("b", "brave", parent=para)
    page.text(" world", para)
    snapshot = page.build()

    assert snapshot.get_text(para) == "Hello brave world"


def test_inner_text_skips_unrendered_children_and_collapses_whitespace(page):
    div = page.add("div", "  Visible\n ")
    page.add("span", "secret", parent=div, styles={"display": "none"})
    page.add("script", "var x = 1;", parent=div)
    page.text("  text ", div)
    snapshot = page.build()

    assert snapshot.get_inner_text(div) == "Visible text"
    assert "secret" in snapshot.get_text(div)


def test_enumerate_descendants_excludes_container_and_text_nodes(page):
    form = page.add("form")
    field = page.add("input", parent=form)
    page.text("loose", form)
    snapshot = page.build()

    assert snapshot.enumerate_descendants(form) == [field]
    assert snapshot.enumerate_descendants(None)[:3] == [page.html, page.body, form]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"bounds": None},
        {"bounds": (10, 10, 0, 0)},
        {"styles": {"display": "none"}},
        {"styles": {"visibility": "hidden"}},
        {"styles": {"opacity": "0"}},
        {"attrs": {"hidden": ""}},
        {"attrs": {"aria-hidden": "true"}},
    ],
)
def test_is_hidden_conditions(page, kwargs):
    node = page.add("div", "x", **kwargs)
    snapshot = page.build()

    assert snapshot.is_hidden(node)


def test_is_hidden_inherits_from_undisplayed_ancestor(page):
    outer = page.add("div", styles={"display": "none"})
    inner = page.add("button", "Go", parent=outer)
    visible = page.add("button", "Go")
    snapshot = page.build()

    assert snapshot.is_hidden(inner)
    assert not snapshot.is_hidden(visible)
    assert not snapshot.is_hidden(page.body)


def test_bounding_rect_and_geometry_error(page):
    box = page.add("div", bounds=(1, 2, 3, 4))
    detached = page.add("div", bounds=None)
    snapshot = page.build()

    assert snapshot.get_bounding_rect(box) == Rect(1, 2, 3, 4)
    with pytest.raises(GeometryError):
        snapshot.get_bounding_rect(detached)


def test_focusable_rules(page):
    link = page.add("a", "Home", attrs={"href": "/"})
    anchor = page.add("a", "Name")
    hidden_input = page.add("input", attrs={"type": "hidden"})
    editable = page.add("div", attrs={"contenteditable": "true"})
    removed = page.add("button", "x", attrs={"tabindex": "-1"})
    snapshot = page.build()

    assert snapshot.is_focusable(link)
    assert not snapshot.is_focusable(anchor)
    assert not snapshot.is_focusable(hidden_input)
    assert snapshot.is_focusable(editable)
    assert not snapshot.is_focusable(removed)


def test_xpath_counts_same_tag_siblings(page):
    page.add("div")
    second = page.add("div")
    button = page.add("button", "Go", parent=second)
    snapshot = page.build()

    assert snapshot.xpath(button) == "/html/body[1]/div[2]/button[1]"


def test_text_sources_cover_every_kind(page):
    page.add("span", "Full name", attrs={"id": "name-label"})
    page.add("span", "Required", attrs={"id": "name-help"})
    page.add("label", "Your name", attrs={"for": "name"})
    field = page.add(
        "input",
        attrs={
            "id": "name",
            "name": "full_name",
            "class": "form-control",
            "placeholder": "Jane Doe",
            "title": "Name",
            "aria-label": "Name input",
            "aria-labelledby": "name-label missing",
            "aria-describedby": "name-help",
            "data-label": "dl",
            "data-title": "dt",
            "data-testid": "name-field",
            "data-test": "name",
        },
        value="Ada",
    )
    snapshot = page.build()

    sources = extract_text_sources(snapshot, field)

    assert set(sources) == set(SOURCE_KINDS)
    assert sources["value"] == "Ada"
    assert sources["placeholder"] == "Jane Doe"
    assert sources["labelText"] == "Your name"
    assert sources["ariaLabelledBy"] == "Full name"
    assert sources["ariaDescribedBy"] == "Required"
    assert sources["dataTestId"] == "name-field"
    assert sources["name"] == "full_name"
    assert sources["className"] == "form-control"
    assert sources["alt"] == ""


def test_label_text_from_enclosing_label(page):
    label = page.add("label", "Remember me ")
    checkbox = page.add("input", parent=label, attrs={"type": "checkbox"})
    snapshot = page.build()

    assert extract_text_sources(snapshot, checkbox)["labelText"] == "Remember me "


def test_aria_references_are_joined_with_single_space(page):
    page.add("span", "First", attrs={"id": "a"})
    page.add("span", "   ", attrs={"id": "blank"})
    page.add("span", "Second", attrs={"id": "b"})
    target = page.add("div", attrs={"aria-labelledby": "a  blank nope b"})
    snapshot = page.build()

    assert extract_text_sources(snapshot, target)["ariaLabelledBy"] == "First Second"


def test_id_and_label_lookups_respect_container_and_document_order(page):
    outside_label = page.add("label", "Outside", attrs={"for": "email"})
    outside_field = page.add("span", "first", attrs={"id": "dup"})
    form = page.add("form", attrs={"id": "dup"})
    inside_label = page.add("label", "Inside", parent=form, attrs={"for": "email"})
    inside_field = page.add("span", "second", parent=form, attrs={"id": "dup"})
    snapshot = page.build()

    assert snapshot.find_label_for(None, "email") is outside_label
    assert snapshot.find_label_for(form, "email") is inside_label
    assert snapshot.resolve_by_id(None, "dup") is outside_field
    # The container itself is not one of its descendants.
    assert snapshot.resolve_by_id(form, "dup") is inside_field
    assert snapshot.resolve_by_id(inside_label, "dup") is None
    assert snapshot.find_label_for(None, "") is None


def test_label_and_aria_lookups_do_not_rescan_the_tree(page, monkeypatch):
    fields = []
    for i in range(200):
        page.add("label", f"Field {i}", attrs={"for": f"f{i}"})
        fields.append(page.add("input", attrs={"id": f"f{i}", "aria-describedby": f"f{i}"}))
    snapshot = page.build()

    def fail(_container):
        raise AssertionError("lookup walked the whole tree")

    monkeypatch.setattr(snapshot, "enumerate_descendants", fail)

    sources = [extract_text_sources(snapshot, field) for field in fields]
    assert sources[150]["labelText"] == "Field 150"


def _cdp_payload():
    strings = [
        "#document",  # 0
        "HTML",  # 1
        "BODY",  # 2
        "BUTTON",  # 3
        "#text",  # 4
        "Submit",  # 5
        "type",  # 6
        "submit",  # 7
        "block",  # 8
        "visible",  # 9
        "1",  # 10
        "DIV",  # 11
        "Hidden",  # 12
        "INPUT",  # 13
        "typed",  # 14
        "none",  # 15
    ]
    return {
        "strings": strings,
        "documents": [
            {
                "nodes": {
                    "parentIndex": [-1, 0, 1, 2, 3, 2, 5, 2],
                    "nodeType": [9, 1, 1, 1, 3, 1, 3, 1],
                    "nodeName": [0, 1, 2, 3, 4, 11, 4, 13],
                    "nodeValue": [-1, -1, -1, -1, 5, -1, 12, -1],
                    "attributes": [[], [], [], [6, 7], [], [], [], []],
                    "inputValue": {"index": [7], "value": [14]},
                    "isClickable": {"index": [3]},
                },
                "layout": {
                    "nodeIndex": [1, 2, 3, 4, 7],
                    "bounds": [
                        [0, 0, 800, 600],
                        [0, 0, 800, 600],
                        [10, 10, 80, 30],
                        [12, 12, 40, 20],
                        [10, 50, 200, 30],
                    ],
                    "styles": [[8, 9, 10], [8, 9, 10], [8, 9, 10], [], [8, 9, 10]],
                },
            }
        ],
    }


def test_parse_dom_snapshot_builds_tree_with_layout():
    snapshot = parse_dom_snapshot(_cdp_payload())

    assert snapshot is not None
    html = snapshot.node(1)
    button = snapshot.node(3)
    hidden_div = snapshot.node(5)
    field = snapshot.node(7)

    assert html.parent is None
    assert snapshot.roots == [html]
    assert button.tag == "button"
    assert button.attributes == {"type": "submit"}
    assert button.bounds == (10.0, 10.0, 80.0, 30.0)
    assert button.styles == {"display": "block", "visibility": "visible", "opacity": "1"}
    assert snapshot.has_event_handler(button, "click")
    assert snapshot.get_text(button) == "Submit"
    assert snapshot.is_hidden(hidden_div)
    assert snapshot.get_value(field) == "typed"
    assert snapshot.get_text(snapshot.node(2)) == "SubmitHidden"


def test_parse_dom_snapshot_without_documents():
    assert parse_dom_snapshot({"documents": [], "strings": []}) is None


def test_document_model_module_is_documented():
    assert document_model.__doc__.startswith("Contract between the locator engine")
