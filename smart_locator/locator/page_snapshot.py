"""In-memory document tree captured from a live page (or built by hand in tests)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from .document_model import GeometryError, Rect

logger = logging.getLogger(__name__)

ELEMENT_NODE = 1
TEXT_NODE = 3

ROOT_TAGS = {"html", "body"}
NON_RENDERED_TAGS = {"head", "script", "style", "template", "noscript", "title", "meta", "link"}
VALUE_TAGS = {"input", "textarea", "select", "button", "option", "output", "data"}
PLACEHOLDER_TAGS = {"input", "textarea"}
ALT_TAGS = {"img", "input", "area"}
NAME_TAGS = {
    "a",
    "button",
    "fieldset",
    "form",
    "iframe",
    "img",
    "input",
    "map",
    "meta",
    "object",
    "output",
    "select",
    "slot",
    "textarea",
}
NATIVE_FOCUSABLE_TAGS = {"button", "select", "textarea", "iframe", "summary"}

SNAPSHOT_STYLES = ["display", "visibility", "opacity"]


@dataclass(eq=False)
class SnapshotNode:
    index: int
    node_name: str
    attributes: dict[str, str] = field(default_factory=dict)
    text_snippet: Optional[str] = None
    parent_index: Optional[int] = None
    node_type: int = ELEMENT_NODE
    bounds: Optional[tuple[float, float, float, float]] = None
    styles: dict[str, str] = field(default_factory=dict)
    is_clickable: bool = False
    input_value: Optional[str] = None
    parent: Optional["SnapshotNode"] = field(default=None, repr=False)
    children: list["SnapshotNode"] = field(default_factory=list, repr=False)

    @property
    def is_element(self) -> bool:
        return self.node_type == ELEMENT_NODE

    @property
    def tag(self) -> str:
        return (self.node_name or "").lower()

    def __repr__(self) -> str:
        return f"SnapshotNode(index={self.index}, node_name={self.node_name!r})"


@dataclass
class PageSnapshot:
    """
    Document Model over a flat list of nodes.

    ``dom_nodes`` must be in document order. Element nodes may carry their own
    leading text in ``text_snippet`` so small trees can be written without
    separate text nodes.
    """

    dom_nodes: list[SnapshotNode] = field(default_factory=list)
    by_dom_index: dict[int, SnapshotNode] = field(default_factory=dict, init=False, repr=False)
    roots: list[SnapshotNode] = field(default_factory=list, init=False, repr=False)
    by_element_id: dict[str, list[SnapshotNode]] = field(default_factory=dict, init=False, repr=False)
    labels_by_for: dict[str, list[SnapshotNode]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.by_dom_index = {node.index: node for node in self.dom_nodes}
        self.roots = []
        for node in self.dom_nodes:
            node.children = []
        for node in self.dom_nodes:
            parent = self.by_dom_index.get(node.parent_index) if node.parent_index is not None else None
            node.parent = parent
            if parent is None:
                self.roots.append(node)
            else:
                parent.children.append(node)

        # Lookup lists keep document order, so the first contained hit wins.
        self.by_element_id = {}
        self.labels_by_for = {}
        for node in self.dom_nodes:
            if not node.is_element:
                continue
            element_id = node.attributes.get("id")
            if element_id:
                self.by_element_id.setdefault(element_id, []).append(node)
            label_for = node.attributes.get("for")
            if node.tag == "label" and label_for:
                self.labels_by_for.setdefault(label_for, []).append(node)

    @classmethod
    def from_nodes(cls, dom_nodes: list[SnapshotNode]) -> "PageSnapshot":
        return cls(dom_nodes=list(dom_nodes))

    def node(self, index: int) -> Optional[SnapshotNode]:
        return self.by_dom_index.get(index)

    # -- traversal ---------------------------------------------------------

    def _walk(self, start: list[SnapshotNode]) -> Iterator[SnapshotNode]:
        stack = list(reversed(start))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def enumerate_descendants(self, container: Optional[SnapshotNode]) -> list[SnapshotNode]:
        start = self.roots if container is None else container.children
        return [node for node in self._walk(start) if node.is_element]

    def get_parent(self, element: SnapshotNode) -> Optional[SnapshotNode]:
        return element.parent

    def get_tree_depth(self, element: SnapshotNode) -> int:
        depth = 0
        current = element.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    def contains(self, ancestor: SnapshotNode, other: SnapshotNode) -> bool:
        current: Optional[SnapshotNode] = other
        while current is not None:
            if current is ancestor:
                return True
            current = current.parent
        return False

    def _first_within(
        self, container: Optional[SnapshotNode], nodes: list[SnapshotNode]
    ) -> Optional[SnapshotNode]:
        for node in nodes:
            if container is None or (node is not container and self.contains(container, node)):
                return node
        return None

    def resolve_by_id(self, container: Optional[SnapshotNode], element_id: str) -> Optional[SnapshotNode]:
        if not element_id:
            return None
        return self._first_within(container, self.by_element_id.get(element_id, []))

    def find_label_for(self, container: Optional[SnapshotNode], element_id: str) -> Optional[SnapshotNode]:
        if not element_id:
            return None
        return self._first_within(container, self.labels_by_for.get(element_id, []))

    # -- text --------------------------------------------------------------

    def get_text(self, element: SnapshotNode) -> str:
        parts: list[str] = []
        for node in self._walk([element]):
            if node.text_snippet:
                parts.append(node.text_snippet)
        return "".join(parts)

    def get_inner_text(self, element: SnapshotNode) -> str:
        parts: list[str] = []
        stack = [element]
        while stack:
            node = stack.pop()
            if node is not element and node.is_element and not self._is_rendered(node):
                continue
            if node.text_snippet:
                parts.append(node.text_snippet)
            stack.extend(reversed(node.children))
        return " ".join(" ".join(parts).split())

    # -- attributes --------------------------------------------------------

    def get_attribute(self, element: SnapshotNode, name: str) -> Optional[str]:
        return element.attributes.get(name)

    def get_value(self, element: SnapshotNode) -> str:
        if element.tag not in VALUE_TAGS:
            return ""
        if element.input_value is not None:
            return element.input_value
        return element.attributes.get("value", "")

    def get_placeholder(self, element: SnapshotNode) -> str:
        if element.tag not in PLACEHOLDER_TAGS:
            return ""
        return element.attributes.get("placeholder", "")

    def get_title(self, element: SnapshotNode) -> str:
        return element.attributes.get("title", "")

    def get_alt(self, element: SnapshotNode) -> str:
        if element.tag not in ALT_TAGS:
            return ""
        return element.attributes.get("alt", "")

    def get_name(self, element: SnapshotNode) -> str:
        if element.tag not in NAME_TAGS:
            return ""
        return element.attributes.get("name", "")

    def get_id(self, element: SnapshotNode) -> str:
        return element.attributes.get("id", "")

    def get_class_name(self, element: SnapshotNode) -> str:
        return element.attributes.get("class", "")

    def get_input_type(self, element: SnapshotNode) -> str:
        if element.tag != "input":
            return ""
        # Browsers report "text" for inputs without an explicit type.
        return (element.attributes.get("type") or "text").strip().lower()

    def get_tag_name(self, element: SnapshotNode) -> str:
        return element.tag

    def get_role(self, element: SnapshotNode) -> Optional[str]:
        role = element.attributes.get("role")
        if role is None:
            return None
        return role.strip().lower() or None

    # -- layout ------------------------------------------------------------

    def get_bounding_rect(self, element: SnapshotNode) -> Rect:
        if element.bounds is None:
            raise GeometryError(f"no layout box for <{element.tag}> index={element.index}")
        return Rect(*element.bounds)

    def _is_rendered(self, node: SnapshotNode) -> bool:
        if node.tag in NON_RENDERED_TAGS:
            return False
        if "hidden" in node.attributes:
            return False
        return node.styles.get("display", "").strip().lower() != "none"

    def is_hidden(self, element: SnapshotNode) -> bool:
        if element.bounds is None or Rect(*element.bounds).is_empty:
            return True

        if element.tag not in ROOT_TAGS:
            ancestor = element.parent
            while ancestor is not None:
                if ancestor.is_element and not self._is_rendered(ancestor):
                    return True
                ancestor = ancestor.parent

        display = element.styles.get("display", "").strip().lower()
        visibility = element.styles.get("visibility", "").strip().lower()
        if display == "none" or visibility == "hidden":
            return True
        opacity = element.styles.get("opacity")
        if opacity is not None:
            try:
                if float(opacity) == 0:
                    return True
            except ValueError:
                pass
        if "hidden" in element.attributes:
            return True
        return element.attributes.get("aria-hidden") == "true"

    # -- interactivity -----------------------------------------------------

    def is_focusable(self, element: SnapshotNode) -> bool:
        tabindex = element.attributes.get("tabindex")
        if tabindex is not None:
            try:
                return int(tabindex.strip()) >= 0
            except ValueError:
                pass
        tag = element.tag
        if tag in {"a", "area"}:
            return "href" in element.attributes
        if tag == "input":
            return self.get_input_type(element) != "hidden"
        if tag in NATIVE_FOCUSABLE_TAGS:
            return True
        editable = element.attributes.get("contenteditable")
        return editable is not None and editable.lower() != "false"

    def has_event_handler(self, element: SnapshotNode, kind: str) -> bool:
        if f"on{kind}" in element.attributes:
            return True
        return kind == "click" and element.is_clickable

    # -- descriptors -------------------------------------------------------

    def xpath(self, element: SnapshotNode) -> str:
        steps: list[str] = []
        node: Optional[SnapshotNode] = element
        while node is not None:
            parent = node.parent
            if parent is None:
                steps.append(node.tag)
                break
            siblings = [child for child in parent.children if child.is_element and child.tag == node.tag]
            steps.append(f"{node.tag}[{siblings.index(node) + 1}]")
            node = parent
        return "/" + "/".join(reversed(steps))


def _resolve_string(strings: list[str], idx: Any) -> str:
    if not isinstance(idx, int) or idx < 0 or idx >= len(strings):
        return ""
    return strings[idx]


def parse_dom_snapshot(dom_snapshot: dict[str, Any]) -> Optional[PageSnapshot]:
    """
    Convert a CDP ``DOMSnapshot.captureSnapshot`` payload into a PageSnapshot.

    Only the first document is used; iframes are separate documents in CDP and
    are not merged. Computed styles are expected in ``SNAPSHOT_STYLES`` order.
    """

    documents = dom_snapshot.get("documents", []) or []
    if not documents:
        return None
    strings: list[str] = dom_snapshot.get("strings", []) or []
    document = documents[0]
    node_data = document.get("nodes", {}) or {}
    layout = document.get("layout", {}) or {}

    parent_indices = node_data.get("parentIndex", []) or []
    node_types = node_data.get("nodeType", []) or []
    node_names = node_data.get("nodeName", []) or []
    node_values = node_data.get("nodeValue", []) or []
    raw_attributes = node_data.get("attributes", []) or []

    input_values: dict[int, str] = {}
    rare_inputs = node_data.get("inputValue", {}) or {}
    for idx, value_idx in zip(rare_inputs.get("index", []) or [], rare_inputs.get("value", []) or []):
        input_values[idx] = _resolve_string(strings, value_idx)
    clickable = set((node_data.get("isClickable", {}) or {}).get("index", []) or [])

    bounds_by_node: dict[int, tuple[float, float, float, float]] = {}
    styles_by_node: dict[int, dict[str, str]] = {}
    layout_nodes = layout.get("nodeIndex", []) or []
    layout_bounds = layout.get("bounds", []) or []
    layout_styles = layout.get("styles", []) or []
    for pos, node_idx in enumerate(layout_nodes):
        if pos < len(layout_bounds) and len(layout_bounds[pos]) >= 4:
            x, y, w, h = layout_bounds[pos][:4]
            bounds_by_node[node_idx] = (float(x), float(y), float(w), float(h))
        if pos < len(layout_styles):
            styles_by_node[node_idx] = {
                name: _resolve_string(strings, value_idx)
                for name, value_idx in zip(SNAPSHOT_STYLES, layout_styles[pos])
            }

    dom_nodes: list[SnapshotNode] = []
    for idx, name_idx in enumerate(node_names):
        node_type = node_types[idx] if idx < len(node_types) else ELEMENT_NODE
        if node_type not in (ELEMENT_NODE, TEXT_NODE):
            # Documents, comments and doctypes carry nothing a locator needs;
            # their children are re-parented to the nearest kept ancestor below.
            continue
        attr_pairs = raw_attributes[idx] if idx < len(raw_attributes) else []
        attrs: dict[str, str] = {}
        for j in range(0, len(attr_pairs), 2):
            key = _resolve_string(strings, attr_pairs[j])
            val = _resolve_string(strings, attr_pairs[j + 1]) if j + 1 < len(attr_pairs) else ""
            if key:
                attrs[key] = val
        parent_index = parent_indices[idx] if idx < len(parent_indices) else -1
        text = None
        if node_type == TEXT_NODE:
            text = _resolve_string(strings, node_values[idx] if idx < len(node_values) else None)
        dom_nodes.append(
            SnapshotNode(
                index=idx,
                node_name=_resolve_string(strings, name_idx).lower(),
                attributes=attrs,
                text_snippet=text,
                parent_index=parent_index if parent_index is not None and parent_index >= 0 else None,
                node_type=node_type,
                bounds=bounds_by_node.get(idx),
                styles=styles_by_node.get(idx, {}),
                is_clickable=idx in clickable,
                input_value=input_values.get(idx),
            )
        )

    kept = {node.index for node in dom_nodes}
    for node in dom_nodes:
        parent_index = node.parent_index
        while parent_index is not None and parent_index not in kept:
            grand = parent_indices[parent_index] if parent_index < len(parent_indices) else -1
            parent_index = grand if grand is not None and grand >= 0 else None
        node.parent_index = parent_index

    logger.debug("dom_snapshot_parsed nodes=%s layout=%s", len(dom_nodes), len(layout_nodes))
    return PageSnapshot.from_nodes(dom_nodes)
