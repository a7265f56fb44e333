import pytest

from smart_locator.locator.page_snapshot import PageSnapshot, SnapshotNode


class PageBuilder:
    """Builds small documents node by node; nodes must be added in document order."""

    def __init__(self):
        self.nodes: list[SnapshotNode] = []
        self.html = self.add("html", bounds=(0, 0, 1024, 768))
        self.body = self.add("body", parent=self.html, bounds=(0, 0, 1024, 768))

    def add(
        self,
        tag,
        text=None,
        parent=None,
        attrs=None,
        bounds=(0, 0, 100, 20),
        styles=None,
        clickable=False,
        value=None,
    ):
        if parent is None and self.nodes:
            parent = self.body
        node = SnapshotNode(
            index=len(self.nodes),
            node_name=tag,
            attributes=dict(attrs or {}),
            text_snippet=text,
            parent_index=parent.index if parent is not None else None,
            bounds=bounds,
            styles=dict(styles or {}),
            is_clickable=clickable,
            input_value=value,
        )
        self.nodes.append(node)
        return node

    def text(self, value, parent):
        node = SnapshotNode(index=len(self.nodes), node_name="#text", text_snippet=value, parent_index=parent.index, node_type=3)
        self.nodes.append(node)
        return node

    def build(self) -> PageSnapshot:
        return PageSnapshot.from_nodes(self.nodes)


@pytest.fixture
def page():
    return PageBuilder()
