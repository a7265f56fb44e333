"""Contract between the locator engine and whatever owns the document tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

ElementHandle = Any


class GeometryError(RuntimeError):
    """Raised when an element has no usable layout box."""


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0


class DocumentModel(Protocol):
    """
    Read-only view of a rendered document.

    Handles are opaque to the engine and compared by identity. ``container``
    may be ``None`` to mean the whole document.
    """

    def enumerate_descendants(self, container: Optional[ElementHandle]) -> Sequence[ElementHandle]: ...

    def get_attribute(self, element: ElementHandle, name: str) -> Optional[str]: ...

    def get_text(self, element: ElementHandle) -> str: ...

    def get_inner_text(self, element: ElementHandle) -> str: ...

    def get_value(self, element: ElementHandle) -> str: ...

    def get_placeholder(self, element: ElementHandle) -> str: ...

    def get_title(self, element: ElementHandle) -> str: ...

    def get_alt(self, element: ElementHandle) -> str: ...

    def get_name(self, element: ElementHandle) -> str: ...

    def get_id(self, element: ElementHandle) -> str: ...

    def get_class_name(self, element: ElementHandle) -> str: ...

    def get_input_type(self, element: ElementHandle) -> str: ...

    def resolve_by_id(self, container: Optional[ElementHandle], element_id: str) -> Optional[ElementHandle]: ...

    def find_label_for(self, container: Optional[ElementHandle], element_id: str) -> Optional[ElementHandle]: ...

    def get_parent(self, element: ElementHandle) -> Optional[ElementHandle]: ...

    def get_bounding_rect(self, element: ElementHandle) -> Rect: ...

    def is_hidden(self, element: ElementHandle) -> bool: ...

    def get_tag_name(self, element: ElementHandle) -> str: ...

    def get_role(self, element: ElementHandle) -> Optional[str]: ...

    def is_focusable(self, element: ElementHandle) -> bool: ...

    def has_event_handler(self, element: ElementHandle, kind: str) -> bool: ...

    def get_tree_depth(self, element: ElementHandle) -> int: ...

    def contains(self, ancestor: ElementHandle, other: ElementHandle) -> bool: ...
