"""Collect every text channel a user might use to describe an element."""

from __future__ import annotations

from typing import Optional

from .document_model import DocumentModel, ElementHandle

SOURCE_KINDS = (
    "textContent",
    "innerText",
    "value",
    "placeholder",
    "ariaLabel",
    "ariaLabelledBy",
    "ariaDescribedBy",
    "title",
    "alt",
    "labelText",
    "dataLabel",
    "dataTitle",
    "dataTestId",
    "dataTest",
    "name",
    "id",
    "className",
)

TextSourceSet = dict[str, str]


def _referenced_text(
    document: DocumentModel, container: Optional[ElementHandle], element: ElementHandle, attribute: str
) -> str:
    refs = document.get_attribute(element, attribute) or ""
    if not refs.strip():
        return ""
    texts: list[str] = []
    for ref_id in refs.split():
        target = document.resolve_by_id(container, ref_id)
        if target is None:
            continue
        text = document.get_text(target)
        if text.strip():
            texts.append(text)
    return " ".join(texts)


def get_label_text(document: DocumentModel, container: Optional[ElementHandle], element: ElementHandle) -> str:
    element_id = document.get_id(element)
    if element_id:
        label = document.find_label_for(container, element_id)
        if label is not None:
            return document.get_text(label)

    node: Optional[ElementHandle] = element
    while node is not None:
        if document.get_tag_name(node) == "label":
            return document.get_text(node)
        node = document.get_parent(node)
    return ""


def extract_text_sources(
    document: DocumentModel, element: ElementHandle, container: Optional[ElementHandle] = None
) -> TextSourceSet:
    """Return one entry per source kind; missing values come back as ``""``."""

    attr = document.get_attribute
    return {
        "textContent": document.get_text(element) or "",
        "innerText": document.get_inner_text(element) or "",
        "value": document.get_value(element) or "",
        "placeholder": document.get_placeholder(element) or "",
        "ariaLabel": attr(element, "aria-label") or "",
        "ariaLabelledBy": _referenced_text(document, container, element, "aria-labelledby"),
        "ariaDescribedBy": _referenced_text(document, container, element, "aria-describedby"),
        "title": document.get_title(element) or "",
        "alt": document.get_alt(element) or "",
        "labelText": get_label_text(document, container, element),
        "dataLabel": attr(element, "data-label") or "",
        "dataTitle": attr(element, "data-title") or "",
        "dataTestId": attr(element, "data-testid") or "",
        "dataTest": attr(element, "data-test") or "",
        "name": document.get_name(element) or "",
        "id": document.get_id(element) or "",
        "className": document.get_class_name(element) or "",
    }
