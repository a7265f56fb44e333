"""Drop ancestor matches that a more specific descendant already explains."""

from __future__ import annotations

import re
from typing import Sequence

from .document_model import DocumentModel, ElementHandle
from .ranking import Candidate
from .type_detection import is_interactive

MEANINGFUL_SOURCES = (
    "ariaLabel",
    "labelText",
    "placeholder",
    "title",
    "alt",
    "value",
    "dataLabel",
    "dataTitle",
    "dataTestId",
)
SEMANTIC_TAGS = {
    "button",
    "a",
    "input",
    "select",
    "textarea",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "label",
    "legend",
    "li",
    "td",
}
GENERIC_TAGS = {"div", "span", "p"}


def has_own_meaningful_content(document: DocumentModel, child: Candidate, parent: Candidate) -> bool:
    """Whether ``child`` says something its ancestor ``parent`` does not."""

    if is_interactive(document, child.element) and not is_interactive(document, parent.element):
        return True

    for source in MEANINGFUL_SOURCES:
        child_text = (child.text_sources.get(source) or "").strip()
        if child_text and child_text != (parent.text_sources.get(source) or "").strip():
            return True

    child_tag = document.get_tag_name(child.element)
    parent_tag = document.get_tag_name(parent.element)
    if child_tag in SEMANTIC_TAGS and parent_tag in GENERIC_TAGS:
        return True

    child_text = document.get_text(child.element).strip()
    parent_text = document.get_text(parent.element).strip()
    if child_text and parent_text and child_text in parent_text and len(child_text) < len(parent_text) * 0.5:
        if re.search(rf"\b{re.escape(child_text)}\b", parent_text, re.IGNORECASE):
            return True

    return False


def filter_out_ancestors(document: DocumentModel, candidates: Sequence[Candidate]) -> list[Candidate]:
    """
    Walk candidates deepest first. An ancestor of something already accepted
    is dropped; a descendant of something accepted replaces it only when it
    has its own meaningful content, otherwise the ancestor is kept.
    """

    depths: dict[int, int] = {id(c): document.get_tree_depth(c.element) for c in candidates}
    ordered = sorted(candidates, key=lambda c: depths[id(c)], reverse=True)

    accepted: list[Candidate] = []
    for candidate in ordered:
        include = True
        for existing in list(accepted):
            if _is_ancestor(document, candidate.element, existing.element):
                include = False
                break
            if _is_ancestor(document, existing.element, candidate.element):
                if has_own_meaningful_content(document, candidate, existing):
                    accepted.remove(existing)
                else:
                    include = False
                    break
        if include:
            accepted.append(candidate)
    return accepted


def _is_ancestor(document: DocumentModel, ancestor: ElementHandle, other: ElementHandle) -> bool:
    return ancestor is not other and document.contains(ancestor, other)
