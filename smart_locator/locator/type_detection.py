"""Semantic element types: inferring the wanted one from a query, detecting the actual one."""

from __future__ import annotations

from typing import Optional

from .document_model import DocumentModel, ElementHandle

# Checked in order; the first type whose keyword occurs in the query wins.
QUERY_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("button", ("button",)),
    ("link", ("link",)),
    ("input", ("input", "field", "text box", "textbox")),
)

BUTTON_INPUT_TYPES = {"button", "submit", "reset"}
FORM_TAGS = {"textarea", "select"}
STRONG_TAGS = {"button", "a", "input", "textarea", "select"}

ROLE_TYPES = {
    "button": "button",
    "link": "link",
    "textbox": "input",
    "searchbox": "input",
    "combobox": "input",
    "checkbox": "checkbox",
    "radio": "radio",
    "menuitem": "menuitem",
}

HINT_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("button", ("button", "submit", "send", "save")),
    ("link", ("link", "more", "read")),
    ("input", ("input", "field", "text", "search", "email", "password", "enter", "box")),
)

TYPE_EQUIVALENTS: dict[str, set[str]] = {
    "button": {"button", "submit", "reset"},
    "input": {
        "input",
        "text",
        "email",
        "password",
        "search",
        "tel",
        "url",
        "number",
        "textarea",
        "select",
        "checkbox",
        "radio",
    },
    "text": {"input", "textarea", "text", "email", "password", "search"},
    "field": {
        "input",
        "textarea",
        "select",
        "text",
        "email",
        "password",
        "search",
        "tel",
        "url",
        "number",
        "checkbox",
        "radio",
    },
}

SEMANTIC_WORDS = {
    "button": ("submit", "save", "send", "login", "register", "click", "press", "button"),
    "link": ("link", "more", "read", "view", "go", "navigate"),
    "field": ("name", "email", "password", "search", "input", "field", "enter", "text", "box"),
}
FIELD_TYPES = {"input", "textarea", "select"}

INTERACTIVE_TAGS = {"button", "a", "input", "select", "textarea"}
INTERACTIVE_ROLES = {"button", "link", "textbox", "checkbox", "radio", "tab", "menuitem"}


def infer_type_from_query(query: str) -> tuple[Optional[str], Optional[str]]:
    """Return ``(type, keyword)`` for the first type keyword found in the query."""

    lowered = (query or "").lower()
    for type_name, keywords in QUERY_TYPE_KEYWORDS:
        for keyword in keywords:
            if keyword in lowered:
                return type_name, keyword
    return None, None


def strip_type_keyword(query: str, keyword: str) -> str:
    # Literal, case-sensitive removal of every occurrence, including inside
    # longer words ("buttons" -> "s"). "Submit Button" keeps its text.
    return query.replace(keyword, "")


def detect_element_type(document: DocumentModel, element: ElementHandle) -> str:
    tag = document.get_tag_name(element)
    input_type = document.get_input_type(element)

    if tag == "button" or (tag == "input" and input_type in BUTTON_INPUT_TYPES):
        return "button"
    if tag == "a":
        return "link"
    if tag == "input":
        return input_type or "input"
    if tag in FORM_TAGS:
        return tag

    role = document.get_role(element)
    if role and role in ROLE_TYPES:
        return ROLE_TYPES[role]

    if tag not in STRONG_TAGS and not role:
        hints = " ".join(
            [
                (document.get_attribute(element, "aria-label") or "").lower(),
                (document.get_title(element) or "").lower(),
                (document.get_placeholder(element) or "").lower(),
            ]
        )
        for type_name, keywords in HINT_KEYWORDS:
            if any(keyword in hints for keyword in keywords):
                return type_name

    if document.has_event_handler(element, "click") or document.has_event_handler(element, "keydown"):
        return "interactive"
    if document.is_focusable(element):
        return "interactive"
    return tag


def matches_element_type(detected_type: str, wanted_type: str) -> bool:
    wanted = wanted_type.lower()
    if detected_type == wanted:
        return True
    equivalents = TYPE_EQUIVALENTS.get(wanted)
    if equivalents is not None:
        return detected_type in equivalents
    return detected_type in wanted or wanted in detected_type


def is_semantic_match(query: str, detected_type: str) -> bool:
    text = (query or "").lower()
    if detected_type == "button":
        return any(word in text for word in SEMANTIC_WORDS["button"])
    if detected_type == "link":
        return any(word in text for word in SEMANTIC_WORDS["link"])
    if detected_type in FIELD_TYPES:
        return any(word in text for word in SEMANTIC_WORDS["field"])
    return False


def is_interactive(document: DocumentModel, element: ElementHandle) -> bool:
    if document.get_tag_name(element) in INTERACTIVE_TAGS:
        return True
    if document.get_role(element) in INTERACTIVE_ROLES:
        return True
    if document.has_event_handler(element, "click") or document.has_event_handler(element, "keydown"):
        return True
    return document.is_focusable(element)
