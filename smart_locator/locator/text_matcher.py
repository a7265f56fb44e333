"""Phrase / all-words matching and the 0-100 match quality bands."""

from __future__ import annotations

import re


def normalize_text(text: str | None, case_sensitive: bool = False) -> str:
    if not text or not isinstance(text, str):
        return ""
    text = text.strip()
    return text if case_sensitive else text.lower()


def _query_words(query: str) -> list[str]:
    return [word for word in query.split() if word]


def text_matches(text: str | None, query: str, exact: bool = False, case_sensitive: bool = False) -> bool:
    if not text:
        return False
    normalized_text = normalize_text(text, case_sensitive)
    normalized_query = normalize_text(query, case_sensitive)

    if exact:
        return normalized_text == normalized_query
    if normalized_query and normalized_query in normalized_text:
        return True

    words = _query_words(normalized_query)
    if not words:
        return False
    return all(word in normalized_text for word in words)


def _has_word_boundary_match(text: str, query: str) -> bool:
    return re.search(rf"\b{re.escape(query)}\b", text) is not None


def match_quality(text: str | None, query: str, case_sensitive: bool = False) -> float:
    """
    Rate how well ``text`` satisfies ``query`` on a 0-100 scale.

    Bands, best first: exact (100), whole-word phrase (60-95), prefix (40-85),
    any ordered substring (10-70), all words in any order (5-50).
    """

    if not text:
        return 0.0

    normalized_text = normalize_text(text, case_sensitive)
    normalized_query = normalize_text(query, case_sensitive)

    if normalized_text == normalized_query:
        return 100.0

    text_length = len(normalized_text)
    if normalized_query and normalized_query in normalized_text:
        ratio = len(normalized_query) / text_length
        if _has_word_boundary_match(normalized_text, normalized_query):
            return min(95.0, 60 + ratio * 35)
        if normalized_text.startswith(normalized_query):
            return min(85.0, 40 + ratio * 45)
        return min(70.0, 10 + ratio * 60)

    words = _query_words(normalized_query)
    if words and all(word in normalized_text for word in words):
        matched = [word for word in words if word in normalized_text]
        coverage_ratio = len(matched) / len(words)
        content_coverage_ratio = sum(len(word) for word in matched) / text_length
        return min(50.0, 5 + coverage_ratio * 20 + content_coverage_ratio * 25)

    return 0.0
