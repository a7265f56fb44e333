"""Composite relevance score for a matched element."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .type_detection import is_semantic_match, matches_element_type

SOURCE_WEIGHTS: dict[str, float] = {
    "ariaLabel": 20,
    "labelText": 18,
    "textContent": 15,
    "innerText": 15,
    "placeholder": 12,
    "title": 10,
    "alt": 10,
    "value": 8,
    "ariaLabelledBy": 16,
    "ariaDescribedBy": 8,
    "dataLabel": 12,
    "dataTitle": 8,
    "dataTestId": 6,
    "dataTest": 6,
    "name": 5,
    "id": 3,
    "className": 1,
}
DEFAULT_SOURCE_WEIGHT = 1.0

TYPE_MATCH_BONUS = 25.0
TYPE_MISMATCH_FACTOR = 0.001
EXACT_TYPE_MISMATCH_FACTOR = 0.5
SEMANTIC_BONUS = 10.0
INTERACTIVE_BONUS = 8.0
VISIBLE_BONUS = 5.0
HIDDEN_FACTOR = 0.1
SINGLE_SOURCE_BONUS = 5.0
MAX_LENGTH_PENALTY = 0.8


@dataclass(frozen=True)
class MatchedSource:
    source_kind: str
    text: str
    quality: float


@dataclass
class Candidate:
    element: Any
    matched_sources: list[MatchedSource]
    relevance: float
    detected_type: str
    text_sources: dict[str, str] = field(default_factory=dict, repr=False)


def quality_multiplier(best_quality: float) -> float:
    if best_quality >= 100:
        return 3.0
    if best_quality >= 90:
        return 2.5
    if best_quality >= 80:
        return 2.0
    if best_quality >= 60:
        return 1.5
    return 1.0


def weighted_base(matched_sources: Sequence[MatchedSource]) -> tuple[float, float]:
    """Return ``(summed weighted score, best quality)``."""

    total = 0.0
    best_quality = 0.0
    for match in matched_sources:
        weight = SOURCE_WEIGHTS.get(match.source_kind, DEFAULT_SOURCE_WEIGHT)
        total += weight + (match.quality / 100) * weight
        best_quality = max(best_quality, match.quality)
    return total, best_quality


def length_penalty_factor(matched_sources: Sequence[MatchedSource], query: str) -> float:
    if not matched_sources:
        return 1.0
    query_length = len(query.strip())
    if query_length == 0:
        return 1.0
    avg_length = sum(len(match.text or "") for match in matched_sources) / len(matched_sources)
    if avg_length <= query_length * 3:
        return 1.0
    return 1 - min(MAX_LENGTH_PENALTY, avg_length / (query_length * 10))


def compute_relevance(
    matched_sources: Sequence[MatchedSource],
    detected_type: str,
    query: str,
    *,
    active_type: Optional[str] = None,
    exact_match: bool = False,
    interactive: bool = False,
    hidden: bool = False,
    include_hidden: bool = False,
    proximity: Optional[float] = None,
) -> float:
    score, best_quality = weighted_base(matched_sources)

    score *= quality_multiplier(best_quality)
    if exact_match and best_quality >= 100:
        score *= 2

    if active_type:
        if matches_element_type(detected_type, active_type):
            score += TYPE_MATCH_BONUS
        elif best_quality >= 100:
            score *= EXACT_TYPE_MISMATCH_FACTOR
        else:
            score *= TYPE_MISMATCH_FACTOR

    if is_semantic_match(query, detected_type):
        score += SEMANTIC_BONUS

    if not active_type and interactive:
        score += INTERACTIVE_BONUS

    if not hidden:
        score += VISIBLE_BONUS
    elif include_hidden:
        score *= HIDDEN_FACTOR

    score *= length_penalty_factor(matched_sources, query)

    if len(matched_sources) == 1:
        score += SINGLE_SOURCE_BONUS

    if proximity is not None:
        score += proximity

    return max(0.0, score)
