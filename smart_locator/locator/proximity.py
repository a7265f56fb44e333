"""Spatial closeness between a target box and a reference box."""

from __future__ import annotations

import math
from typing import Iterable

from .document_model import Rect

DIRECTIONS = ("right", "below", "left", "above")
DIRECTION_BONUSES = {"right": 20.0, "below": 20.0, "left": 10.0, "above": 10.0}
CLOSENESS_WEIGHT = 50.0
ALIGNMENT_BONUS = 5.0
ALIGNMENT_TOLERANCE = 10.0


def edge_distance(target: Rect, reference: Rect) -> float:
    dx = max(0.0, target.left - reference.right, reference.left - target.right)
    dy = max(0.0, target.top - reference.bottom, reference.top - target.bottom)
    return math.sqrt(dx * dx + dy * dy)


def satisfies_direction(target: Rect, reference: Rect, direction: str) -> bool:
    if direction == "right":
        return target.left >= reference.right
    if direction == "below":
        return target.top >= reference.bottom
    if direction == "left":
        return target.right <= reference.left
    if direction == "above":
        return target.bottom <= reference.top
    return False


def proximity_score(target: Rect, reference: Rect, threshold: float, directions: Iterable[str]) -> float:
    """
    Score 0-100: up to 50 for closeness, plus a bonus per satisfied preferred
    direction, plus 5 each for horizontal and vertical edge alignment.
    """

    if target.is_empty:
        return 0.0

    distance = edge_distance(target, reference)
    if distance > threshold:
        return 0.0

    if threshold > 0:
        score = (1 - distance / threshold) * CLOSENESS_WEIGHT
    else:
        score = CLOSENESS_WEIGHT

    for direction in directions:
        if satisfies_direction(target, reference, direction):
            score += DIRECTION_BONUSES.get(direction, 0.0)

    if (
        abs(target.top - reference.top) < ALIGNMENT_TOLERANCE
        or abs(target.bottom - reference.bottom) < ALIGNMENT_TOLERANCE
    ):
        score += ALIGNMENT_BONUS
    if (
        abs(target.left - reference.left) < ALIGNMENT_TOLERANCE
        or abs(target.right - reference.right) < ALIGNMENT_TOLERANCE
    ):
        score += ALIGNMENT_BONUS

    return min(100.0, max(0.0, score))
