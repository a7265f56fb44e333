import math

import pytest

from smart_locator.locator.document_model import Rect
from smart_locator.locator.proximity import DIRECTIONS, edge_distance, proximity_score

REFERENCE = Rect(0, 0, 100, 20)


def test_edge_distance_is_zero_for_touching_or_overlapping_boxes():
    assert edge_distance(Rect(100, 0, 10, 10), REFERENCE) == 0
    assert edge_distance(Rect(50, 5, 10, 10), REFERENCE) == 0


def test_edge_distance_diagonal():
    assert edge_distance(Rect(130, 60, 10, 10), REFERENCE) == pytest.approx(50)


def test_closer_target_on_the_right_scores_higher():
    near = proximity_score(Rect(120, 0, 40, 20), REFERENCE, 150, ["right"])
    far = proximity_score(Rect(240, 0, 40, 20), REFERENCE, 150, ["right"])

    # closeness + right bonus + top/bottom alignment
    assert near == pytest.approx((1 - 20 / 150) * 50 + 20 + 5)
    assert far == pytest.approx((1 - 140 / 150) * 50 + 20 + 5)
    assert near > far


def test_beyond_threshold_scores_zero():
    assert proximity_score(Rect(500, 0, 40, 20), REFERENCE, 150, ["right"]) == 0
    assert proximity_score(Rect(0, 400, 40, 20), REFERENCE, 150, DIRECTIONS) == 0


def test_score_strictly_decreases_with_distance():
    scores = [proximity_score(Rect(100 + d, 0, 40, 20), REFERENCE, 150, ["right"]) for d in range(0, 150, 10)]
    assert all(a > b for a, b in zip(scores, scores[1:]))


def test_all_satisfied_directions_are_summed():
    target = Rect(120, 40, 50, 20)
    score = proximity_score(target, REFERENCE, 200, DIRECTIONS)
    assert score == pytest.approx((1 - math.hypot(20, 20) / 200) * 50 + 20 + 20)


def test_unpreferred_direction_gets_no_bonus():
    target = Rect(120, 0, 40, 20)
    assert proximity_score(target, REFERENCE, 150, ["left"]) == pytest.approx((1 - 20 / 150) * 50 + 5)


def test_left_and_above_bonuses_are_smaller():
    reference = Rect(200, 200, 100, 20)
    left = proximity_score(Rect(150, 300, 30, 30), reference, 200, ["left"])
    right = proximity_score(Rect(320, 300, 30, 30), reference, 200, ["right"])
    assert right - left == pytest.approx(10)


def test_both_alignment_bonuses_apply():
    # Only the left/right edges line up.
    vertical_only = proximity_score(Rect(5, 30, 100, 20), REFERENCE, 100, [])
    assert vertical_only == pytest.approx((1 - 10 / 100) * 50 + 5)
    # Bottom edges are 7 apart as well.
    both = proximity_score(Rect(5, 25, 100, 2), REFERENCE, 100, [])
    assert both == pytest.approx((1 - 5 / 100) * 50 + 10)


def test_zero_area_target_scores_zero():
    assert proximity_score(Rect(110, 0, 0, 0), REFERENCE, 150, DIRECTIONS) == 0


def test_score_is_capped_at_100():
    reference = Rect(0, 0, 5, 5)
    score = proximity_score(Rect(5, 5, 5, 5), reference, 50, DIRECTIONS)
    assert score == 100


def test_zero_threshold_only_accepts_touching_boxes():
    assert proximity_score(Rect(100, 0, 10, 20), REFERENCE, 0, ["right"]) == pytest.approx(50 + 20 + 5)
    assert proximity_score(Rect(101, 0, 10, 20), REFERENCE, 0, ["right"]) == 0
