# -*- coding: utf-8 -*-
"""Tests for weight normalization."""
import math

import pytest

from course_tracker.weights import normalize_weight


@pytest.mark.parametrize(
    "raw, expected",
    [
        (0.5, 50),
        (50, 50),
        (1, 100),
        (150, 100),
        (0, 0),
        (0.25, 25),
        (25, 25),
        (1.5, 1.5),
        (100, 100),
    ],
)
def test_normalize_weight_known_values(raw, expected):
    """Fractions are scaled, percentages kept, everything clamped to [0, 100]."""
    assert normalize_weight(raw) == pytest.approx(expected)


def test_weight_of_one_is_read_as_a_whole_fraction():
    """A raw weight of exactly 1 means 100%, not 1%."""
    assert normalize_weight(1) == 100
    assert normalize_weight(1.0) == 100


@pytest.mark.parametrize("raw", [math.nan, math.inf, -math.inf, None, "50", True, [50]])
def test_non_finite_or_non_numeric_weight_is_zero(raw):
    assert normalize_weight(raw) == 0


def test_negative_weight_clamps_to_zero():
    assert normalize_weight(-0.5) == 0
    assert normalize_weight(-20) == 0


def test_normalized_weight_is_always_within_bounds():
    """Every finite non-negative input maps into [0, 100]."""
    for raw in [0, 1e-9, 0.999, 1, 1.0001, 42, 99.99, 100, 100.01, 1e6, 1e300]:
        assert 0 <= normalize_weight(raw) <= 100
