# -*- coding: utf-8 -*-
"""Weight normalization."""
import math
import numbers


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def normalize_weight(raw) -> float:
    """Convert a raw user-entered weight into a percentage in [0, 100].

    Values up to and including 1 are read as fractions, anything larger as a
    percentage already. A weight of exactly 1 is therefore 100%, never 1%.
    Anything that is not a finite real number normalizes to 0.

    :param raw: The weight as stored on the assignment.
    :return: The weight as a percentage.
    """
    if isinstance(raw, bool) or not isinstance(raw, numbers.Real):
        return 0.0
    raw = float(raw)
    if not math.isfinite(raw):
        return 0.0
    if raw <= 1:
        return clamp(raw * 100)
    return clamp(raw)
