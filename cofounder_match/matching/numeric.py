"""Rounding and clamping helpers shared by the scoring modules."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (62.5 -> 63)."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    """Round half-up and clamp into ``[low, high]``."""
    return max(low, min(high, round_half_up(value)))
