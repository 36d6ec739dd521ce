"""Small numeric helpers used across the pipeline."""
from __future__ import annotations
import math


def round_half_up(x: float, ndigits: int = 0) -> float:
    """Round with halves going up (0.5 -> 1, -0.5 -> 0), unlike round()."""
    scale = 10.0 ** ndigits
    return math.floor(x * scale + 0.5) / scale


def iround(x: float) -> int:
    """round_half_up to an int."""
    return int(math.floor(x + 0.5))


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))
