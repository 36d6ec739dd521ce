"""Time-domain EMG features for the live tick.

- RMS: root mean square of the buffered window
- MAV: approximated as ``RMS * 0.9``
- Variance: approximated as ``RMS ** 2``

MAV and variance are not computed from the samples; the approximations are
kept so the values match what downstream consumers have always seen.
"""
from __future__ import annotations
import numpy as np

MAV_RMS_FACTOR = 0.9


def rms(x: np.ndarray) -> float:
    """Root mean square of a window (0.0 for an empty window)."""
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(x * x)))


def approx_mav(rms_value: float, factor: float = MAV_RMS_FACTOR) -> float:
    """Mean absolute value approximated from RMS."""
    return float(rms_value) * float(factor)


def approx_variance(rms_value: float) -> float:
    """Variance approximated as RMS squared."""
    return float(rms_value) ** 2
