"""Quick heart-rate and HRV estimates for the 1 Hz live tick.

Cheaper than the clinical detector in :mod:`neuroguard.ecg.rpeaks`: peaks are
raw-signal local maxima above ``mean * 1.2`` with a 200 ms refractory gap,
timed with the host timestamps of each sample so jitter and dropped samples
are accounted for.

SDNN here is ``RMSSD * 1.1``, an approximation rather than the standard
deviation of the RR intervals.
"""
from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from neuroguard.utils.signals import iround

THRESHOLD_FACTOR = 1.2
REFRACTORY_MS = 200.0
SDNN_RMSSD_FACTOR = 1.1


@dataclass(frozen=True)
class HeartTick:
    """Heart metrics from one tick window (rounded to whole units)."""
    heart_rate: int
    rmssd: int
    sdnn: int
    peak_count: int


def detect_tick_peaks(
    values: np.ndarray,
    times_ms: np.ndarray,
    threshold_factor: float = THRESHOLD_FACTOR,
    refractory_ms: float = REFRACTORY_MS,
) -> list[int]:
    """Indices of local maxima above ``mean * threshold_factor``.

    A sample qualifies when it is strictly greater than both neighbours and
    the threshold; it is accepted when at least ``refractory_ms`` has passed
    since the previously accepted peak.
    """
    x = np.asarray(values, dtype=float)
    t = np.asarray(times_ms, dtype=float)
    if x.size < 3:
        return []
    threshold = float(np.mean(x)) * threshold_factor
    inner = x[1:-1]
    is_max = (inner > threshold) & (inner > x[:-2]) & (inner > x[2:])
    peaks: list[int] = []
    for i in np.flatnonzero(is_max) + 1:
        if not peaks or t[i] - t[peaks[-1]] >= refractory_ms:
            peaks.append(int(i))
    return peaks


def rmssd(rr: np.ndarray) -> float:
    """Root mean square of successive RR differences (needs >= 2 intervals)."""
    rr = np.asarray(rr, dtype=float)
    if rr.size < 2:
        return 0.0
    return float(np.sqrt(np.mean(np.diff(rr) ** 2)))


def quick_heart_metrics(
    values: np.ndarray,
    times_ms: np.ndarray,
    threshold_factor: float = THRESHOLD_FACTOR,
    refractory_ms: float = REFRACTORY_MS,
    sdnn_factor: float = SDNN_RMSSD_FACTOR,
) -> HeartTick | None:
    """Heart rate, RMSSD and approximated SDNN for a tick window.

    Returns None when fewer than two peaks (no RR interval) are found.
    """
    t = np.asarray(times_ms, dtype=float)
    peaks = detect_tick_peaks(values, t, threshold_factor, refractory_ms)
    if len(peaks) < 2:
        return None
    rr = np.diff(t[peaks])
    mean_rr = float(np.mean(rr))
    if mean_rr <= 0:
        return None
    r = rmssd(rr)
    return HeartTick(
        heart_rate=iround(60000.0 / mean_rr),
        rmssd=iround(r),
        sdnn=iround(r * sdnn_factor),
        peak_count=len(peaks),
    )
