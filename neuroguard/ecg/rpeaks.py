"""R-peak detection for single-lead ECG.

A simplified Pan-Tompkins detector:

1. Derivative-squaring: ``sq[n] = (x[n+1] - x[n-1])^2`` for interior samples
   emphasizes the steep QRS slopes.
2. Moving-window integration over the preceding 150 ms:
   ``integ[n] = mean(sq[n-W:n])`` (zero for ``n < W``).
3. Adaptive threshold, initialized at 30 % of ``max(integ)`` and updated after
   every accepted beat as ``thr = 0.6 thr + 0.4 (0.5 integ[n])``.
4. A candidate is a local maximum of ``integ`` (``>=`` both neighbours,
   ``>`` the left one to break flat runs) above the threshold.
5. The beat is located at the sample of maximum ``|x|`` within +/-5 samples
   of the candidate, in the filtered signal. Both the candidate and the
   located beat must lie at least one refractory period (200 ms) after the
   previous beat.
"""
from __future__ import annotations
import numpy as np

from neuroguard.ecg.types import RPeak

SAMPLE_RATE_HZ = 100.0
REFRACTORY_MS = 200.0
INTEGRATION_MS = 150.0
INITIAL_THRESHOLD_FRACTION = 0.3
REFINE_SAMPLES = 5
# Integrated energy below this (mV^2) is a flat line, not a QRS.
MIN_QRS_ENERGY = 1e-6
MIN_DURATION_S = 1.0


def min_samples(fs: float = SAMPLE_RATE_HZ) -> int:
    """Minimum segment length (one second) for peak detection."""
    return int(round(MIN_DURATION_S * float(fs)))


def derivative_squared(x: np.ndarray) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    sq = np.zeros_like(x)
    if x.size >= 3:
        sq[1:-1] = (x[2:] - x[:-2]) ** 2
    return sq


def moving_window_integration(sq: np.ndarray, window: int) -> np.ndarray:
    """Average of the ``window`` samples preceding each index."""
    sq = np.asarray(sq, dtype=float)
    n = sq.size
    out = np.zeros(n, dtype=float)
    if window <= 0 or n <= window:
        return out
    csum = np.concatenate(([0.0], np.cumsum(sq)))
    out[window:] = (csum[window:n] - csum[0:n - window]) / window
    return out


def refine_peak(x: np.ndarray, candidate: int, radius: int = REFINE_SAMPLES) -> int:
    """Index of the largest ``|x|`` within ``radius`` samples of ``candidate``."""
    lo = max(0, candidate - radius)
    hi = min(x.size - 1, candidate + radius)
    return lo + int(np.argmax(np.abs(x[lo:hi + 1])))


def detect_r_peaks(
    signal: np.ndarray,
    fs: float = SAMPLE_RATE_HZ,
    refractory_ms: float = REFRACTORY_MS,
) -> list[RPeak]:
    """Detect R-peaks in a baseline-corrected ECG segment (mV).

    Args:
        signal: Filtered ECG samples in mV.
        fs: Sampling rate (Hz).
        refractory_ms: Minimum spacing between accepted peaks (ms).
    Returns:
        Peaks in ascending index order. Empty for segments shorter than one
        second or without any QRS energy above threshold.
    """
    x = np.asarray(signal, dtype=float)
    n = x.size
    if fs <= 0 or n < min_samples(fs):
        return []

    ms_per_sample = 1000.0 / float(fs)
    refractory = int(round(refractory_ms / ms_per_sample))
    window = int(round(INTEGRATION_MS / 1000.0 * fs))

    integ = moving_window_integration(derivative_squared(x), window)
    peak_energy = float(np.max(integ))
    if not np.isfinite(peak_energy) or peak_energy < MIN_QRS_ENERGY:
        return []
    threshold = INITIAL_THRESHOLD_FRACTION * peak_energy

    peaks: list[RPeak] = []
    last = -refractory
    for i in range(1, n - 1):
        v = integ[i]
        if not (v > threshold and v > integ[i - 1] and v >= integ[i + 1]):
            continue
        if i - last < refractory:
            continue
        best = refine_peak(x, i)
        if best - last < refractory:
            continue
        peaks.append(RPeak(index=best, amplitude_mv=float(x[best]), time_ms=best * ms_per_sample))
        last = best
        threshold = 0.6 * threshold + 0.4 * (v * 0.5)
    return peaks
