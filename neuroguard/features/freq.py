"""Frequency-domain EMG features.

Median frequency of the EMG power spectrum is the usual muscle fatigue
indicator: it drifts down as a muscle fatigues. Spectra are Welch estimates.
"""
from __future__ import annotations
import numpy as np
from scipy import signal
from typing import Tuple

MIN_PSD_SAMPLES = 8


def welch_psd(window: np.ndarray, fs: float, nperseg: int = 256) -> Tuple[np.ndarray, np.ndarray]:
    """Welch spectrum of one tick window.

    The DC level of the raw EMG counts is removed per segment, so an
    offset-only channel has zero power.

    Args:
        window: Raw EMG samples, oldest first.
        fs: Device sampling rate (Hz).
        nperseg: Segment length, shortened to the window when larger.
    Returns:
        (freqs_hz, power) arrays of equal length.
    """
    samples = np.asarray(window, dtype=float)
    seg = min(int(nperseg), samples.size)
    return signal.welch(samples, fs=fs, nperseg=seg, detrend="constant")


def median_frequency(freqs: np.ndarray, power: np.ndarray) -> float:
    """Frequency splitting total power in half (0.0 when there is no power)."""
    freqs = np.asarray(freqs, dtype=float)
    cumulative = np.cumsum(np.asarray(power, dtype=float))
    if cumulative.size == 0 or cumulative[-1] <= 0:
        return 0.0
    k = int(np.searchsorted(cumulative, 0.5 * cumulative[-1]))
    return float(freqs[min(k, freqs.size - 1)])


def emg_median_frequency(x: np.ndarray, fs: float, nperseg: int = 256) -> float:
    """Median frequency of an EMG window; 0.0 for short or flat windows."""
    x = np.asarray(x, dtype=float)
    if fs <= 0 or x.size < MIN_PSD_SAMPLES or not np.all(np.isfinite(x)):
        return 0.0
    return median_frequency(*welch_psd(x, fs, nperseg))
