"""Interval measurements from an R-peak sequence.

RR intervals outside the physiological 30-300 BPM band (200-2000 ms) are
dropped from the statistics, the peaks themselves are kept. Wave intervals
are single-lead estimates:

- QRS: scan out from the first R-peak until ``|x|`` drops below 30 % of the
  peak amplitude (at most 150 ms each side); outside [40, 200] ms falls back
  to 80 ms.
- PR: largest positive deflection above 0.02 mV in the 80-250 ms before the
  first R-peak; 160 ms when none is found; clamped to [80, 300] ms.
- QT: ``0.4 * mean RR`` clamped to [300, 500] ms. An approximation, not a
  T-wave offset measurement.
- QTc: Bazett, ``QT / sqrt(RR_s)``.
"""
from __future__ import annotations
import math
from typing import Sequence

import numpy as np

from neuroguard.ecg.types import ECGIntervals, RPeak
from neuroguard.utils.signals import clamp, iround

SAMPLE_RATE_HZ = 100.0

RR_MIN_MS = 200.0
RR_MAX_MS = 2000.0

QRS_AMPLITUDE_FRACTION = 0.3
QRS_SEARCH_MS = 150.0
QRS_MIN_MS, QRS_MAX_MS, QRS_DEFAULT_MS = 40, 200, 80

P_SEARCH_START_MS = 250.0
P_SEARCH_END_MS = 80.0
P_WAVE_THRESHOLD_MV = 0.02
PR_MIN_MS, PR_MAX_MS, PR_DEFAULT_MS = 80, 300, 160

QT_RR_FRACTION = 0.4
QT_MIN_MS, QT_MAX_MS = 300, 500


def rr_intervals(peaks: Sequence[RPeak]) -> list[float]:
    """Consecutive peak spacings (ms) within [RR_MIN_MS, RR_MAX_MS]."""
    out = []
    for prev, cur in zip(peaks, peaks[1:]):
        rr = cur.time_ms - prev.time_ms
        if RR_MIN_MS <= rr <= RR_MAX_MS:
            out.append(rr)
    return out


def find_p_wave(signal: np.ndarray, peak_index: int, fs: float = SAMPLE_RATE_HZ) -> int | None:
    """Index of the P-wave candidate before ``peak_index``, or None.

    Searches 80-250 ms ahead of the R-peak for the largest positive
    deflection exceeding the P-wave threshold.
    """
    ms_per_sample = 1000.0 / float(fs)
    start = max(0, peak_index - int(round(P_SEARCH_START_MS / ms_per_sample)))
    end = peak_index - int(round(P_SEARCH_END_MS / ms_per_sample))
    if end < start:
        return None
    seg = np.asarray(signal[start:end + 1], dtype=float)
    if seg.size == 0:
        return None
    k = int(np.argmax(seg))
    if seg[k] > P_WAVE_THRESHOLD_MV:
        return start + k
    return None


def estimate_qrs_duration(signal: np.ndarray, peak: RPeak, fs: float = SAMPLE_RATE_HZ) -> int:
    x = np.asarray(signal, dtype=float)
    ms_per_sample = 1000.0 / float(fs)
    span = int(round(QRS_SEARCH_MS / ms_per_sample))
    cutoff = abs(peak.amplitude_mv) * QRS_AMPLITUDE_FRACTION
    p = peak.index

    onset = p
    for i in range(p, max(0, p - span) - 1, -1):
        if abs(x[i]) < cutoff:
            onset = i
            break
    offset = p
    for i in range(p, min(x.size - 1, p + span) + 1):
        if abs(x[i]) < cutoff:
            offset = i
            break

    duration = iround((offset - onset) * ms_per_sample)
    if duration < QRS_MIN_MS or duration > QRS_MAX_MS:
        return QRS_DEFAULT_MS
    return duration


def estimate_pr_interval(signal: np.ndarray, peak: RPeak, fs: float = SAMPLE_RATE_HZ) -> int:
    ms_per_sample = 1000.0 / float(fs)
    p_idx = find_p_wave(signal, peak.index, fs)
    pr = PR_DEFAULT_MS if p_idx is None else iround((peak.index - p_idx) * ms_per_sample)
    return int(clamp(pr, PR_MIN_MS, PR_MAX_MS))


def calculate_intervals(signal: np.ndarray, peaks: Sequence[RPeak], fs: float = SAMPLE_RATE_HZ) -> ECGIntervals:
    """Compute RR statistics and wave interval estimates.

    Returns an all-zero ECGIntervals when fewer than two peaks exist or no
    RR interval survives the physiological range check.
    """
    if len(peaks) < 2:
        return ECGIntervals()
    rr = rr_intervals(peaks)
    if not rr:
        return ECGIntervals()

    rr_arr = np.asarray(rr, dtype=float)
    mean_rr = float(np.mean(rr_arr))
    sd_rr = float(np.std(rr_arr))
    hr_values = [iround(60000.0 / v) for v in rr]

    qt = int(clamp(iround(mean_rr * QT_RR_FRACTION), QT_MIN_MS, QT_MAX_MS))
    qtc = iround(qt / math.sqrt(mean_rr / 1000.0))

    return ECGIntervals(
        rr_intervals=tuple(rr),
        mean_rr=iround(mean_rr),
        sd_rr=iround(sd_rr),
        hr_bpm=iround(60000.0 / mean_rr),
        min_hr=min(hr_values),
        max_hr=max(hr_values),
        pr_interval=estimate_pr_interval(signal, peaks[0], fs),
        qrs_duration=estimate_qrs_duration(signal, peaks[0], fs),
        qt_interval=qt,
        qtc_interval=qtc,
    )
