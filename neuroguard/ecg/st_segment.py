"""ST-segment deviation relative to the TP baseline.

For each pair of consecutive beats the J-point is taken 80 ms after the
earlier R-peak and the ST level 40 ms after that. The baseline is the mean
of the 70-90 % span of the RR interval (an approximation of the TP segment).
The per-beat deviations are averaged and rounded to 0.01 mV; beyond
+/-0.1 mV the segment is classified as elevated or depressed.
"""
from __future__ import annotations
from typing import Sequence

import numpy as np

from neuroguard.ecg.types import RPeak, STAssessment, STClassification
from neuroguard.utils.signals import iround, round_half_up

SAMPLE_RATE_HZ = 100.0
J_POINT_MS = 80.0
ST_OFFSET_MS = 40.0
TP_START_FRACTION = 0.7
TP_END_FRACTION = 0.9
ST_THRESHOLD_MV = 0.1


def st_deviations(signal: np.ndarray, peaks: Sequence[RPeak], fs: float = SAMPLE_RATE_HZ) -> list[float]:
    """Per-beat ST deviation (mV) for every consecutive peak pair."""
    x = np.asarray(signal, dtype=float)
    last = x.size - 1
    if last < 0:
        return []
    ms_per_sample = 1000.0 / float(fs)
    j_off = int(round(J_POINT_MS / ms_per_sample))
    st_off = int(round(ST_OFFSET_MS / ms_per_sample))

    out = []
    for cur, nxt in zip(peaks, peaks[1:]):
        r = cur.index
        j_point = min(last, r + j_off)
        st_point = min(last, j_point + st_off)
        rr_samples = nxt.index - r
        tp_start = min(last, r + iround(rr_samples * TP_START_FRACTION))
        tp_end = min(last, r + iround(rr_samples * TP_END_FRACTION))
        tp = x[tp_start:tp_end + 1]
        baseline = float(np.mean(tp)) if tp.size else 0.0
        out.append(float(x[st_point]) - baseline)
    return out


def assess_st_segment(signal: np.ndarray, peaks: Sequence[RPeak], fs: float = SAMPLE_RATE_HZ) -> STAssessment:
    if len(peaks) < 2:
        return STAssessment(0.0, STClassification.NORMAL, "Insufficient data for ST segment analysis.")
    devs = st_deviations(signal, peaks, fs)
    if not devs:
        return STAssessment(0.0, STClassification.NORMAL, "Unable to measure ST segment.")

    deviation = round_half_up(float(np.mean(devs)), 2)
    if deviation > ST_THRESHOLD_MV:
        return STAssessment(
            deviation,
            STClassification.ELEVATION,
            f"ST elevation of {deviation:.2f} mV detected. In a single-lead recording, this finding "
            "requires confirmation with a 12-lead ECG. May indicate acute myocardial injury if "
            "confirmed across multiple leads.",
        )
    if deviation < -ST_THRESHOLD_MV:
        return STAssessment(
            deviation,
            STClassification.DEPRESSION,
            f"ST depression of {abs(deviation):.2f} mV detected. Requires confirmation with a "
            "12-lead ECG. May indicate myocardial ischemia, strain, or medication effects.",
        )
    return STAssessment(deviation, STClassification.NORMAL, "ST segment is isoelectric (within normal limits).")
