"""Clinical ECG report over a captured segment.

This is the main entry point of the analysis pipeline::

    raw ADC -> mV -> baseline removal -> R-peaks -> intervals
            -> rhythm -> ST segment -> interpretation

Every stage degrades to a defined zero / ``insufficient_data`` value when
there is not enough signal. The one hard precondition is a segment of at
least one second; shorter captures raise
:class:`~neuroguard.errors.InsufficientDataError` because an all-zero report
would be misleading. The path is pure: the same segment always produces an
equal report.
"""
from __future__ import annotations
import logging
from typing import Sequence

import numpy as np

from neuroguard.ecg.intervals import calculate_intervals
from neuroguard.ecg.rhythm import assess_rhythm
from neuroguard.ecg.rpeaks import REFRACTORY_MS, detect_r_peaks, min_samples
from neuroguard.ecg.st_segment import assess_st_segment
from neuroguard.ecg.types import ECGIntervals, ECGReport, RhythmAnalysis, STAssessment
from neuroguard.errors import InsufficientDataError
from neuroguard.preprocessing.conversion import adc_to_millivolts
from neuroguard.preprocessing.filters import BASELINE_WINDOW, remove_baseline_wander
from neuroguard.utils.signals import round_half_up

log = logging.getLogger(__name__)

SAMPLE_RATE_HZ = 100.0
LEAD_CONFIG = "Lead I (3-electrode: RA, LA, RL-ground)"

LIMITATIONS = (
    "This is a single-lead (Lead I) recording from a 3-electrode configuration.",
    "A full 12-lead ECG is required for comprehensive cardiac assessment.",
    "Axis deviation, chamber enlargement, and regional ischemia cannot be reliably assessed from a single lead.",
    "This recording is intended for screening purposes only and should not replace clinical evaluation.",
    "Signal quality may be affected by electrode placement, movement artifacts, and electromagnetic interference.",
)


def _pr_status(pr: int) -> str:
    if pr > 200:
        return "Prolonged (possible 1st degree AV block)"
    if pr < 120:
        return "Short (consider pre-excitation)"
    return "Normal"


def _qrs_status(qrs: int) -> str:
    if qrs > 120:
        return "Wide QRS (consider bundle branch block)"
    if qrs > 100:
        return "Borderline"
    return "Normal"


def _qtc_status(qtc: int) -> str:
    if qtc > 470:
        return "Prolonged QTc"
    if qtc < 350:
        return "Short QTc"
    return "Normal"


def build_interpretation(intervals: ECGIntervals, rhythm: RhythmAnalysis, st: STAssessment) -> list[str]:
    """Ordered interpretation lines: rate, rhythm, PR, QRS, QTc, ST."""
    lines = []
    if intervals.hr_bpm > 0:
        lines.append(
            f"Ventricular rate: {intervals.hr_bpm} BPM "
            f"(range: {intervals.min_hr}-{intervals.max_hr} BPM)"
        )
    lines.append(rhythm.description)
    if intervals.pr_interval > 0:
        lines.append(f"PR interval: {intervals.pr_interval} ms - {_pr_status(intervals.pr_interval)}")
    if intervals.qrs_duration > 0:
        lines.append(f"QRS duration: {intervals.qrs_duration} ms - {_qrs_status(intervals.qrs_duration)}")
    if intervals.qtc_interval > 0:
        lines.append(f"QTc interval: {intervals.qtc_interval} ms (Bazett) - {_qtc_status(intervals.qtc_interval)}")
    lines.append(f"ST segment: {st.description}")
    return lines


def generate_ecg_report(
    raw: Sequence[float] | np.ndarray,
    fs: float = SAMPLE_RATE_HZ,
    baseline_window: int = BASELINE_WINDOW,
    refractory_ms: float = REFRACTORY_MS,
) -> ECGReport:
    """Generate a complete ECG report from raw ADC samples.

    Args:
        raw: Raw 10-bit ADC ECG samples (e.g. 1000 samples = 10 s).
        fs: Sampling rate (Hz).
        baseline_window: Baseline-wander moving-average window (samples).
        refractory_ms: R-peak refractory period (ms).
    Raises:
        InsufficientDataError: Fewer than one second of samples.
    """
    raw_arr = np.asarray(raw, dtype=float)
    total = int(raw_arr.size)
    needed = min_samples(fs)
    if total < needed:
        raise InsufficientDataError(f"Need at least {needed} samples (1 s) for a report, got {total}")

    signal_mv = adc_to_millivolts(raw_arr)
    filtered = remove_baseline_wander(signal_mv, baseline_window)
    peaks = detect_r_peaks(filtered, fs, refractory_ms)
    intervals = calculate_intervals(filtered, peaks, fs)
    rhythm = assess_rhythm(intervals, filtered, peaks, fs)
    st = assess_st_segment(filtered, peaks, fs)
    log.debug("Report: %d samples, %d peaks, %s", total, len(peaks), rhythm.type.value)

    return ECGReport(
        sample_rate=float(fs),
        duration_s=round_half_up(total / float(fs), 1),
        total_samples=total,
        lead_config=LEAD_CONFIG,
        signal_mv=tuple(float(v) for v in signal_mv),
        filtered_signal=tuple(float(v) for v in filtered),
        r_peaks=tuple(peaks),
        intervals=intervals,
        rhythm=rhythm,
        st_segment=st,
        interpretation=tuple(build_interpretation(intervals, rhythm, st)),
        limitations=LIMITATIONS,
    )
