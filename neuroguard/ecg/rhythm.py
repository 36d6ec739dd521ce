"""Rhythm classification from intervals and the filtered signal."""
from __future__ import annotations
from typing import Sequence

import numpy as np

from neuroguard.ecg.intervals import find_p_wave
from neuroguard.ecg.types import ECGIntervals, RPeak, RhythmAnalysis, RhythmType

SAMPLE_RATE_HZ = 100.0
MIN_PEAKS = 3
REGULARITY_CV = 0.15
P_WAVE_FRACTION = 0.6
BRADYCARDIA_BPM = 60
TACHYCARDIA_BPM = 100


def p_wave_present(signal: np.ndarray, peaks: Sequence[RPeak], fs: float = SAMPLE_RATE_HZ) -> bool:
    """True when a P-wave precedes more than 60 % of the peaks."""
    if not peaks:
        return False
    count = sum(1 for p in peaks if find_p_wave(signal, p.index, fs) is not None)
    return count > len(peaks) * P_WAVE_FRACTION


def assess_rhythm(
    intervals: ECGIntervals,
    signal: np.ndarray,
    peaks: Sequence[RPeak],
    fs: float = SAMPLE_RATE_HZ,
) -> RhythmAnalysis:
    """Classify the rhythm.

    Precedence: irregular > sinus bradycardia > sinus tachycardia > sinus
    rhythm. Needs at least three peaks and one valid RR interval, otherwise
    ``insufficient_data``.
    """
    if len(peaks) < MIN_PEAKS or intervals.mean_rr <= 0:
        return RhythmAnalysis(
            type=RhythmType.INSUFFICIENT_DATA,
            regular=False,
            description=(
                "Insufficient R-peaks detected for rhythm analysis. "
                "Recording may be too short or signal quality is poor."
            ),
            p_wave_present=False,
        )

    regular = (intervals.sd_rr / intervals.mean_rr) < REGULARITY_CV
    has_p = p_wave_present(signal, peaks, fs)
    hr = intervals.hr_bpm

    if not regular:
        kind = RhythmType.IRREGULAR
        description = (
            "Irregular rhythm detected. R-R interval variability exceeds normal sinus variation. "
            "Further evaluation with 12-lead ECG recommended."
        )
    elif hr < BRADYCARDIA_BPM:
        kind = RhythmType.SINUS_BRADYCARDIA
        p_text = "P waves present before each QRS." if has_p else "P wave morphology unclear in this lead."
        description = (
            f"Sinus bradycardia at {hr} BPM. {p_text} "
            "Rate below 60 BPM, may be normal in athletes or during sleep."
        )
    elif hr > TACHYCARDIA_BPM:
        kind = RhythmType.SINUS_TACHYCARDIA
        p_text = "P waves present before each QRS." if has_p else "P wave morphology unclear."
        description = (
            f"Sinus tachycardia at {hr} BPM. {p_text} "
            "Rate above 100 BPM, consider stress, anxiety, caffeine, or underlying condition."
        )
    else:
        kind = RhythmType.SINUS_RHYTHM
        p_text = (
            "P waves present and upright before each QRS complex."
            if has_p else "P wave assessment limited in this lead configuration."
        )
        description = f"Normal sinus rhythm at {hr} BPM. {p_text} Regular R-R intervals."

    return RhythmAnalysis(type=kind, regular=regular, description=description, p_wave_present=has_p)
