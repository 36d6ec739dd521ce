import numpy as np
import pytest

from neuroguard.ecg.intervals import calculate_intervals
from neuroguard.ecg.rhythm import assess_rhythm
from neuroguard.ecg.rpeaks import detect_r_peaks
from neuroguard.ecg.st_segment import assess_st_segment
from neuroguard.ecg.types import RhythmType, RPeak, STClassification
from neuroguard.preprocessing import adc_to_millivolts, remove_baseline_wander
from tests.helpers import synthetic_ecg


def analyse(raw):
    filtered = remove_baseline_wander(adc_to_millivolts(raw), 60)
    peaks = detect_r_peaks(filtered)
    iv = calculate_intervals(filtered, peaks)
    return iv, assess_rhythm(iv, filtered, peaks)


@pytest.mark.parametrize("kwargs, expected, hr", [
    (dict(bpm=72.0), RhythmType.SINUS_RHYTHM, 72),
    (dict(bpm=50.0), RhythmType.SINUS_BRADYCARDIA, 50),
    (dict(bpm=120.0), RhythmType.SINUS_TACHYCARDIA, 120),
])
def test_regular_rhythms(kwargs, expected, hr):
    iv, rhythm = analyse(synthetic_ecg(**kwargs)[0])
    assert iv.hr_bpm == hr
    assert rhythm.type is expected
    assert rhythm.regular
    assert rhythm.p_wave_present
    assert f"{hr} BPM" in rhythm.description


def test_irregular_rhythm_takes_precedence():
    _, rhythm = analyse(synthetic_ecg(rr_ms=[600.0, 1100.0])[0])
    assert rhythm.type is RhythmType.IRREGULAR
    assert not rhythm.regular


def test_too_few_peaks_is_insufficient():
    _, rhythm = analyse(synthetic_ecg(bpm=60.0, seconds=2.0)[0])
    assert rhythm.type is RhythmType.INSUFFICIENT_DATA
    assert not rhythm.p_wave_present


def peaks_at(*indices):
    return [RPeak(index=i, amplitude_mv=1.0, time_ms=i * 10.0) for i in indices]


@pytest.mark.parametrize("level, expected", [
    (0.3, STClassification.ELEVATION),
    (-0.25, STClassification.DEPRESSION),
    (0.05, STClassification.NORMAL),
])
def test_st_classification(level, expected):
    x = np.zeros(400)
    # ST point sits 120 ms after each R peak.
    x[32] = x[132] = level
    st = assess_st_segment(x, peaks_at(20, 120, 220))
    assert st.deviation_mv == pytest.approx(level)
    assert st.classification is expected


def test_st_description_mentions_deviation():
    x = np.zeros(400)
    x[32] = x[132] = -0.25
    st = assess_st_segment(x, peaks_at(20, 120, 220))
    assert "0.25 mV" in st.description


def test_st_needs_two_peaks():
    st = assess_st_segment(np.zeros(400), peaks_at(20))
    assert st.deviation_mv == 0.0
    assert st.classification is STClassification.NORMAL
    assert st.description == "Insufficient data for ST segment analysis."
