import numpy as np

from neuroguard.ecg.intervals import calculate_intervals, find_p_wave, rr_intervals
from neuroguard.ecg.rpeaks import detect_r_peaks
from neuroguard.ecg.types import ECGIntervals, RPeak
from neuroguard.preprocessing import adc_to_millivolts, remove_baseline_wander


def peaks_at(*indices, fs=100.0):
    return [RPeak(index=i, amplitude_mv=1.0, time_ms=i * 1000.0 / fs) for i in indices]


def test_rr_outliers_are_dropped():
    # RR: 800, 800, 3000, 800, 800 ms
    peaks = peaks_at(10, 90, 170, 470, 550, 630)
    iv = calculate_intervals(np.zeros(700), peaks)
    assert iv.rr_intervals == (800.0, 800.0, 800.0, 800.0)
    assert iv.mean_rr == 800
    assert iv.sd_rr == 0
    assert iv.hr_bpm == 75
    assert (iv.min_hr, iv.max_hr) == (75, 75)
    # Flat signal: no measurable QRS edges or P wave, so defaults apply.
    assert iv.qrs_duration == 80
    assert iv.pr_interval == 160
    assert iv.qt_interval == 320
    assert iv.qtc_interval == 358


def test_rr_bounds_are_inclusive():
    assert rr_intervals(peaks_at(0, 20, 220, 421)) == [200.0, 2000.0]


def test_mean_rr_833_gives_72_bpm():
    peaks = [RPeak(i, 1.0, t) for i, t in enumerate([0.0, 833.0, 1666.0, 2499.0])]
    iv = calculate_intervals(np.zeros(300), peaks)
    assert iv.hr_bpm == 72


def test_fewer_than_two_peaks_gives_zeros():
    assert calculate_intervals(np.zeros(300), peaks_at(50)) == ECGIntervals()
    assert calculate_intervals(np.zeros(300), []) == ECGIntervals()


def test_no_valid_rr_gives_zeros():
    assert calculate_intervals(np.zeros(400), peaks_at(0, 300)) == ECGIntervals()


def test_qt_is_clamped():
    fast = calculate_intervals(np.zeros(400), peaks_at(0, 40, 80))
    assert fast.qt_interval == 300
    slow = calculate_intervals(np.zeros(800), peaks_at(0, 150, 300))
    assert slow.qt_interval == 500


def test_find_p_wave_window():
    x = np.zeros(100)
    x[60] = 0.1
    assert find_p_wave(x, 75) == 60
    # 10 samples before the peak is inside the 80 ms exclusion.
    assert find_p_wave(x, 65) is None
    assert find_p_wave(x, 5) is None


def test_synthetic_wave_intervals(ecg72):
    raw, _ = ecg72
    filtered = remove_baseline_wander(adc_to_millivolts(raw), 60)
    iv = calculate_intervals(filtered, detect_r_peaks(filtered))
    assert abs(iv.hr_bpm - 72) <= 2
    assert iv.pr_interval == 160
    assert 40 <= iv.qrs_duration <= 100
    assert iv.qt_interval == 333
    assert iv.qtc_interval == 365
