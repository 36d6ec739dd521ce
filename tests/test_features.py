import numpy as np
import pytest

from neuroguard.features.freq import emg_median_frequency, median_frequency
from neuroguard.features.hrv import detect_tick_peaks, quick_heart_metrics, rmssd
from neuroguard.features.time import approx_mav, approx_variance, rms
from tests.helpers import synthetic_ecg


def test_rms_and_approximations():
    x = np.array([3.0, -3.0, 3.0, -3.0])
    assert rms(x) == 3.0
    assert rms(np.array([])) == 0.0
    assert approx_mav(10.0) == pytest.approx(9.0)
    assert approx_variance(10.0) == pytest.approx(100.0)


def test_median_frequency_of_sine():
    fs = 100.0
    t = np.arange(500) / fs
    x = 100 * np.sin(2 * np.pi * 20 * t)
    assert emg_median_frequency(x, fs) == pytest.approx(20.0, abs=1.0)


def test_median_frequency_degenerate_inputs():
    assert emg_median_frequency(np.full(500, 7.0), 100.0) == 0.0
    assert emg_median_frequency(np.ones(4), 100.0) == 0.0
    assert median_frequency(np.array([]), np.array([])) == 0.0


def test_tick_peaks_respect_refractory():
    x = np.zeros(60)
    x[10] = x[15] = x[40] = 5.0
    times = np.arange(60) * 10.0
    assert detect_tick_peaks(x, times) == [10, 40]


def test_tick_peaks_use_host_timestamps():
    x = np.zeros(60)
    x[10] = x[15] = 5.0
    # A gap in the timestamps puts the two maxima 300 ms apart.
    times = np.arange(60) * 10.0
    times[15:] += 250.0
    assert detect_tick_peaks(x, times) == [10, 15]


def test_rmssd():
    assert rmssd(np.array([800.0])) == 0.0
    assert rmssd(np.array([800.0, 810.0, 800.0])) == pytest.approx(10.0)


def test_quick_heart_metrics_on_synthetic_ecg():
    raw, _ = synthetic_ecg(bpm=72.0)
    window = raw[-500:]
    times = np.arange(500, 1000) * 10.0
    heart = quick_heart_metrics(window, times)
    assert heart is not None
    assert heart.peak_count == 6
    assert heart.heart_rate == 72
    assert heart.rmssd == 9
    assert heart.sdnn == 10


def test_quick_heart_metrics_needs_two_peaks():
    assert quick_heart_metrics(np.full(50, 512.0), np.arange(50) * 10.0) is None
