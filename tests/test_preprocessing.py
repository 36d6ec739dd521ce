import numpy as np
import pytest

from neuroguard.preprocessing import adc_to_millivolts, remove_baseline_wander


def test_adc_conversion_range():
    mv = adc_to_millivolts(np.array([0, 511.5, 512, 1023]))
    assert mv[0] == pytest.approx(-1.5)
    assert mv[1] == pytest.approx(0.0)
    assert mv[2] == pytest.approx(0.0015, abs=1e-4)
    assert mv[3] == pytest.approx(1.5)


def test_baseline_removes_constant_offset():
    out = remove_baseline_wander(np.full(200, 0.7), 60)
    assert out.shape == (200,)
    assert np.allclose(out, 0.0)


def test_baseline_removes_linear_drift_in_interior():
    x = np.linspace(0.0, 2.0, 300)
    out = remove_baseline_wander(x, 60)
    # A centered mean of a ramp equals the ramp away from the edges.
    assert np.allclose(out[30:-30], 0.0, atol=1e-9)


def test_baseline_keeps_sharp_peaks():
    x = np.zeros(300)
    x[150] = 1.0
    out = remove_baseline_wander(x, 60)
    assert out[150] > 0.95
    assert int(np.argmax(out)) == 150


def test_baseline_short_input_is_copied_unchanged():
    x = np.arange(10, dtype=float)
    out = remove_baseline_wander(x, 60)
    assert np.array_equal(out, x)
    assert out is not x
