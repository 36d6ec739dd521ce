import json

import numpy as np
import pytest

from neuroguard.ecg import RhythmType, generate_ecg_report
from neuroguard.ecg.report import LIMITATIONS
from neuroguard.errors import InsufficientDataError


def test_report_on_synthetic_recording(ecg72):
    raw, beats = ecg72
    report = generate_ecg_report(raw)
    assert report.total_samples == 1000
    assert report.duration_s == 10.0
    assert report.sample_rate == 100.0
    assert len(report.signal_mv) == len(report.filtered_signal) == 1000
    assert [p.index for p in report.r_peaks] == beats
    assert report.rhythm.type is RhythmType.SINUS_RHYTHM
    assert report.interpretation[0].startswith("Ventricular rate: 72 BPM")
    assert report.interpretation[-1].startswith("ST segment: ")
    assert report.limitations == LIMITATIONS
    assert len(report.limitations) == 5


def test_report_is_deterministic(ecg72):
    raw, _ = ecg72
    assert generate_ecg_report(raw) == generate_ecg_report(list(raw))


def test_report_requires_one_second():
    with pytest.raises(InsufficientDataError):
        generate_ecg_report(np.full(99, 512.0))
    with pytest.raises(ValueError):
        generate_ecg_report([])


def test_flat_recording_degrades_to_zero_values():
    report = generate_ecg_report(np.full(1000, 512.0))
    assert report.r_peaks == ()
    assert report.intervals.hr_bpm == 0
    assert report.rhythm.type is RhythmType.INSUFFICIENT_DATA
    assert report.st_segment.description == "Insufficient data for ST segment analysis."
    assert report.interpretation == (
        report.rhythm.description,
        "ST segment: Insufficient data for ST segment analysis.",
    )


def test_report_to_dict_is_json_ready(ecg72):
    raw, _ = ecg72
    d = generate_ecg_report(raw).to_dict()
    assert d["rhythm"]["type"] == "sinus_rhythm"
    assert d["st_segment"]["classification"] in ("normal", "elevation", "depression")
    assert d["intervals"]["hr_bpm"] == 72
    json.loads(json.dumps(d))
