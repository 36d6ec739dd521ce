"""Value objects produced by the ECG analysis pipeline.

All are frozen; a new analysis produces new objects rather than mutating
previous ones. Sequences are stored as tuples so equal inputs produce
equal (``==``) results.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from enum import Enum


class RhythmType(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    SINUS_RHYTHM = "sinus_rhythm"
    SINUS_BRADYCARDIA = "sinus_bradycardia"
    SINUS_TACHYCARDIA = "sinus_tachycardia"
    IRREGULAR = "irregular"


class STClassification(str, Enum):
    NORMAL = "normal"
    ELEVATION = "elevation"
    DEPRESSION = "depression"


@dataclass(frozen=True)
class RPeak:
    """A detected R-peak.

    Attributes:
        index: Sample offset into the analysis window.
        amplitude_mv: Filtered signal value at the peak (mV).
        time_ms: Time from the start of the window (ms).
    """
    index: int
    amplitude_mv: float
    time_ms: float


@dataclass(frozen=True)
class ECGIntervals:
    """Interval statistics derived from an R-peak sequence.

    All fields are zero when fewer than two peaks (or no physiological RR
    interval) exist. Times are in ms, rates in BPM.
    """
    rr_intervals: tuple[float, ...] = ()
    mean_rr: int = 0
    sd_rr: int = 0
    hr_bpm: int = 0
    min_hr: int = 0
    max_hr: int = 0
    pr_interval: int = 0
    qrs_duration: int = 0
    qt_interval: int = 0
    qtc_interval: int = 0


@dataclass(frozen=True)
class RhythmAnalysis:
    type: RhythmType
    regular: bool
    description: str
    p_wave_present: bool


@dataclass(frozen=True)
class STAssessment:
    """ST deviation (mV, positive = elevation) and its classification."""
    deviation_mv: float
    classification: STClassification
    description: str


@dataclass(frozen=True)
class ECGReport:
    """Complete result of one clinical analysis call."""
    sample_rate: float
    duration_s: float
    total_samples: int
    lead_config: str
    signal_mv: tuple[float, ...]
    filtered_signal: tuple[float, ...]
    r_peaks: tuple[RPeak, ...]
    intervals: ECGIntervals
    rhythm: RhythmAnalysis
    st_segment: STAssessment
    interpretation: tuple[str, ...] = field(default=())
    limitations: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict:
        """Plain JSON-ready representation (enums as their string values)."""
        d = asdict(self)
        d["rhythm"]["type"] = self.rhythm.type.value
        d["st_segment"]["classification"] = self.st_segment.classification.value
        return d
