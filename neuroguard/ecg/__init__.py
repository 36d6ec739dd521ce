"""ECG analysis subpackage: R-peaks, intervals, rhythm, ST segment, report."""
from .types import (
    ECGIntervals,
    ECGReport,
    RhythmAnalysis,
    RhythmType,
    RPeak,
    STAssessment,
    STClassification,
)
from .rpeaks import detect_r_peaks
from .intervals import calculate_intervals
from .rhythm import assess_rhythm
from .st_segment import assess_st_segment
from .report import generate_ecg_report
