"""Vitals and burnout prediction records exchanged with collaborators."""
from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum

from neuroguard.utils.signals import clamp, iround


@dataclass(frozen=True)
class StressFeatures:
    """The 6-element feature vector handed to the classifier collaborator."""
    hr: float
    hrv: float
    rmssd: float
    sdnn: float
    lf_hf: float
    emg_rms: float

    def as_list(self) -> list[float]:
        return [self.hr, self.hrv, self.rmssd, self.sdnn, self.lf_hf, self.emg_rms]


@dataclass(frozen=True)
class VitalStats:
    """Near-real-time vitals, overwritten by every tick.

    Attributes:
        heart_rate: BPM.
        hrv: ms (RMSSD).
        rmssd: ms.
        sdnn: ms (RMSSD x factor approximation).
        lf_hf_ratio: placeholder ratio.
        emg_rms: raw EMG units.
        emg_median_freq: Hz.
        emg_mav: RMS x factor approximation.
        emg_variance: RMS squared approximation.
    """
    heart_rate: int = 0
    hrv: int = 0
    rmssd: int = 0
    sdnn: int = 0
    lf_hf_ratio: float = 0.0
    emg_rms: int = 0
    emg_median_freq: float = 0.0
    emg_mav: int = 0
    emg_variance: int = 0

    def to_features(self) -> StressFeatures:
        return StressFeatures(
            hr=float(self.heart_rate),
            hrv=float(self.hrv),
            rmssd=float(self.rmssd),
            sdnn=float(self.sdnn),
            lf_hf=float(self.lf_hf_ratio),
            emg_rms=float(self.emg_rms),
        )


NO_SIGNAL = VitalStats()


class BurnoutClass(str, Enum):
    NORMAL = "normal"
    HIGH_STRESS = "high_stress"
    BURNOUT_RISK = "burnout_risk"


@dataclass(frozen=True)
class BurnoutPrediction:
    """Classifier output mapped to a 0-100 score and a class."""
    score: int = 0
    classification: BurnoutClass = BurnoutClass.NORMAL
    confidence: float = 0.0

    @classmethod
    def from_probability(cls, p: float) -> "BurnoutPrediction":
        """Map a burnout likelihood in [0, 1] (clamped) to a prediction."""
        if not math.isfinite(p):
            raise ValueError(f"Classifier returned non-finite value {p!r}")
        p = clamp(float(p), 0.0, 1.0)
        score = iround(p * 100)
        if score > 70:
            kind = BurnoutClass.BURNOUT_RISK
        elif score > 40:
            kind = BurnoutClass.HIGH_STRESS
        else:
            kind = BurnoutClass.NORMAL
        return cls(score=score, classification=kind, confidence=p)


NO_PREDICTION = BurnoutPrediction()
