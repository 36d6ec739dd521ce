"""Interfaces of the collaborators the pipeline hands results to.

Their implementations (model, storage backend) live outside this package;
the pipeline only depends on these shapes.
"""
from __future__ import annotations
from typing import Protocol

from neuroguard.realtime.vitals import StressFeatures


class BurnoutClassifier(Protocol):
    def predict(self, features: StressFeatures) -> float:
        """Return a burnout likelihood in [0, 1]."""
        ...
