"""Real-time subpackage: channel buffers, vitals records and the signal pipeline."""
from .buffers import ChannelBuffer, ChannelSnapshot
from .vitals import NO_PREDICTION, NO_SIGNAL, BurnoutPrediction, StressFeatures, VitalStats
from .pipeline import SignalPipeline
