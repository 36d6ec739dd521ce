"""Preprocessing subpackage for ECG signals.
Exports ADC conversion and baseline wander removal.
"""
from .conversion import adc_to_millivolts
from .filters import remove_baseline_wander
