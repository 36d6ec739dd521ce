"""ADC count to millivolt conversion.

The AD8232 front end outputs an amplified signal centered on VCC/2, sampled
by a 10-bit ADC (0-1023, 3.3 V reference). Counts are centered on mid-scale
and mapped linearly onto the nominal +/-1.5 mV ECG range:

.. math:: mv = \\frac{raw - mid}{full/2} \\times 1.5

with :math:`full = 1023` and :math:`mid = 511.5`.
"""
from __future__ import annotations
import numpy as np

ADC_BITS = 10
ADC_MAX = (1 << ADC_BITS) - 1
ADC_MID = ADC_MAX / 2.0
V_REF = 3.3
ECG_RANGE_MV = 1.5


def adc_to_millivolts(raw: np.ndarray, adc_max: int = ADC_MAX, range_mv: float = ECG_RANGE_MV) -> np.ndarray:
    """Convert raw ADC counts to millivolts.

    Args:
        raw: Raw ADC samples.
        adc_max: Full-scale ADC count.
        range_mv: Millivolts represented by half the ADC span.
    Returns:
        Float array of the same length.
    """
    x = np.asarray(raw, dtype=float)
    half = adc_max / 2.0
    return (x - half) / half * float(range_mv)
