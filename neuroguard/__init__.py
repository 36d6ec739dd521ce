"""NeuroGuard biopotential pipeline package.

Modules are organized by pipeline stages:
- acquisition: serial device link and line protocol
- preprocessing: ADC conversion, baseline wander removal
- ecg: R-peak detection, intervals, rhythm, ST segment, report
- features: quick HR/HRV tick features, EMG time and frequency domain
- realtime: channel buffers, signal pipeline, collaborator interfaces
- io: session persistence
- utils: logging setup
"""

__version__ = "0.1.0"
