"""Configuration for the NeuroGuard pipeline.

This module centralizes tunable parameters (sampling, buffer bounds, peak
detection constants, approximation factors) so the live tick, the clinical
report and the command-line scripts share one consistent setup. Environment
overrides are read through :class:`Settings`.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from neuroguard.acquisition.serial_source import SerialConfig


@dataclass
class PipelineConfig:
    """Top-level configuration for buffering and feature extraction.

    Attributes:
        sample_rate_hz: Nominal device sampling rate (Hz).
        ecg_buffer_size: ECG ring buffer bound (samples, oldest evicted).
        emg_buffer_size: EMG ring buffer bound (samples, oldest evicted).
        tick_window: Number of most recent samples used by the live tick.
        min_tick_samples: Below this many samples the tick is skipped.
        tick_interval_s: Period of the background tick thread (s).
        tick_threshold_factor: Peak threshold as a multiple of the ECG mean.
        refractory_ms: Minimum gap between accepted peaks (ms).
        sdnn_rmssd_factor: SDNN approximated as RMSSD times this factor.
        emg_mav_factor: MAV approximated as RMS times this factor.
        lf_hf_ratio: Placeholder LF/HF ratio reported with every tick.
        report_segment_size: Default capture length for on-demand reports.
        emg_psd_nperseg: Welch segment length for the EMG median frequency.
    """

    # Sampling
    sample_rate_hz: float = 100.0

    # Buffers
    ecg_buffer_size: int = 1000
    emg_buffer_size: int = 1000

    # Live tick
    tick_window: int = 500
    min_tick_samples: int = 50
    tick_interval_s: float = 1.0
    tick_threshold_factor: float = 1.2
    refractory_ms: float = 200.0

    # Approximations
    sdnn_rmssd_factor: float = 1.1
    emg_mav_factor: float = 0.9
    lf_hf_ratio: float = 1.5

    # Clinical report
    report_segment_size: int = 1000

    # EMG spectrum
    emg_psd_nperseg: int = 256


class Settings(BaseSettings):
    """Environment-driven settings (``NEUROGUARD_*`` variables or ``.env``)."""

    serial_port: str | None = None
    baud: int = 115200
    read_timeout_s: float = 0.1
    sample_rate_hz: float = 100.0
    log_level: str = "INFO"
    log_file: str | None = None
    session_store_path: str = str(Path.home() / ".neuroguard" / "sessions.json")

    model_config = SettingsConfigDict(env_prefix="NEUROGUARD_", env_file=".env", extra="ignore")

    def serial_config(self) -> SerialConfig:
        return SerialConfig(port=self.serial_port, baud=self.baud, read_timeout_s=self.read_timeout_s)

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(sample_rate_hz=self.sample_rate_hz)
