"""Signal pipeline: buffered samples to live vitals and clinical reports.

The pipeline subscribes to a :class:`~neuroguard.acquisition.DeviceLink`,
keeps bounded ECG/EMG buffers while scanning, and offers two analyses:

- :meth:`SignalPipeline.tick` (1 Hz via :meth:`start_ticker`): quick heart
  rate, RMSSD, approximated SDNN and EMG RMS/MAV/variance/median frequency,
  then the optional classifier collaborator.
- :meth:`SignalPipeline.analyze`: the full deterministic report from
  :func:`~neuroguard.ecg.report.generate_ecg_report` over a captured segment.

Both work on snapshots taken at the start of the call. A forced device
disconnect stops scanning and resets every derived value to its no-signal
baseline.
"""
from __future__ import annotations
import logging
import threading
import time
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

import numpy as np

from neuroguard.acquisition.device_link import DeviceLink
from neuroguard.acquisition.serial_source import Sample
from neuroguard.config import PipelineConfig
from neuroguard.ecg.report import generate_ecg_report
from neuroguard.ecg.types import ECGReport
from neuroguard.features.freq import emg_median_frequency
from neuroguard.features.hrv import quick_heart_metrics
from neuroguard.features.time import approx_mav, approx_variance, rms
from neuroguard.io.session_store import SessionRecord, SessionStore
from neuroguard.realtime.buffers import ChannelBuffer
from neuroguard.realtime.collaborators import BurnoutClassifier
from neuroguard.realtime.vitals import NO_PREDICTION, NO_SIGNAL, BurnoutPrediction, VitalStats
from neuroguard.utils.signals import iround, round_half_up

log = logging.getLogger(__name__)


class SignalPipeline:
    """Per-session owner of channel buffers, vitals and reports.

    Args:
        link: Device link to subscribe to (may be attached later).
        config: Pipeline configuration.
        classifier: Optional burnout classifier collaborator.
        store: Optional session store collaborator.
        clock: Monotonic clock used for session durations.
    """
    def __init__(
        self,
        link: DeviceLink | None = None,
        config: PipelineConfig | None = None,
        classifier: BurnoutClassifier | None = None,
        store: SessionStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or PipelineConfig()
        self.classifier = classifier
        self.store = store
        self._clock = clock
        self._ecg = ChannelBuffer(self.config.ecg_buffer_size)
        self._emg = ChannelBuffer(self.config.emg_buffer_size)
        self._lock = threading.Lock()
        self._scanning = False
        # Bumped by every reset; work started under an older value is discarded.
        self._generation = 0
        self._vitals = NO_SIGNAL
        self._prediction = NO_PREDICTION
        self._report: ECGReport | None = None
        self._link: DeviceLink | None = None
        self._unsubscribe: list[Callable[[], None]] = []
        self._ticker: threading.Thread | None = None
        self._stop_ticker = threading.Event()
        self._reset_session()
        if link is not None:
            self.attach(link)

    # Wiring

    def attach(self, link: DeviceLink):
        """Subscribe to a device link's samples and forced disconnects."""
        self.detach()
        self._link = link
        self._unsubscribe = [
            link.subscribe(self.ingest),
            link.on_disconnect(self._on_device_lost),
        ]

    def detach(self):
        for unsub in self._unsubscribe:
            unsub()
        self._unsubscribe = []
        self._link = None

    def close(self):
        self.stop_ticker()
        self.detach()

    def disconnect(self, wait: bool = False):
        """Stop scanning, reset derived state, then close the link gracefully."""
        self.stop_scanning()
        if self._link is not None:
            self._link.disconnect(wait=wait)

    # State

    @property
    def is_scanning(self) -> bool:
        with self._lock:
            return self._scanning

    @property
    def vitals(self) -> VitalStats:
        with self._lock:
            return self._vitals

    @property
    def prediction(self) -> BurnoutPrediction:
        with self._lock:
            return self._prediction

    @property
    def report(self) -> ECGReport | None:
        """The most recent clinical report, if any."""
        with self._lock:
            return self._report

    def start_scanning(self):
        with self._lock:
            self._scanning = True
            self._generation += 1
            self._reset_session()
        log.info("Scanning started")

    def stop_scanning(self):
        self.reset(scanning=False)
        log.info("Scanning stopped")

    def reset(self, scanning: bool | None = None):
        """Clear buffers and return every derived value to no-signal.

        Ticks and analyses still running on data from before the reset do
        not publish their results.
        """
        with self._lock:
            if scanning is not None:
                self._scanning = scanning
            self._generation += 1
            self._ecg.clear()
            self._emg.clear()
            self._vitals = NO_SIGNAL
            self._prediction = NO_PREDICTION
            self._report = None

    def ingest(self, sample: Sample):
        """Sample subscriber: buffer the reading while scanning."""
        with self._lock:
            if not self._scanning:
                return
            self._ecg.append(sample.t, sample.ecg)
            self._emg.append(sample.t, sample.emg)

    def _on_device_lost(self):
        log.warning("Device unexpectedly disconnected; resetting vitals")
        self.reset(scanning=False)

    # Live tick

    def tick(self) -> VitalStats | None:
        """Recompute vitals from the latest window.

        Each channel needs ``min_tick_samples``; a channel below that, or an
        ECG window without at least two peaks, keeps its previous values.
        Returns the new vitals, or None when nothing changed.
        """
        cfg = self.config
        with self._lock:
            generation = self._generation
        ecg = self._ecg.snapshot(cfg.tick_window)
        emg = self._emg.snapshot(cfg.tick_window)

        updates = {}
        if len(ecg) >= cfg.min_tick_samples:
            heart = quick_heart_metrics(
                ecg.values,
                ecg.times * 1000.0,
                threshold_factor=cfg.tick_threshold_factor,
                refractory_ms=cfg.refractory_ms,
                sdnn_factor=cfg.sdnn_rmssd_factor,
            )
            if heart is not None:
                updates.update(
                    heart_rate=heart.heart_rate,
                    hrv=heart.rmssd,
                    rmssd=heart.rmssd,
                    sdnn=heart.sdnn,
                    lf_hf_ratio=cfg.lf_hf_ratio,
                )
        if len(emg) >= cfg.min_tick_samples:
            emg_rms = rms(emg.values)
            updates.update(
                emg_rms=iround(emg_rms),
                emg_mav=iround(approx_mav(emg_rms, cfg.emg_mav_factor)),
                emg_variance=iround(approx_variance(emg_rms)),
                emg_median_freq=round_half_up(
                    emg_median_frequency(emg.values, cfg.sample_rate_hz, cfg.emg_psd_nperseg), 1
                ),
            )
        if not updates:
            return None

        with self._lock:
            if self._generation != generation:
                return None
            vitals = replace(self._vitals, **updates)
            if vitals == self._vitals:
                return None
            self._vitals = vitals
            if "heart_rate" in updates:
                self._hr_sum += vitals.heart_rate
                self._hrv_sum += vitals.hrv
                self._hr_ticks += 1

        self._predict(vitals, generation)
        return vitals

    def _predict(self, vitals: VitalStats, generation: int):
        if self.classifier is None:
            return
        try:
            prediction = BurnoutPrediction.from_probability(self.classifier.predict(vitals.to_features()))
        except Exception:
            log.exception("Classifier failed; keeping previous prediction")
            return
        with self._lock:
            if self._generation == generation:
                self._prediction = prediction

    def start_ticker(self):
        """Run :meth:`tick` every ``tick_interval_s`` on a background thread while scanning."""
        if self._ticker is not None and self._ticker.is_alive():
            return
        self._stop_ticker.clear()
        self._ticker = threading.Thread(target=self._tick_loop, name="neuroguard-ticker", daemon=True)
        self._ticker.start()

    def stop_ticker(self):
        self._stop_ticker.set()
        if self._ticker is not None and self._ticker is not threading.current_thread():
            self._ticker.join(timeout=2 * self.config.tick_interval_s)
        self._ticker = None

    def _tick_loop(self):
        while not self._stop_ticker.wait(self.config.tick_interval_s):
            if not self.is_scanning:
                continue
            try:
                self.tick()
            except Exception:
                log.exception("Tick failed")

    # Clinical report

    def capture_segment(self, size: int | None = None) -> np.ndarray:
        """Snapshot of the most recent raw ECG samples (default: report size)."""
        n = self.config.report_segment_size if size is None else size
        return self._ecg.snapshot(n).values

    def analyze(self, raw: np.ndarray | None = None) -> ECGReport:
        """Build a clinical report from ``raw`` or the current ECG buffer.

        Raises:
            InsufficientDataError: Less than one second of samples.
        """
        with self._lock:
            generation = self._generation
        segment = self.capture_segment() if raw is None else np.asarray(raw, dtype=float)
        report = generate_ecg_report(
            segment,
            fs=self.config.sample_rate_hz,
            refractory_ms=self.config.refractory_ms,
        )
        with self._lock:
            if self._generation == generation:
                self._report = report
        return report

    # Sessions

    def _reset_session(self):
        self._session_id = uuid.uuid4().hex
        self._session_started_at = datetime.now(timezone.utc)
        self._session_t0 = self._clock()
        self._hr_sum = 0
        self._hrv_sum = 0
        self._hr_ticks = 0

    def build_session_record(self, include_ecg: bool = True) -> SessionRecord:
        """Summarize the current scanning session."""
        with self._lock:
            ticks = self._hr_ticks
            avg_hr = iround(self._hr_sum / ticks) if ticks else 0
            avg_hrv = iround(self._hrv_sum / ticks) if ticks else 0
            prediction = self._prediction
            session_id = self._session_id
            started_at = self._session_started_at
            t0 = self._session_t0
        ecg = self.capture_segment(self.config.ecg_buffer_size).tolist() if include_ecg else None
        return SessionRecord(
            id=session_id,
            started_at=started_at,
            duration_s=max(0.0, self._clock() - t0),
            avg_hr=avg_hr,
            avg_hrv=avg_hrv,
            burnout_score=prediction.score,
            classification=prediction.classification.value,
            ecg_samples=ecg,
        )

    def save_session(self, include_ecg: bool = True) -> SessionRecord:
        """Persist the current session summary through the session store."""
        if self.store is None:
            raise RuntimeError("No session store configured")
        record = self.build_session_record(include_ecg)
        self.store.save(record)
        return record
