import json
import queue
import threading
import time

import numpy as np
import serial


def synthetic_ecg(bpm=72.0, seconds=10.0, fs=100.0, rr_ms=None, r_amp=300.0, p_amp=80.0, t_amp=60.0,
                  baseline=512.0, first_beat_s=0.5):
    """Raw 10-bit ADC ECG with gaussian P, QRS and T waves.

    Beats are placed every 60000/bpm ms, or at the spacings in ``rr_ms``.
    Returns (samples, beat_indices).
    """
    n = int(round(seconds * fs))
    idx = np.arange(n, dtype=float)
    x = np.full(n, baseline, dtype=float)
    beats = []
    t = first_beat_s * 1000.0
    k = 0
    while True:
        b = int(round(t / 1000.0 * fs))
        if b >= n - 5:
            break
        beats.append(b)
        step = rr_ms[k % len(rr_ms)] if rr_ms else 60000.0 / bpm
        t += step
        k += 1
    p_off = int(round(0.16 * fs))
    t_off = int(round(0.30 * fs))
    for b in beats:
        x += r_amp * np.exp(-((idx - b) ** 2) / (2 * 1.5 ** 2))
        x += p_amp * np.exp(-((idx - (b - p_off)) ** 2) / (2 * 2.0 ** 2))
        x += t_amp * np.exp(-((idx - (b + t_off)) ** 2) / (2 * 4.0 ** 2))
    return x, beats


class FakeTransport:
    """Scripted serial stand-in: queued chunks come back from read()."""
    def __init__(self, chunks=()):
        self._q = queue.Queue()
        for c in chunks:
            self._q.put(c)
        self.closed = 0
        self.cancelled = 0
        self.close_gate = None

    def feed(self, data: bytes):
        self._q.put(data)

    def fail(self, exc=None):
        self._q.put(exc or serial.SerialException("device reports readiness to read but returned no data"))

    @property
    def in_waiting(self):
        return 0

    def read(self, size=1):
        try:
            item = self._q.get(timeout=0.02)
        except queue.Empty:
            return b""
        if isinstance(item, BaseException):
            raise item
        return item

    def cancel_read(self):
        self.cancelled += 1
        self._q.put(b"")

    def close(self):
        self.closed += 1
        if self.close_gate is not None:
            self.close_gate.wait(5)


def wait_for(cond, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if cond():
            return True
        time.sleep(0.005)
    return cond()


class Recorder:
    """Thread-safe call recorder for subscriber tests."""
    def __init__(self):
        self.items = []
        self.threads = []
        self._lock = threading.Lock()

    def __call__(self, *args):
        with self._lock:
            self.items.append(args[0] if args else None)
            self.threads.append(threading.current_thread().name)

    def __len__(self):
        with self._lock:
            return len(self.items)


class StreamTransport:
    """Byte-stream stand-in with pyserial read semantics.

    ``read(size)`` returns once ``size`` bytes are buffered or the timeout
    expires, whichever comes first. ``sizes`` records every requested size.
    """
    def __init__(self, timeout=0.1):
        self.timeout = timeout
        self.sizes = []
        self.closed = 0
        self._buf = bytearray()
        self._cond = threading.Condition()
        self._cancelled = False

    def write(self, data: bytes):
        with self._cond:
            self._buf.extend(data)
            self._cond.notify_all()

    @property
    def in_waiting(self):
        with self._cond:
            return len(self._buf)

    def read(self, size=1):
        deadline = time.monotonic() + self.timeout
        with self._cond:
            self.sizes.append(size)
            while len(self._buf) < size and not self._cancelled:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._cond.wait(remaining)
            self._cancelled = False
            out = bytes(self._buf[:size])
            del self._buf[:size]
            return out

    def cancel_read(self):
        with self._cond:
            self._cancelled = True
            self._cond.notify_all()

    def close(self):
        self.closed += 1


def stream_lines(port, lines, period_s=0.01):
    """Write one line per period on a paced schedule (late writes do not drift)."""
    t0 = time.monotonic()
    for k, line in enumerate(lines):
        delay = t0 + k * period_s - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        port.write(line)


def sample_lines(ecg, emg):
    return [json.dumps({"ecg": float(e), "emg": float(m)}).encode() + b"\n" for e, m in zip(ecg, emg)]
