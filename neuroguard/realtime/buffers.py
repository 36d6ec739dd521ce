"""Bounded per-channel sample buffers.

Single writer (the device read loop via the pipeline's ingest callback),
many readers. Readers never touch the deques directly: :meth:`snapshot`
copies under the lock and returns read-only arrays, so an analysis never
observes a buffer that is mutated mid-computation.
"""
from __future__ import annotations
import threading
from collections import deque
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ChannelSnapshot:
    """Immutable copy of a buffer's contents (oldest first)."""
    values: np.ndarray
    times: np.ndarray

    def __len__(self) -> int:
        return int(self.values.size)


class ChannelBuffer:
    """FIFO ring buffer of (timestamp, value) pairs; oldest evicted on overflow."""
    def __init__(self, maxlen: int):
        self.maxlen = max(1, int(maxlen))
        self._lock = threading.Lock()
        self._values: deque[float] = deque(maxlen=self.maxlen)
        self._times: deque[float] = deque(maxlen=self.maxlen)

    def append(self, t: float, value: float):
        with self._lock:
            self._values.append(float(value))
            self._times.append(float(t))

    def clear(self):
        with self._lock:
            self._values.clear()
            self._times.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def snapshot(self, last: int | None = None) -> ChannelSnapshot:
        """Copy the buffer (or its ``last`` most recent entries)."""
        with self._lock:
            values = np.asarray(self._values, dtype=float)
            times = np.asarray(self._times, dtype=float)
        if last is not None and last < values.size:
            values = values[-last:] if last > 0 else values[:0]
            times = times[-last:] if last > 0 else times[:0]
        values.setflags(write=False)
        times.setflags(write=False)
        return ChannelSnapshot(values=values, times=times)
