"""Serial transport and line protocol for the ECG/EMG sensor.

The firmware prints one JSON object per line, e.g. ``{"ecg": 523, "emg": 87}``,
at 115200 baud. This module turns raw byte chunks into :class:`Sample`
objects and opens the pyserial transport used by
:class:`~neuroguard.acquisition.device_link.DeviceLink`.
"""
from __future__ import annotations
import errno
import json
import logging
import math
from dataclasses import dataclass
from typing import Protocol

import serial
import serial.tools.list_ports

from neuroguard.errors import (
    ConnectError,
    DeviceNotFoundError,
    TransportUnsupportedError,
)

log = logging.getLogger(__name__)

DEFAULT_BAUD = 115200
MAX_LINE_BYTES = 4096


@dataclass
class SerialConfig:
    """Serial connection configuration.

    Attributes:
        port: Port name or pyserial URL (e.g. "/dev/ttyACM0", "COM3",
            "socket://host:port"). None picks the first discovered port.
        baud: Baud rate. Must match the firmware (default 115200).
        read_timeout_s: Blocking read timeout; bounds how long a read can
            delay shutdown when ``cancel_read`` is unavailable.
        read_chunk_bytes: Upper bound on bytes taken per read. The read loop
            asks for what the driver already holds (at least one byte), so
            each line is timestamped when it arrives rather than when a
            fixed-size chunk fills.
        max_line_bytes: Partial lines longer than this are discarded.
    """
    port: str | None = None
    baud: int = DEFAULT_BAUD
    read_timeout_s: float = 0.1
    read_chunk_bytes: int = 4096
    max_line_bytes: int = MAX_LINE_BYTES


@dataclass(frozen=True)
class Sample:
    """One parsed device reading.

    Attributes:
        ecg: Raw ECG value (10-bit ADC counts on the reference device).
        emg: Raw EMG value.
        t: Host-side monotonic timestamp in seconds.
    """
    ecg: float
    emg: float
    t: float


class Transport(Protocol):
    """The subset of ``serial.Serial`` the device link relies on."""
    @property
    def in_waiting(self) -> int: ...
    def read(self, size: int = 1) -> bytes: ...
    def cancel_read(self) -> None: ...
    def close(self) -> None: ...


def _is_number(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def parse_line(line: str, t: float) -> Sample | None:
    """Parse one protocol line into a Sample.

    Returns None for anything that is not a JSON object with numeric
    ``ecg`` and ``emg`` fields; sensor noise is expected, not fatal.
    """
    line = line.strip()
    if not line:
        return None
    try:
        data = json.loads(line)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    ecg, emg = data.get("ecg"), data.get("emg")
    if not (_is_number(ecg) and _is_number(emg)):
        return None
    return Sample(ecg=float(ecg), emg=float(emg), t=float(t))


class LineFramer:
    """Accumulate byte chunks and split out complete newline-terminated lines.

    The trailing partial line is retained for the next chunk. A partial line
    that grows past ``max_line_bytes`` is dropped so a device that never
    sends a newline cannot grow the buffer without bound. Lines that are not
    valid UTF-8 are dropped whole.
    """
    def __init__(self, max_line_bytes: int = MAX_LINE_BYTES):
        self.max_line_bytes = int(max_line_bytes)
        self._buf = bytearray()
        self.dropped_overflow = 0
        self.dropped_invalid = 0

    def reset(self):
        self._buf.clear()

    def feed(self, chunk: bytes) -> list[str]:
        self._buf.extend(chunk)
        *complete, rest = self._buf.split(b"\n")
        self._buf = bytearray(rest)
        if len(self._buf) > self.max_line_bytes:
            self.dropped_overflow += 1
            log.debug("Discarding %d bytes without newline", len(self._buf))
            self._buf.clear()
        lines = []
        for raw in complete:
            try:
                lines.append(raw.decode("utf-8").strip())
            except UnicodeDecodeError:
                self.dropped_invalid += 1
                log.debug("Discarding line with invalid UTF-8: %r", bytes(raw))
        return lines


def discover_port() -> str:
    """Return the first serial port reported by the OS."""
    ports = sorted(serial.tools.list_ports.comports(), key=lambda p: p.device)
    if not ports:
        raise DeviceNotFoundError("No serial ports found")
    log.info("Auto-selected serial port %s (%s)", ports[0].device, ports[0].description)
    return ports[0].device


def open_serial(cfg: SerialConfig) -> Transport:
    """Open the configured port and map pyserial failures to ConnectError.

    Raises:
        DeviceNotFoundError: Port missing or nothing discoverable.
        TransportUnsupportedError: Unknown pyserial URL scheme.
        ConnectError: Any other failure to open.
    """
    port = cfg.port or discover_port()
    try:
        return serial.serial_for_url(port, baudrate=cfg.baud, timeout=cfg.read_timeout_s)
    except ValueError as exc:
        raise TransportUnsupportedError(f"Unsupported transport {port!r}: {exc}") from exc
    except serial.SerialException as exc:
        if exc.errno in (errno.ENOENT, errno.ENODEV) or "FileNotFoundError" in str(exc):
            raise DeviceNotFoundError(f"Device not found at {port}") from exc
        raise ConnectError(f"Could not open {port}: {exc}") from exc
    except OSError as exc:
        raise ConnectError(f"Could not open {port}: {exc}") from exc
