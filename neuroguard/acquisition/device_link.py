"""Device link: one serial connection, framed into sample events.

State machine::

    DISCONNECTED --connect()--> CONNECTING --open ok--> CONNECTED
    CONNECTING --open failed / cancelled--> DISCONNECTED
    CONNECTED --disconnect()--> DISCONNECTING --teardown done--> DISCONNECTED
    CONNECTED --read error / device removed--> DISCONNECTED  (disconnect event)

Ordering guarantee: ``disconnect()`` clears :attr:`DeviceLink.is_connected`
on the calling thread before any transport teardown starts. Teardown
(cancelling the in-flight read, joining the reader, closing the port) runs
on a background thread and its errors are logged and swallowed, so callers
never wait on unresponsive hardware.

A forced disconnect (read failure or :meth:`DeviceLink.notify_device_removed`)
closes the transport once, without cancelling or flushing, and fires the
disconnect event exactly once from a separate notifier thread, never inline
in the failing read.
"""
from __future__ import annotations
import logging
import threading
import time
from enum import Enum
from typing import Callable

from neuroguard.acquisition.events import Observers
from neuroguard.acquisition.serial_source import (
    LineFramer,
    Sample,
    SerialConfig,
    Transport,
    open_serial,
    parse_line,
)
from neuroguard.errors import (
    AlreadyConnectedError,
    ConnectError,
    ConnectionCancelledError,
)

log = logging.getLogger(__name__)

SampleHandler = Callable[[Sample], None]
DisconnectHandler = Callable[[], None]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class DeviceLink:
    """Owns exactly one transport and publishes parsed samples.

    Args:
        config: Serial configuration.
        opener: Callable that opens a transport for ``config``. Defaults to
            :func:`~neuroguard.acquisition.serial_source.open_serial`; must
            raise :class:`~neuroguard.errors.ConnectError` subclasses.
        clock: Monotonic clock (seconds) used to timestamp samples.
    """
    def __init__(
        self,
        config: SerialConfig | None = None,
        opener: Callable[[SerialConfig], Transport] = open_serial,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or SerialConfig()
        self._opener = opener
        self._clock = clock
        self._lock = threading.RLock()
        self._state = ConnectionState.DISCONNECTED
        self._connected = False
        self._cancel_requested = False
        self._transport: Transport | None = None
        self._reader: threading.Thread | None = None
        self._teardown: threading.Thread | None = None
        self._samples: Observers[SampleHandler] = Observers("sample")
        self._disconnects: Observers[DisconnectHandler] = Observers("disconnect")

        # Stats
        self.samples_received = 0
        self.lines_dropped = 0

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        """Externally observable connection flag (cleared first on disconnect)."""
        return self._connected

    def subscribe(self, handler: SampleHandler) -> Callable[[], None]:
        """Register a sample handler; returns its unsubscribe callable."""
        return self._samples.add(handler)

    def on_disconnect(self, handler: DisconnectHandler) -> Callable[[], None]:
        """Register a handler for unexpected (forced) disconnects."""
        return self._disconnects.add(handler)

    def connect(self) -> None:
        """Open the transport and start the read loop.

        Raises:
            AlreadyConnectedError: Not in DISCONNECTED, or a previous read
                loop is still shutting down.
            ConnectionCancelledError: disconnect() was called while opening.
            ConnectError: The transport could not be opened.
        """
        with self._lock:
            if self._state is not ConnectionState.DISCONNECTED:
                raise AlreadyConnectedError(f"Cannot connect while {self._state.value}")
            stale = self._reader
            if stale is not None and stale.is_alive() and stale is not threading.current_thread():
                raise AlreadyConnectedError("Previous read loop is still shutting down")
            self._state = ConnectionState.CONNECTING
            self._cancel_requested = False

        try:
            transport = self._opener(self.config)
        except ConnectError:
            with self._lock:
                self._state = ConnectionState.DISCONNECTED
            raise
        except Exception as exc:
            with self._lock:
                self._state = ConnectionState.DISCONNECTED
            raise ConnectError(str(exc)) from exc

        with self._lock:
            cancelled = self._cancel_requested
            if cancelled:
                self._state = ConnectionState.DISCONNECTED
            else:
                self._transport = transport
                self._state = ConnectionState.CONNECTED
                self._connected = True
                self._reader = threading.Thread(
                    target=self._read_loop,
                    args=(transport,),
                    name="neuroguard-reader",
                    daemon=True,
                )
                self._reader.start()

        if cancelled:
            _close_quietly(transport)
            raise ConnectionCancelledError("Connection cancelled")
        log.info("Connected to %s at %d baud", self.config.port or "auto-selected port", self.config.baud)

    def disconnect(self, wait: bool = False) -> None:
        """Gracefully close the connection. Never raises.

        No-op when already disconnected or mid-disconnect. While connecting,
        the pending attempt is cancelled instead.

        Args:
            wait: Block until transport teardown has finished.
        """
        with self._lock:
            if self._state is ConnectionState.CONNECTING:
                self._cancel_requested = True
                return
            if self._state is not ConnectionState.CONNECTED:
                teardown = self._teardown
            else:
                # State first, cleanup after.
                self._connected = False
                self._state = ConnectionState.DISCONNECTING
                teardown = threading.Thread(
                    target=self._teardown_transport,
                    args=(self._transport, self._reader),
                    name="neuroguard-teardown",
                    daemon=True,
                )
                self._teardown = teardown
                teardown.start()
                log.info("Disconnect requested")
        if wait and teardown is not None and teardown is not threading.current_thread():
            teardown.join()

    def wait_closed(self, timeout: float | None = None) -> bool:
        """Wait for a pending graceful teardown. Returns True once closed."""
        teardown = self._teardown
        if teardown is not None and teardown is not threading.current_thread():
            teardown.join(timeout)
        return self.state is ConnectionState.DISCONNECTED

    def notify_device_removed(self) -> None:
        """Report physical removal of the device (e.g. from a hot-plug monitor)."""
        with self._lock:
            transport = self._transport
        if transport is not None:
            log.warning("Physical device disconnect detected")
            self._force_disconnect(transport)

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *exc):
        self.disconnect(wait=True)

    def _is_live(self, transport: Transport) -> bool:
        with self._lock:
            return self._state is ConnectionState.CONNECTED and self._transport is transport

    def _read_loop(self, transport: Transport) -> None:
        framer = LineFramer(self.config.max_line_bytes)
        while self._is_live(transport):
            try:
                waiting = transport.in_waiting
                chunk = transport.read(min(max(waiting, 1), self.config.read_chunk_bytes))
            except Exception as exc:
                if self._is_live(transport):
                    log.warning("Read loop error (device likely disconnected): %s", exc)
                    self._force_disconnect(transport)
                return
            if not chunk:
                continue
            for line in framer.feed(chunk):
                sample = parse_line(line, self._clock())
                if sample is None:
                    if line:
                        self.lines_dropped += 1
                        log.debug("Dropped malformed line %r", line[:80])
                    continue
                if not self._is_live(transport):
                    return
                self.samples_received += 1
                self._samples.emit(sample)

    def _force_disconnect(self, transport: Transport) -> None:
        with self._lock:
            if self._transport is not transport or self._state is not ConnectionState.CONNECTED:
                return
            self._connected = False
            self._state = ConnectionState.DISCONNECTED
            self._transport = None
            reader = self._reader
        # The device is already gone: release the handle once, no cancel/flush.
        _close_quietly(transport)
        threading.Thread(
            target=self._notify_disconnect,
            args=(reader,),
            name="neuroguard-disconnect-notify",
            daemon=True,
        ).start()

    def _notify_disconnect(self, reader: threading.Thread | None) -> None:
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=max(1.0, 10 * self.config.read_timeout_s))
        self._disconnects.emit()

    def _teardown_transport(self, transport: Transport | None, reader: threading.Thread | None) -> None:
        try:
            if transport is not None:
                cancel = getattr(transport, "cancel_read", None)
                if cancel is not None:
                    try:
                        cancel()
                    except Exception as exc:
                        log.warning("Reader cancel error (ignored): %s", exc)
            if reader is not None and reader is not threading.current_thread():
                reader.join(timeout=max(1.0, 10 * self.config.read_timeout_s))
                if reader.is_alive():
                    log.warning("Read loop did not stop before port close")
            if transport is not None:
                try:
                    transport.close()
                except Exception as exc:
                    log.warning("Port close error (ignored): %s", exc)
        finally:
            with self._lock:
                self._transport = None
                self._state = ConnectionState.DISCONNECTED
            log.info("Disconnected")


def _close_quietly(transport: Transport) -> None:
    try:
        transport.close()
    except Exception as exc:
        log.debug("Close of dead transport failed (ignored): %s", exc)
