"""Exception hierarchy for the NeuroGuard core.

Only connection establishment failures and the one-second report
precondition are raised. Stream errors travel through the disconnect event
and data-sufficiency conditions are zero values, never exceptions.
"""


class NeuroGuardError(Exception):
    """Base class for all NeuroGuard errors."""


class ConnectError(NeuroGuardError):
    """Opening the device transport failed."""


class DeviceNotFoundError(ConnectError):
    """No device at the configured port (or no port could be discovered)."""


class ConnectionCancelledError(ConnectError):
    """The connection attempt was cancelled before it completed."""


class TransportUnsupportedError(ConnectError):
    """The configured port URL names a transport pyserial cannot open."""


class AlreadyConnectedError(ConnectError):
    """connect() was called while connected, connecting or disconnecting."""


class InsufficientDataError(NeuroGuardError, ValueError):
    """The captured segment is too short to attempt peak detection."""
