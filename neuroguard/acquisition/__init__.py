"""Acquisition subpackage: serial line protocol and the device link."""
from .serial_source import LineFramer, Sample, SerialConfig, parse_line
from .device_link import ConnectionState, DeviceLink
