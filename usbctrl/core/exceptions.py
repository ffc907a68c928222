"""
Exception types and result codes for the public API.

Exceptions are raised and handled inside the core only. The facade converts
them into ``UsbCtrlResult`` codes or ``None`` before returning to callers.
"""

from enum import IntEnum


class UsbCtrlResult(IntEnum):
    SUCCESS = 0
    FAILURE = 1


class UsbCtrlError(Exception):
    pass


class StartupFailure(UsbCtrlError):
    """udev context or live-event monitor could not be created."""


class DeviceNotFound(UsbCtrlError):
    pass


class MonitoringFailure(UsbCtrlError):
    """The monitor wait primitive failed or woke with nothing ready."""


class MalformedEvent(UsbCtrlError):
    """Event with an unknown action, or a removal that matches no record."""


class IdentifierExhausted(UsbCtrlError):
    pass


class HandleReleasedError(UsbCtrlError):
    """A device handle was used after being released or moved."""


__all__ = [
    "UsbCtrlResult",
    "UsbCtrlError",
    "StartupFailure",
    "DeviceNotFound",
    "MonitoringFailure",
    "MalformedEvent",
    "IdentifierExhausted",
    "HandleReleasedError",
]
