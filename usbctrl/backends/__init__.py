"""
Device subsystem backends.

``usbctrl.backends.udev`` is imported on demand so that pyudev is only
loaded when the default backend is used.
"""

from .base import ACTION_ADD, ACTION_REMOVE, DeviceBackend, DeviceEvent, EventSource

__all__ = [
    "ACTION_ADD",
    "ACTION_REMOVE",
    "DeviceBackend",
    "DeviceEvent",
    "EventSource",
]
