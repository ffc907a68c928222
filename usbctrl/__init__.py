"""
usbctrl package.

Hotplug-aware registry of attached USB devices with asynchronous
connect/disconnect notification and synchronous property queries.
"""

from .core import (
    SUPPORTED_PROPERTIES,
    DeviceManager,
    ManagerConfig,
    UsbCtrlResult,
    init_logger,
    load_config,
)

__all__ = [
    "DeviceManager",
    "ManagerConfig",
    "SUPPORTED_PROPERTIES",
    "UsbCtrlResult",
    "init_logger",
    "load_config",
    "backends",
    "core",
]
