"""
Device manager core: registry, monitor loop, callback dispatch and
property queries.
"""

from .config import ManagerConfig, load_config
from .device_record import DeviceHandle, DeviceRecord
from .exceptions import (
    DeviceNotFound,
    HandleReleasedError,
    IdentifierExhausted,
    MalformedEvent,
    MonitoringFailure,
    StartupFailure,
    UsbCtrlError,
    UsbCtrlResult,
)
from .logging import init_logger
from .manager import DeviceManager
from .monitor import MonitorState
from .properties import SUPPORTED_PROPERTIES

__all__ = [
    "DeviceManager",
    "DeviceHandle",
    "DeviceRecord",
    "ManagerConfig",
    "MonitorState",
    "SUPPORTED_PROPERTIES",
    "UsbCtrlResult",
    "UsbCtrlError",
    "StartupFailure",
    "DeviceNotFound",
    "MonitoringFailure",
    "MalformedEvent",
    "IdentifierExhausted",
    "HandleReleasedError",
    "init_logger",
    "load_config",
]
