from __future__ import annotations

"""
udev implementation of the device backend, built on pyudev.
"""

from typing import Any, Iterator, Optional

from loguru import logger
import pyudev

from ..core.device_record import DeviceHandle
from ..core.exceptions import StartupFailure
from .base import DeviceBackend, DeviceEvent, EventSource


class UdevEventSource(EventSource):
    """
    Netlink monitor wrapped as an ``EventSource``.

    Parameters
    ----------
    backend : UdevBackend
        Backend whose ``release`` is attached to event handles.
    monitor : pyudev.Monitor
        Monitor with receiving already enabled.
    """

    def __init__(self, backend: "UdevBackend", monitor: pyudev.Monitor) -> None:
        self._backend = backend
        self._monitor: Optional[pyudev.Monitor] = monitor

    def fileno(self) -> int:
        if self._monitor is None:
            raise ValueError("udev monitor is closed.")
        return self._monitor.fileno()

    def receive(self) -> Optional[DeviceEvent]:
        if self._monitor is None:
            return None
        try:
            device = self._monitor.poll(timeout=0)
        except OSError as exc:
            logger.error("udev monitor receive failed: {}", exc)
            return None
        if device is None:
            return None
        return DeviceEvent(
            action=device.action,
            device_node=device.device_node,
            handle=DeviceHandle(device, self._backend.release),
        )

    def close(self) -> None:
        # libudev unrefs the monitor socket when the object is collected.
        self._monitor = None


class UdevBackend(DeviceBackend):
    """
    Device backend for USB devices reported by udev.

    Parameters
    ----------
    subsystem : str, optional
        Subsystem filter, by default ``"usb"``.
    device_type : str, optional
        ``DEVTYPE`` filter, by default ``"usb_device"``.
    """

    def __init__(self, subsystem: str = "usb", device_type: str = "usb_device") -> None:
        self._subsystem = subsystem
        self._device_type = device_type
        self._context: Optional[pyudev.Context] = None

    def open(self) -> None:
        if self._context is not None:
            return
        try:
            self._context = pyudev.Context()
        except (ImportError, OSError) as exc:
            raise StartupFailure(f"Could not create udev context: {exc}") from exc
        logger.info("Opened udev context for {}/{}.", self._subsystem, self._device_type)

    def close(self) -> None:
        self._context = None

    def _require_context(self) -> pyudev.Context:
        if self._context is None:
            raise StartupFailure("udev context is not open.")
        return self._context

    def open_event_source(self) -> UdevEventSource:
        context = self._require_context()
        try:
            monitor = pyudev.Monitor.from_netlink(context, source="udev")
            monitor.filter_by(self._subsystem, self._device_type)
            monitor.start()
        except (OSError, ValueError) as exc:
            raise StartupFailure(f"Could not enable udev monitoring: {exc}") from exc
        return UdevEventSource(self, monitor)

    def enumerate(self) -> Iterator[tuple[DeviceHandle, Optional[str]]]:
        context = self._require_context()
        for device in context.list_devices(subsystem=self._subsystem, DEVTYPE=self._device_type):
            logger.debug("Detected device [syspath: {}]", device.sys_path)
            yield DeviceHandle(device, self.release), device.device_node

    def get_attribute(self, native: Any, key: str) -> Optional[str]:
        try:
            return native.attributes.asstring(key)
        except (KeyError, UnicodeDecodeError):
            return None

    def release(self, native: Any) -> None:
        # pyudev devices hold their own libudev reference; dropping ours is enough.
        logger.debug("Released udev device {}", getattr(native, "device_node", native))
