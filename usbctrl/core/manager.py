from __future__ import annotations

"""
Device manager facade.

``DeviceManager`` composes the registry, the property resolver, the callback
dispatcher and the monitor loop. Its public methods never raise: failures
come back as ``UsbCtrlResult.FAILURE`` or ``None``.
"""

from typing import Any, Optional, TYPE_CHECKING

from loguru import logger

from .callback import CallbackDispatcher, DeviceCallback
from .config import ManagerConfig
from .exceptions import DeviceNotFound, StartupFailure, UsbCtrlError, UsbCtrlResult
from .monitor import MonitorLoop, MonitorState
from .properties import PropertyResolver
from .registry import DeviceRegistry

if TYPE_CHECKING:
    from ..backends.base import DeviceBackend


class DeviceManager:
    """
    Hotplug-aware registry of attached USB devices.

    The backend context is opened on construction and released by
    ``close()``. Use the manager as a context manager to guarantee release.

    Parameters
    ----------
    backend : DeviceBackend | None, optional
        Device subsystem backend. Defaults to ``UdevBackend`` configured from
        ``config``.
    config : ManagerConfig | None, optional
        Manager settings, by default ``ManagerConfig()``.

    Examples
    --------
    >>> with DeviceManager() as manager:
    ...     manager.init()
    ...     result, devices = manager.register_callback(on_change, "payload")
    ...     vendor = manager.get_property(devices[0], "idVendor")
    """

    def __init__(
        self,
        backend: Optional["DeviceBackend"] = None,
        config: Optional[ManagerConfig] = None,
    ) -> None:
        self.config = config or ManagerConfig()
        if backend is None:
            from ..backends.udev import UdevBackend

            backend = UdevBackend(self.config.subsystem, self.config.device_type)
        self._backend = backend
        self._registry = DeviceRegistry()
        self._dispatcher = CallbackDispatcher(self._registry)
        self._resolver = PropertyResolver(self._registry, self._backend)
        self._monitor = MonitorLoop(
            self._backend,
            self._registry,
            self._dispatcher,
            thread_name=self.config.thread_name,
        )
        self._context_open = False
        self._closed = False

        logger.info("Creating new device manager object.")
        try:
            self._backend.open()
            self._context_open = True
        except StartupFailure as exc:
            logger.error("Critical error! {}", exc)

    def __enter__(self) -> "DeviceManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    @property
    def monitor_state(self) -> MonitorState:
        return self._monitor.state

    def init(self) -> UsbCtrlResult:
        """
        Start monitoring, then re-enumerate attached devices.

        Existing records are destroyed and replaced. Identifiers keep
        increasing across calls. The live-event source is opened before the
        scan, so a device attached during enumeration is not lost. Such a
        device can be recorded twice, once by the scan and once by its
        buffered add event.

        Returns
        -------
        UsbCtrlResult
            ``FAILURE`` when enumeration or monitor startup failed. Devices
            found by a successful scan stay queryable either way.
        """
        logger.info("Initializing device manager.")
        if self._closed:
            logger.error("Device manager is closed.")
            return UsbCtrlResult.FAILURE
        monitoring = self._monitor.start()
        result = self._enumerate_connected_devices()
        if not monitoring:
            result = UsbCtrlResult.FAILURE
        return result

    def terminate(self) -> UsbCtrlResult:
        """
        Stop monitoring, then clear records and the callback.

        Returns
        -------
        UsbCtrlResult
            ``FAILURE`` when the monitor thread did not join in time. Records
            and the callback are cleared either way.
        """
        logger.info("Stopping monitor thread.")
        stopped = self._monitor.stop(self.config.join_timeout_sec)
        logger.info("Clearing device records.")
        with self._registry.lock:
            self._registry.reset()
            self._dispatcher.clear()
        return UsbCtrlResult.SUCCESS if stopped else UsbCtrlResult.FAILURE

    def register_callback(
        self, callback: DeviceCallback, payload: Any = None
    ) -> tuple[UsbCtrlResult, list[int]]:
        """
        Install the hotplug callback, replacing any previous one.

        Parameters
        ----------
        callback : DeviceCallback
            Called on the monitor thread as
            ``callback(identifier, connected, payload)``.
        payload : Any, optional
            Opaque value handed back to the callback.

        Returns
        -------
        tuple[UsbCtrlResult, list[int]]
            Result code and the identifiers already present. Devices in this
            list do not produce a connect notification.
        """
        if not callable(callback):
            logger.error("Refusing to register non-callable callback {!r}.", callback)
            return UsbCtrlResult.FAILURE, []
        devices = self._dispatcher.register(callback, payload)
        logger.info("Registered callback; {} devices already connected.", len(devices))
        return UsbCtrlResult.SUCCESS, devices

    def get_property(self, identifier: int, key: str) -> Optional[str]:
        """
        Read a sysfs attribute of a tracked device.

        Parameters
        ----------
        identifier : int
            Device identifier.
        key : str
            Attribute name, for example one of ``SUPPORTED_PROPERTIES``.

        Returns
        -------
        str | None
            Attribute value, or None when the device or attribute is unknown.
        """
        try:
            return self._resolver.get_property(identifier, key)
        except DeviceNotFound as exc:
            logger.warning("{}", exc)
            return None
        except (UsbCtrlError, OSError) as exc:
            logger.error("Property query {} on device {} failed: {}", key, identifier, exc)
            return None

    def list_devices(self) -> list[int]:
        return self._registry.snapshot_identifiers()

    def close(self) -> None:
        """
        Terminate and release the backend context. Safe to call twice.
        """
        if self._closed:
            return
        self.terminate()
        self._closed = True
        if self._context_open:
            self._backend.close()
            self._context_open = False
        logger.info("Destroyed device manager object.")

    def _enumerate_connected_devices(self) -> UsbCtrlResult:
        if not self._context_open:
            logger.error("Cannot enumerate devices without a subsystem context.")
            with self._registry.lock:
                self._registry.reset()
            return UsbCtrlResult.FAILURE

        with self._registry.lock:
            self._registry.reset()
            try:
                for handle, device_node in self._backend.enumerate():
                    logger.info("Detected device [node: {}]", device_node)
                    try:
                        self._registry.add(handle, device_node)
                    finally:
                        handle.release()
            except (UsbCtrlError, OSError) as exc:
                logger.error("Couldn't scan devices: {}", exc)
                return UsbCtrlResult.FAILURE
        return UsbCtrlResult.SUCCESS
