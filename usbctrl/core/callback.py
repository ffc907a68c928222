from __future__ import annotations

"""
Single-slot callback dispatch for hotplug notifications.
"""

from typing import Any, Callable, Optional

from loguru import logger

from .registry import DeviceRegistry

DeviceCallback = Callable[[int, bool, Any], None]


class CallbackDispatcher:
    """
    Holds at most one ``(callback, payload)`` pair.

    The slot shares the registry lock. Callbacks run on the monitor thread
    with no lock held, so they may call back into the device manager. A slow
    callback delays processing of the next device event.

    Parameters
    ----------
    registry : DeviceRegistry
        Registry whose lock guards the slot and whose identifiers are
        snapshotted on registration.
    """

    def __init__(self, registry: DeviceRegistry) -> None:
        self._registry = registry
        self._callback: Optional[DeviceCallback] = None
        self._payload: Any = None

    @property
    def is_registered(self) -> bool:
        with self._registry.lock:
            return self._callback is not None

    def register(self, callback: DeviceCallback, payload: Any = None) -> list[int]:
        """
        Install ``callback`` and snapshot the known identifiers atomically.

        Parameters
        ----------
        callback : DeviceCallback
            Called as ``callback(identifier, connected, payload)``.
        payload : Any, optional
            Opaque value passed back on every call.

        Returns
        -------
        list[int]
            Identifiers present at registration time. No notification is
            sent for these.
        """
        with self._registry.lock:
            self._callback = callback
            self._payload = payload
            return self._registry.snapshot_identifiers()

    def clear(self) -> None:
        with self._registry.lock:
            self._callback = None
            self._payload = None

    def dispatch(self, identifier: int, connected: bool) -> bool:
        """
        Notify the registered callback, if any.

        Returns
        -------
        bool
            True when a callback was invoked.
        """
        with self._registry.lock:
            callback, payload = self._callback, self._payload
        if callback is None:
            return False
        try:
            callback(identifier, connected, payload)
        except Exception as exc:
            logger.warning("Device callback failed for {} (connected={}): {}", identifier, connected, exc)
        return True
