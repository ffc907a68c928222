from __future__ import annotations

"""
Property queries against live device records.
"""

from typing import TYPE_CHECKING

from .exceptions import DeviceNotFound
from .registry import DeviceRegistry

if TYPE_CHECKING:
    from ..backends.base import DeviceBackend

# Informational only; any sysfs attribute name may be queried.
SUPPORTED_PROPERTIES = (
    "manufacturer",
    "product",
    "idProduct",
    "idVendor",
    "serial",
    "bInterfaceClass",
    "bInterfaceSubClass",
)


class PropertyResolver:
    """
    Resolve ``(identifier, key)`` to an attribute value.

    Parameters
    ----------
    registry : DeviceRegistry
        Registry used to find the device handle.
    backend : DeviceBackend
        Backend that reads attributes from the handle.
    """

    def __init__(self, registry: DeviceRegistry, backend: "DeviceBackend") -> None:
        self._registry = registry
        self._backend = backend

    def get_property(self, identifier: int, key: str) -> str:
        """
        Read attribute ``key`` of device ``identifier``.

        The handle is only borrowed from the registry, so the attribute is
        read before the lock is released.

        Returns
        -------
        str
            Independent copy of the value.

        Raises
        ------
        DeviceNotFound
            For an unknown identifier or a missing attribute.
        """
        with self._registry.lock:
            handle = self._registry.find(identifier)
            if handle is None:
                raise DeviceNotFound(f"Found no record for device with id {identifier}.")
            value = self._backend.get_attribute(handle.native, key)
        if value is None:
            raise DeviceNotFound(f"Could not find property {key} on device {identifier}.")
        return str(value)
