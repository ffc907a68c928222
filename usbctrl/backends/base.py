from __future__ import annotations

"""
Boundary between the device manager and the platform device subsystem.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from ..core.device_record import DeviceHandle

ACTION_ADD = "add"
ACTION_REMOVE = "remove"


@dataclass
class DeviceEvent:
    """
    One hotplug event pulled from an ``EventSource``.

    Parameters
    ----------
    action : str | None
        Event action such as ``"add"`` or ``"remove"``.
    device_node : str | None
        Device node path carried by the event.
    handle : DeviceHandle
        Owned handle for the event's device. Whoever consumes the event must
        either move it into a record or release it.
    """

    action: Optional[str]
    device_node: Optional[str]
    handle: DeviceHandle


class EventSource(ABC):
    """
    Pollable live-event descriptor.
    """

    @abstractmethod
    def fileno(self) -> int:
        ...

    @abstractmethod
    def receive(self) -> Optional[DeviceEvent]:
        """
        Pull one pending event without blocking.

        Returns
        -------
        DeviceEvent | None
            The event, or None when nothing could be received.
        """

    @abstractmethod
    def close(self) -> None:
        ...


class DeviceBackend(ABC):
    """
    Narrow capability interface consumed by ``DeviceManager``.
    """

    @abstractmethod
    def open(self) -> None:
        """
        Open the subsystem context.

        Raises
        ------
        StartupFailure
            If the context cannot be created.
        """

    @abstractmethod
    def close(self) -> None:
        ...

    @abstractmethod
    def open_event_source(self) -> EventSource:
        """
        Create a live-event monitor filtered to the configured device class.

        Raises
        ------
        StartupFailure
            If the monitor cannot be created or enabled.
        """

    @abstractmethod
    def enumerate(self) -> Iterator[tuple[DeviceHandle, Optional[str]]]:
        """
        Yield an owned handle and node path for every present device.
        """

    @abstractmethod
    def get_attribute(self, native: Any, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def release(self, native: Any) -> None:
        ...
