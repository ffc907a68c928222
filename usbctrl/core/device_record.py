from __future__ import annotations

"""
Device records and the single-owner handle they hold.
"""

from typing import Any, Callable, Optional

from loguru import logger

from .exceptions import HandleReleasedError


class DeviceHandle:
    """
    Single-owner wrapper around one backend device object.

    Ownership moves with ``transfer()``: the source handle is emptied and a
    new handle owning the same object is returned. ``release()`` hands the
    object back to the backend exactly once; later calls are no-ops.

    Parameters
    ----------
    native : Any
        Backend device object, for example a ``pyudev.Device``.
    release : Callable[[Any], None]
        Backend callback that frees ``native``.
    """

    def __init__(self, native: Any, release: Callable[[Any], None]) -> None:
        self._native = native
        self._release: Optional[Callable[[Any], None]] = release

    def __repr__(self) -> str:
        state = "released" if self.released else repr(self._native)
        return f"DeviceHandle({state})"

    @property
    def released(self) -> bool:
        return self._release is None

    @property
    def native(self) -> Any:
        """
        Borrow the wrapped backend object.

        Raises
        ------
        HandleReleasedError
            If the handle was released or moved.
        """
        if self._release is None:
            raise HandleReleasedError("Device handle was already released or moved.")
        return self._native

    def transfer(self) -> "DeviceHandle":
        """
        Move ownership into a new handle, leaving this one empty.

        Returns
        -------
        DeviceHandle
            New owner of the backend object.
        """
        moved = DeviceHandle(self.native, self._release)
        self._native = None
        self._release = None
        return moved

    def release(self) -> None:
        if self._release is None:
            return
        native, release = self._native, self._release
        self._native = None
        self._release = None
        release(native)


class DeviceRecord:
    """
    One attached device tracked by the registry.

    Parameters
    ----------
    identifier : int
        Caller-visible identifier.
    handle : DeviceHandle
        Owned backend handle, released by ``destroy()``.
    device_node : str | None
        Device node path used to match removal events.
    """

    def __init__(self, identifier: int, handle: DeviceHandle, device_node: Optional[str]) -> None:
        self.identifier = identifier
        self.handle = handle
        self.device_node = device_node
        logger.debug("Adding device {} ({}) as record {}", handle, device_node, identifier)

    def __repr__(self) -> str:
        return f"DeviceRecord(identifier={self.identifier}, device_node={self.device_node!r})"

    def destroy(self) -> None:
        logger.debug("Releasing device {} ({})", self.identifier, self.device_node)
        self.handle.release()
