from __future__ import annotations

"""
Ordered registry of live device records.

Every operation takes ``lock`` itself. The lock is re-entrant because
enumeration holds it across ``reset()`` and repeated ``add()`` calls, and
the callback dispatcher captures the identifier snapshot under the same
acquisition that installs a callback.
"""

import threading
from typing import Optional

from loguru import logger

from .device_record import DeviceHandle, DeviceRecord
from .exceptions import IdentifierExhausted

# Identifiers are handed to embedders as C ints.
_MAX_IDENTIFIER = 2**31 - 1


class DeviceRegistry:
    """
    Thread-safe collection of ``DeviceRecord`` objects in insertion order.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._records: list[DeviceRecord] = []
        self._last_identifier = 0

    def __len__(self) -> int:
        with self.lock:
            return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        with self.lock:
            return any(record.identifier == identifier for record in self._records)

    def add(self, handle: DeviceHandle, device_node: Optional[str]) -> int:
        """
        Create a record and take ownership of ``handle``.

        Parameters
        ----------
        handle : DeviceHandle
            Handle to move into the new record.
        device_node : str | None
            Device node path of the device.

        Returns
        -------
        int
            Newly assigned identifier.

        Raises
        ------
        IdentifierExhausted
            When no identifier is left. ``handle`` is left untouched.
        HandleReleasedError
            When ``handle`` was already released or moved. No identifier is
            consumed.
        """
        with self.lock:
            self._check_identifier_space()
            owned = handle.transfer()
            identifier = self._next_identifier()
            self._records.append(DeviceRecord(identifier, owned, device_node))
        logger.info("Added device {} to records with identifier {}", device_node, identifier)
        return identifier

    def remove(self, device_node: Optional[str]) -> Optional[int]:
        """
        Destroy the record whose node path equals ``device_node``.

        Returns
        -------
        int | None
            Identifier of the removed record, or None when nothing matched.
        """
        if device_node is None:
            return None
        with self.lock:
            for index, record in enumerate(self._records):
                if record.device_node == device_node:
                    del self._records[index]
                    record.destroy()
                    break
            else:
                return None
        logger.info("Removed record {} for device {}", record.identifier, device_node)
        return record.identifier

    def find(self, identifier: int) -> Optional[DeviceHandle]:
        """
        Return the handle for ``identifier`` without transferring ownership.

        The handle may be released by a concurrent removal once the lock is
        dropped, so callers must hold ``lock`` for as long as they use it.
        """
        with self.lock:
            for record in self._records:
                if record.identifier == identifier:
                    return record.handle
        return None

    def snapshot_identifiers(self) -> list[int]:
        with self.lock:
            return [record.identifier for record in self._records]

    def reset(self) -> None:
        """
        Destroy every record, releasing all handles.

        The identifier counter is not rewound.
        """
        with self.lock:
            records, self._records = self._records, []
            for record in records:
                record.destroy()
        if records:
            logger.info("Cleared {} device records.", len(records))

    def _check_identifier_space(self) -> None:
        if self._last_identifier >= _MAX_IDENTIFIER:
            raise IdentifierExhausted(
                f"Device identifier space exhausted after {self._last_identifier}."
            )

    def _next_identifier(self) -> int:
        self._last_identifier += 1
        return self._last_identifier
