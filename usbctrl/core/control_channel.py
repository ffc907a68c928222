"""
One-way wake channel used to stop the monitor loop.

Closing the write end is the only signal. The monitor sees readiness on the
read end, reads zero bytes, and treats end-of-channel as a shutdown request.
"""

import os
from typing import Optional

from loguru import logger

_CONTROL_MESSAGE_SIZE = 4


class ControlChannel:
    """
    Pipe pair with a signal side and a wait side.

    Raises
    ------
    OSError
        If the pipe cannot be created.
    """

    def __init__(self) -> None:
        read_fd, write_fd = os.pipe()
        self._read_fd: Optional[int] = read_fd
        self._write_fd: Optional[int] = write_fd

    def fileno(self) -> int:
        """
        Return the wait side descriptor for ``select``.

        Raises
        ------
        ValueError
            If the wait side is already closed.
        """
        if self._read_fd is None:
            raise ValueError("Control channel wait side is closed.")
        return self._read_fd

    @property
    def signaled(self) -> bool:
        return self._write_fd is None

    def signal(self) -> None:
        """
        Close the write end, waking any waiter on the read end.
        """
        fd, self._write_fd = self._write_fd, None
        if fd is not None:
            os.close(fd)

    def consume(self) -> bool:
        """
        Read pending data from the wait side.

        Returns
        -------
        bool
            True when end-of-channel was observed.
        """
        data = os.read(self.fileno(), _CONTROL_MESSAGE_SIZE)
        if data:
            logger.debug("Ignoring {} bytes on control channel.", len(data))
            return False
        return True

    def close_wait_side(self) -> None:
        fd, self._read_fd = self._read_fd, None
        if fd is not None:
            os.close(fd)

    def close(self) -> None:
        self.signal()
        self.close_wait_side()
