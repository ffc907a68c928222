import os
import select

import pytest

from usbctrl.core.control_channel import ControlChannel


def test_signal_wakes_wait_side_with_eof():
    channel = ControlChannel()
    try:
        readable, _, _ = select.select([channel.fileno()], [], [], 0)
        assert readable == []

        channel.signal()

        readable, _, _ = select.select([channel.fileno()], [], [], 1.0)
        assert readable == [channel.fileno()]
        assert channel.signaled
        assert channel.consume() is True
    finally:
        channel.close()


def test_data_on_channel_is_not_a_shutdown():
    channel = ControlChannel()
    try:
        os.write(channel._write_fd, b"ping")
        assert channel.consume() is False
    finally:
        channel.close()


def test_close_is_idempotent():
    channel = ControlChannel()
    channel.close()
    channel.close()
    channel.signal()
    with pytest.raises(ValueError):
        channel.fileno()
