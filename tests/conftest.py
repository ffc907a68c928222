import collections
import os
import threading
import time

import pytest

from usbctrl.backends.base import DeviceBackend, DeviceEvent, EventSource
from usbctrl.core.device_record import DeviceHandle
from usbctrl.core.exceptions import StartupFailure
from usbctrl.core.manager import DeviceManager


class FakeDevice:
    def __init__(self, device_node, **attributes):
        self.device_node = device_node
        self.attributes = dict(attributes)

    def __repr__(self):
        return f"FakeDevice({self.device_node!r})"


class FakeEventSource(EventSource):
    """Event queue whose readiness is signalled through a real pipe."""

    def __init__(self, backend):
        self._backend = backend
        self._read_fd, self._write_fd = os.pipe()
        self._pending = collections.deque()
        self._lock = threading.Lock()
        self.closed = False

    def push(self, action, device):
        with self._lock:
            self._pending.append((action, device))
        os.write(self._write_fd, b"x")

    def pending(self):
        with self._lock:
            return len(self._pending)

    def fileno(self):
        return self._read_fd

    def receive(self):
        os.read(self._read_fd, 1)
        with self._lock:
            if not self._pending:
                return None
            action, device = self._pending.popleft()
        return DeviceEvent(
            action=action,
            device_node=device.device_node,
            handle=DeviceHandle(device, self._backend.release),
        )

    def close(self):
        if self.closed:
            return
        self.closed = True
        os.close(self._read_fd)
        os.close(self._write_fd)


class FakeBackend(DeviceBackend):
    def __init__(self, devices=(), fail_open=False, fail_event_source=False):
        self.devices = list(devices)
        self.fail_open = fail_open
        self.fail_event_source = fail_event_source
        self.opened = False
        self.released = []
        self.sources = []
        self.source_ready = threading.Event()

    @property
    def source(self):
        return self.sources[-1]

    def open(self):
        if self.fail_open:
            raise StartupFailure("fake context unavailable")
        self.opened = True

    def close(self):
        self.opened = False

    def open_event_source(self):
        if self.fail_event_source or not self.opened:
            raise StartupFailure("fake monitor unavailable")
        source = FakeEventSource(self)
        self.sources.append(source)
        self.source_ready.set()
        return source

    def enumerate(self):
        for device in self.devices:
            yield DeviceHandle(device, self.release), device.device_node

    def get_attribute(self, native, key):
        return native.attributes.get(key)

    def release(self, native):
        self.released.append(native)


class CallbackRecorder:
    def __init__(self):
        self.calls = []
        self._cond = threading.Condition()

    def __call__(self, identifier, connected, payload):
        with self._cond:
            self.calls.append((identifier, connected, payload))
            self._cond.notify_all()

    def wait_for(self, count, timeout=2.0):
        with self._cond:
            return self._cond.wait_for(lambda: len(self.calls) >= count, timeout)


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def usb_devices():
    return [
        FakeDevice("/dev/bus/usb/001/002", idVendor="0x046d", product="Receiver"),
        FakeDevice("/dev/bus/usb/001/003", idVendor="0x046d", idProduct="c52b", product="Webcam"),
    ]


@pytest.fixture
def backend(usb_devices):
    return FakeBackend(usb_devices)


@pytest.fixture
def manager(backend):
    with DeviceManager(backend=backend) as device_manager:
        yield device_manager


@pytest.fixture
def running_manager(manager, backend):
    manager.init()
    assert backend.source_ready.wait(2.0)
    yield manager
