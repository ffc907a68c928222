import io
import json

import pytest
from loguru import logger

from usbctrl.core.config import ManagerConfig, load_config
from usbctrl.core.device_record import DeviceHandle
from usbctrl.core.logging import init_logger
from usbctrl.core.registry import DeviceRegistry


@pytest.fixture
def stream():
    buffer = io.StringIO()
    yield buffer
    logger.remove()


def add_one_device():
    DeviceRegistry().add(DeviceHandle("dev", lambda native: None), "/dev/bus/usb/001/002")


def test_level_is_taken_from_config(stream, tmp_path, monkeypatch):
    monkeypatch.delenv("USBCTRL_LOG_LEVEL", raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"colour": "red"}))

    init_logger(ManagerConfig(log_level="warning"), sink=stream)
    add_one_device()
    load_config(path)

    output = stream.getvalue()
    assert 'LOG_LEVEL = "WARNING"' in output
    assert "Added device" not in output
    assert "colour" in output


def test_explicit_level_overrides_config(stream):
    init_logger(ManagerConfig(log_level="ERROR"), log_level="debug", sink=stream)
    add_one_device()

    assert "Added device /dev/bus/usb/001/002" in stream.getvalue()


def test_unknown_level_falls_back_to_info(stream):
    init_logger(ManagerConfig(log_level="LOUD"), sink=stream)
    add_one_device()

    output = stream.getvalue()
    assert "Unknown log level 'LOUD'" in output
    assert "Added device" in output


def test_records_from_other_packages_are_dropped(stream):
    init_logger(sink=stream)
    logger.info("embedding application record")
    add_one_device()

    output = stream.getvalue()
    assert "embedding application record" not in output
    assert "Added device" in output


def test_thread_column_fits_monitor_thread_name(stream):
    init_logger(ManagerConfig(thread_name="usbctrl-hotplug-monitor"), sink=stream)
    add_one_device()

    line = next(line for line in stream.getvalue().splitlines() if "Added device" in line)
    assert "| " + "MainThread".ljust(len("usbctrl-hotplug-monitor")) + " |" in line
