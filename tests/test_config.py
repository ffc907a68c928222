import json

from usbctrl.core.config import ManagerConfig, load_config


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("USBCTRL_LOG_LEVEL", raising=False)
    assert load_config(tmp_path / "absent.json") == ManagerConfig()


def test_known_keys_are_loaded_and_unknown_ignored(tmp_path, monkeypatch):
    monkeypatch.delenv("USBCTRL_LOG_LEVEL", raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"subsystem": "usb", "device_type": "usb_interface", "colour": "red"}))

    config = load_config(path)

    assert config.device_type == "usb_interface"
    assert config.log_level == "INFO"


def test_unreadable_file_falls_back(tmp_path, monkeypatch):
    monkeypatch.delenv("USBCTRL_LOG_LEVEL", raising=False)
    path = tmp_path / "config.json"
    path.write_text("{not json")

    assert load_config(path) == ManagerConfig()


def test_environment_overrides_log_level(tmp_path, monkeypatch):
    monkeypatch.setenv("USBCTRL_LOG_LEVEL", "debug")
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"log_level": "WARNING"}))

    assert load_config(path).log_level == "DEBUG"
