from __future__ import annotations

"""
Runtime configuration for the device manager.
"""

from dataclasses import dataclass, fields, replace
import json
import os
from pathlib import Path
from typing import Optional

from loguru import logger

_CONFIG_DIR = Path.home() / ".usbctrl"
_CONFIG_FILE = _CONFIG_DIR / "config.json"
_LOG_LEVEL_ENV = "USBCTRL_LOG_LEVEL"


@dataclass(frozen=True)
class ManagerConfig:
    """
    Settings used by ``DeviceManager`` and the udev backend.

    Parameters
    ----------
    subsystem : str
        udev subsystem to enumerate and monitor.
    device_type : str
        udev ``DEVTYPE`` to enumerate and monitor.
    log_level : str
        Loguru level used by the command-line harness.
    thread_name : str
        Name given to the monitor thread.
    join_timeout_sec : float | None
        Upper bound for joining the monitor thread on terminate. ``None``
        waits for the thread to finish.
    """

    subsystem: str = "usb"
    device_type: str = "usb_device"
    log_level: str = "INFO"
    thread_name: str = "usbctrl-monitor"
    join_timeout_sec: Optional[float] = None


def _read_json(path: Path, default_payload: dict) -> dict:
    """
    Read JSON safely with fallback.

    Parameters
    ----------
    path : Path
        JSON file path.
    default_payload : dict
        Fallback payload if read fails.

    Returns
    -------
    dict
        Parsed JSON payload or fallback.
    """
    try:
        if not path.exists():
            return default_payload
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Unable to read config file {}: {}", path, exc)
        return default_payload
    if not isinstance(payload, dict):
        logger.warning("Ignoring config file {}: top level is not an object.", path)
        return default_payload
    return payload


def load_config(path: str | Path | None = None) -> ManagerConfig:
    """
    Load configuration from JSON with environment overrides.

    Parameters
    ----------
    path : str | Path | None, optional
        Config file path. Defaults to ``~/.usbctrl/config.json``.

    Returns
    -------
    ManagerConfig
        Defaults merged with known keys from the file. ``USBCTRL_LOG_LEVEL``
        overrides ``log_level`` when set.
    """
    config_path = Path(path).expanduser() if path is not None else _CONFIG_FILE
    payload = _read_json(config_path, {})
    known = {item.name for item in fields(ManagerConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: {}", ", ".join(unknown))
    config = ManagerConfig(**{key: value for key, value in payload.items() if key in known})

    env_level = os.environ.get(_LOG_LEVEL_ENV, "").strip()
    if env_level:
        config = replace(config, log_level=env_level.upper())
    return config
