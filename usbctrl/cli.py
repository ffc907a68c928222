"""
Interactive test harness for the device manager.

Run with ``python -m usbctrl``.
"""

import argparse
import sys
import threading
from typing import Any, List, Optional, TextIO

from .core import SUPPORTED_PROPERTIES, DeviceManager, UsbCtrlResult, init_logger, load_config

_MENU = """
--- usbctrl test application menu ---
1. init()
2. terminate()
3. register_callback()
4. get_property()
5. List hot-plugged device ids.
9. Quit.
"""


class HarnessSession:
    """
    Menu loop state: the manager plus the ids seen through the callback.
    """

    def __init__(self, manager: DeviceManager, stdin: TextIO, stdout: TextIO) -> None:
        self.manager = manager
        self.stdin = stdin
        self.stdout = stdout
        self._lock = threading.Lock()
        self.connected_ids: List[int] = []

    def write(self, text: str) -> None:
        self.stdout.write(text + "\n")
        self.stdout.flush()

    def read(self, prompt: str) -> Optional[str]:
        self.write(prompt)
        line = self.stdin.readline()
        if not line:
            return None
        return line.strip()

    def on_device(self, identifier: int, connected: bool, payload: Any) -> None:
        self.write(f"Enter callback. Payload is {payload}")
        if connected:
            product = self.manager.get_property(identifier, "product")
            with self._lock:
                self.connected_ids.append(identifier)
            self.write(f"device {identifier} is connected")
            self.write(f"Product: {product}")
        else:
            with self._lock:
                if identifier in self.connected_ids:
                    self.connected_ids.remove(identifier)
            self.write(f"device {identifier} was removed")

    def dump_connected(self) -> None:
        with self._lock:
            ids = list(self.connected_ids)
        self.write("Hot-plugged device ids:")
        if not ids:
            self.write("No devices detected so far.")
        else:
            self.write(" ".join(f"[{identifier}]" for identifier in ids))

    def register(self) -> None:
        payload = self.read(
            "Enter a string for callback_payload. This will be used to identify the callback you register."
        )
        if not payload:
            self.write("Whoops! Bad input.")
            return
        result, devices = self.manager.register_callback(self.on_device, payload)
        if result is not UsbCtrlResult.SUCCESS:
            self.write("Failed to register callback.")
            return
        self.write(f"Registered callback with payload {payload}")
        with self._lock:
            self.connected_ids.extend(devices)
        self.dump_connected()

    def query(self) -> None:
        line = self.read(
            "Enter devId(integer) and property(string) separated by a space.\n"
            f"Some examples of properties: {' '.join(SUPPORTED_PROPERTIES)}"
        )
        parts = (line or "").split()
        if len(parts) != 2 or not parts[0].lstrip("-").isdigit():
            self.write("Whoops! Bad input.")
            return
        identifier, key = int(parts[0]), parts[1]
        self.write(f"Querying property {key} for dev_id {identifier}")
        value = self.manager.get_property(identifier, key)
        if value is None:
            self.write("Query returned None!")
        else:
            self.write(f"Query returned {value}")

    def run(self) -> None:
        while True:
            self.write(_MENU)
            choice = self.read("Enter command:")
            if choice is None:
                self.write("Quitting.")
                return
            if choice == "1":
                self.manager.init()
            elif choice == "2":
                self.manager.terminate()
                with self._lock:
                    self.connected_ids.clear()
            elif choice == "3":
                self.register()
            elif choice == "4":
                self.query()
            elif choice == "5":
                self.dump_connected()
            elif choice == "9":
                self.write("Quitting.")
                return
            else:
                self.write("Unknown input!")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="usbctrl",
        description="Interactive harness for the USB hotplug device manager.",
    )
    parser.add_argument("--config", default=None, help="Path to a JSON config file.")
    parser.add_argument("--log-level", default=None, help="Override the configured log level.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    init_logger(config, args.log_level)
    with DeviceManager(config=config) as manager:
        HarnessSession(manager, sys.stdin, sys.stdout).run()
    return 0
