# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared test doubles and helpers for logcontrol tests."""

import time
from typing import Dict, List, Optional, Set, Tuple

from logcontrol import ConfigType, InMemoryKVStore
from logcontrol.engine import LoggingEngine, LogLevel, UnknownPackageError
from logcontrol.kvstore import StoreUnavailableError, WatchStream
from logcontrol.values import encode_value

CONFIG_PREFIX = "config/"


class RecordingEngine(LoggingEngine):
    """Logging engine fake that records every call."""

    def __init__(
        self,
        default_level: LogLevel = LogLevel.INFO,
        packages: Optional[Dict[str, LogLevel]] = None,
        unresolvable: Optional[Set[str]] = None,
    ):
        self.default_level = default_level
        self.packages: Dict[str, LogLevel] = dict(packages or {})
        self.unresolvable = set(unresolvable or ())
        self.calls: List[Tuple] = []

    def get_default_level(self) -> LogLevel:
        return self.default_level

    def set_default_level(self, level: LogLevel) -> None:
        self.calls.append(("set_default_level", level))
        self.default_level = level

    def list_known_packages(self) -> List[str]:
        return sorted(self.packages)

    def get_package_level(self, package_name: str) -> LogLevel:
        if package_name not in self.packages:
            raise UnknownPackageError(f"Unknown package: {package_name}")
        return self.packages[package_name]

    def set_package_level(self, package_name: str, level: LogLevel) -> None:
        self.calls.append(("set_package_level", package_name, level))
        if package_name in self.unresolvable:
            raise UnknownPackageError(f"Unknown package: {package_name}")
        self.packages[package_name] = level

    def clear_package_level(self, package_name: str) -> None:
        self.calls.append(("clear_package_level", package_name))
        self.packages.pop(package_name, None)

    def package_calls(self, package_name: str) -> List[Tuple]:
        return [
            call for call in self.calls
            if call[0] == "set_package_level" and call[1] == package_name
        ]


def wait_for(condition, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll until condition() is truthy or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return bool(condition())


def publish_level(store: InMemoryKVStore, component: str, key: str, level: str) -> None:
    """Write a level the way the publishing side does."""
    store.put(f"{CONFIG_PREFIX}{component}/{ConfigType.LOG_LEVEL}/{key}", encode_value(level))




class FlakyKVStore(InMemoryKVStore):
    """In-memory store whose watches can be made to fail.

    While ``down`` is set, subscribing raises StoreUnavailableError. With
    ``break_watches`` set, every new stream fails before delivering anything.
    """

    def __init__(self, path_prefix: str = ""):
        super().__init__(path_prefix)
        self.down = False
        self.break_watches = False
        self.subscribe_attempts = 0

    def watch_subkeys(self, key_prefix: str) -> WatchStream:
        with self._lock:
            self.subscribe_attempts += 1
        if self.down:
            raise StoreUnavailableError("store down")
        stream = super().watch_subkeys(key_prefix)
        if self.break_watches:
            stream.fail(StoreUnavailableError("watch lost"))
        return stream
