# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Logging engine capability whose verbosity is controlled at runtime."""

import logging
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Dict, List, Optional

from .exceptions import LogControlError
from .keys import package_to_key
from .reconciler import DEFAULT_KEY


class UnknownLevelError(LogControlError, ValueError):
    """Raised when a level string is not one of the known severities."""
    pass


class UnknownPackageError(LogControlError, LookupError):
    """Raised when a package cannot be resolved by the logging engine."""
    pass


class LogLevel(IntEnum):
    """Closed set of severities, valued as stdlib logging levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL

    @classmethod
    def parse(cls, value: str) -> "LogLevel":
        """Parse a level string, accepting stdlib spellings.

        Raises:
            UnknownLevelError: If the value names no known severity
        """
        name = str(value).strip().upper()
        name = _LEVEL_ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            raise UnknownLevelError(
                f"Invalid log level: {value!r}. Must be one of {[level.name for level in cls]}"
            ) from None

    @classmethod
    def from_int(cls, value: int) -> "LogLevel":
        """Map a numeric stdlib level to the closest severity at or below it."""
        result = cls.DEBUG
        for level in cls:
            if level <= value:
                result = level
        return result

    def __str__(self) -> str:
        return self.name


_LEVEL_ALIASES = {"WARNING": "WARN", "CRITICAL": "FATAL"}


class LoggingEngine(ABC):
    """Abstract logging engine holding a default and per-package levels."""

    @abstractmethod
    def get_default_level(self) -> LogLevel:
        pass

    @abstractmethod
    def set_default_level(self, level: LogLevel) -> None:
        pass

    @abstractmethod
    def list_known_packages(self) -> List[str]:
        pass

    @abstractmethod
    def get_package_level(self, package_name: str) -> LogLevel:
        """Get a package's level.

        Raises:
            UnknownPackageError: If the package is not known to the engine
        """
        pass

    @abstractmethod
    def set_package_level(self, package_name: str, level: LogLevel) -> None:
        """Set a package's level.

        Raises:
            UnknownPackageError: If the package cannot be resolved
        """
        pass

    def clear_package_level(self, package_name: str) -> None:
        """Drop a package's explicit level so it follows the default."""
        self.set_package_level(package_name, self.get_default_level())

    def active_levels(self) -> Dict[str, str]:
        """Snapshot of the engine as a key-safe level map."""
        levels = {DEFAULT_KEY: str(self.get_default_level())}
        for package_name in self.list_known_packages():
            levels[package_to_key(package_name)] = str(self.get_package_level(package_name))
        return levels


class StdlibLoggingEngine(LoggingEngine):
    """Logging engine backed by Python's logging hierarchy.

    The default level is the root logger's level; a package is any logger
    with an explicitly set level.
    """

    def __init__(self, root: Optional[logging.Logger] = None, create_missing: bool = True):
        """Initialize stdlib engine.

        Args:
            root: Logger acting as default (the root logger if None)
            create_missing: If False, only loggers that already exist can be set
        """
        self.root = root or logging.getLogger()
        self.create_missing = create_missing

    def _registered(self) -> Dict[str, logging.Logger]:
        return {
            name: candidate
            for name, candidate in logging.Logger.manager.loggerDict.items()
            if isinstance(candidate, logging.Logger)
        }

    def _resolve(self, package_name: str) -> logging.Logger:
        if not package_name or not package_name.strip():
            raise UnknownPackageError("Package name must not be empty")
        if not self.create_missing and package_name not in self._registered():
            raise UnknownPackageError(f"Unknown package: {package_name}")
        return logging.getLogger(package_name)

    def get_default_level(self) -> LogLevel:
        return LogLevel.from_int(self.root.getEffectiveLevel())

    def set_default_level(self, level: LogLevel) -> None:
        self.root.setLevel(int(level))

    def list_known_packages(self) -> List[str]:
        return sorted(
            name
            for name, candidate in self._registered().items()
            if candidate is not self.root and candidate.level != logging.NOTSET
        )

    def get_package_level(self, package_name: str) -> LogLevel:
        registered = self._registered()
        if package_name not in registered:
            raise UnknownPackageError(f"Unknown package: {package_name}")
        return LogLevel.from_int(registered[package_name].getEffectiveLevel())

    def set_package_level(self, package_name: str, level: LogLevel) -> None:
        self._resolve(package_name).setLevel(int(level))

    def clear_package_level(self, package_name: str) -> None:
        self._resolve(package_name).setLevel(logging.NOTSET)
