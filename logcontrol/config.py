# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Configuration providers and settings for the log controller."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ConfigProvider(ABC):
    """Abstract base class for configuration providers."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        raise NotImplementedError

    @abstractmethod
    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get a boolean configuration value."""
        raise NotImplementedError

    @abstractmethod
    def get_int(self, key: str, default: int = 0) -> int:
        """Get an integer configuration value."""
        raise NotImplementedError


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        value_lower = value.lower()
        if value_lower in ("true", "1", "yes", "on"):
            return True
        if value_lower in ("false", "0", "no", "off"):
            return False
    return default


def _parse_int(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


class EnvConfigProvider(ConfigProvider):
    """Configuration provider that reads from environment variables."""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        return self._environ.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._environ.get(key)
        if value is None:
            return default
        return _parse_bool(value, default)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._environ.get(key)
        if value is None:
            return default
        return _parse_int(value, default)


class StaticConfigProvider(ConfigProvider):
    """Configuration provider with static values (useful for tests)."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._config = config if config is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._config.get(key)
        if value is None:
            return default
        return _parse_bool(value, default)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._config.get(key)
        if value is None:
            return default
        return _parse_int(value, default)

    def set(self, key: str, value: Any) -> None:
        self._config[key] = value


class RemovePolicy(Enum):
    """What the controller does when a level entry is removed from the store."""

    IGNORE = "ignore"
    REAPPLY = "reapply"
    CLEAR = "clear"


@dataclass(frozen=True)
class LogControlSettings:
    """Settings for running a component's log controller."""

    component_name: str
    kv_store_type: str = "inmemory"
    kv_store_host: str = "localhost"
    kv_store_port: int = 6379
    kv_store_timeout: int = 5
    kv_store_data_prefix: str = "service/voltha"
    kv_store_config_prefix: str = "config/"
    remove_policy: RemovePolicy = RemovePolicy.IGNORE
    propagate_default: bool = True
    watch_retries: int = 0
    log_level: str = "INFO"


def load_settings(provider: Optional[ConfigProvider] = None) -> LogControlSettings:
    """Load settings from a configuration provider.

    Args:
        provider: Source of values (environment variables if None)

    Returns:
        LogControlSettings instance

    Raises:
        ValueError: If COMPONENT_NAME is missing or a value is invalid
    """
    provider = provider or EnvConfigProvider()

    component_name = provider.get("COMPONENT_NAME")
    if not component_name:
        raise ValueError("COMPONENT_NAME must be set to the label of the running component")

    policy_name = str(provider.get("LOG_CONFIG_REMOVE_POLICY", RemovePolicy.IGNORE.value)).lower()
    try:
        remove_policy = RemovePolicy(policy_name)
    except ValueError:
        raise ValueError(
            f"Invalid LOG_CONFIG_REMOVE_POLICY: {policy_name}. "
            f"Must be one of {[policy.value for policy in RemovePolicy]}"
        ) from None

    return LogControlSettings(
        component_name=component_name,
        kv_store_type=provider.get("KV_STORE_TYPE", "inmemory"),
        kv_store_host=provider.get("KV_STORE_HOST", "localhost"),
        kv_store_port=provider.get_int("KV_STORE_PORT", 6379),
        kv_store_timeout=provider.get_int("KV_STORE_TIMEOUT", 5),
        kv_store_data_prefix=provider.get("KV_STORE_DATA_PREFIX", "service/voltha"),
        kv_store_config_prefix=provider.get("KV_STORE_CONFIG_PREFIX", "config/"),
        remove_policy=remove_policy,
        propagate_default=provider.get_bool("LOG_CONFIG_PROPAGATE_DEFAULT", True),
        watch_retries=provider.get_int("LOG_CONFIG_WATCH_RETRIES", 0),
        log_level=str(provider.get("LOG_LEVEL", "INFO")).upper(),
    )
