# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Live log level control for distributed components.

A central authority publishes a global default and per-component log levels
in a watchable key-value store. Each component runs a
ComponentLogController that watches its own subtree and the global one,
merges both, and applies only changed levels to its logging engine.

Example:
    >>> from logcontrol import ConfigManager, ComponentLogController, InMemoryKVStore
    >>>
    >>> manager = ConfigManager(InMemoryKVStore(), config_prefix="config/")
    >>> controller = ComponentLogController(manager, "adapter")
    >>> controller.start()
"""

__version__ = "0.1.0"

from .applier import ApplyPartialFailure, LevelApplier
from .change_gate import ChangeGate, fingerprint, should_apply
from .component_config import ComponentConfig, ConfigManager
from .config import (
    ConfigProvider,
    EnvConfigProvider,
    LogControlSettings,
    RemovePolicy,
    StaticConfigProvider,
    load_settings,
)
from .controller import ComponentLogController, process_log_config_change
from .engine import (
    LoggingEngine,
    LogLevel,
    StdlibLoggingEngine,
    UnknownLevelError,
    UnknownPackageError,
)
from .events import ChangeKind, ConfigChangeEvent, EventTranslator, translate_watch_event
from .exceptions import LogControlError
from .keys import ConfigType, MalformedKeyError, build_key, parse_watch_key
from .kvstore import (
    InMemoryKVStore,
    KVStore,
    KVStoreError,
    NotFoundError,
    StoreUnavailableError,
    create_kv_store,
)
from .reconciler import reconcile
from .values import decode_level_value, encode_value

__all__ = [
    # Version
    "__version__",
    # Controller
    "ComponentLogController",
    "process_log_config_change",
    "RemovePolicy",
    # Configuration store access
    "ConfigManager",
    "ComponentConfig",
    "ConfigType",
    "build_key",
    "parse_watch_key",
    "ChangeKind",
    "ConfigChangeEvent",
    "EventTranslator",
    "translate_watch_event",
    # Reconciliation
    "reconcile",
    "fingerprint",
    "should_apply",
    "ChangeGate",
    "LevelApplier",
    "decode_level_value",
    "encode_value",
    # Logging engine
    "LoggingEngine",
    "StdlibLoggingEngine",
    "LogLevel",
    # Stores
    "KVStore",
    "InMemoryKVStore",
    "create_kv_store",
    # Settings
    "ConfigProvider",
    "EnvConfigProvider",
    "StaticConfigProvider",
    "LogControlSettings",
    "load_settings",
    # Exceptions
    "LogControlError",
    "KVStoreError",
    "NotFoundError",
    "StoreUnavailableError",
    "MalformedKeyError",
    "ApplyPartialFailure",
    "UnknownLevelError",
    "UnknownPackageError",
]
