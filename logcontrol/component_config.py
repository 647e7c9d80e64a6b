# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Per-component configuration handles backed by the KV store."""

import logging
import queue
import threading
from typing import Any, Callable, Dict, Optional

from .events import ConfigChangeEvent, EventTranslator
from .keys import ConfigType, MalformedKeyError, build_key, build_leaf_key, parse_watch_key
from .kvstore import KVStore, NotFoundError, WatchEvent, WatchStream

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PREFIX = "config/"


class ConfigManager:
    """Entry point for component configuration stored under a common prefix."""

    def __init__(self, kv_store: KVStore, config_prefix: str = DEFAULT_CONFIG_PREFIX):
        """Initialize config manager.

        Args:
            kv_store: Store holding the configuration
            config_prefix: Prefix of every configuration key
        """
        self.kv_store = kv_store
        self.config_prefix = config_prefix

    def init_component_config(self, component_label: str, config_type: ConfigType) -> "ComponentConfig":
        """Create a handle for one component's configuration namespace.

        Raises:
            ValueError: If the label is empty or contains the key separator
        """
        if not component_label or "/" in component_label:
            raise ValueError(f"Invalid component label: {component_label!r}")
        return ComponentConfig(self, component_label, config_type)


class ComponentConfig:
    """Accessor for the configuration subtree of one component and config type.

    Each handle owns at most one live watch subscription.
    """

    def __init__(self, manager: ConfigManager, component_label: str, config_type: ConfigType):
        self.manager = manager
        self.component_label = component_label
        self.config_type = config_type
        self._stream: Optional[WatchStream] = None

    @property
    def config_path(self) -> str:
        return build_key(self.manager.config_prefix, self.component_label, self.config_type)

    @property
    def kv_store(self) -> KVStore:
        return self.manager.kv_store

    def get(self, leaf_key: str) -> Any:
        """Get one entry's stored value.

        Raises:
            NotFoundError: If the entry does not exist
            StoreUnavailableError: If the store cannot be reached
        """
        key = build_leaf_key(self.manager.config_prefix, self.component_label, self.config_type, leaf_key)
        return self.kv_store.get(key).value

    def get_or_default(self, leaf_key: str, default: Any = None) -> Any:
        try:
            return self.get(leaf_key)
        except NotFoundError:
            return default

    def list_all(self) -> Dict[str, Any]:
        """Return every entry of this subtree keyed by leaf key.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        results: Dict[str, Any] = {}
        for full_key, pair in self.kv_store.list(self.config_path + "/").items():
            try:
                leaf_key, _ = parse_watch_key(self.manager.config_prefix, self.config_type, full_key)
            except MalformedKeyError as e:
                logger.warning(f"Skipping unexpected key under {self.config_path}: {e}")
                continue
            if leaf_key:
                results[leaf_key] = pair.value
        return results

    def put(self, leaf_key: str, value: Any) -> None:
        """Store an already serialized value under a leaf key."""
        key = build_leaf_key(self.manager.config_prefix, self.component_label, self.config_type, leaf_key)
        self.kv_store.put(key, value)
        logger.debug(f"Saved {key}")

    def delete(self, leaf_key: str) -> None:
        key = build_leaf_key(self.manager.config_prefix, self.component_label, self.config_type, leaf_key)
        self.kv_store.delete(key)
        logger.debug(f"Deleted {key}")

    def subscribe(self) -> WatchStream:
        """Start watching this subtree.

        Raises:
            RuntimeError: If a subscription of this handle is still open
            StoreUnavailableError: If the watch cannot be established
        """
        if self._stream is not None and not self._stream.closed:
            raise RuntimeError(f"Already subscribed to {self.config_path}")
        self._stream = self.kv_store.watch_subkeys(self.config_path)
        return self._stream

    def unsubscribe(self) -> None:
        if self._stream is not None:
            self._stream.close()

    def monitor_for_config_change(
        self,
        events: Optional["queue.Queue[ConfigChangeEvent]"] = None,
        stop_event: Optional[threading.Event] = None,
        on_dropped: Optional[Callable[[WatchEvent, Exception], None]] = None,
    ) -> EventTranslator:
        """Subscribe and start translating notifications into change events.

        Args:
            events: Queue receiving change events (a new one is created if None)
            stop_event: Lifecycle token shared with the consumer
            on_dropped: Optional callback for dropped notifications

        Returns:
            The started translator; its ``events`` queue carries the changes
        """
        stream = self.subscribe()
        translator = EventTranslator(
            stream=stream,
            prefix=self.manager.config_prefix,
            config_type=self.config_type,
            events=events if events is not None else queue.Queue(),
            stop_event=stop_event,
            on_dropped=on_dropped,
        )
        translator.start()
        logger.info(f"Monitoring {self.config_path} for configuration changes")
        return translator
