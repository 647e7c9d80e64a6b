# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""In-memory key-value store for testing and local development."""

import copy
import logging
import threading
from typing import Any, Dict, List

from .base import (
    EventType,
    KVPair,
    KVStore,
    NotFoundError,
    WatchEvent,
    WatchStream,
)

logger = logging.getLogger(__name__)


class InMemoryKVStore(KVStore):
    """In-memory watchable store implementation for testing."""

    def __init__(self, path_prefix: str = ""):
        """Initialize in-memory store.

        Args:
            path_prefix: Prefix prepended to every key
        """
        super().__init__(path_prefix)
        self.data: Dict[str, Any] = {}
        self._watches: List[WatchStream] = []
        self._lock = threading.Lock()

    def get(self, key: str) -> KVPair:
        full_key = self._full_key(key)
        with self._lock:
            if full_key not in self.data:
                logger.debug(f"InMemoryKVStore: key {full_key} not found")
                raise NotFoundError(f"Key {full_key} not found")
            return KVPair(full_key, copy.deepcopy(self.data[full_key]))

    def list(self, key_prefix: str) -> Dict[str, KVPair]:
        full_prefix = self._full_key(key_prefix)
        with self._lock:
            results = {
                key: KVPair(key, copy.deepcopy(value))
                for key, value in self.data.items()
                if key.startswith(full_prefix)
            }
        logger.debug(f"InMemoryKVStore: list {full_prefix} returned {len(results)} keys")
        return results

    def put(self, key: str, value: Any) -> None:
        full_key = self._full_key(key)
        with self._lock:
            self.data[full_key] = copy.deepcopy(value)
            watches = list(self._watches)
        logger.debug(f"InMemoryKVStore: put {full_key}")
        self._notify(watches, WatchEvent(full_key, copy.deepcopy(value), EventType.PUT))

    def delete(self, key: str) -> None:
        full_key = self._full_key(key)
        with self._lock:
            if full_key not in self.data:
                logger.debug(f"InMemoryKVStore: delete of missing key {full_key}")
                return
            del self.data[full_key]
            watches = list(self._watches)
        logger.debug(f"InMemoryKVStore: deleted {full_key}")
        self._notify(watches, WatchEvent(full_key, None, EventType.DELETE))

    def watch_subkeys(self, key_prefix: str) -> WatchStream:
        stream = WatchStream(self._full_key(key_prefix), on_close=self._remove_watch)
        with self._lock:
            self._watches.append(stream)
        logger.debug(f"InMemoryKVStore: watching {stream.prefix}")
        return stream

    def close(self) -> None:
        with self._lock:
            watches = list(self._watches)
        for stream in watches:
            stream.close()

    def fail_watches(self, error: Exception) -> None:
        """Break every open watch with an error (useful for testing)."""
        with self._lock:
            watches = list(self._watches)
        for stream in watches:
            stream.fail(error)

    def clear(self) -> None:
        """Remove all keys without emitting watch events (useful for testing)."""
        with self._lock:
            self.data.clear()

    def _remove_watch(self, stream: WatchStream) -> None:
        with self._lock:
            if stream in self._watches:
                self._watches.remove(stream)

    @staticmethod
    def _notify(watches: List[WatchStream], event: WatchEvent) -> None:
        for stream in watches:
            if event.key.startswith(stream.prefix):
                stream.push(event)
