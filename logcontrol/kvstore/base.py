# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract watchable key-value store interface."""

import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional

from ..exceptions import LogControlError


class KVStoreError(LogControlError):
    """Base exception for key-value store errors."""
    pass


class NotFoundError(KVStoreError):
    """Exception raised when a key is not present in the store."""
    pass


class StoreUnavailableError(KVStoreError):
    """Exception raised when a store operation cannot be completed."""
    pass


class EventType(Enum):
    """Kind of change reported by a watch."""

    PUT = 0
    DELETE = 1


@dataclass(frozen=True)
class KVPair:
    """A key and its stored value."""

    key: str
    value: Any


@dataclass(frozen=True)
class WatchEvent:
    """A single change notification from a watch."""

    key: str
    value: Any
    event_type: EventType


_CLOSED = object()


class WatchStream:
    """Iterable stream of watch events for one key prefix.

    Backends feed events with ``push``. Iteration blocks until an event
    arrives and ends once the stream is closed. A backend failure pushed with
    ``fail`` is raised as StoreUnavailableError from the iterator.
    """

    def __init__(self, prefix: str, on_close: Optional[Any] = None):
        self.prefix = prefix
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._closed = threading.Event()
        self._on_close = on_close

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def push(self, event: WatchEvent) -> None:
        if not self.closed:
            self._queue.put(event)

    def fail(self, error: Exception) -> None:
        if not self.closed:
            self._queue.put(error)

    def close(self) -> None:
        """Close the stream; pending iteration stops after queued events."""
        if self.closed:
            return
        self._closed.set()
        self._queue.put(_CLOSED)
        if self._on_close is not None:
            self._on_close(self)

    def __iter__(self) -> Iterator[WatchEvent]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            if isinstance(item, Exception):
                if isinstance(item, StoreUnavailableError):
                    raise item
                raise StoreUnavailableError(f"Watch on {self.prefix} failed: {item}") from item
            yield item


class KVStore(ABC):
    """Abstract base class for watchable key-value store backends.

    All keys passed to a store are relative to its ``path_prefix``; keys
    reported back by ``list`` and ``watch_subkeys`` are absolute.
    """

    def __init__(self, path_prefix: str = ""):
        self.path_prefix = path_prefix.rstrip("/") + "/" if path_prefix else ""

    def _full_key(self, key: str) -> str:
        return self.path_prefix + key

    @abstractmethod
    def get(self, key: str) -> KVPair:
        """Retrieve a single key.

        Raises:
            NotFoundError: If the key does not exist
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    def list(self, key_prefix: str) -> Dict[str, KVPair]:
        """Return every key under a prefix, keyed by absolute key.

        Raises:
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Store a value.

        Raises:
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a key. Deleting a missing key is not an error.

        Raises:
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    def watch_subkeys(self, key_prefix: str) -> WatchStream:
        """Start watching every key under a prefix.

        Raises:
            StoreUnavailableError: If the watch cannot be established
        """
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass
