# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Translation of raw store watch notifications into configuration change events."""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .keys import ConfigType, MalformedKeyError, parse_watch_key
from .kvstore import EventType, StoreUnavailableError, WatchEvent, WatchStream

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    """Kind of configuration change."""

    SET = "Set"
    REMOVE = "Remove"

    @classmethod
    def from_event_type(cls, event_type: EventType) -> "ChangeKind":
        if event_type is EventType.PUT:
            return cls.SET
        if event_type is EventType.DELETE:
            return cls.REMOVE
        raise ValueError(f"Unknown watch event type: {event_type}")


@dataclass(frozen=True)
class ConfigChangeEvent:
    """A typed change to one configuration entry.

    Attributes:
        kind: Whether the entry was set or removed
        key: Leaf configuration key (package name or "default")
        scope: Component label owning the key, or "global"
        value: Raw stored payload (None for removals)
    """

    kind: ChangeKind
    key: str
    scope: str
    value: Any = None


def translate_watch_event(prefix: str, config_type: ConfigType, event: WatchEvent) -> ConfigChangeEvent:
    """Convert one watch notification into a change event.

    Raises:
        MalformedKeyError: If the key does not name a leaf entry
        ValueError: If the event type is unknown
    """
    kind = ChangeKind.from_event_type(event.event_type)
    leaf_key, scope = parse_watch_key(prefix, config_type, str(event.key))
    if not leaf_key:
        raise MalformedKeyError(f"Key {event.key!r} is a subtree root, not a configuration entry")
    return ConfigChangeEvent(kind=kind, key=leaf_key, scope=scope, value=event.value)


class EventTranslator:
    """Background task that turns a watch stream into change events.

    Malformed notifications are dropped and logged. The task ends when the
    stream is exhausted or closed, or when the stop token is set.
    """

    def __init__(
        self,
        stream: WatchStream,
        prefix: str,
        config_type: ConfigType,
        events: "queue.Queue[ConfigChangeEvent]",
        stop_event: Optional[threading.Event] = None,
        on_dropped: Optional[Callable[[WatchEvent, Exception], None]] = None,
    ):
        """Initialize translator.

        Args:
            stream: Raw watch stream to consume
            prefix: Configuration key prefix
            config_type: Expected configuration namespace
            events: Queue receiving translated events
            stop_event: Lifecycle token; setting it ends the task
            on_dropped: Optional callback for dropped notifications
        """
        self.stream = stream
        self.prefix = prefix
        self.config_type = config_type
        self.events = events
        self.stop_event = stop_event or threading.Event()
        self.on_dropped = on_dropped
        self.failure: Optional[StoreUnavailableError] = None
        self.received = 0
        self._thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(
            target=self.run,
            name=f"config-watch-{self.stream.prefix}",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        """Consume the stream until it ends; never raises."""
        try:
            for watch_event in self.stream:
                if self.stop_event.is_set():
                    break
                self._handle(watch_event)
        except StoreUnavailableError as e:
            self.failure = e
            logger.error(f"Watch on {self.stream.prefix} failed: {e}")
        finally:
            self.stream.close()

        if self.stop_event.is_set():
            logger.debug(f"Watch on {self.stream.prefix} stopped")
        elif self.failure is None:
            logger.warning(f"Watch on {self.stream.prefix} closed; no further changes will be delivered")

    def _handle(self, watch_event: WatchEvent) -> None:
        self.received += 1
        try:
            change = translate_watch_event(self.prefix, self.config_type, watch_event)
        except ValueError as e:
            logger.warning(f"Dropping watch notification for {watch_event.key!r}: {e}")
            if self.on_dropped is not None:
                self.on_dropped(watch_event, e)
            return

        logger.debug(f"Config change {change.kind.value} {change.scope}/{change.key}")
        self.events.put(change)
