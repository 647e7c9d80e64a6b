# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Redis-backed key-value store using keyspace notifications for watches."""

import logging
import threading
from typing import Any, Dict, Optional

from .base import (
    EventType,
    KVPair,
    KVStore,
    NotFoundError,
    StoreUnavailableError,
    WatchEvent,
    WatchStream,
)

logger = logging.getLogger(__name__)

# Import redis with graceful fallback
try:
    import redis
    REDIS_AVAILABLE = True
except ImportError:
    redis = None
    REDIS_AVAILABLE = False

_PUT_OPERATIONS = frozenset({"set"})
_DELETE_OPERATIONS = frozenset({"del", "expired", "evicted"})


class RedisKVStore(KVStore):
    """Redis implementation of KVStore.

    Watches rely on keyspace notifications, so the server must be started
    with ``notify-keyspace-events`` including at least ``K$g`` (or ``KA``).

    Note: Requires redis to be installed.
    Install with: pip install redis
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
        timeout: float = 5.0,
        path_prefix: str = "",
        client: Optional[Any] = None,
    ):
        """Initialize Redis store.

        Args:
            host: Redis server hostname
            port: Redis server port
            db: Database index
            password: Optional authentication password
            timeout: Socket timeout in seconds
            path_prefix: Prefix prepended to every key
            client: Pre-built redis client (used instead of host/port)
        """
        super().__init__(path_prefix)
        self.db = db
        self.timeout = timeout

        if client is not None:
            self.client = client
            return

        if not REDIS_AVAILABLE:
            raise ImportError(
                "redis is required for RedisKVStore. "
                "Install with: pip install redis"
            )

        self.client = redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            decode_responses=True,
        )

    def get(self, key: str) -> KVPair:
        full_key = self._full_key(key)
        try:
            value = self.client.get(full_key)
        except Exception as e:
            raise StoreUnavailableError(f"Failed to get {full_key}: {e}") from e
        if value is None:
            raise NotFoundError(f"Key {full_key} not found")
        return KVPair(full_key, value)

    def list(self, key_prefix: str) -> Dict[str, KVPair]:
        full_prefix = self._full_key(key_prefix)
        try:
            keys = sorted(self.client.scan_iter(match=f"{full_prefix}*"))
            values = self.client.mget(keys) if keys else []
        except Exception as e:
            raise StoreUnavailableError(f"Failed to list {full_prefix}: {e}") from e

        # Keys may vanish between SCAN and MGET
        return {
            key: KVPair(key, value)
            for key, value in zip(keys, values)
            if value is not None
        }

    def put(self, key: str, value: Any) -> None:
        full_key = self._full_key(key)
        try:
            self.client.set(full_key, value)
        except Exception as e:
            raise StoreUnavailableError(f"Failed to put {full_key}: {e}") from e

    def delete(self, key: str) -> None:
        full_key = self._full_key(key)
        try:
            self.client.delete(full_key)
        except Exception as e:
            raise StoreUnavailableError(f"Failed to delete {full_key}: {e}") from e

    def watch_subkeys(self, key_prefix: str) -> WatchStream:
        full_prefix = self._full_key(key_prefix)
        channel_prefix = f"__keyspace@{self.db}__:"
        try:
            pubsub = self.client.pubsub(ignore_subscribe_messages=True)
            pubsub.psubscribe(f"{channel_prefix}{full_prefix}*")
        except Exception as e:
            raise StoreUnavailableError(f"Failed to watch {full_prefix}: {e}") from e

        stream = WatchStream(full_prefix)
        thread = threading.Thread(
            target=self._pump_notifications,
            args=(pubsub, stream, channel_prefix),
            name=f"redis-watch-{full_prefix}",
            daemon=True,
        )
        thread.start()
        logger.info(f"Watching Redis keyspace for {full_prefix}")
        return stream

    def close(self) -> None:
        try:
            self.client.close()
        except Exception as e:
            logger.warning(f"Error closing Redis client: {e}")

    def _pump_notifications(self, pubsub: Any, stream: WatchStream, channel_prefix: str) -> None:
        """Translate keyspace notifications into watch events until the stream closes."""
        try:
            while not stream.closed:
                message = pubsub.get_message(timeout=1.0)
                if not message:
                    continue
                key = str(message["channel"])[len(channel_prefix):]
                operation = message["data"]
                if operation in _PUT_OPERATIONS:
                    value = self.client.get(key)
                    if value is None:
                        continue
                    stream.push(WatchEvent(key, value, EventType.PUT))
                elif operation in _DELETE_OPERATIONS:
                    stream.push(WatchEvent(key, None, EventType.DELETE))
                else:
                    logger.debug(f"Ignoring keyspace operation {operation} on {key}")
        except Exception as e:
            logger.error(f"Redis watch on {stream.prefix} failed: {e}")
            stream.fail(StoreUnavailableError(f"Redis watch on {stream.prefix} failed: {e}"))
        finally:
            try:
                pubsub.close()
            except Exception as e:
                logger.warning(f"Error closing Redis pubsub: {e}")
