# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Watchable key-value store backends."""

import os
from typing import Optional

from .base import (
    EventType,
    KVPair,
    KVStore,
    KVStoreError,
    NotFoundError,
    StoreUnavailableError,
    WatchEvent,
    WatchStream,
)
from .inmemory import InMemoryKVStore


def create_kv_store(store_type: Optional[str] = None, **kwargs) -> KVStore:
    """Factory function to create a key-value store.

    Args:
        store_type: Type of store ("redis", "inmemory"). If None, reads from
                    the KV_STORE_TYPE environment variable (defaults to "inmemory")
        **kwargs: Store-specific arguments. For Redis, host and port fall back
                  to KV_STORE_HOST and KV_STORE_PORT.

    Returns:
        KVStore instance

    Raises:
        ValueError: If store_type is not recognized
    """
    if store_type is None:
        store_type = os.getenv("KV_STORE_TYPE", "inmemory")

    if store_type == "redis":
        from .redis_store import RedisKVStore

        redis_kwargs = dict(kwargs)
        redis_kwargs.setdefault("host", os.getenv("KV_STORE_HOST", "localhost"))
        redis_kwargs.setdefault("port", int(os.getenv("KV_STORE_PORT", "6379")))
        return RedisKVStore(**redis_kwargs)
    elif store_type == "inmemory":
        return InMemoryKVStore(path_prefix=kwargs.get("path_prefix", ""))
    else:
        raise ValueError(f"Unknown store_type: {store_type}")


__all__ = [
    "EventType",
    "KVPair",
    "KVStore",
    "KVStoreError",
    "NotFoundError",
    "StoreUnavailableError",
    "WatchEvent",
    "WatchStream",
    "InMemoryKVStore",
    "create_kv_store",
]
