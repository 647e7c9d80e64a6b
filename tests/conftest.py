# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Pytest configuration and fixtures for logcontrol tests."""

import logging

import pytest

from logcontrol import ConfigManager, InMemoryKVStore

from .fixtures import CONFIG_PREFIX, RecordingEngine


@pytest.fixture
def kv_store():
    """In-memory store with a backend path prefix."""
    store = InMemoryKVStore(path_prefix="service/voltha")
    yield store
    store.close()


@pytest.fixture
def config_manager(kv_store):
    return ConfigManager(kv_store, config_prefix=CONFIG_PREFIX)


@pytest.fixture
def engine():
    return RecordingEngine()


@pytest.fixture
def restore_logging():
    """Restore root logger level and handlers after tests touching stdlib logging."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
