# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Key layout for component configuration in the KV store.

Keys follow ``<prefix><component>/<config_type>[/<leaf>]``. Component labels
and config type names must not contain the ``/`` separator.
"""

from enum import Enum

from .exceptions import LogControlError

KEY_SEPARATOR = "/"

# Stand-in for the key separator inside package identifiers
PACKAGE_SEPARATOR_PLACEHOLDER = "#"


class MalformedKeyError(LogControlError, ValueError):
    """Raised when a watched key does not follow the configuration layout."""
    pass


class ConfigType(Enum):
    """Configuration namespaces under a component."""

    LOG_LEVEL = "loglevel"
    KAFKA = "kafka"

    def __str__(self) -> str:
        return self.value


def build_key(prefix: str, component_label: str, config_type: ConfigType) -> str:
    """Build the subtree root key for a component's configuration.

    Args:
        prefix: Configuration prefix (e.g. "config/")
        component_label: Label of the owning component, or "global"
        config_type: Configuration namespace

    Returns:
        Subtree root key, e.g. "config/adapter/loglevel"
    """
    return f"{prefix}{component_label}{KEY_SEPARATOR}{config_type}"


def build_leaf_key(prefix: str, component_label: str, config_type: ConfigType, leaf_key: str) -> str:
    """Build the key of a single entry under a component's subtree."""
    return build_key(prefix, component_label, config_type) + KEY_SEPARATOR + leaf_key


def parse_watch_key(prefix: str, config_type: ConfigType, raw_key: str) -> tuple[str, str]:
    """Split a watched key into its leaf key and owning component.

    The prefix may be preceded by a backend path prefix. The subtree root
    itself parses to an empty leaf key.

    Args:
        prefix: Configuration prefix the key was built with
        config_type: Expected configuration namespace
        raw_key: Key as reported by the store

    Returns:
        Tuple of (leaf_key, owner_component)

    Raises:
        MalformedKeyError: If the key does not follow the layout
    """
    index = raw_key.find(prefix)
    if index < 0:
        raise MalformedKeyError(f"Key {raw_key!r} does not contain prefix {prefix!r}")

    segments = raw_key[index + len(prefix):].split(KEY_SEPARATOR, 2)
    component = segments[0]
    if not component:
        raise MalformedKeyError(f"Key {raw_key!r} has an empty component segment")
    if len(segments) < 2 or segments[1] != str(config_type):
        raise MalformedKeyError(f"Key {raw_key!r} has no {config_type} segment")
    if len(segments) == 2:
        return "", component

    leaf_key = segments[2]
    if not leaf_key or KEY_SEPARATOR in leaf_key:
        raise MalformedKeyError(f"Key {raw_key!r} has no single leaf segment after {config_type}")
    return leaf_key, component


def package_to_key(package_name: str) -> str:
    """Make a package identifier safe to use as a leaf key."""
    return package_name.replace(KEY_SEPARATOR, PACKAGE_SEPARATOR_PLACEHOLDER)


def key_to_package(leaf_key: str) -> str:
    """Recover the package identifier from a leaf key."""
    return leaf_key.replace(PACKAGE_SEPARATOR_PLACEHOLDER, KEY_SEPARATOR)
