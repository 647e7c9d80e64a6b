# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Serialization of configuration values stored in the KV store."""

import json
from typing import Any

# Guards against pathological nesting of quoted payloads
_MAX_UNWRAP_DEPTH = 4


def encode_value(value: Any) -> str:
    """Serialize a configuration value for storage.

    Args:
        value: JSON-serializable value (e.g. a level string)

    Returns:
        JSON text, so "DEBUG" is stored as '"DEBUG"'
    """
    return json.dumps(value)


def decode_level_value(raw: Any) -> str:
    """Extract a bare level string from a stored payload.

    Tolerates bytes, JSON string wrapping (including double encoding) and
    stray quotes or backslashes left around the level.

    Args:
        raw: Value as returned by the store

    Returns:
        Level string such as "DEBUG", or "" when the payload is empty
    """
    if raw is None:
        return ""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    value: Any = raw
    for _ in range(_MAX_UNWRAP_DEPTH):
        if not isinstance(value, str):
            break
        try:
            value = json.loads(value)
        except (ValueError, RecursionError):
            break

    text = value if isinstance(value, str) else str(value)
    return text.replace("\\", "").strip().strip('"').strip()
