# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Change detection for effective level maps."""

import hashlib
import json
from typing import Mapping, Optional

# Fingerprint of "nothing applied yet"
EMPTY_FINGERPRINT = bytes(16)


def fingerprint(levels: Mapping[str, str]) -> bytes:
    """Compute a 128-bit digest of a level map, independent of key order.

    MD5 is used for change detection only, not for integrity.
    """
    canonical = json.dumps(dict(levels), sort_keys=True, separators=(",", ":"))
    return hashlib.md5(canonical.encode("utf-8"), usedforsecurity=False).digest()


def should_apply(new_fingerprint: bytes, last_fingerprint: Optional[bytes]) -> bool:
    return new_fingerprint != last_fingerprint


class ChangeGate:
    """Tracks the fingerprint of the last successfully applied level map.

    Only the owning consumer loop may call ``commit``.
    """

    def __init__(self):
        self.last_fingerprint: bytes = EMPTY_FINGERPRINT

    def check(self, levels: Mapping[str, str]) -> Optional[bytes]:
        """Return the map's fingerprint if it differs from the last applied one, else None."""
        current = fingerprint(levels)
        if should_apply(current, self.last_fingerprint):
            return current
        return None

    def commit(self, applied_fingerprint: bytes) -> None:
        self.last_fingerprint = applied_fingerprint

    def reset(self) -> None:
        self.last_fingerprint = EMPTY_FINGERPRINT
