# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Merge of global and component-specific log levels."""

from typing import Any, Dict, Mapping

from .values import decode_level_value

DEFAULT_KEY = "default"


def levels_from_entries(entries: Mapping[str, Any]) -> Dict[str, str]:
    """Decode stored entries (leaf key -> payload) into a level map."""
    return {key: decode_level_value(value) for key, value in entries.items()}


def reconcile(global_levels: Mapping[str, str], component_levels: Mapping[str, str]) -> Dict[str, str]:
    """Combine global and component levels into the effective level map.

    Component entries always win. A key only present globally is carried
    through, unless the component sets its own "default", in which case that
    default replaces the global value. Inputs are never modified.

    Args:
        global_levels: Levels published for every component
        component_levels: Levels published for this component

    Returns:
        New effective level map
    """
    fallback_default = component_levels.get(DEFAULT_KEY, "")

    effective = dict(component_levels)
    for key, level in global_levels.items():
        if key in effective:
            continue
        effective[key] = fallback_default or level
    return effective
