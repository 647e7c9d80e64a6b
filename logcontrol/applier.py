# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Application of an effective level map to the logging engine."""

import logging
from typing import Dict, List, Mapping

from .engine import LoggingEngine, LogLevel
from .exceptions import LogControlError
from .keys import key_to_package
from .reconciler import DEFAULT_KEY, reconcile

logger = logging.getLogger(__name__)


class ApplyPartialFailure(LogControlError):
    """Raised after applying a level map when some entries could not be set.

    Attributes:
        failures: Leaf key -> error for every entry that was not applied
        applied: Leaf keys that were applied
    """

    def __init__(self, failures: Dict[str, Exception], applied: List[str]):
        self.failures = failures
        self.applied = applied
        keys = ", ".join(sorted(failures))
        super().__init__(f"Failed to apply {len(failures)} log level(s): {keys}")


class LevelApplier:
    """Pushes effective level maps into a logging engine."""

    def __init__(self, engine: LoggingEngine, propagate_default: bool = True):
        """Initialize applier.

        Args:
            engine: Logging engine to configure
            propagate_default: If True, packages already known to the engine
                but absent from the map are moved to the map's "default"
        """
        self.engine = engine
        self.propagate_default = propagate_default

    def apply(self, levels: Mapping[str, str]) -> List[str]:
        """Apply every entry of a level map; entries are independent.

        Returns:
            Leaf keys that were applied

        Raises:
            ApplyPartialFailure: If at least one entry could not be applied;
                all other entries have been applied
        """
        if self.propagate_default:
            levels = reconcile(self._active_levels(), levels)

        applied: List[str] = []
        failures: Dict[str, Exception] = {}

        # "default" first so package levels are set on top of it
        ordered = sorted(levels.items(), key=lambda item: item[0] != DEFAULT_KEY)
        for key, level_name in ordered:
            try:
                level = LogLevel.parse(level_name)
                if key == DEFAULT_KEY:
                    self.engine.set_default_level(level)
                else:
                    self.engine.set_package_level(key_to_package(key), level)
            except Exception as e:
                logger.error(f"Failed to set log level {level_name!r} for {key}: {e}")
                failures[key] = e
                continue
            applied.append(key)

        logger.info(f"Applied {len(applied)} log level(s)")
        if failures:
            raise ApplyPartialFailure(failures, applied)
        return applied

    def _active_levels(self) -> Dict[str, str]:
        try:
            return self.engine.active_levels()
        except Exception as e:
            logger.warning(f"Could not read active log levels, applying map as is: {e}")
            return {}
