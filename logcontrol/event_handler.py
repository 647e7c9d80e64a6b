# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Decorator keeping the consumer loop alive across handler errors."""

import logging
from functools import wraps
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def safe_event_handler(
    event_name: str = "event",
    on_error: Optional[Callable[[Any, Exception, Any], None]] = None,
):
    """Decorator for handler methods that must never raise.

    Errors are logged with traceback, reported to the instance's
    ``error_reporter`` when it has one, and passed to ``on_error``.

    Example:
        @safe_event_handler("ConfigChange")
        def _handle_change(self, event):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self, event: Any):
            try:
                return func(self, event)
            except Exception as e:
                logger.error(f"Error handling {event_name} event: {e}", exc_info=True)

                reporter = getattr(self, "error_reporter", None)
                if reporter is not None:
                    reporter.report(e, context={"event": event, "event_name": event_name})

                if on_error:
                    on_error(self, e, event)
            return None

        return wrapper
    return decorator
