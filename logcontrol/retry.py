# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Retry policy for re-establishing watches after transient store failures."""

import logging
import threading

logger = logging.getLogger(__name__)

DEFAULT_MAX_BACKOFF_SECONDS = 30


def backoff_delay(
    attempt: int,
    backoff_seconds: float = 1,
    max_backoff_seconds: float = DEFAULT_MAX_BACKOFF_SECONDS,
) -> float:
    """Delay before retry number `attempt` (1-based): doubles each time, capped."""
    return min(backoff_seconds * (2 ** (attempt - 1)), max_backoff_seconds)


class WatchRetryPolicy:
    """Counts consecutive failed watch cycles and paces resubscription.

    A cycle fails when subscribing raises or when the stream breaks. The
    count is only reset once a stream has delivered something, so a store
    whose streams fail right after subscribing still exhausts the budget.
    """

    def __init__(
        self,
        max_retries: int = 0,
        backoff_seconds: float = 1,
        max_backoff_seconds: float = DEFAULT_MAX_BACKOFF_SECONDS,
    ):
        """Initialize retry policy.

        Args:
            max_retries: Resubscribe attempts allowed after consecutive failures
            backoff_seconds: Base backoff time in seconds
            max_backoff_seconds: Maximum backoff time (cap)
        """
        self.max_retries = max(max_retries, 0)
        self.backoff_seconds = backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds
        self.failures = 0

    def record_failure(self) -> bool:
        """Count a failed cycle.

        Returns:
            True if another attempt is allowed
        """
        self.failures += 1
        if self.failures > self.max_retries:
            logger.error(f"All {self.max_retries} retry attempts exhausted")
            return False
        return True

    def record_success(self) -> None:
        self.failures = 0

    def wait(self, stop_event: threading.Event) -> bool:
        """Wait before the next attempt.

        Returns:
            False if the stop token was set while waiting
        """
        backoff = backoff_delay(self.failures, self.backoff_seconds, self.max_backoff_seconds)
        logger.info(f"Retry attempt {self.failures}/{self.max_retries}, waiting {backoff}s")
        return not stop_event.wait(backoff)
