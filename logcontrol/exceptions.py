# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Base exception for the log control library."""


class LogControlError(Exception):
    """Base exception for log control errors."""
    pass
