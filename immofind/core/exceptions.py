"""Custom exceptions for immofind.

Domain-specific exception types for better error handling and debugging.
The calculation engines do not raise for bad numeric input; these are used
by the settings layer and by callers that need a hard failure.
"""

from __future__ import annotations

from typing import Any


class ImmoFindError(Exception):
    """Base exception for all immofind errors."""
    pass


# --- Settings Errors ---

class SettingsError(ImmoFindError):
    """Failed to load or persist the city settings."""
    pass


class ConfigurationError(ImmoFindError):
    """Error in application configuration."""
    pass


# --- Validation Errors ---

class InvalidParameterError(ImmoFindError):
    """Invalid parameter value provided."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)
