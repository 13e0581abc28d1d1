"""Core utilities: formatting, settings, logging and exceptions."""

from .exceptions import (
    ConfigurationError,
    ImmoFindError,
    InvalidParameterError,
    SettingsError,
)
from .formatting import format_currency, format_thousands, parse_localized_number

__all__ = [
    "format_currency",
    "format_thousands",
    "parse_localized_number",
    # Exceptions
    "ImmoFindError",
    "SettingsError",
    "ConfigurationError",
    "InvalidParameterError",
]
