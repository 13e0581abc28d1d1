"""Application services."""

from .financing import FinancingCalculator, FinancingForm, FinancingResult
from .settings_store import SettingsStore

__all__ = [
    "FinancingCalculator",
    "FinancingForm",
    "FinancingResult",
    "SettingsStore",
]
