"""Data models for immofind."""

from .city_settings import CityRent, CitySettings, LoanDefaults
from .investment import CashflowInputs, InvestmentScenario
from .listing import Listing, ListingFilter
from .loan import AmortizationEntry, LoanParameters, LoanType
from .status import CalculationStatus

__all__ = [
    "AmortizationEntry",
    "CalculationStatus",
    "CashflowInputs",
    "CityRent",
    "CitySettings",
    "InvestmentScenario",
    "Listing",
    "ListingFilter",
    "LoanDefaults",
    "LoanParameters",
    "LoanType",
]
