"""Calculation engines: loans, cashflow, rent and returns."""

from .cashflow import (
    calculate_monthly_cashflow,
    default_non_apportionable_cost,
    monthly_cashflow,
)
from .loan import (
    LoanSchedule,
    calculate_annuity_from_repayment_rate,
    calculate_annuity_payment,
    calculate_remaining_balance,
    generate_amortization_schedule,
)
from .rent import RentEstimator, normalize_rent_candidates
from .returns import ReturnMetric, calculate_cagr, calculate_irr, evaluate_scenario

__all__ = [
    "LoanSchedule",
    "RentEstimator",
    "ReturnMetric",
    "calculate_annuity_from_repayment_rate",
    "calculate_annuity_payment",
    "calculate_cagr",
    "calculate_irr",
    "calculate_monthly_cashflow",
    "calculate_remaining_balance",
    "default_non_apportionable_cost",
    "evaluate_scenario",
    "generate_amortization_schedule",
    "monthly_cashflow",
    "normalize_rent_candidates",
]
