"""Monthly cashflow of a financed rental property.

cashflow = rent − annuity − non-apportionable costs

Negative cashflow is a real result (the owner subsidizes the property every
month) and is never clamped.
"""

from __future__ import annotations

import math

from immofind.domain.models.investment import CashflowInputs

# Owner costs not recoverable from tenants, per year, as share of the purchase price
NON_APPORTIONABLE_COST_RATE = 0.015


def default_non_apportionable_cost(
    purchase_price: float,
    annual_cost_rate: float = NON_APPORTIONABLE_COST_RATE,
) -> float:
    """Monthly non-apportionable costs: purchase price × 1.5 % / 12 by default."""
    if purchase_price <= 0:
        return 0.0
    return purchase_price * annual_cost_rate / 12.0


def resolve_non_apportionable_cost(
    purchase_price: float,
    manual_cost: float | None = None,
    annual_cost_rate: float = NON_APPORTIONABLE_COST_RATE,
) -> float:
    """A manually entered monthly cost wins over the price-based default."""
    if manual_cost is not None and manual_cost > 0:
        return manual_cost
    return default_non_apportionable_cost(purchase_price, annual_cost_rate)


def monthly_cashflow(inputs: CashflowInputs) -> float:
    return inputs.monthly_rent - inputs.monthly_annuity - inputs.monthly_non_apportionable_cost


def calculate_monthly_cashflow(
    monthly_rent: float,
    monthly_annuity: float,
    monthly_non_apportionable_cost: float,
) -> float:
    """Plain-number variant of ``monthly_cashflow`` for callers without a model."""
    return monthly_rent - monthly_annuity - monthly_non_apportionable_cost


def annual_cashflow(monthly: float) -> float:
    return monthly * 12.0


def round_to_euro(value: float) -> int:
    """Round to whole euros, halves towards +infinity (-225.5 -> -225, 225.5 -> 226)."""
    return math.floor(value + 0.5)


def is_positive_cashflow(cashflow: float) -> bool:
    """Break-even counts as positive."""
    return cashflow >= 0
