"""Return metrics of a leveraged property investment.

Total return, CAGR and IRR over a holding period. All functions are pure.

The IRR is found with plain Newton-Raphson starting at 10 %. There is no
bisection fallback: when the iteration does not converge within the cap the
last iterate is returned as a best effort, with ``converged=False`` on the
metric for callers that care.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from immofind.domain.models.investment import InvestmentScenario
from immofind.domain.models.status import CalculationStatus

IRR_INITIAL_GUESS = 0.10
IRR_TOLERANCE = 1e-6
IRR_MAX_ITERATIONS = 100


@dataclass(frozen=True)
class ReturnMetric:
    """A rate of return and whether it may be shown."""

    value: float | None
    status: CalculationStatus = CalculationStatus.OK
    converged: bool = True
    iterations: int = 0

    @property
    def is_available(self) -> bool:
        return self.status is CalculationStatus.OK and self.value is not None

    @classmethod
    def unavailable(cls, status: CalculationStatus) -> ReturnMetric:
        return cls(value=None, status=status, converged=False)


@dataclass(frozen=True)
class ReturnSummary:
    """All return figures of one scenario."""

    net_proceeds: float
    total_return: float
    cagr: ReturnMetric
    irr: ReturnMetric
    cashflows: list[float]


def calculate_net_proceeds(sale_price: float, remaining_debt: float) -> float:
    return sale_price - remaining_debt


def calculate_total_return(net_proceeds: float, annual_cashflow: float, holding_years: float) -> float:
    """Sale proceeds plus every year's cashflow."""
    return net_proceeds + annual_cashflow * holding_years


def calculate_cagr(total_return: float, equity: float, years: float) -> ReturnMetric:
    """Compound annual growth rate: (total_return / equity)^(1/years) − 1.

    Args:
        total_return: Money returned to the investor over the holding period
        equity: Equity invested at the start
        years: Holding period in years

    Returns:
        The CAGR as ratio; ``INSUFFICIENT_INPUTS`` without equity or years,
        ``NEGATIVE_RETURN`` when less than nothing comes back (the root of a
        negative number has no real meaning here).
    """
    if equity <= 0 or years <= 0:
        return ReturnMetric.unavailable(CalculationStatus.INSUFFICIENT_INPUTS)
    if total_return < 0:
        return ReturnMetric.unavailable(CalculationStatus.NEGATIVE_RETURN)
    return ReturnMetric(value=(total_return / equity) ** (1.0 / years) - 1.0)


def holding_periods(holding_years: float) -> int:
    """Whole years of an IRR series; fractional holding periods are rounded."""
    return max(1, int(round(holding_years)))


def build_cashflow_series(
    equity: float,
    annual_cashflow: float,
    holding_years: float,
    net_sale_proceeds: float,
) -> list[float]:
    """Yearly cashflows from the investor's point of view.

    [−equity, cf, cf, ..., cf + net_sale_proceeds], one entry per year plus
    the initial investment.
    """
    periods = holding_periods(holding_years)
    series = [-equity] + [annual_cashflow] * periods
    series[-1] += net_sale_proceeds
    return series


def npv(rate: float, cashflows: Sequence[float]) -> float:
    """Net present value with cashflow t discounted by (1 + rate)^t."""
    return sum(cf / (1.0 + rate) ** t for t, cf in enumerate(cashflows))


def npv_derivative(rate: float, cashflows: Sequence[float]) -> float:
    """d(NPV)/d(rate) = Σ −t · cf_t / (1 + rate)^(t+1)."""
    return sum(-t * cf / (1.0 + rate) ** (t + 1) for t, cf in enumerate(cashflows) if t)


def calculate_irr(
    cashflows: Sequence[float],
    initial_guess: float = IRR_INITIAL_GUESS,
    tolerance: float = IRR_TOLERANCE,
    max_iterations: int = IRR_MAX_ITERATIONS,
) -> ReturnMetric:
    """Internal rate of return by Newton-Raphson.

    Iterates until |NPV| < ``tolerance`` or ``max_iterations`` steps. If it
    stops early (flat derivative, or a step to a rate of −100 % or below)
    or runs out of iterations, the last usable iterate is returned with
    ``converged=False``.

    Args:
        cashflows: Cashflow per period, index 0 being the investment
        initial_guess: Starting rate

    Returns:
        IRR as ratio. ``NEGATIVE_RETURN`` when the inflows after the
        investment sum to less than zero, ``INSUFFICIENT_INPUTS`` for fewer
        than two cashflows.
    """
    flows = [float(cf) for cf in cashflows]
    if len(flows) < 2 or not all(math.isfinite(cf) for cf in flows):
        return ReturnMetric.unavailable(CalculationStatus.INSUFFICIENT_INPUTS)
    if sum(flows[1:]) < 0:
        return ReturnMetric.unavailable(CalculationStatus.NEGATIVE_RETURN)

    rate = initial_guess
    for iteration in range(1, max_iterations + 1):
        try:
            value = npv(rate, flows)
            slope = npv_derivative(rate, flows)
        except (OverflowError, ZeroDivisionError):
            return ReturnMetric(value=rate, converged=False, iterations=iteration - 1)

        if abs(value) < tolerance:
            return ReturnMetric(value=rate, converged=True, iterations=iteration - 1)
        if slope == 0:
            return ReturnMetric(value=rate, converged=False, iterations=iteration - 1)

        next_rate = rate - value / slope
        if not math.isfinite(next_rate) or next_rate <= -1.0:
            return ReturnMetric(value=rate, converged=False, iterations=iteration)
        rate = next_rate

    try:
        converged = abs(npv(rate, flows)) < tolerance
    except (OverflowError, ZeroDivisionError):
        converged = False
    return ReturnMetric(value=rate, converged=converged, iterations=max_iterations)


def evaluate_scenario(scenario: InvestmentScenario) -> ReturnSummary:
    """Total return, CAGR and IRR of an investment scenario.

    A negative total return marks both CAGR and IRR as ``NEGATIVE_RETURN``.
    """
    net_proceeds = scenario.net_proceeds
    total_return = scenario.total_return
    cashflows = build_cashflow_series(
        scenario.equity, scenario.annual_cashflow, scenario.holding_years, net_proceeds
    )

    cagr = calculate_cagr(total_return, scenario.equity, scenario.holding_years)
    if total_return < 0:
        irr = ReturnMetric.unavailable(CalculationStatus.NEGATIVE_RETURN)
    else:
        irr = calculate_irr(cashflows)

    return ReturnSummary(
        net_proceeds=net_proceeds,
        total_return=total_return,
        cagr=cagr,
        irr=irr,
        cashflows=cashflows,
    )
