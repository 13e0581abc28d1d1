"""Financing calculator service.

Runs the full calculation behind the calculator page:

    form strings -> parsed inputs -> loan schedule + rent estimate
                 -> cashflow -> return metrics -> display strings

The service never raises for incomplete input. ``calculate`` returns None
while the purchase price or the financed amount is missing, and every
derived figure that cannot be computed yet carries a status the page uses
to hide it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from immofind.core.formatting import (
    PLACEHOLDER,
    format_currency,
    format_decimal,
    format_percent,
    parse_localized_number,
)
from immofind.core.logging import get_logger
from immofind.core.settings import AppSettings, get_settings
from immofind.domain.calculator.cashflow import annual_cashflow, resolve_non_apportionable_cost
from immofind.domain.calculator.loan import (
    LoanSchedule,
    calculate_remaining_balance,
    generate_amortization_schedule,
)
from immofind.domain.calculator.rent import RentEstimate, RentEstimator
from immofind.domain.calculator.returns import ReturnMetric, ReturnSummary, evaluate_scenario
from immofind.domain.models.city_settings import CitySettings
from immofind.domain.models.investment import CashflowInputs, InvestmentScenario
from immofind.domain.models.loan import AmortizationEntry, LoanParameters, LoanType

log = get_logger(__name__)


class FinancingForm(BaseModel):
    """Calculator inputs exactly as typed (de-DE number strings, rates in %)."""

    purchase_price: str = ""
    square_meters: str = ""
    non_apportionable: str = Field(default="", description="Monthly override of the non-apportionable costs")
    apportionable: str = Field(default="", description="Monthly service charges passed on to the tenant")
    down_payment: str = ""
    manual_rent: str = ""
    city: str = "Dresden"
    interest_rate: str = "3,5"
    loan_term: str = "30"
    additional_costs: str = Field(default="", description="Notary, land transfer tax, broker")
    loan_type: LoanType = LoanType.ANNUITY
    repayment_rate: str = ""
    monthly_annuity: str = ""
    monthly_principal: str = ""
    holding_years: str = ""
    sale_price: str = ""

    def parse(self) -> FinancingInputs:
        """Convert the strings; empty or malformed fields become 0 / None."""
        return FinancingInputs(
            purchase_price=parse_localized_number(self.purchase_price),
            square_meters=parse_localized_number(self.square_meters),
            equity=parse_localized_number(self.down_payment),
            additional_costs=parse_localized_number(self.additional_costs),
            city=self.city,
            annual_interest_rate=parse_localized_number(self.interest_rate) / 100.0,
            term_years=parse_localized_number(self.loan_term),
            loan_type=self.loan_type,
            annual_repayment_rate=_optional(self.repayment_rate, scale=100.0),
            monthly_annuity=_optional(self.monthly_annuity),
            monthly_principal=_optional(self.monthly_principal),
            manual_rent=_optional(self.manual_rent),
            manual_non_apportionable=_optional(self.non_apportionable),
            apportionable_cost=parse_localized_number(self.apportionable),
            holding_years=_optional(self.holding_years),
            sale_price=_optional(self.sale_price),
        )


def _optional(raw: str, scale: float = 1.0) -> Optional[float]:
    value = parse_localized_number(raw)
    return value / scale if value > 0 else None


@dataclass(frozen=True)
class FinancingInputs:
    """Parsed calculator inputs. Rates are ratios."""

    purchase_price: float
    square_meters: float = 0.0
    equity: float = 0.0
    additional_costs: float = 0.0
    city: str = "Dresden"
    annual_interest_rate: float = 0.035
    term_years: float = 30.0
    loan_type: LoanType = LoanType.ANNUITY
    annual_repayment_rate: Optional[float] = None
    monthly_annuity: Optional[float] = None
    monthly_principal: Optional[float] = None
    manual_rent: Optional[float] = None
    manual_non_apportionable: Optional[float] = None
    apportionable_cost: float = 0.0
    holding_years: Optional[float] = None
    sale_price: Optional[float] = None

    @property
    def loan_amount(self) -> float:
        """Purchase price minus equity plus financed purchase costs."""
        return self.purchase_price - self.equity + self.additional_costs


@dataclass
class FinancingResult:
    """Everything the calculator page shows."""

    inputs: FinancingInputs
    schedule: LoanSchedule
    rent: RentEstimate
    cashflow: CashflowInputs
    remaining_debt_at_sale: Optional[float] = None
    returns: Optional[ReturnSummary] = None
    preview_months: int = 12

    @property
    def loan_amount(self) -> float:
        return self.inputs.loan_amount

    @property
    def monthly_payment(self) -> float:
        return self.schedule.monthly_payment

    @property
    def total_interest(self) -> float:
        return self.schedule.total_interest

    @property
    def total_amount(self) -> float:
        """Financed amount plus all interest."""
        return self.loan_amount + self.total_interest

    @property
    def monthly_cashflow(self) -> float:
        return self.cashflow.monthly_cashflow

    @property
    def annual_cashflow(self) -> float:
        return annual_cashflow(self.cashflow.monthly_cashflow)

    @property
    def preview(self) -> list[AmortizationEntry]:
        """First months of the schedule, as shown on the page."""
        return self.schedule.head(self.preview_months)

    def summary(self) -> dict[str, str]:
        """Display strings keyed by their German labels; hidden figures show a dash."""
        computable = self.schedule.is_computable
        lines = {
            "Darlehenssumme": format_currency(self.loan_amount),
            "Monatliche Rate": format_currency(self.monthly_payment, 2) if computable else PLACEHOLDER,
            "Gesamtzinsen": format_currency(self.total_interest) if computable else PLACEHOLDER,
            "Gesamtkosten": format_currency(self.total_amount) if computable else PLACEHOLDER,
            "Laufzeit": (
                f"{format_decimal(self.schedule.term_months / 12.0, 1)} Jahre" if computable else PLACEHOLDER
            ),
            "Miete": format_currency(self.rent.monthly_rent) if self.rent.is_available else PLACEHOLDER,
            "Cashflow": format_currency(self.monthly_cashflow) if computable else PLACEHOLDER,
        }
        if self.returns is not None:
            lines["Gesamtrückfluss"] = format_currency(self.returns.total_return)
            lines["CAGR"] = _format_metric(self.returns.cagr)
            lines["IRR"] = _format_metric(self.returns.irr)
        return lines


def _format_metric(metric: ReturnMetric) -> str:
    if not metric.is_available:
        return PLACEHOLDER
    return format_percent(metric.value)


class FinancingCalculator:
    """Calculator bound to one settings snapshot."""

    def __init__(self, settings: CitySettings, app_settings: AppSettings | None = None):
        self.settings = settings
        self.app_settings = app_settings or get_settings()
        self.rent_estimator = RentEstimator(settings)

    def build_loan_parameters(self, inputs: FinancingInputs) -> LoanParameters:
        """Loan parameters for the financed amount.

        A repayment rate or annuity entered by the user drives an annuity loan;
        the term then only caps the schedule. Fixed-principal loans use the
        monthly principal when given, otherwise the term.
        """
        principal = max(0.0, inputs.loan_amount)
        rate = max(0.0, inputs.annual_interest_rate)
        term = inputs.term_years if inputs.term_years > 0 else None

        if inputs.loan_type is LoanType.FIXED_PRINCIPAL:
            return LoanParameters(
                principal=principal,
                annual_interest_rate=rate,
                loan_type=LoanType.FIXED_PRINCIPAL,
                monthly_principal_amount=inputs.monthly_principal,
                term_years=None if inputs.monthly_principal else term,
            )

        return LoanParameters(
            principal=principal,
            annual_interest_rate=rate,
            loan_type=LoanType.ANNUITY,
            annual_repayment_rate=inputs.annual_repayment_rate,
            monthly_annuity=inputs.monthly_annuity,
            term_years=term,
        )

    def calculate(self, inputs: FinancingInputs) -> Optional[FinancingResult]:
        """Run the whole calculation.

        Returns:
            None while there is no purchase price or nothing to finance.
        """
        if inputs.purchase_price <= 0:
            log.debug("financing_suppressed", reason="no_purchase_price")
            return None
        if inputs.loan_amount <= 0:
            log.debug("financing_suppressed", reason="nothing_to_finance", equity=inputs.equity)
            return None

        schedule = generate_amortization_schedule(self.build_loan_parameters(inputs))
        rent = self.rent_estimator.estimate(inputs.city, inputs.square_meters, inputs.manual_rent)
        cost = resolve_non_apportionable_cost(
            inputs.purchase_price,
            inputs.manual_non_apportionable,
            self.app_settings.non_apportionable_cost_pct / 100.0,
        )
        cashflow = CashflowInputs(
            monthly_rent=rent.monthly_rent,
            monthly_annuity=schedule.monthly_payment,
            monthly_non_apportionable_cost=cost,
        )

        result = FinancingResult(
            inputs=inputs,
            schedule=schedule,
            rent=rent,
            cashflow=cashflow,
            preview_months=self.app_settings.schedule_preview_months,
        )
        if schedule.is_computable and inputs.holding_years and inputs.equity > 0:
            self._add_returns(result)
        return result

    def calculate_form(self, form: FinancingForm) -> Optional[FinancingResult]:
        return self.calculate(form.parse())

    def _add_returns(self, result: FinancingResult) -> None:
        inputs = result.inputs
        holding_years = inputs.holding_years or 0.0
        # Closed form with the first month's payment; approximate for
        # fixed-principal loans, whose payment falls over time
        remaining_debt = calculate_remaining_balance(
            inputs.loan_amount,
            inputs.annual_interest_rate,
            result.schedule.monthly_payment,
            holding_years,
        )
        scenario = InvestmentScenario(
            equity=inputs.equity,
            annual_cashflow=result.annual_cashflow,
            holding_years=holding_years,
            sale_price=inputs.sale_price or inputs.purchase_price,
            remaining_debt_at_sale=remaining_debt,
        )
        result.remaining_debt_at_sale = remaining_debt
        result.returns = evaluate_scenario(scenario)
        if not result.returns.irr.converged and result.returns.irr.is_available:
            log.debug("irr_not_converged", iterations=result.returns.irr.iterations)
