"""Loan amortization engine.

Annuity and fixed-principal (Tilgungsdarlehen) loans, month by month. Rates
are annual ratios; each month charges ``annual_rate / 12`` on the balance
outstanding at the start of that month.

Nothing in here raises for incomplete input. A loan that cannot be computed
yet (no principal, no term, a payment that never repays the debt) comes back
as a ``LoanSchedule`` with status ``INSUFFICIENT_INPUTS`` and no entries.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy_financial as npf
import pandas as pd

from immofind.domain.models.loan import AmortizationEntry, LoanParameters, LoanType
from immofind.domain.models.status import CalculationStatus

# Open-ended annuity schedules (repayment rate without a term) stop here
MAX_TERM_MONTHS = 100 * 12

# Balances below half a cent count as repaid
BALANCE_TOLERANCE = 0.005

SCHEDULE_COLUMNS = {
    "period_index": "Monat",
    "payment": "Rate",
    "interest_portion": "Zinsen",
    "principal_portion": "Tilgung",
    "remaining_balance": "Restschuld",
}


@dataclass
class LoanSchedule:
    """Month-by-month amortization of one loan."""

    status: CalculationStatus
    loan_type: LoanType
    principal: float = 0.0
    monthly_payment: float = 0.0
    entries: list[AmortizationEntry] = field(default_factory=list)

    @classmethod
    def insufficient(cls, loan_type: LoanType, principal: float = 0.0) -> LoanSchedule:
        return cls(
            status=CalculationStatus.INSUFFICIENT_INPUTS,
            loan_type=loan_type,
            principal=max(0.0, principal),
        )

    @property
    def is_computable(self) -> bool:
        return self.status is CalculationStatus.OK

    @property
    def term_months(self) -> int:
        return len(self.entries)

    @property
    def total_interest(self) -> float:
        return sum(e.interest_portion for e in self.entries)

    @property
    def total_principal(self) -> float:
        return sum(e.principal_portion for e in self.entries)

    @property
    def total_paid(self) -> float:
        return self.total_interest + self.total_principal

    @property
    def final_balance(self) -> float:
        return self.entries[-1].remaining_balance if self.entries else self.principal

    def balance_after(self, months: int) -> float:
        """Exact balance after ``months`` payments, read from the schedule."""
        if months <= 0 or not self.entries:
            return self.principal
        return self.entries[min(months, len(self.entries)) - 1].remaining_balance

    def head(self, months: int = 12) -> list[AmortizationEntry]:
        return self.entries[:max(0, months)]

    def to_frame(self) -> pd.DataFrame:
        """Schedule as a DataFrame with German column labels."""
        rows = [{column: getattr(e, column) for column in SCHEDULE_COLUMNS} for e in self.entries]
        frame = pd.DataFrame(rows, columns=list(SCHEDULE_COLUMNS))
        return frame.rename(columns=SCHEDULE_COLUMNS)

    def to_yearly_frame(self) -> pd.DataFrame:
        """Interest and principal per loan year, with the balance at year end."""
        frame = self.to_frame()
        if frame.empty:
            return pd.DataFrame(columns=["Jahr", "Rate", "Zinsen", "Tilgung", "Restschuld"])
        frame["Jahr"] = (frame["Monat"] - 1) // 12 + 1
        yearly = frame.groupby("Jahr", as_index=False).agg(
            {"Rate": "sum", "Zinsen": "sum", "Tilgung": "sum", "Restschuld": "last"}
        )
        return yearly


def monthly_rate(annual_interest_rate: float) -> float:
    """Convert an annual rate (ratio) to the monthly rate."""
    return annual_interest_rate / 12.0


def calculate_annuity_payment(
    principal: float,
    annual_interest_rate: float,
    term_years: float,
) -> float:
    """Closed-form monthly annuity that repays ``principal`` over ``term_years``.

    Args:
        principal: Loan amount in €
        annual_interest_rate: Annual interest rate as ratio (0.035 for 3.5 %)
        term_years: Loan term in years; fractional years are rounded to months

    Returns:
        Monthly payment in €, principal / months at a zero rate, 0.0 when
        the inputs are insufficient.
    """
    months = int(round(term_years * 12)) if term_years > 0 else 0
    if principal <= 0 or months <= 0 or annual_interest_rate < 0:
        return 0.0

    rate = monthly_rate(annual_interest_rate)
    if rate == 0:
        return principal / months

    return float(-npf.pmt(rate, months, principal))


def calculate_annuity_from_repayment_rate(
    principal: float,
    annual_interest_rate: float,
    annual_repayment_rate: float,
) -> float:
    """Monthly annuity quoted from interest and initial repayment rate.

    Both rates apply to the original principal, which is how German banks
    quote annuity loans: 240 000 € at 2 % interest and 2 % repayment cost
    240 000 × 4 % / 12 = 800 € a month.
    """
    if principal <= 0:
        return 0.0
    return principal * monthly_rate(annual_interest_rate) + principal * (annual_repayment_rate / 12.0)


def calculate_repayment_rate_from_annuity(
    principal: float,
    annual_interest_rate: float,
    monthly_annuity: float,
) -> float | None:
    """Inverse of ``calculate_annuity_from_repayment_rate``.

    Returns None without a principal. The result is negative when the
    annuity does not even cover the first month's interest.
    """
    if principal <= 0:
        return None
    return monthly_annuity * 12.0 / principal - annual_interest_rate


def calculate_fixed_principal_term_months(principal: float, monthly_principal: float) -> int:
    """Number of payments until a fixed-principal loan is repaid."""
    if principal <= 0 or monthly_principal <= 0:
        return 0
    # 1e-9 absorbs float noise from principal / (principal / n)
    return math.ceil(principal / monthly_principal - 1e-9)


def derive_term_years(principal: float, monthly_principal: float) -> float | None:
    """Term of a fixed-principal loan implied by its monthly principal."""
    if principal <= 0 or monthly_principal <= 0:
        return None
    return principal / (monthly_principal * 12.0)


def derive_monthly_principal(principal: float, term_years: float) -> float | None:
    """Monthly principal that repays a fixed-principal loan within ``term_years``."""
    if principal <= 0 or term_years <= 0:
        return None
    return principal / (term_years * 12.0)


def calculate_remaining_balance(
    principal: float,
    annual_interest_rate: float,
    monthly_annuity: float,
    years: float,
) -> float:
    """Closed-form loan balance after ``years`` of constant annuity payments.

    balance = P·(1+r)^(12k) − A·((1+r)^(12k) − 1) / r

    Used for the payoff at sale. The formula assumes a constant annuity, so
    for fixed-principal loans (whose payment shrinks) it is only an
    approximation; callers pass the first month's payment and accept that.
    Use ``LoanSchedule.balance_after`` for the exact figure.
    """
    if principal <= 0:
        return 0.0
    if years <= 0:
        return principal

    periods = 12.0 * years
    rate = monthly_rate(annual_interest_rate)
    if rate == 0:
        remaining = principal - monthly_annuity * periods
    else:
        growth = (1.0 + rate) ** periods
        remaining = principal * growth - monthly_annuity * ((growth - 1.0) / rate)
    return max(0.0, remaining)


def resolve_monthly_annuity(
    principal: float,
    annual_interest_rate: float,
    term_years: float | None = None,
    annual_repayment_rate: float | None = None,
    monthly_annuity: float | None = None,
) -> float:
    """Pick the annuity of an annuity loan: explicit amount, repayment rate, then term."""
    if monthly_annuity:
        return monthly_annuity
    if annual_repayment_rate:
        return calculate_annuity_from_repayment_rate(principal, annual_interest_rate, annual_repayment_rate)
    if term_years:
        return calculate_annuity_payment(principal, annual_interest_rate, term_years)
    return 0.0


def generate_annuity_schedule(
    principal: float,
    annual_interest_rate: float,
    term_years: float | None = None,
    annual_repayment_rate: float | None = None,
    monthly_annuity: float | None = None,
) -> LoanSchedule:
    """Amortize an annuity loan.

    The schedule ends when the balance is repaid or after ``term_years``
    (whichever comes first), so a repayment-rate loan with a shorter term
    leaves a residual balance.
    """
    if principal <= 0 or annual_interest_rate < 0 or (term_years is not None and term_years <= 0):
        return LoanSchedule.insufficient(LoanType.ANNUITY, principal)

    annuity = resolve_monthly_annuity(
        principal, annual_interest_rate, term_years, annual_repayment_rate, monthly_annuity
    )
    rate = monthly_rate(annual_interest_rate)
    if annuity <= principal * rate:
        # Payment never exceeds the interest: the debt would not shrink
        return LoanSchedule.insufficient(LoanType.ANNUITY, principal)

    max_periods = int(round(term_years * 12)) if term_years else MAX_TERM_MONTHS
    if max_periods < 1:
        # Term shorter than half a month
        return LoanSchedule.insufficient(LoanType.ANNUITY, principal)

    entries: list[AmortizationEntry] = []
    balance = principal

    for period in range(1, max_periods + 1):
        interest = balance * rate
        principal_portion = min(annuity - interest, balance)
        balance -= principal_portion
        if balance < BALANCE_TOLERANCE:
            principal_portion += balance
            balance = 0.0

        entries.append(
            AmortizationEntry(
                period_index=period,
                interest_portion=interest,
                principal_portion=principal_portion,
                remaining_balance=balance,
            )
        )
        if balance == 0.0:
            break

    return LoanSchedule(
        status=CalculationStatus.OK,
        loan_type=LoanType.ANNUITY,
        principal=principal,
        monthly_payment=annuity,
        entries=entries,
    )


def generate_fixed_principal_schedule(
    principal: float,
    annual_interest_rate: float,
    monthly_principal: float | None = None,
    term_years: float | None = None,
) -> LoanSchedule:
    """Amortize a loan with a constant monthly principal payment.

    Interest is recomputed from the shrinking balance, so each month's
    payment is interest + fixed principal and falls over time. After month
    k the balance is exactly max(0, principal − k × monthly_principal).
    """
    if monthly_principal is None and term_years:
        monthly_principal = derive_monthly_principal(principal, term_years)

    if principal <= 0 or annual_interest_rate < 0 or not monthly_principal or monthly_principal <= 0:
        return LoanSchedule.insufficient(LoanType.FIXED_PRINCIPAL, principal)

    rate = monthly_rate(annual_interest_rate)
    months = calculate_fixed_principal_term_months(principal, monthly_principal)
    entries: list[AmortizationEntry] = []
    balance = principal

    for period in range(1, months + 1):
        interest = balance * rate
        new_balance = max(0.0, principal - period * monthly_principal)
        if new_balance < BALANCE_TOLERANCE:
            new_balance = 0.0

        entries.append(
            AmortizationEntry(
                period_index=period,
                interest_portion=interest,
                principal_portion=balance - new_balance,
                remaining_balance=new_balance,
            )
        )
        balance = new_balance
        if balance == 0.0:
            break

    return LoanSchedule(
        status=CalculationStatus.OK,
        loan_type=LoanType.FIXED_PRINCIPAL,
        principal=principal,
        monthly_payment=entries[0].payment,
        entries=entries,
    )


def generate_amortization_schedule(params: LoanParameters) -> LoanSchedule:
    """Amortization schedule for validated loan parameters."""
    if params.loan_type is LoanType.FIXED_PRINCIPAL:
        return generate_fixed_principal_schedule(
            params.principal,
            params.annual_interest_rate,
            monthly_principal=params.effective_monthly_principal,
        )

    return generate_annuity_schedule(
        params.principal,
        params.annual_interest_rate,
        term_years=params.term_years,
        annual_repayment_rate=params.annual_repayment_rate,
        monthly_annuity=params.monthly_annuity,
    )
