"""Loan data models.

Rates are ratios (0.02 for 2 %) and apply per year; the engines convert them
to monthly rates on the balance outstanding at the start of each month.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field, model_validator


class LoanType(str, Enum):
    """Supported amortization policies."""

    ANNUITY = "annuity"
    FIXED_PRINCIPAL = "fixed_principal"


class LoanParameters(BaseModel):
    """Inputs of a single loan.

    Annuity loans take their monthly payment from, in order of precedence,
    ``monthly_annuity``, ``annual_repayment_rate`` (German convention:
    principal × (interest + repayment) / 12) or the closed-form annuity over
    ``term_years``. Fixed-principal loans take exactly one of
    ``monthly_principal_amount`` and ``term_years``; the other is derived.
    """

    principal: float = Field(..., ge=0, description="Financed amount in €")
    annual_interest_rate: float = Field(..., ge=0, description="Annual interest rate as ratio")
    loan_type: LoanType = Field(default=LoanType.ANNUITY)
    annual_repayment_rate: float | None = Field(None, ge=0, description="Initial annual repayment rate as ratio")
    monthly_annuity: float | None = Field(None, ge=0, description="Explicit monthly annuity in €")
    monthly_principal_amount: float | None = Field(None, ge=0, description="Fixed monthly principal in €")
    term_years: float | None = Field(None, ge=0, description="Loan term in years")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _single_fixed_principal_driver(self) -> LoanParameters:
        if (
            self.loan_type is LoanType.FIXED_PRINCIPAL
            and self.monthly_principal_amount
            and self.term_years
        ):
            raise ValueError(
                "fixed-principal loans take either monthly_principal_amount or term_years, not both"
            )
        return self

    @property
    def monthly_interest_rate(self) -> float:
        return self.annual_interest_rate / 12.0

    @computed_field
    @property
    def effective_term_years(self) -> float | None:
        """Term in years, derived from the monthly principal for fixed-principal loans."""
        if self.loan_type is LoanType.FIXED_PRINCIPAL and self.monthly_principal_amount:
            return self.principal / (self.monthly_principal_amount * 12.0)
        return self.term_years or None

    @computed_field
    @property
    def effective_monthly_principal(self) -> float | None:
        """Monthly principal of a fixed-principal loan, derived from the term if needed."""
        if self.loan_type is not LoanType.FIXED_PRINCIPAL:
            return None
        if self.monthly_principal_amount:
            return self.monthly_principal_amount
        if self.term_years:
            return self.principal / (self.term_years * 12.0)
        return None


class AmortizationEntry(BaseModel):
    """One month of an amortization schedule."""

    period_index: int = Field(..., ge=1)
    interest_portion: float = Field(..., description="Interest paid this month in €")
    principal_portion: float = Field(..., description="Principal repaid this month in €")
    remaining_balance: float = Field(..., ge=0, description="Balance after this month's payment")

    model_config = {"frozen": True}

    @computed_field
    @property
    def payment(self) -> float:
        """Total debt service of the month."""
        return self.interest_portion + self.principal_portion
