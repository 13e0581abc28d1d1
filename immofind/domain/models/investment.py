"""Cashflow and investment scenario models."""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class CashflowInputs(BaseModel):
    """Monthly figures of a financed rental property."""

    monthly_rent: float = Field(default=0.0, ge=0, description="Cold rent in €")
    monthly_annuity: float = Field(default=0.0, ge=0, description="Debt service in €")
    monthly_non_apportionable_cost: float = Field(
        default=0.0, ge=0, description="Owner costs not recoverable from tenants in €"
    )

    model_config = {"frozen": True}

    @computed_field
    @property
    def monthly_cashflow(self) -> float:
        """Rent minus debt service minus non-apportionable costs. May be negative."""
        return self.monthly_rent - self.monthly_annuity - self.monthly_non_apportionable_cost


class InvestmentScenario(BaseModel):
    """An equity investment held for a number of years and then sold."""

    equity: float = Field(..., gt=0, description="Equity invested at purchase in €")
    annual_cashflow: float = Field(default=0.0, description="Yearly net cashflow in €")
    holding_years: float = Field(..., gt=0, description="Holding period in years")
    sale_price: float = Field(default=0.0, ge=0, description="Projected sale price in €")
    remaining_debt_at_sale: float = Field(default=0.0, ge=0, description="Loan balance repaid at sale in €")

    model_config = {"frozen": True}

    @computed_field
    @property
    def net_proceeds(self) -> float:
        return self.sale_price - self.remaining_debt_at_sale

    @computed_field
    @property
    def total_return(self) -> float:
        """Everything the equity returns: sale proceeds plus all cashflows."""
        return self.net_proceeds + self.annual_cashflow * self.holding_years
