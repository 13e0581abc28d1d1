"""Mutually derived loan input fields.

The calculator form has two pairs of inputs that describe the same quantity:

* repayment rate (%) and monthly annuity (€) of an annuity loan
* monthly principal (€) and term (years) of a fixed-principal loan

Whichever field of a pair the user edited last is authoritative. ``edit``
records the value and the authority tag; ``recompute`` only ever writes the
other field, so a derived value can never feed back into the field it was
derived from.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from immofind.domain.calculator.loan import (
    calculate_annuity_from_repayment_rate,
    calculate_repayment_rate_from_annuity,
    derive_monthly_principal,
    derive_term_years,
)


class LinkedField(str, Enum):
    REPAYMENT_RATE = "repayment_rate"
    MONTHLY_ANNUITY = "monthly_annuity"
    MONTHLY_PRINCIPAL = "monthly_principal"
    TERM_YEARS = "term_years"


@dataclass(frozen=True)
class AnnuityTerms:
    """Repayment rate (ratio) linked to the monthly annuity (€)."""

    repayment_rate: float | None = None
    monthly_annuity: float | None = None
    last_edited: LinkedField = LinkedField.REPAYMENT_RATE

    def edit(self, field_name: LinkedField, value: float | None) -> AnnuityTerms:
        if field_name is LinkedField.REPAYMENT_RATE:
            return replace(self, repayment_rate=value, last_edited=field_name)
        if field_name is LinkedField.MONTHLY_ANNUITY:
            return replace(self, monthly_annuity=value, last_edited=field_name)
        raise ValueError(f"{field_name.value} is not part of the annuity terms")

    def recompute(self, principal: float, annual_interest_rate: float) -> AnnuityTerms:
        """Derive the non-authoritative field from the authoritative one.

        Without a principal (or without the authoritative value) the derived
        field is cleared, which the form shows as "not yet computable".
        """
        if self.last_edited is LinkedField.REPAYMENT_RATE:
            if self.repayment_rate is None or principal <= 0:
                return replace(self, monthly_annuity=None)
            annuity = calculate_annuity_from_repayment_rate(
                principal, annual_interest_rate, self.repayment_rate
            )
            return replace(self, monthly_annuity=annuity)

        if self.monthly_annuity is None:
            return replace(self, repayment_rate=None)
        rate = calculate_repayment_rate_from_annuity(principal, annual_interest_rate, self.monthly_annuity)
        return replace(self, repayment_rate=rate)


@dataclass(frozen=True)
class PrincipalTerms:
    """Fixed monthly principal (€) linked to the term (years)."""

    monthly_principal: float | None = None
    term_years: float | None = None
    last_edited: LinkedField = LinkedField.TERM_YEARS

    def edit(self, field_name: LinkedField, value: float | None) -> PrincipalTerms:
        if field_name is LinkedField.MONTHLY_PRINCIPAL:
            return replace(self, monthly_principal=value, last_edited=field_name)
        if field_name is LinkedField.TERM_YEARS:
            return replace(self, term_years=value, last_edited=field_name)
        raise ValueError(f"{field_name.value} is not part of the principal terms")

    def recompute(self, principal: float) -> PrincipalTerms:
        if self.last_edited is LinkedField.MONTHLY_PRINCIPAL:
            term = derive_term_years(principal, self.monthly_principal or 0.0)
            return replace(self, term_years=term)

        amount = derive_monthly_principal(principal, self.term_years or 0.0)
        return replace(self, monthly_principal=amount)
