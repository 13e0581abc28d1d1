"""Persisted city rent rates and loan defaults.

A ``CitySettings`` instance is an immutable snapshot. Updates go through
``with_rent_rate`` / ``with_loan_default``, which return a new snapshot;
persisting it is the settings store's job.
"""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

FALLBACK_CITY = "Dresden"

DEFAULT_RENT_RATES: dict[str, float] = {
    "Dresden": 9.5,
    "Leipzig": 9.8,
    "Senftenberg": 6.5,  # smaller town, lower rents
}

LoanDefaultKey = Literal["interest_rate_pct", "repayment_rate_pct"]


class CityRent(BaseModel):
    """Rent level of one city."""

    rent_per_sqm: float = Field(..., ge=0, description="Monthly cold rent per m² in €")

    model_config = {"frozen": True}


class LoanDefaults(BaseModel):
    """Default financing terms, stored in percent like the settings form shows them."""

    interest_rate_pct: float = Field(default=2.0, ge=0, le=100)
    repayment_rate_pct: float = Field(default=2.0, ge=0, le=100)

    model_config = {"frozen": True}

    @property
    def interest_rate(self) -> float:
        """Annual interest rate as ratio."""
        return self.interest_rate_pct / 100.0

    @property
    def repayment_rate(self) -> float:
        """Initial annual repayment rate as ratio."""
        return self.repayment_rate_pct / 100.0


def _default_cities() -> dict[str, CityRent]:
    return {city: CityRent(rent_per_sqm=rate) for city, rate in DEFAULT_RENT_RATES.items()}


class CitySettings(BaseModel):
    """Snapshot of the city rent rates and loan defaults."""

    cities: dict[str, CityRent] = Field(default_factory=_default_cities)
    loan_defaults: LoanDefaults = Field(default_factory=LoanDefaults)

    model_config = {"frozen": True}

    @field_validator("cities")
    @classmethod
    def _keep_fallback_city(cls, cities: dict[str, CityRent]) -> dict[str, CityRent]:
        if FALLBACK_CITY not in cities:
            cities = {**cities, FALLBACK_CITY: CityRent(rent_per_sqm=DEFAULT_RENT_RATES[FALLBACK_CITY])}
        return cities

    @property
    def city_names(self) -> list[str]:
        return list(self.cities)

    def get_rent_rate(self, city: str | None) -> float:
        """Rent per m² for ``city``; unknown cities use the Dresden rate."""
        entry = self.cities.get(city or "") or self.cities[FALLBACK_CITY]
        return entry.rent_per_sqm

    def get_loan_defaults(self) -> LoanDefaults:
        return self.loan_defaults

    def with_rent_rate(self, city: str, rent_per_sqm: float) -> CitySettings:
        """Return a new snapshot with ``city`` set to ``rent_per_sqm``."""
        cities = {**self.cities, city: CityRent(rent_per_sqm=rent_per_sqm)}
        return self.model_copy(update={"cities": cities})

    def with_loan_default(self, key: LoanDefaultKey, value: float) -> CitySettings:
        """Return a new snapshot with one loan default replaced."""
        loan_defaults = LoanDefaults(**{**self.loan_defaults.model_dump(), key: value})
        return self.model_copy(update={"loan_defaults": loan_defaults})

    # --- Storage shape (camelCase, as persisted by earlier releases) ---

    def to_storage(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            city: {"rentPerSqm": entry.rent_per_sqm} for city, entry in self.cities.items()
        }
        payload["loanDefaults"] = {
            "interestRate": self.loan_defaults.interest_rate_pct,
            "repaymentRate": self.loan_defaults.repayment_rate_pct,
        }
        return payload

    @classmethod
    def from_storage(cls, payload: dict[str, Any]) -> CitySettings:
        """Merge a stored payload over the defaults, skipping malformed entries."""
        defaults = cls()
        cities = dict(defaults.cities)
        loan_defaults = defaults.loan_defaults.model_dump()

        for key, value in payload.items():
            if key == "loanDefaults" and isinstance(value, dict):
                if _is_rate(value.get("interestRate")):
                    loan_defaults["interest_rate_pct"] = float(value["interestRate"])
                if _is_rate(value.get("repaymentRate")):
                    loan_defaults["repayment_rate_pct"] = float(value["repaymentRate"])
            elif isinstance(value, dict) and _is_rate(value.get("rentPerSqm")):
                cities[key] = CityRent(rent_per_sqm=float(value["rentPerSqm"]))

        return cls(cities=cities, loan_defaults=LoanDefaults(**loan_defaults))


def _is_rate(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and 0 <= value <= 100
    )
