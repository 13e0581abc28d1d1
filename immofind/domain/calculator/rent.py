"""Rent estimation from city rent levels.

The automatic estimate is area × the city's rent per m². A manual rent
entered by the user always wins over it, and figures discovered on a listing
page are normalized to a monthly rent before use.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from immofind.domain.models.city_settings import CitySettings


class RentSource(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    DISCOVERED = "discovered"


@dataclass(frozen=True)
class RentEstimate:
    """Monthly rent and where it came from."""

    monthly_rent: float
    source: RentSource
    rent_per_sqm: float

    @property
    def is_available(self) -> bool:
        return self.monthly_rent > 0


def estimate_monthly_rent(area: float, rent_per_sqm: float) -> float:
    """Monthly cold rent for ``area`` m² at ``rent_per_sqm`` €/m²."""
    if area <= 0 or rent_per_sqm <= 0:
        return 0.0
    return area * rent_per_sqm


def resolve_monthly_rent(estimated_rent: float, manual_rent: float | None = None) -> float:
    """Manual rent if present and positive, otherwise the estimate."""
    if manual_rent is not None and manual_rent > 0:
        return manual_rent
    return estimated_rent


def normalize_rent_candidates(
    candidates: Iterable[float],
    rent_per_sqm: float,
    area: float,
) -> float | None:
    """Reduce rent figures scraped from a listing page to one monthly rent.

    Takes the smallest positive candidate. A value above twice the city-rate
    estimate (2 × rent_per_sqm × area) is taken to be a yearly figure and
    divided by 12. The factor 2 is an empirical threshold.

    Returns:
        Monthly rent, or None when there is no usable candidate.
    """
    usable = [float(c) for c in candidates if c is not None and math.isfinite(c) and c > 0]
    if not usable:
        return None

    rent = min(usable)
    if rent > 2.0 * rent_per_sqm * area:
        rent /= 12.0
    return rent


class RentEstimator:
    """Rent estimates against one settings snapshot."""

    def __init__(self, settings: CitySettings):
        self.settings = settings

    def estimate(
        self,
        city: str,
        area: float,
        manual_rent: float | None = None,
    ) -> RentEstimate:
        rate = self.settings.get_rent_rate(city)
        if manual_rent is not None and manual_rent > 0:
            return RentEstimate(monthly_rent=manual_rent, source=RentSource.MANUAL, rent_per_sqm=rate)
        return RentEstimate(
            monthly_rent=estimate_monthly_rent(area, rate),
            source=RentSource.AUTOMATIC,
            rent_per_sqm=rate,
        )

    def from_candidates(self, city: str, area: float, candidates: Iterable[float]) -> RentEstimate:
        """Rent from discovered candidates, falling back to the automatic estimate."""
        rate = self.settings.get_rent_rate(city)
        rent = normalize_rent_candidates(candidates, rate, area)
        if rent is None:
            return self.estimate(city, area)
        return RentEstimate(monthly_rent=rent, source=RentSource.DISCOVERED, rent_per_sqm=rate)
