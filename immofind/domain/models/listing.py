"""Listing and search filter models."""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

from immofind.core.formatting import parse_localized_number


class Listing(BaseModel):
    """A listing as returned by the search API.

    Price and area stay the localized strings the portal shows
    ("450.000 €", "85,5 m²"); the parsed values are derived.
    """

    price: str = Field(default="", description="Localized price, e.g. '450.000 €'")
    area: str = Field(default="", description="Localized living area, e.g. '85,5 m²'")
    location: str = Field(default="")
    link: str = Field(default="")
    title: str | None = None

    model_config = {"extra": "allow"}

    @computed_field
    @property
    def price_value(self) -> float:
        return parse_localized_number(self.price)

    @computed_field
    @property
    def area_value(self) -> float:
        return parse_localized_number(self.area)

    @computed_field
    @property
    def price_per_sqm(self) -> float | None:
        """Purchase price per m², or None while the area is unknown."""
        if self.area_value <= 0 or self.price_value <= 0:
            return None
        return self.price_value / self.area_value


class ListingFilter(BaseModel):
    """Search filters entered on the search page."""

    city: str = Field(default="Dresden")
    min_price: float | None = Field(None, ge=0)
    max_price: float | None = Field(None, ge=0)
    min_area: float | None = Field(None, ge=0)
    max_area: float | None = Field(None, ge=0)
    radius_km: float | None = Field(None, ge=0)
    max_price_per_sqm: float | None = Field(None, ge=0)
