"""Listing services: search query, client-side filtering and sorting.

The listings API and the rent-discovery scraper are external services. They
are typed here as protocols so the UI can be wired to any implementation;
this module only works on the records they return.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Literal, Optional, Protocol, Sequence
from urllib.parse import urlencode

from immofind.core.exceptions import ConfigurationError
from immofind.core.formatting import format_signed_currency
from immofind.domain.calculator.cashflow import (
    calculate_monthly_cashflow,
    default_non_apportionable_cost,
    is_positive_cashflow,
    round_to_euro,
)
from immofind.domain.calculator.loan import calculate_annuity_from_repayment_rate
from immofind.domain.calculator.rent import estimate_monthly_rent
from immofind.domain.models.city_settings import CitySettings
from immofind.domain.models.listing import Listing, ListingFilter

SortKey = Literal["price", "area", "price_per_sqm", "cashflow"]

DEV_API_PREFIX = "/api"


class ListingsSource(Protocol):
    """Remote listings search."""

    def search(self, params: dict[str, str]) -> list[dict[str, Any]]: ...


class RentDiscoveryService(Protocol):
    """Finds rent figures on a listing page."""

    async def find_rent_candidates(self, url: str) -> list[float]: ...


def build_api_url(endpoint: str, query: str | dict[str, Any] | None = None, base_url: str | None = None) -> str:
    """URL of an API endpoint.

    With an absolute ``base_url`` the endpoint is appended to it (trailing
    slash removed); otherwise the ``/api`` prefix of the dev proxy is used.

    Raises:
        ConfigurationError: ``base_url`` is set but not an http(s) URL.
    """
    clean_endpoint = endpoint.lstrip("/")
    if isinstance(query, dict):
        query = urlencode({k: v for k, v in query.items() if v is not None})
    suffix = ""
    if query:
        suffix = query if query.startswith("?") else f"?{query}"

    if base_url:
        if not base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"API base URL must be absolute: {base_url!r}")
        return f"{base_url.rstrip('/')}/{clean_endpoint}{suffix}"
    return f"{DEV_API_PREFIX}/{clean_endpoint}{suffix}"


def _param(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    return str(int(value)) if float(value).is_integer() else str(value)


def build_search_params(filters: ListingFilter) -> dict[str, str]:
    """Query parameters of a listings search; unset filters are left out."""
    params = {
        "city": filters.city,
        "min_price": _param(filters.min_price),
        "max_price": _param(filters.max_price),
        "min_area": _param(filters.min_area),
        "max_area": _param(filters.max_area),
        "radius": _param(filters.radius_km),
        "max_price_per_sqm": _param(filters.max_price_per_sqm),
    }
    return {k: v for k, v in params.items() if v}


def parse_listings(records: Iterable[dict[str, Any]]) -> list[Listing]:
    return [Listing.model_validate(record) for record in records]


def matches_filter(listing: Listing, filters: ListingFilter) -> bool:
    """Client-side check of the numeric filters.

    Listings whose price or area could not be parsed only pass filters that
    do not constrain that value.
    """
    price = listing.price_value
    area = listing.area_value

    if filters.min_price is not None and price < filters.min_price:
        return False
    if filters.max_price is not None and (price <= 0 or price > filters.max_price):
        return False
    if filters.min_area is not None and area < filters.min_area:
        return False
    if filters.max_area is not None and (area <= 0 or area > filters.max_area):
        return False
    if filters.max_price_per_sqm is not None:
        per_sqm = listing.price_per_sqm
        if per_sqm is None or per_sqm > filters.max_price_per_sqm:
            return False
    return True


def filter_listings(listings: Iterable[Listing], filters: ListingFilter) -> list[Listing]:
    return [listing for listing in listings if matches_filter(listing, filters)]


def calculate_listing_cashflow(
    listing: Listing,
    city: str,
    settings: CitySettings,
    equity: float = 10000.0,
    annual_cost_rate: float = 0.015,
) -> Optional[int]:
    """Quick monthly cashflow estimate shown on a listing card.

    Rent from the city rate, an annuity loan on price minus ``equity`` at the
    default interest and repayment rates, and the default non-apportionable
    costs, rounded to whole euros.

    Returns:
        None when the listing's price or area could not be parsed.
    """
    price = listing.price_value
    area = listing.area_value
    if price <= 0 or area <= 0:
        return None

    defaults = settings.get_loan_defaults()
    rent = estimate_monthly_rent(area, settings.get_rent_rate(city))
    annuity = calculate_annuity_from_repayment_rate(
        max(0.0, price - equity), defaults.interest_rate, defaults.repayment_rate
    )
    cost = default_non_apportionable_cost(price, annual_cost_rate)
    return round_to_euro(calculate_monthly_cashflow(rent, annuity, cost))


def format_cashflow_label(cashflow: int | float) -> str:
    """Card label, e.g. ``"Cashflow +1.234 €"`` or ``"Cashflow -225 €"``."""
    return f"Cashflow {format_signed_currency(cashflow)}"


def cashflow_tone(cashflow: int | float) -> str:
    return "positive" if is_positive_cashflow(cashflow) else "negative"


def sort_listings(
    listings: Sequence[Listing],
    key: SortKey = "price",
    descending: bool = False,
    cashflow_of: Optional[Callable[[Listing], Optional[float]]] = None,
) -> list[Listing]:
    """Sort listings; those without a value for ``key`` always go last.

    Args:
        listings: Listings to sort
        key: Sort criterion
        descending: Largest first
        cashflow_of: Cashflow lookup, required for ``key="cashflow"``
    """
    getters: dict[str, Callable[[Listing], Optional[float]]] = {
        "price": lambda item: item.price_value or None,
        "area": lambda item: item.area_value or None,
        "price_per_sqm": lambda item: item.price_per_sqm,
    }
    if key == "cashflow":
        if cashflow_of is None:
            raise ValueError("sorting by cashflow needs a cashflow_of callable")
        getter = cashflow_of
    else:
        getter = getters[key]

    valued = [(getter(listing), listing) for listing in listings]
    present = [(value, item) for value, item in valued if value is not None]
    missing = [item for value, item in valued if value is None]
    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [item for _, item in present] + missing
