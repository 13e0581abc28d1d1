"""Unit tests for immofind.application.services.listings."""

import pytest

from immofind.application.services.listings import (
    build_api_url,
    build_search_params,
    calculate_listing_cashflow,
    cashflow_tone,
    filter_listings,
    format_cashflow_label,
    parse_listings,
    sort_listings,
)
from immofind.core.exceptions import ConfigurationError
from immofind.domain.models.listing import Listing, ListingFilter


def _prices(listings):
    return [listing.price for listing in listings]


class TestListingCashflow:
    """Tests for the cashflow chip on listing cards."""

    def test_dresden_default(self, sample_listings, city_settings):
        """950 € rent − 966,67 € annuity on 290 000 € − 375 € costs."""
        assert calculate_listing_cashflow(sample_listings[0], "Dresden", city_settings) == -392

    def test_cheap_flat_in_leipzig(self, city_settings):
        listing = Listing(price="60.000 €", area="50 m²")
        # 490 − 50000 × 4 % / 12 − 75 = 248,33
        assert calculate_listing_cashflow(listing, "Leipzig", city_settings) == 248

    def test_unparseable_listing(self, sample_listings, city_settings):
        assert calculate_listing_cashflow(sample_listings[3], "Dresden", city_settings) is None

    def test_follows_settings(self, sample_listings, city_settings):
        richer = city_settings.with_rent_rate("Dresden", 15.0)
        assert calculate_listing_cashflow(sample_listings[0], "Dresden", richer) == 158

    def test_label(self):
        assert format_cashflow_label(-392) == "Cashflow -392 €"
        assert format_cashflow_label(1234) == "Cashflow +1.234 €"
        assert cashflow_tone(0) == "positive"
        assert cashflow_tone(-1) == "negative"


class TestFilterListings:
    """Tests for the client-side filters."""

    def test_no_filters(self, sample_listings):
        assert filter_listings(sample_listings, ListingFilter()) == sample_listings

    def test_max_price(self, sample_listings):
        result = filter_listings(sample_listings, ListingFilter(max_price=300000))
        assert _prices(result) == ["300.000 €", "189.000 €"]

    def test_min_area(self, sample_listings):
        result = filter_listings(sample_listings, ListingFilter(min_area=70))
        assert _prices(result) == ["300.000 €", "450.000 €", "Preis auf Anfrage"]

    def test_max_price_per_sqm(self, sample_listings):
        result = filter_listings(sample_listings, ListingFilter(max_price_per_sqm=3010))
        assert _prices(result) == ["300.000 €"]


class TestSortListings:
    """Tests for sort_listings."""

    def test_price_ascending(self, sample_listings):
        result = sort_listings(sample_listings, "price")
        assert _prices(result) == ["189.000 €", "300.000 €", "450.000 €", "Preis auf Anfrage"]

    def test_missing_values_last_when_descending(self, sample_listings):
        result = sort_listings(sample_listings, "price", descending=True)
        assert _prices(result) == ["450.000 €", "300.000 €", "189.000 €", "Preis auf Anfrage"]

    def test_by_price_per_sqm(self, sample_listings):
        result = sort_listings(sample_listings, "price_per_sqm")
        assert _prices(result)[:2] == ["300.000 €", "189.000 €"]

    def test_by_cashflow(self, sample_listings, city_settings):
        result = sort_listings(
            sample_listings,
            "cashflow",
            descending=True,
            cashflow_of=lambda item: calculate_listing_cashflow(item, "Dresden", city_settings),
        )
        assert _prices(result) == ["189.000 €", "300.000 €", "450.000 €", "Preis auf Anfrage"]

    def test_cashflow_needs_lookup(self, sample_listings):
        with pytest.raises(ValueError):
            sort_listings(sample_listings, "cashflow")


class TestSearchQuery:
    """Tests for the API URL and query parameters."""

    def test_dev_proxy_prefix(self):
        assert build_api_url("search", {"city": "Dresden", "max_price": None}) == "/api/search?city=Dresden"

    def test_absolute_base_url(self):
        url = build_api_url("/search", "?max_price=300000", base_url="https://api.example.org/")
        assert url == "https://api.example.org/search?max_price=300000"

    def test_relative_base_url_rejected(self):
        with pytest.raises(ConfigurationError):
            build_api_url("search", base_url="api.example.org")

    def test_without_query(self):
        assert build_api_url("scrape-rent") == "/api/scrape-rent"

    def test_search_params(self):
        params = build_search_params(ListingFilter(city="Leipzig", max_price=250000, radius_km=10))
        assert params == {"city": "Leipzig", "max_price": "250000", "radius": "10"}

    def test_fractional_params(self):
        params = build_search_params(ListingFilter(min_area=62.5))
        assert params["min_area"] == "62.5"

    def test_parse_listings(self):
        listings = parse_listings([{"price": "300.000 €", "area": "100 m²", "location": "Dresden"}])
        assert listings[0].price_value == 300000
        assert listings[0].link == ""
