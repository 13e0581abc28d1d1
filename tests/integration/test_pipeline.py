"""Pipeline tests: settings store -> calculator and search page flows."""

import pytest

from immofind.application.services.financing import FinancingCalculator, FinancingForm
from immofind.application.services.listings import (
    calculate_listing_cashflow,
    filter_listings,
    sort_listings,
)
from immofind.application.services.settings_store import SettingsStore
from immofind.domain.models.listing import ListingFilter


def test_rent_rate_change_reaches_calculator(settings_path, app_settings):
    """A saved rent rate is used by the next calculation."""
    store = SettingsStore(settings_path)
    form = FinancingForm(
        purchase_price="300.000", square_meters="100", down_payment="60.000",
        interest_rate="2", repayment_rate="2",
    )

    before = FinancingCalculator(store.snapshot, app_settings).calculate_form(form)
    store.set_rent_rate("Dresden", 11.0)
    after = FinancingCalculator(store.snapshot, app_settings).calculate_form(form)

    assert before.monthly_cashflow == pytest.approx(-225.0)
    assert after.monthly_cashflow == pytest.approx(1100 - 800 - 375)


def test_loan_defaults_change_listing_cashflow(settings_path, sample_listings):
    store = SettingsStore(settings_path)
    listing = sample_listings[0]
    assert calculate_listing_cashflow(listing, "Dresden", store.snapshot) == -392

    store.set_loan_default("interest_rate_pct", 3.0)
    # 290 000 € × 5 % / 12 = 1 208,33 €
    assert calculate_listing_cashflow(listing, "Dresden", store.snapshot) == -633

    reloaded = SettingsStore(settings_path)
    assert calculate_listing_cashflow(listing, "Dresden", reloaded.snapshot) == -633


def test_search_results_flow(sample_listings, city_settings):
    """Filter then sort by cashflow, as the search page does."""
    visible = filter_listings(sample_listings, ListingFilter(max_price=400000))
    ranked = sort_listings(
        visible,
        "cashflow",
        descending=True,
        cashflow_of=lambda item: calculate_listing_cashflow(item, "Dresden", city_settings),
    )
    assert [item.price for item in ranked] == ["189.000 €", "300.000 €"]
