"""Search page: filters, listing cards with cashflow chips."""

from __future__ import annotations

import json

import streamlit as st
from pydantic import ValidationError

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
from immofind.core.formatting import parse_localized_number
from immofind.core.logging import get_logger
from immofind.core.settings import get_settings
from immofind.domain.models.listing import Listing, ListingFilter
from immofind.ui.helpers import NEGATIVE_COLOR, POSITIVE_COLOR
from immofind.ui.state import SessionManager, get_state, set_state

log = get_logger(__name__)

SORT_LABELS = {
    "Preis": "price",
    "Fläche": "area",
    "Preis pro m²": "price_per_sqm",
    "Cashflow": "cashflow",
}


def _optional_number(raw: str) -> float | None:
    value = parse_localized_number(raw)
    return value if value > 0 else None


def render_filters() -> ListingFilter:
    settings = SessionManager.get_city_settings()
    c1, c2, c3 = st.columns(3)
    city = c1.selectbox("Stadt", settings.city_names, key="search_city")
    min_price = c2.text_input("Mindestpreis (€)", key="search_min_price")
    max_price = c3.text_input("Maximaler Preis (€)", key="search_max_price")

    c1, c2, c3 = st.columns(3)
    min_area = c1.text_input("Mindest-Quadratmeter", key="search_min_area")
    radius = c2.text_input("Umkreis (km)", key="search_radius")
    max_per_sqm = c3.text_input("Max. Preis pro m² (€)", key="search_max_per_sqm")

    return ListingFilter(
        city=city,
        min_price=_optional_number(min_price),
        max_price=_optional_number(max_price),
        min_area=_optional_number(min_area),
        radius_km=_optional_number(radius),
        max_price_per_sqm=_optional_number(max_per_sqm),
    )


def render_listing_card(listing: Listing, cashflow: int | None) -> None:
    with st.container(border=True):
        st.markdown(f"**{listing.title or listing.location}**")
        st.caption(f"{listing.price} · {listing.area} · {listing.location}")
        if cashflow is not None:
            color = POSITIVE_COLOR if cashflow_tone(cashflow) == "positive" else NEGATIVE_COLOR
            st.markdown(
                f"<span style='background: {color}; color: white; padding: 2px 8px; border-radius: 12px;'>"
                f"{format_cashflow_label(cashflow)}</span>",
                unsafe_allow_html=True,
            )
        if listing.link:
            st.markdown(f"[Zum Inserat]({listing.link})")


def load_listings(file_obj) -> None:
    """Load listing records exported from the listings API."""
    try:
        records = json.load(file_obj)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        log.error("listings_upload_invalid", error=str(e))
        st.error(f"Fehler beim Lesen der Inserate: {e}")
        return
    if not isinstance(records, list):
        st.error("Die Datei muss eine Liste von Inseraten enthalten.")
        return
    try:
        listings = parse_listings(r for r in records if isinstance(r, dict))
    except ValidationError as e:
        log.error("listings_upload_invalid", error=str(e))
        st.error("Die Inserate haben ein unerwartetes Format.")
        return
    set_state("listings", listings)
    log.info("listings_loaded", count=len(listings))


def render_search_page() -> None:
    st.title("ImmoFind")
    st.caption("Finden Sie Ihre perfekte Immobilie mit unseren intelligenten Suchfiltern")

    filters = render_filters()
    app_settings = get_settings()
    try:
        st.caption(f"Anfrage: {build_api_url('listings', build_search_params(filters), app_settings.api_base_url)}")
    except ConfigurationError as e:
        log.error("api_url_invalid", error=str(e))
        st.error(str(e))

    uploaded = st.file_uploader("Inserate laden (JSON)", type=["json"], key="search_upload")
    if uploaded is not None:
        load_listings(uploaded)

    listings: list[Listing] = get_state("listings", [])
    if not listings:
        st.info("Noch keine Inserate geladen.")
        return

    settings = SessionManager.get_city_settings()
    cashflows = {
        id(listing): calculate_listing_cashflow(listing, filters.city, settings, app_settings.default_equity)
        for listing in listings
    }

    c1, c2 = st.columns(2)
    sort_label = c1.selectbox("Sortieren nach", list(SORT_LABELS), key="search_sort")
    descending = c2.toggle("Absteigend", key="search_desc")
    set_state("sort_key", SORT_LABELS[sort_label])

    visible = sort_listings(
        filter_listings(listings, filters),
        key=SORT_LABELS[sort_label],
        descending=descending,
        cashflow_of=lambda listing: cashflows.get(id(listing)),
    )
    st.markdown(f"**{len(visible)} Inserate**")
    for listing in visible:
        render_listing_card(listing, cashflows.get(id(listing)))
