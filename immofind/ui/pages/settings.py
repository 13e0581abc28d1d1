"""Settings page: rent per m² per city and loan defaults."""

from __future__ import annotations

import streamlit as st

from immofind.core.exceptions import ImmoFindError
from immofind.core.formatting import format_decimal, parse_localized_number
from immofind.ui.state import SessionManager


def render_settings_page() -> None:
    st.title("Stadt-Einstellungen")
    st.caption("Verwalten Sie die Mietpreise pro Quadratmeter für verschiedene Städte")

    store = SessionManager.get_store()
    snapshot = store.snapshot

    with st.form("city_rents"):
        entered = {
            city: st.text_input(f"{city} (€/m²)", value=format_decimal(snapshot.get_rent_rate(city), 2))
            for city in snapshot.city_names
        }
        defaults = snapshot.get_loan_defaults()
        c1, c2 = st.columns(2)
        interest = c1.text_input("Zinssatz (%)", value=format_decimal(defaults.interest_rate_pct, 2))
        repayment = c2.text_input("Tilgungssatz (%)", value=format_decimal(defaults.repayment_rate_pct, 2))
        saved = st.form_submit_button("Speichern")

    if saved:
        try:
            for city, raw in entered.items():
                value = parse_localized_number(raw)
                if value > 0 and value != snapshot.get_rent_rate(city):
                    store.set_rent_rate(city, value)
            store.set_loan_default("interest_rate_pct", parse_localized_number(interest))
            store.set_loan_default("repayment_rate_pct", parse_localized_number(repayment))
        except ImmoFindError as e:
            st.error(str(e))
        else:
            st.success("Einstellungen gespeichert")

    if st.button("Zurücksetzen"):
        store.reset_rent_rates()
        st.rerun()
