"""Session state management for the Streamlit app.

Provides a centralized interface for Streamlit session state, including the
authority tags of the linked loan fields.
"""

from __future__ import annotations

from typing import Any, TypeVar

import streamlit as st

from immofind.application.services.settings_store import SettingsStore
from immofind.domain.calculator.linked_fields import (
    AnnuityTerms,
    LinkedField,
    PrincipalTerms,
)
from immofind.domain.models.city_settings import CitySettings

T = TypeVar("T")


def get_state(key: str, default: T) -> T:
    """Get a value from session state, storing the default on first access."""
    if key not in st.session_state:
        st.session_state[key] = default
    return st.session_state[key]


def set_state(key: str, value: Any) -> None:
    st.session_state[key] = value


def init_state(defaults: dict[str, Any]) -> None:
    """Initialize multiple session state values; existing values are kept."""
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


class SessionManager:
    """Manages all session state for the app."""

    DEFAULTS = {
        "page": "Suche",
        "sort_key": "price",
        "sort_descending": False,
        "annuity_terms": AnnuityTerms(),
        "principal_terms": PrincipalTerms(),
    }

    @classmethod
    def initialize(cls) -> None:
        init_state(cls.DEFAULTS)
        # Mutable defaults are created per session
        init_state({"listings": []})
        if "settings_store" not in st.session_state:
            st.session_state["settings_store"] = SettingsStore()
            annuity = AnnuityTerms(
                repayment_rate=st.session_state["settings_store"].get_loan_defaults().repayment_rate
            )
            set_state("annuity_terms", annuity)

    @classmethod
    def get_store(cls) -> SettingsStore:
        return st.session_state["settings_store"]

    @classmethod
    def get_city_settings(cls) -> CitySettings:
        """Current settings snapshot, read fresh on every rerun."""
        return cls.get_store().snapshot

    @classmethod
    def get_annuity_terms(cls) -> AnnuityTerms:
        return get_state("annuity_terms", AnnuityTerms())

    @classmethod
    def edit_annuity_terms(cls, field_name: LinkedField, value: float | None) -> None:
        set_state("annuity_terms", cls.get_annuity_terms().edit(field_name, value))

    @classmethod
    def recompute_annuity_terms(cls, principal: float, annual_interest_rate: float) -> AnnuityTerms:
        terms = cls.get_annuity_terms().recompute(principal, annual_interest_rate)
        set_state("annuity_terms", terms)
        return terms

    @classmethod
    def get_principal_terms(cls) -> PrincipalTerms:
        return get_state("principal_terms", PrincipalTerms())

    @classmethod
    def edit_principal_terms(cls, field_name: LinkedField, value: float | None) -> None:
        set_state("principal_terms", cls.get_principal_terms().edit(field_name, value))

    @classmethod
    def recompute_principal_terms(cls, principal: float) -> PrincipalTerms:
        terms = cls.get_principal_terms().recompute(principal)
        set_state("principal_terms", terms)
        return terms
