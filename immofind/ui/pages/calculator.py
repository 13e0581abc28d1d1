"""Financing calculator page."""

from __future__ import annotations

import streamlit as st

from immofind.application.services.financing import FinancingCalculator, FinancingForm, FinancingResult
from immofind.core.formatting import format_currency, format_decimal, parse_localized_number
from immofind.core.settings import get_settings
from immofind.domain.calculator.linked_fields import LinkedField
from immofind.domain.models.loan import LoanType
from immofind.ui.helpers import cashflow_html, regroup_input
from immofind.ui.state import SessionManager

LOAN_TYPE_LABELS = {
    "Annuitätendarlehen": LoanType.ANNUITY,
    "Tilgungsdarlehen": LoanType.FIXED_PRINCIPAL,
}


def _money_input(label: str, key: str) -> str:
    return st.text_input(label, key=key, on_change=regroup_input, args=(key,))


def _on_linked_edit(widget_key: str, field_name: LinkedField, scale: float = 1.0) -> None:
    value = parse_localized_number(st.session_state.get(widget_key, "")) / scale
    if field_name in (LinkedField.REPAYMENT_RATE, LinkedField.MONTHLY_ANNUITY):
        SessionManager.edit_annuity_terms(field_name, value or None)
    else:
        SessionManager.edit_principal_terms(field_name, value or None)


def _render_annuity_terms(principal: float, interest_rate: float) -> dict[str, str]:
    terms = SessionManager.recompute_annuity_terms(principal, interest_rate)
    if "calc_repayment" not in st.session_state and terms.repayment_rate is not None:
        st.session_state["calc_repayment"] = format_decimal(terms.repayment_rate * 100.0, 2)
    # Only the derived field is written back into its widget
    if terms.last_edited is LinkedField.REPAYMENT_RATE:
        st.session_state["calc_annuity"] = format_decimal(terms.monthly_annuity, 2) if terms.monthly_annuity else ""
    else:
        st.session_state["calc_repayment"] = (
            format_decimal(terms.repayment_rate * 100.0, 2) if terms.repayment_rate is not None else ""
        )

    c1, c2 = st.columns(2)
    c1.text_input(
        "Tilgungssatz (%)", key="calc_repayment",
        on_change=_on_linked_edit, args=("calc_repayment", LinkedField.REPAYMENT_RATE, 100.0),
    )
    c2.text_input(
        "Monatliche Annuität (€)", key="calc_annuity",
        on_change=_on_linked_edit, args=("calc_annuity", LinkedField.MONTHLY_ANNUITY),
    )
    if terms.last_edited is LinkedField.REPAYMENT_RATE:
        return {"repayment_rate": st.session_state["calc_repayment"]}
    return {"monthly_annuity": st.session_state["calc_annuity"]}


def _render_principal_terms(principal: float) -> dict[str, str]:
    terms = SessionManager.recompute_principal_terms(principal)
    if terms.last_edited is LinkedField.TERM_YEARS:
        st.session_state["calc_principal"] = format_decimal(terms.monthly_principal, 2) if terms.monthly_principal else ""
    else:
        st.session_state["calc_term"] = format_decimal(terms.term_years, 1) if terms.term_years else ""

    c1, c2 = st.columns(2)
    c1.text_input(
        "Tilgung pro Monat (€)", key="calc_principal",
        on_change=_on_linked_edit, args=("calc_principal", LinkedField.MONTHLY_PRINCIPAL),
    )
    c2.text_input(
        "Laufzeit (Jahre)", key="calc_term",
        on_change=_on_linked_edit, args=("calc_term", LinkedField.TERM_YEARS),
    )
    if terms.last_edited is LinkedField.MONTHLY_PRINCIPAL:
        return {"monthly_principal": st.session_state["calc_principal"], "loan_term": ""}
    return {"loan_term": st.session_state["calc_term"]}


def render_form() -> FinancingForm:
    settings = SessionManager.get_city_settings()
    app_settings = get_settings()

    c1, c2, c3, c4 = st.columns(4)
    square_meters = c1.text_input("Quadratmeter", key="calc_sqm")
    with c2:
        purchase_price = _money_input("Kaufpreis (€)", "calc_price")
    with c3:
        non_apportionable = _money_input("Nicht umlagefähig (€/Monat)", "calc_non_apportionable")
    with c4:
        apportionable = _money_input("Umlagefähig (€/Monat)", "calc_apportionable")

    c1, c2, c3, c4 = st.columns(4)
    with c1:
        down_payment = _money_input("Eigenkapital (€)", "calc_equity")
    city = c2.selectbox("Stadt", settings.city_names, key="calc_city")
    with c3:
        manual_rent = _money_input("Manueller Mietpreis (€)", "calc_manual_rent")
    interest_rate = c4.text_input(
        "Zinssatz (%)", value=format_decimal(app_settings.default_interest_rate_pct, 1), key="calc_interest"
    )

    c1, c2 = st.columns(2)
    with c1:
        additional_costs = _money_input("Nebenkosten (Notar, Grunderwerbsteuer, etc.)", "calc_additional")
    loan_label = c2.radio("Darlehensart", list(LOAN_TYPE_LABELS), horizontal=True, key="calc_loan_type")
    loan_type = LOAN_TYPE_LABELS[loan_label]

    principal = (
        parse_localized_number(purchase_price)
        - parse_localized_number(down_payment)
        + parse_localized_number(additional_costs)
    )
    rate = parse_localized_number(interest_rate) / 100.0

    linked: dict[str, str] = {"loan_term": str(app_settings.default_loan_term_years)}
    if loan_type is LoanType.ANNUITY:
        linked.update(_render_annuity_terms(principal, rate))
        linked["loan_term"] = st.text_input(
            "Laufzeit (Jahre)", value=str(app_settings.default_loan_term_years), key="calc_annuity_term"
        )
    else:
        linked.update(_render_principal_terms(principal))

    c1, c2 = st.columns(2)
    holding_years = c1.text_input("Haltedauer (Jahre)", key="calc_holding")
    with c2:
        sale_price = _money_input("Verkaufspreis (€)", "calc_sale_price")

    return FinancingForm(
        purchase_price=purchase_price,
        square_meters=square_meters,
        non_apportionable=non_apportionable,
        apportionable=apportionable,
        down_payment=down_payment,
        manual_rent=manual_rent,
        city=city,
        interest_rate=interest_rate,
        additional_costs=additional_costs,
        loan_type=loan_type,
        holding_years=holding_years,
        sale_price=sale_price,
        **linked,
    )


def render_results(result: FinancingResult) -> None:
    left, right = st.columns(2)
    with left:
        st.subheader("Finanzierungsübersicht")
        for label, value in result.summary().items():
            if label == "Cashflow" and result.schedule.is_computable:
                st.markdown(f"**{label}:** {cashflow_html(result.monthly_cashflow)}", unsafe_allow_html=True)
            else:
                st.markdown(f"**{label}:** {value}")
        if result.remaining_debt_at_sale is not None:
            st.caption(f"Restschuld bei Verkauf: {format_currency(result.remaining_debt_at_sale)}")

    with right:
        st.subheader(f"Tilgungsplan (erste {result.preview_months} Monate)")
        if result.schedule.is_computable:
            frame = result.schedule.to_frame().head(result.preview_months)
            st.dataframe(frame, hide_index=True, use_container_width=True)
            with st.expander("Jahresübersicht"):
                st.dataframe(result.schedule.to_yearly_frame(), hide_index=True, use_container_width=True)
        else:
            st.info("Für einen Tilgungsplan fehlen noch Angaben (Zinssatz, Laufzeit oder Tilgung).")


def render_calculator_page() -> None:
    st.title("Immobilien-Rechner")
    st.caption("Berechnen Sie Ihre Finanzierung und monatlichen Raten")

    form = render_form()
    calculator = FinancingCalculator(SessionManager.get_city_settings())
    result = calculator.calculate_form(form)
    if result is None:
        st.info("Geben Sie Kaufpreis und Eigenkapital ein, um die Finanzierung zu berechnen.")
        return
    render_results(result)
