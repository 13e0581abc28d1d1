"""UI helper functions for Streamlit.

Formatting callbacks for de-DE input fields and colored KPI markup.
"""

from __future__ import annotations

import streamlit as st

from immofind.core.formatting import PLACEHOLDER, format_currency, format_thousands
from immofind.domain.calculator.cashflow import is_positive_cashflow

POSITIVE_COLOR = "#16a34a"
NEGATIVE_COLOR = "#dc2626"


def regroup_input(key: str) -> None:
    """``on_change`` callback: re-group the digits typed into a money field."""
    st.session_state[key] = format_thousands(st.session_state.get(key, ""))


def cashflow_html(value: float | None) -> str:
    """Cashflow in green (break-even or better) or red."""
    if value is None:
        return f"<span>{PLACEHOLDER}</span>"
    color = POSITIVE_COLOR if is_positive_cashflow(value) else NEGATIVE_COLOR
    return f"<span style='color: {color}; font-weight: 600;'>{format_currency(value)}</span>"
