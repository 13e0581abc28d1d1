"""Main Application Entry Point.

Streamlit shell around the immofind services: search, financing calculator
and city settings.

    streamlit run app.py
"""

import os
import sys

import streamlit as st

# Add project root to path if not present (for running from root)
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from immofind.core.logging import get_logger
from immofind.core.settings import get_settings
from immofind.ui.pages.calculator import render_calculator_page
from immofind.ui.pages.search import render_search_page
from immofind.ui.pages.settings import render_settings_page
from immofind.ui.state import SessionManager, get_state, set_state

log = get_logger(__name__)

PAGES = {
    "Suche": render_search_page,
    "Rechner": render_calculator_page,
    "Einstellungen": render_settings_page,
}


def main() -> None:
    st.set_page_config(page_title="ImmoFind", page_icon="🏠", layout="wide")
    SessionManager.initialize()

    with st.sidebar:
        st.title("ImmoFind")
        pages = list(PAGES)
        page = st.radio("Navigation", pages, index=pages.index(get_state("page", "Suche")))
        set_state("page", page)

    if get_settings().debug_mode:
        with st.sidebar.expander("Debug"):
            store = SessionManager.get_store()
            st.caption(str(store.path))
            st.json(store.snapshot.to_storage())

    log.debug("page_rendered", page=page)
    PAGES[page]()


if __name__ == "__main__":
    main()
