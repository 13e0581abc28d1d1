"""
immofind - Real estate search and financing calculator

Modules:
    - core: Number formatting, settings, logging and exceptions
    - domain: Pydantic data models and the loan, cashflow, rent and return engines
    - application: Settings store, financing calculator and listing services
    - ui: Streamlit pages and session state
"""

__version__ = "1.4.0"
