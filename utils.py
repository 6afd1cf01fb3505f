# utils.py
import logging

import streamlit as st

from config import (
    BITCOIN_GROWTH_RATE_OPTIONS,
    DEFAULT_ANNUAL_CONTRIBUTION,
    DEFAULT_ANNUAL_EXPENSE,
    DEFAULT_CURRENT_AGE,
    DEFAULT_LIFE_EXPECTANCY,
    DEFAULT_WITHDRAWAL_RATE,
    MODEL_LIFE_EXPECTANCY,
    PROJECTION_MODELS,
)


def initialize_session_state():
    """Initialize the Streamlit session state variables.

    Examples
    --------
    >>> initialize_session_state()
    >>> st.session_state.setdefault("extra_key", "default")
    """
    st.session_state.setdefault("last_inputs", {})
    st.session_state.setdefault("calculator_expanded", True)
    st.session_state.setdefault("results_expanded", False)
    st.session_state.setdefault("results_available", False)
    st.session_state.setdefault("history_summary", None)


QUERY_PARAM_DEFAULTS = {
    "current_age": DEFAULT_CURRENT_AGE,
    "life_expectancy": DEFAULT_LIFE_EXPECTANCY,
    "annual_expense": DEFAULT_ANNUAL_EXPENSE,
    "bitcoin_growth_rate_label": next(iter(BITCOIN_GROWTH_RATE_OPTIONS)),
    "annual_contribution": DEFAULT_ANNUAL_CONTRIBUTION,
    "projection_model": MODEL_LIFE_EXPECTANCY,
    "withdrawal_rate": DEFAULT_WITHDRAWAL_RATE,
}

_ALLOWED_CHOICES = {
    "bitcoin_growth_rate_label": tuple(BITCOIN_GROWTH_RATE_OPTIONS),
    "projection_model": PROJECTION_MODELS,
}


def update_query_params():
    """Mirror the calculator inputs from session state into the URL."""
    params = {
        key: str(st.session_state[key])
        for key in QUERY_PARAM_DEFAULTS
        if key in st.session_state
    }
    st.query_params.update(params)


def load_from_query_params():
    """Load calculator inputs from the URL into session state.

    Returns:
        tuple: (inputs, all_present) where inputs maps every calculator key to
            a typed value and all_present tells whether every key came from the
            URL with a usable value.
    """
    raw = st.query_params.to_dict()
    loaded = {}
    all_present = True

    for key, default in QUERY_PARAM_DEFAULTS.items():
        value = raw.get(key)
        if value is None:
            all_present = False
            loaded[key] = default
            continue
        try:
            parsed = type(default)(value)
        except ValueError:
            logging.warning(f"Ignoring invalid query parameter {key}={value!r}")
            all_present = False
            loaded[key] = default
            continue
        if key in _ALLOWED_CHOICES and parsed not in _ALLOWED_CHOICES[key]:
            all_present = False
            parsed = default
        loaded[key] = parsed

    for key, value in loaded.items():
        st.session_state[key] = value

    return loaded, all_present


def fmt_money(x: float) -> str:
    """Format currency for markdown without triggering LaTeX parsing."""
    return f"\\${x:,.2f}"


def fmt_btc(x) -> str:
    if x is None:
        return "price unavailable"
    return f"₿{x:,.4f}"
