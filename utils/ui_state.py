"""Shared UI helpers for session-scoped parameters and results."""

from __future__ import annotations

from typing import Optional, Tuple

import streamlit as st

from services.valuation_core import ParameterSet, ValuationConfig, ValuationEngine, ValuationResult

PARAMS_SESSION_KEY = "latest_parameter_set"
RESULT_SESSION_KEY = "latest_valuation_result"
CACHE_KEY_SESSION_KEY = "latest_valuation_cache_key"
EVALUATION_COUNT_KEY = "valuation_evaluations"


def evaluate_cached(params: ParameterSet, config: ValuationConfig) -> ValuationResult:
    """Evaluate ``params`` unless the session already holds a result for the same inputs.

    The cache holds only the latest parameter set; any field change triggers a
    full re-evaluation and replaces the stored result.
    """

    cache_key = (params, config)
    if st.session_state.get(CACHE_KEY_SESSION_KEY) == cache_key and RESULT_SESSION_KEY in st.session_state:
        return st.session_state[RESULT_SESSION_KEY]

    result = ValuationEngine(config).evaluate(params)
    st.session_state[CACHE_KEY_SESSION_KEY] = cache_key
    st.session_state[PARAMS_SESSION_KEY] = params
    st.session_state[RESULT_SESSION_KEY] = result
    st.session_state[EVALUATION_COUNT_KEY] = st.session_state.get(EVALUATION_COUNT_KEY, 0) + 1
    return result


def get_latest_valuation() -> Tuple[Optional[ParameterSet], Optional[ValuationResult]]:
    """Return the parameter set and result from the calculator page, if any."""

    return st.session_state.get(PARAMS_SESSION_KEY), st.session_state.get(RESULT_SESSION_KEY)


def clear_latest_valuation() -> None:
    for key in (PARAMS_SESSION_KEY, RESULT_SESSION_KEY, CACHE_KEY_SESSION_KEY):
        st.session_state.pop(key, None)
