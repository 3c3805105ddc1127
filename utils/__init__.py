"""Utility helpers shared across the Streamlit pages and the API.

Modules that depend on ``services.valuation_core`` (config, flags, validation,
sweeps, ui_state) are imported directly by callers, not re-exported here.
"""

from utils.formatting import format_currency, format_number, format_percent, format_years
from utils.ui_inputs import parse_numeric_series

__all__ = [
    "format_currency",
    "format_number",
    "format_percent",
    "format_years",
    "parse_numeric_series",
]
