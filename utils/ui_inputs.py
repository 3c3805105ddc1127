"""Shared UI input parsing helpers used across Streamlit pages."""

from __future__ import annotations

import re
from typing import List

import streamlit as st

_SEPARATORS = re.compile(r"[;\n]+")


def parse_locale_number(token: str) -> float:
    """Parse a number typed with either ``.`` or ``,`` as decimal mark.

    Spaces (including non-breaking ones) are treated as thousands separators, so
    ``"1 200 000"`` and ``"1,10"`` both parse.
    """

    cleaned = token.replace(" ", "").replace("\u00a0", "").replace("\u202f", "")
    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(",", "")
    else:
        cleaned = cleaned.replace(",", ".")
    return float(cleaned)


def parse_numeric_series(label: str, raw_text: str) -> List[float]:
    """Parse semicolon/newline separated numbers for form inputs with consistent errors.

    Raises ``ValueError`` after surfacing the message with ``st.error`` so every
    page reports bad entries the same way.
    """

    tokens = [token.strip() for token in _SEPARATORS.split(raw_text) if token.strip()]
    series: List[float] = []
    for token in tokens:
        try:
            series.append(parse_locale_number(token))
        except ValueError:
            message = f"{label} contains a non-numeric entry: '{token}'"
            st.error(message)
            raise ValueError(message)
    return series
