"""Locale-aware number formatting for display and report output.

Only separators, symbol placement and percent spacing vary by locale. All
output stays within latin-1 so the PDF core fonts can render it; the
non-breaking space (U+00A0) used by Nordic locales is part of that range.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

NBSP = "\u00a0"


@dataclass(frozen=True)
class NumberStyle:
    group: str
    decimal: str
    currency_after: bool
    percent_space: bool


_STYLES: Dict[str, NumberStyle] = {
    "nb-NO": NumberStyle(group=NBSP, decimal=",", currency_after=True, percent_space=True),
    "sv-SE": NumberStyle(group=NBSP, decimal=",", currency_after=True, percent_space=True),
    "de-DE": NumberStyle(group=".", decimal=",", currency_after=True, percent_space=True),
    "en-US": NumberStyle(group=",", decimal=".", currency_after=False, percent_space=False),
    "en-GB": NumberStyle(group=",", decimal=".", currency_after=False, percent_space=False),
}
_FALLBACK_LOCALE = "en-US"

_CURRENCY_SYMBOLS: Dict[str, Dict[str, str]] = {
    "NOK": {"nb-NO": "kr"},
    "SEK": {"sv-SE": "kr"},
    "EUR": {"de-DE": "EUR"},
}


def resolve_style(locale: Optional[str]) -> NumberStyle:
    if locale in _STYLES:
        return _STYLES[locale]
    return _STYLES[_FALLBACK_LOCALE]


def _group(value: float, digits: int, style: NumberStyle) -> str:
    text = f"{abs(value):,.{digits}f}"
    integer, _, fraction = text.partition(".")
    integer = integer.replace(",", style.group)
    sign = "-" if value < 0 and float(text.replace(",", "")) != 0 else ""
    if fraction:
        return f"{sign}{integer}{style.decimal}{fraction}"
    return f"{sign}{integer}"


def format_number(value: float, locale: Optional[str] = None, digits: int = 0) -> str:
    """Format ``value`` with locale grouping; ``digits`` decimals (default whole units)."""

    if value is None or not math.isfinite(value):
        return "-"
    return _group(value, digits, resolve_style(locale))


def format_currency(value: float, locale: Optional[str] = None, currency: str = "NOK") -> str:
    """Format a whole-unit currency amount, e.g. ``1 200 000 kr`` or ``NOK 1,200,000``."""

    if value is None or not math.isfinite(value):
        return "-"
    style = resolve_style(locale)
    symbol = _CURRENCY_SYMBOLS.get(currency, {}).get(locale or "", currency)
    amount = _group(round(value), 0, style)
    if style.currency_after:
        return f"{amount}{NBSP}{symbol}"
    return f"{symbol}{NBSP}{amount}"


def format_percent(fraction: Optional[float], locale: Optional[str] = None, digits: int = 1) -> str:
    """Format a fraction (``0.153``) as a percentage (``15,3 %`` / ``15.3%``)."""

    if fraction is None or not math.isfinite(fraction):
        return "-"
    style = resolve_style(locale)
    number = _group(fraction * 100.0, digits, style)
    return f"{number}{NBSP}%" if style.percent_space else f"{number}%"


def format_years(years: float, locale: Optional[str] = None) -> str:
    return f"{format_number(years, locale, digits=1)} years"
