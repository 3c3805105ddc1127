"""Economic helpers shared across the valuation engine, app and API entrypoints.

The functions here cover the aggregation stage of a valuation: fee deduction,
payback and return ratios, and share-of-gross percentages. They never raise on
undefined ratios; callers receive a ``0`` sentinel (payback, ROI) or ``None``
(shares) instead.
"""
from __future__ import annotations

import math
from typing import Mapping, Optional

DEFAULT_FEE_RATE = 0.15
# Unverified industry-typical assumptions for the two estimate streams.
DEFAULT_PEAK_SHAVING_RATE_PER_KW = 42.4
DEFAULT_SPOT_ARBITRAGE_RATE_PER_KWH = 23.7
DEFAULT_USABLE_CAPACITY_FRACTION = 0.80

PAYBACK_YEARS = "years"
PAYBACK_NOT_APPLICABLE = "not_applicable"
PAYBACK_NEVER = "never"
PAYBACK_STATUSES = (PAYBACK_YEARS, PAYBACK_NOT_APPLICABLE, PAYBACK_NEVER)


def pct_to_fraction(value_pct: float) -> float:
    """Convert a ``[0, 100]`` percentage into a fraction at the point of use."""

    return value_pct / 100.0


def compute_fee(gross_value: float, fee_rate: float) -> float:
    """Return the operator fee charged on the gross annual value."""

    return gross_value * fee_rate


def compute_payback_years(investment_amount: float, net_value: float) -> float:
    """Return simple payback in years, or ``0`` when payback is undefined.

    ``0`` is a sentinel, not "pays back instantly": it is returned both when no
    investment is entered and when the net annual value is zero or negative.
    Use :func:`resolve_payback_status` to tell the two apart.
    """

    if investment_amount > 0 and net_value > 0:
        return investment_amount / net_value
    return 0.0


def compute_roi(net_value: float, investment_amount: float) -> float:
    """Return the annual return on investment as a fraction (``0`` without investment)."""

    if investment_amount > 0:
        return net_value / investment_amount
    return 0.0


def resolve_payback_status(investment_amount: float, net_value: float) -> str:
    """Classify the payback figure as ``years``, ``not_applicable`` or ``never``."""

    if investment_amount <= 0:
        return PAYBACK_NOT_APPLICABLE
    if net_value <= 0:
        return PAYBACK_NEVER
    return PAYBACK_YEARS


def share_of_gross(value: float, gross_value: float) -> Optional[float]:
    """Return ``value / gross_value`` or ``None`` when the ratio is undefined."""

    if gross_value == 0 or not math.isfinite(gross_value):
        return None
    return value / gross_value


def shares_of_gross(values: Mapping[str, float], gross_value: float) -> Optional[dict[str, float]]:
    """Return per-key shares of ``gross_value``; ``None`` when gross is zero."""

    if share_of_gross(0.0, gross_value) is None:
        return None
    return {key: value / gross_value for key, value in values.items()}
