"""Reusable KPI helpers for Streamlit pages."""

from dataclasses import dataclass
from typing import List, Optional

import streamlit as st

from frontend.ui.rendering import MetricSpec, render_metrics
from services.valuation_core import ParameterSet, ValuationResult
from utils.economics import PAYBACK_NEVER, PAYBACK_NOT_APPLICABLE
from utils.formatting import format_currency, format_percent, format_years


@dataclass
class KPIResults:
    gross_value: float
    acron_fee: float
    net_value: float
    payback_years: float
    payback_status: str
    roi: float
    investment_amount: float
    estimate_share: Optional[float]


def compute_kpis(params: ParameterSet, result: ValuationResult) -> KPIResults:
    """Derive headline KPIs from a valuation for reuse across pages."""

    shares = result.stream_shares()
    estimate_share = None
    if shares is not None:
        estimate_share = sum(shares[s.key] for s in result.streams() if s.is_estimate)
    return KPIResults(
        gross_value=result.gross_value,
        acron_fee=result.acron_fee,
        net_value=result.net_value,
        payback_years=result.payback_years,
        payback_status=result.payback_status,
        roi=result.roi,
        investment_amount=params.investment_amount,
        estimate_share=estimate_share,
    )


def payback_label(years: float, status: str, locale: Optional[str] = None) -> str:
    """Render the payback figure, spelling out the cases where ``0`` is a sentinel."""

    if status == PAYBACK_NOT_APPLICABLE:
        return "Not applicable"
    if status == PAYBACK_NEVER:
        return "Does not pay back"
    return format_years(years, locale)


def build_metric_specs(kpis: KPIResults, locale: Optional[str], currency: str) -> List[MetricSpec]:
    estimate_caption = None
    if kpis.estimate_share:
        estimate_caption = f"{format_percent(kpis.estimate_share, locale)} of gross from estimates"
    return [
        MetricSpec(
            "Gross value / year",
            format_currency(kpis.gross_value, locale, currency),
            help="Sum of all included revenue streams before the Acron fee.",
            caption=estimate_caption,
        ),
        MetricSpec(
            "Acron fee / year",
            format_currency(kpis.acron_fee, locale, currency),
            help="Operator fee deducted from the gross value.",
        ),
        MetricSpec(
            "Net to building owner / year",
            format_currency(kpis.net_value, locale, currency),
            help="Gross value minus the Acron fee.",
        ),
        MetricSpec(
            "Payback time",
            payback_label(kpis.payback_years, kpis.payback_status, locale),
            help="Investment divided by net annual value.",
        ),
        MetricSpec(
            "Annual ROI",
            format_percent(kpis.roi, locale) if kpis.investment_amount > 0 else "Not applicable",
            help="Net annual value divided by investment.",
        ),
    ]


def render_primary_metrics(kpis: KPIResults, locale: Optional[str], currency: str) -> None:
    """Render the top-level KPI cards shown after each evaluation."""

    specs = build_metric_specs(kpis, locale, currency)
    render_metrics(st.columns(len(specs)), specs)
