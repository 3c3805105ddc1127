"""Stream provenance tags and limitation notes."""

from __future__ import annotations

from typing import Dict, List

from services.valuation_core import (
    STREAM_FLEXIBILITY,
    STREAM_PEAK_SHAVING,
    STREAM_SOLAR,
    STREAM_SPOT_ARBITRAGE,
    ParameterSet,
    ReferenceScaledDetail,
    ValuationResult,
)
from utils.economics import PAYBACK_NEVER, PAYBACK_NOT_APPLICABLE

TAG_VERIFIED = "verified"
TAG_USER_SUPPLIED = "user_supplied"
TAG_ESTIMATE = "estimate"

TAG_DEFINITIONS: Dict[str, Dict[str, str]] = {
    TAG_VERIFIED: {
        "label": "Reference rate",
        "suffix": "",
        "meaning": "Scaled from the per-kW yield of a reference installation.",
    },
    TAG_USER_SUPPLIED: {
        "label": "User supplied",
        "suffix": " (user supplied)",
        "meaning": "Derived from prices and rates entered in the calculator.",
    },
    TAG_ESTIMATE: {
        "label": "Estimate",
        "suffix": " (ESTIMATE)",
        "meaning": "Industry-typical rate, not verified for this site; may vary significantly.",
    },
}


def stream_tag(stream_key: str, result: ValuationResult) -> str:
    """Return the provenance tag for one revenue stream."""

    if stream_key in (STREAM_PEAK_SHAVING, STREAM_SPOT_ARBITRAGE):
        return TAG_ESTIMATE
    if stream_key == STREAM_FLEXIBILITY and isinstance(result.flexibility_detail, ReferenceScaledDetail):
        return TAG_VERIFIED
    if stream_key in (STREAM_FLEXIBILITY, STREAM_SOLAR):
        return TAG_USER_SUPPLIED
    raise KeyError(stream_key)


def stream_display_label(label: str, stream_key: str, result: ValuationResult) -> str:
    return label + TAG_DEFINITIONS[stream_tag(stream_key, result)]["suffix"]


def build_limitation_notes(params: ParameterSet, result: ValuationResult) -> List[str]:
    """Translate the active assumptions into short notes for the UI and report."""

    notes: List[str] = []
    if isinstance(result.flexibility_detail, ReferenceScaledDetail):
        ref = result.flexibility_detail.reference
        notes.append(
            f"Flexibility income is scaled from the yield of {ref.name}"
            f" ({result.flexibility_detail.rate_per_kw_year:,.0f} per kW per year)."
        )
        if not ref.documented:
            notes.append(
                "The reference installation figures are illustrative, derived from the rate;"
                " they are not measured results of a specific site."
            )
    else:
        notes.append("Flexibility income is calculated from the entered prices and battery power.")
    notes.append(
        "Actual income may vary with local grid conditions, market situation and battery availability."
    )
    if params.include_estimates:
        notes.append("Values marked ESTIMATE are not verified and may vary significantly.")
    if params.include_solar and params.self_consumption_delta_pct < 0:
        notes.append(
            "Self-consumption with battery is set below self-consumption without battery,"
            " which makes the solar utilization value negative."
        )
    if result.payback_status == PAYBACK_NOT_APPLICABLE:
        notes.append("No investment entered: payback time and ROI are not applicable.")
    elif result.payback_status == PAYBACK_NEVER:
        notes.append("Net annual value is zero or negative: the investment does not pay back.")
    notes.append("Contact Acron for an accurate project assessment.")
    return notes
