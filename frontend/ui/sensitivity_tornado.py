from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Optional

import altair as alt
import pandas as pd

from services.valuation_core import ParameterSet, ValuationConfig, ValuationEngine

IMPACT_METRICS = ("net_value", "gross_value", "roi")


def _scale(field_name: str) -> Callable[[ParameterSet, float], ParameterSet]:
    def _apply(params: ParameterSet, delta_pct: float) -> ParameterSet:
        value = getattr(params, field_name)
        return replace(params, **{field_name: max(value * (1.0 + delta_pct / 100.0), 0.0)})

    return _apply


def apply_self_consumption_delta(params: ParameterSet, delta_pp: float) -> ParameterSet:
    """Shift self-consumption with battery by ``delta_pp`` points, clamped to 0-100."""

    shifted = min(max(params.self_consumption_with_battery_pct + delta_pp, 0.0), 100.0)
    return replace(params, self_consumption_with_battery_pct=shifted)


LEVER_APPLIERS: Dict[str, Callable[[ParameterSet, float], ParameterSet]] = {
    "Battery power": _scale("battery_power_kw"),
    "Investment": _scale("investment_amount"),
    "Availability price": _scale("availability_price_per_mwh_per_hour"),
    "Activation price": _scale("activation_price_per_mwh"),
    "Spot price": _scale("spot_price_per_kwh"),
    "Self-consumption uplift": apply_self_consumption_delta,
}


def prepare_tornado_data(table: pd.DataFrame) -> pd.DataFrame:
    """Convert a lever impact table into the long format expected by the tornado chart."""

    scenario_label_map = {
        "Low impact": "Low case",
        "High impact": "High case",
    }
    numeric_table = table.copy()
    for column in ("Low impact", "High impact"):
        numeric_table[column] = pd.to_numeric(numeric_table[column], errors="coerce").fillna(0.0)
    numeric_table["sort_key"] = numeric_table[["Low impact", "High impact"]].abs().max(axis=1)
    melted = numeric_table.melt(
        id_vars=["Lever", "Notes", "sort_key"],
        value_vars=["Low impact", "High impact"],
        var_name="Scenario",
        value_name="Impact",
    )
    melted["Scenario"] = melted["Scenario"].map(scenario_label_map).fillna(melted["Scenario"])
    return melted.sort_values("sort_key", ascending=False)


def build_tornado_chart(source: pd.DataFrame, axis_title: str = "Change in net value / year") -> alt.Chart:
    """Render a tornado bar chart from a melted impact table."""

    if source.empty:
        return alt.Chart(pd.DataFrame({"Impact": [], "Lever": []})).mark_bar()

    extent = max(abs(float(source["Impact"].min())), abs(float(source["Impact"].max())), 1.0)
    zero_line = alt.Chart(pd.DataFrame({"zero": [0]})).mark_rule(color="#6b6b6b").encode(x="zero:Q")

    bars = (
        alt.Chart(source)
        .mark_bar()
        .encode(
            x=alt.X(
                "Impact:Q",
                title=axis_title,
                scale=alt.Scale(domain=[-extent, extent]),
            ),
            y=alt.Y("Lever:N", sort=None, title="Sensitivity lever"),
            color=alt.Color(
                "Scenario:N",
                scale=alt.Scale(range=["#d95f02", "#1b9e77"]),
                title="Scenario",
            ),
            tooltip=[
                alt.Tooltip("Lever:N"),
                alt.Tooltip("Scenario:N"),
                alt.Tooltip("Impact:Q", format=",.2f"),
                alt.Tooltip("Notes:N"),
            ],
        )
    )
    return (bars + zero_line).properties(height=320)


def build_lever_table() -> pd.DataFrame:
    """Return the default lever table; changes are percent except the self-consumption points."""

    return pd.DataFrame(
        [
            {
                "Lever": "Battery power",
                "Low change": -20.0,
                "High change": 20.0,
                "Low impact": None,
                "High impact": None,
                "Notes": "% change to battery power (kW).",
            },
            {
                "Lever": "Investment",
                "Low change": -20.0,
                "High change": 20.0,
                "Low impact": None,
                "High impact": None,
                "Notes": "% change to investment; moves payback and ROI only.",
            },
            {
                "Lever": "Availability price",
                "Low change": -20.0,
                "High change": 20.0,
                "Low impact": None,
                "High impact": None,
                "Notes": "% change to winter availability price (parametric model only).",
            },
            {
                "Lever": "Activation price",
                "Low change": -20.0,
                "High change": 20.0,
                "Low impact": None,
                "High impact": None,
                "Notes": "% change to activation price (parametric model only).",
            },
            {
                "Lever": "Spot price",
                "Low change": -20.0,
                "High change": 20.0,
                "Low impact": None,
                "High impact": None,
                "Notes": "% change to the electricity price used for solar value.",
            },
            {
                "Lever": "Self-consumption uplift",
                "Low change": -5.0,
                "High change": 5.0,
                "Low impact": None,
                "High impact": None,
                "Notes": "Self-consumption with battery delta (pp).",
            },
        ]
    )


def compute_lever_impacts(
    params: ParameterSet,
    config: Optional[ValuationConfig] = None,
    table: Optional[pd.DataFrame] = None,
    metric: str = "net_value",
) -> pd.DataFrame:
    """Fill the impact columns with the change in ``metric`` for each lever's low/high case."""

    if metric not in IMPACT_METRICS:
        raise ValueError(f"Unsupported impact metric '{metric}'; choose one of {IMPACT_METRICS}")

    engine = ValuationEngine(config)
    baseline = getattr(engine.evaluate(params), metric)
    table = (table if table is not None else build_lever_table()).copy()
    for column in ("Low change", "High change"):
        table[column] = pd.to_numeric(table[column], errors="coerce").fillna(0.0)

    low_impacts = []
    high_impacts = []
    for _, row in table.iterrows():
        apply = LEVER_APPLIERS.get(row["Lever"])
        if apply is None:
            raise ValueError(f"Unknown sensitivity lever '{row['Lever']}'")
        low = getattr(engine.evaluate(apply(params, float(row["Low change"]))), metric)
        high = getattr(engine.evaluate(apply(params, float(row["High change"]))), metric)
        low_impacts.append(low - baseline)
        high_impacts.append(high - baseline)

    table["Low impact"] = low_impacts
    table["High impact"] = high_impacts
    return table
