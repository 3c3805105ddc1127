from __future__ import annotations

from typing import Optional

import pandas as pd
import streamlit as st

from frontend.ui.charts import build_sweep_chart
from frontend.ui.sensitivity_tornado import (
    IMPACT_METRICS,
    build_lever_table,
    build_tornado_chart,
    compute_lever_impacts,
    prepare_tornado_data,
)
from services.valuation_core import ParameterSet
from utils.config import load_display_settings, load_valuation_config
from utils.formatting import format_currency
from utils.sweeps import generate_values, sweep_parameter, sweepable_fields
from utils.ui_inputs import parse_numeric_series
from utils.ui_layout import init_page_layout
from utils.ui_state import get_latest_valuation

SWEEP_RESULTS_KEY = "sensitivity_sweep_results"
SWEEP_FIELD_KEY = "sensitivity_sweep_field"

render_layout = init_page_layout(
    page_title="Sensitivity",
    main_title="Sensitivity analysis",
    description="Sweep one input or compare the main levers around the latest calculator inputs.",
)
config = load_valuation_config()
settings = load_display_settings()
render_layout(config)

params: Optional[ParameterSet]
params, _ = get_latest_valuation()
if params is None:
    st.warning(
        "No valuation cached yet. Open the Calculator page and adjust the inputs to seed the analysis.",
        icon="⚠️",
    )
    params = ParameterSet()

st.page_link("app.py", label="Back to Calculator", help="Update inputs before rerunning the analysis.")
st.markdown("---")

st.session_state.setdefault(SWEEP_RESULTS_KEY, None)

st.subheader("Parameter sweep")
fields = sweepable_fields()
field_name = st.selectbox(
    "Parameter",
    fields,
    index=fields.index("battery_power_kw"),
    format_func=lambda name: name.replace("_", " "),
)
current_value = getattr(params, field_name) or 0.0
with st.form("parameter_sweep_form"):
    range_col, steps_col = st.columns([3, 1])
    with range_col:
        low_col, high_col = st.columns(2)
        low = low_col.number_input("From", value=float(current_value) * 0.5, step=1.0)
        high = high_col.number_input("To", value=float(current_value) * 1.5, step=1.0)
    with steps_col:
        steps = st.number_input("Points", min_value=1, max_value=25, value=7)
    custom_text = st.text_area(
        "Custom values (optional)",
        value="",
        help="Overrides the range. Separate values with ';' or new lines; decimal commas are accepted.",
    )
    submitted = st.form_submit_button("Run sweep")

if submitted:
    try:
        values = parse_numeric_series("Custom values", custom_text) if custom_text.strip() else []
    except ValueError:
        values = None
    if values is not None:
        if not values:
            values = generate_values(float(low), float(high), int(steps))
        try:
            sweep_df = sweep_parameter(params, field_name, values, config)
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.session_state[SWEEP_RESULTS_KEY] = sweep_df
            st.session_state[SWEEP_FIELD_KEY] = field_name

sweep_df: Optional[pd.DataFrame] = st.session_state.get(SWEEP_RESULTS_KEY)
sweep_field = st.session_state.get(SWEEP_FIELD_KEY)
if sweep_df is not None and sweep_field in sweep_df.columns:
    metric = st.radio("Metric", list(IMPACT_METRICS), horizontal=True)
    st.altair_chart(build_sweep_chart(sweep_df, sweep_field, metric), use_container_width=True)
    st.dataframe(sweep_df, hide_index=True, use_container_width=True)
    st.download_button(
        "Download sweep (CSV)",
        sweep_df.to_csv(index=False).encode("utf-8"),
        file_name=f"acron-sweep-{sweep_field}.csv",
        mime="text/csv",
    )

st.markdown("---")
st.subheader("Tornado")
tornado_metric = st.selectbox(
    "Impact metric",
    IMPACT_METRICS,
    format_func=lambda name: name.replace("_", " "),
)
lever_table = st.data_editor(
    build_lever_table(),
    disabled=["Lever", "Low impact", "High impact", "Notes"],
    hide_index=True,
    use_container_width=True,
    key="tornado_lever_table",
)
impacts = compute_lever_impacts(params, config, lever_table, metric=tornado_metric)
axis_title = f"Change in {tornado_metric.replace('_', ' ')}"
st.altair_chart(build_tornado_chart(prepare_tornado_data(impacts), axis_title), use_container_width=True)
if tornado_metric != "roi":
    largest = impacts.loc[impacts[["Low impact", "High impact"]].abs().max(axis=1).idxmax()]
    swing = max(abs(largest["Low impact"]), abs(largest["High impact"]))
    st.caption(
        f"Largest lever: {largest['Lever']} "
        f"(up to {format_currency(swing, settings.locale, settings.currency)} per year)."
    )
