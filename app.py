# app.py - Acron battery storage profitability calculator
# - Parameters in the sidebar, valuation recomputed on every change
# - Revenue streams with provenance tags, KPI cards, flexibility breakdown, limitations
# - PDF report download

import logging
from datetime import date

import streamlit as st

from frontend.ui.charts import (
    build_stream_chart,
    estimate_assumption_rows,
    flexibility_breakdown_rows,
    prepare_stream_frame,
    prepare_stream_table,
)
from frontend.ui.forms import render_parameter_form
from frontend.ui.metrics import compute_kpis, render_primary_metrics
from frontend.ui.pdf import build_valuation_report, report_filename
from frontend.ui.rendering import render_notes, render_text_table
from services.valuation_core import ParameterSet, ValuationConfig, ValuationResult
from utils.config import DisplaySettings, load_display_settings, load_valuation_config
from utils.flags import TAG_DEFINITIONS, build_limitation_notes
from utils.ui_layout import init_page_layout
from utils.ui_state import evaluate_cached


def _render_results(params: ParameterSet, result: ValuationResult, config: ValuationConfig, settings: DisplaySettings) -> None:
    locale, currency = settings.locale, settings.currency

    render_primary_metrics(compute_kpis(params, result), locale, currency)
    st.markdown("---")

    table_col, chart_col = st.columns([3, 2])
    with table_col:
        st.subheader("Annual value creation")
        render_text_table(
            prepare_stream_table(result, locale, currency),
            caption=" | ".join(f"{d['label']}: {d['meaning']}" for d in TAG_DEFINITIONS.values()),
        )
    with chart_col:
        st.altair_chart(build_stream_chart(prepare_stream_frame(result)), use_container_width=True)

    with st.expander("Flexibility market breakdown", expanded=False):
        for label, amount in flexibility_breakdown_rows(params, result, locale):
            label_col, amount_col = st.columns([3, 1])
            label_col.write(label)
            amount_col.write(amount)

    with st.expander("User-supplied values and estimates", expanded=False):
        st.markdown("\n".join(f"- {line}" for line in estimate_assumption_rows(params, config, locale)))

    render_notes(build_limitation_notes(params, result))


def _render_report_download(
    params: ParameterSet, result: ValuationResult, config: ValuationConfig, settings: DisplaySettings
) -> None:
    st.subheader("Report")
    today = date.today()
    pdf_bytes = None
    try:
        pdf_bytes = build_valuation_report(
            params,
            result,
            config,
            locale=settings.locale,
            currency=settings.currency,
            logo_path=settings.logo_path,
            generated_on=today,
        )
    except Exception as exc:  # noqa: BLE001
        logging.getLogger(__name__).exception("Report generation failed")
        st.warning(f"PDF report unavailable: {exc}")

    if pdf_bytes:
        st.download_button(
            "Download profitability report (PDF)",
            pdf_bytes,
            file_name=report_filename(params, today),
            mime="application/pdf",
        )


def run_app():
    render_layout = init_page_layout(
        page_title="Acron profitability calculator",
        main_title="Battery storage profitability",
        description="Annual value of a building battery: flexibility market, solar utilization and estimated savings.",
    )
    config = load_valuation_config()
    settings = load_display_settings()

    form = render_parameter_form(config)

    for warning in form.validation_warnings:
        st.warning(warning)
    if not form.is_valid:
        for error in form.validation_errors:
            st.error(error)
        render_layout(config)
        st.info("Adjust the highlighted inputs to see results.")
        return

    result = evaluate_cached(form.params, config)
    render_layout(config)
    _render_results(form.params, result, config, settings)
    st.markdown("---")
    _render_report_download(form.params, result, config, settings)


if __name__ == "__main__":
    run_app()
