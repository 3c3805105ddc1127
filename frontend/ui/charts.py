"""Chart and table data prep helpers for Streamlit visualizations."""

from typing import List, Optional, Tuple

import altair as alt
import pandas as pd

from services.valuation_core import (
    ParameterSet,
    ReferenceScaledDetail,
    SeasonalBreakdown,
    ValuationConfig,
    ValuationResult,
)
from utils.flags import stream_display_label, stream_tag, TAG_DEFINITIONS
from utils.formatting import format_currency, format_number, format_percent

_STREAM_COLORS = {
    "flexibility": "#1b9e77",
    "solar": "#e6ab02",
    "peak_shaving": "#7570b3",
    "spot_arbitrage": "#d95f02",
}


def prepare_stream_frame(result: ValuationResult) -> pd.DataFrame:
    """Return one numeric row per included stream with its share of gross.

    ``share`` is NaN for every row when gross value is zero.
    """

    shares = result.stream_shares()
    rows = []
    for stream in result.streams():
        if not stream.included:
            continue
        rows.append(
            {
                "key": stream.key,
                "stream": stream.label,
                "value": stream.value,
                "share": shares[stream.key] if shares is not None else float("nan"),
                "is_estimate": stream.is_estimate,
                "tag": TAG_DEFINITIONS[stream_tag(stream.key, result)]["label"],
            }
        )
    return pd.DataFrame(rows, columns=["key", "stream", "value", "share", "is_estimate", "tag"])


def prepare_stream_table(result: ValuationResult, locale: Optional[str], currency: str) -> pd.DataFrame:
    """Return the localized revenue table shown on the calculator page."""

    frame = prepare_stream_frame(result)
    table = pd.DataFrame(
        {
            "Revenue stream": [
                stream_display_label(label, key, result) for key, label in zip(frame["key"], frame["stream"])
            ],
            "Amount / year": [format_currency(v, locale, currency) for v in frame["value"]],
            "Share": [format_percent(None if pd.isna(s) else s, locale) for s in frame["share"]],
        }
    )
    total = pd.DataFrame(
        {
            "Revenue stream": ["Total gross value"],
            "Amount / year": [format_currency(result.gross_value, locale, currency)],
            "Share": [format_percent(1.0, locale) if result.stream_shares() is not None else "-"],
        }
    )
    return pd.concat([table, total], ignore_index=True)


def build_stream_chart(frame: pd.DataFrame) -> alt.Chart:
    """Horizontal bar chart of stream values, estimates drawn with lower opacity."""

    if frame.empty:
        return alt.Chart(pd.DataFrame({"value": [], "stream": []})).mark_bar()

    return (
        alt.Chart(frame)
        .mark_bar()
        .encode(
            x=alt.X("value:Q", title="Annual value"),
            y=alt.Y("stream:N", sort="-x", title=None),
            color=alt.Color(
                "key:N",
                scale=alt.Scale(domain=list(_STREAM_COLORS), range=list(_STREAM_COLORS.values())),
                legend=None,
            ),
            opacity=alt.condition("datum.is_estimate", alt.value(0.55), alt.value(1.0)),
            tooltip=[
                alt.Tooltip("stream:N", title="Stream"),
                alt.Tooltip("value:Q", title="Value", format=",.0f"),
                alt.Tooltip("share:Q", title="Share", format=".1%"),
                alt.Tooltip("tag:N", title="Basis"),
            ],
        )
        .properties(height=60 + 40 * len(frame))
    )


def flexibility_breakdown_rows(
    params: ParameterSet,
    result: ValuationResult,
    locale: Optional[str],
) -> List[Tuple[str, str]]:
    """Return ``(label, amount)`` line items for the flexibility detail."""

    detail = result.flexibility_detail
    if isinstance(detail, SeasonalBreakdown):
        mw = format_number(detail.power_mw, locale, digits=3)
        schedule = detail.schedule
        return [
            (
                f"Price per hour ({format_number(params.availability_price_per_mwh_per_hour, locale)}/MWh/h x {mw} MW)",
                format_number(detail.price_per_hour, locale),
            ),
            (f"Price per day ({format_number(params.hours_per_day, locale)} hours/day)", format_number(detail.price_per_day, locale)),
            (
                f"Price per week ({format_number(schedule.days_per_week, locale)} business days)",
                format_number(detail.price_per_week, locale),
            ),
            (
                f"Price per month ({format_number(schedule.weeks_per_month, locale)} weeks)",
                format_number(detail.price_per_month, locale),
            ),
            (
                f"Availability winter ({format_number(schedule.winter_months, locale)} months)",
                format_number(detail.price_per_winter, locale),
            ),
            (
                f"Availability summer ({format_number(params.summer_factor_pct, locale)}% of winter)",
                format_number(detail.price_per_summer, locale),
            ),
            ("Total availability per year", format_number(detail.availability_per_year, locale)),
            (
                f"Activation sum winter ({format_number(params.activations_per_winter, locale)} activations)",
                format_number(detail.activation_sum, locale),
            ),
            ("Total flexibility market", format_number(detail.total, locale)),
        ]
    if isinstance(detail, ReferenceScaledDetail):
        ref = detail.reference
        return [
            ("Reference installation", ref.name),
            ("Reference figures", "Documented" if ref.documented else "Illustrative (derived from the rate)"),
            ("Reference battery power (kW)", format_number(ref.battery_power_kw, locale)),
            ("Reference availability income", format_number(ref.availability_income, locale)),
            ("Reference activation income", format_number(ref.activation_income, locale)),
            ("Reference total income", format_number(ref.total_income, locale)),
            ("Rate per kW per year", format_number(detail.rate_per_kw_year, locale)),
            (
                f"Flexibility income ({format_number(detail.battery_power_kw, locale)} kW x rate)",
                format_number(detail.total, locale),
            ),
        ]
    raise TypeError(f"Unsupported flexibility detail: {type(detail).__name__}")


def estimate_assumption_rows(params: ParameterSet, config: ValuationConfig, locale: Optional[str]) -> List[str]:
    """Return the user-supplied values and estimate rates behind the figures."""

    lines: List[str] = []
    if params.include_solar:
        lines.append(f"Electricity price (user supplied): {format_number(params.spot_price_per_kwh, locale, digits=2)} per kWh")
        lines.append(
            f"Solar production (user supplied): {format_number(params.solar_production_per_kwp, locale)} kWh/kWp/year"
        )
        lines.append(
            "Self-consumption without battery (user supplied): "
            f"{format_number(params.self_consumption_without_battery_pct, locale)}%"
        )
        lines.append(
            "Self-consumption with battery (user supplied): "
            f"{format_number(params.self_consumption_with_battery_pct, locale)}%"
        )
    if params.include_estimates:
        lines.append(
            f"Peak shaving: {format_number(config.peak_shaving_rate_per_kw, locale, digits=1)} per kW/year"
            " (estimate based on typical tariffs)"
        )
        basis = "kW battery power" if config.energy_basis == "power" else (
            f"kWh usable capacity ({format_percent(config.usable_capacity_fraction, locale, digits=0)} of nameplate)"
        )
        lines.append(
            f"Spot arbitrage: {format_number(config.spot_arbitrage_rate_per_kwh, locale, digits=1)} per {basis}/year"
            " (estimate based on historical price spreads)"
        )
    lines.append(f"Acron fee: {format_percent(config.fee_rate, locale)} of total income/savings")
    return lines


def build_sweep_chart(df: pd.DataFrame, field_name: str, metric: str = "net_value") -> alt.Chart:
    """Line chart of one valuation metric across a parameter sweep."""

    if df.empty:
        return alt.Chart(pd.DataFrame({field_name: [], metric: []})).mark_line()

    base = alt.Chart(df).encode(
        x=alt.X(f"{field_name}:Q", title=field_name.replace("_", " ")),
        y=alt.Y(f"{metric}:Q", title=metric.replace("_", " ")),
        tooltip=[alt.Tooltip(f"{field_name}:Q", format=",.2f"), alt.Tooltip(f"{metric}:Q", format=",.2f")],
    )
    return (base.mark_line(color="#1b9e77") + base.mark_circle(color="#1b9e77", size=50)).properties(height=320)
