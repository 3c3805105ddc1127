"""Streamlit form rendering for valuation inputs.

Centralizing the widgets keeps ``app.run_app`` focused on orchestration and
lets the sensitivity page start from the same parameter set.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import streamlit as st
from streamlit.delta_generator import DeltaGenerator

from services.valuation_core import (
    ENERGY_BASIS_CAPACITY,
    ParameterSet,
    ReferenceScaledFlexibility,
    ValuationConfig,
)
from utils.validation import check_parameters

DEFAULT_CAPACITY_KWH = 500.0


@dataclass
class ValuationFormResult:
    params: ParameterSet
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors


def _render_battery_inputs(container: DeltaGenerator, config: ValuationConfig, defaults: ParameterSet) -> dict:
    container.subheader("Battery")
    values = {
        "battery_power_kw": float(
            container.slider(
                "Battery power (kW)",
                min_value=50,
                max_value=1000,
                step=10,
                value=int(defaults.battery_power_kw),
                help="Installed power rating. Flexibility income scales with MW committed to the market.",
            )
        )
    }
    if config.energy_basis == ENERGY_BASIS_CAPACITY:
        values["battery_capacity_kwh"] = float(
            container.number_input(
                "Battery capacity (kWh)",
                min_value=0.0,
                value=float(defaults.battery_capacity_kwh or DEFAULT_CAPACITY_KWH),
                step=10.0,
                help=f"Nameplate energy; {config.usable_capacity_fraction:.0%} is treated as usable.",
            )
        )
    return values


def _render_flexibility_inputs(container: DeltaGenerator, config: ValuationConfig, defaults: ParameterSet) -> dict:
    container.subheader("Flexibility market")
    model = config.flexibility_model
    if isinstance(model, ReferenceScaledFlexibility):
        container.caption(
            f"Income is scaled from {model.reference.name}: {model.rate_per_kw_year:,.0f} per kW per year."
        )
        return {}

    col1, col2 = container.columns(2)
    values = {
        "activation_price_per_mwh": float(
            col1.number_input(
                "Activation price (per MWh)",
                min_value=0.0,
                value=float(defaults.activation_price_per_mwh),
                step=500.0,
            )
        ),
        "availability_price_per_mwh_per_hour": float(
            col2.number_input(
                "Availability price winter (per MWh/h)",
                min_value=0.0,
                value=float(defaults.availability_price_per_mwh_per_hour),
                step=10.0,
            )
        ),
        "hours_per_day": float(
            col1.number_input("Hours per day", min_value=0.0, max_value=24.0, value=float(defaults.hours_per_day), step=1.0)
        ),
        "activations_per_winter": float(
            col2.number_input(
                "Activations per winter",
                min_value=0.0,
                value=float(defaults.activations_per_winter),
                step=1.0,
            )
        ),
    }
    values["summer_factor_pct"] = float(
        container.slider(
            "Summer income (% of winter)",
            min_value=0,
            max_value=100,
            step=5,
            value=int(defaults.summer_factor_pct),
        )
    )
    return values


def _render_solar_inputs(container: DeltaGenerator, defaults: ParameterSet) -> dict:
    container.subheader("Solar")
    include_solar = container.toggle(
        "Include increased solar utilization",
        value=defaults.include_solar,
        help="Value of extra self-consumed solar energy when a battery is installed.",
    )
    values = {"include_solar": bool(include_solar)}
    if not include_solar:
        return values

    values["solar_capacity_kwp"] = float(
        container.slider(
            "Solar capacity (kWp)",
            min_value=10,
            max_value=1000,
            step=5,
            value=int(defaults.solar_capacity_kwp),
        )
    )
    col1, col2 = container.columns(2)
    values["solar_production_per_kwp"] = float(
        col1.number_input(
            "Production (kWh/kWp/year)",
            min_value=0.0,
            value=float(defaults.solar_production_per_kwp),
            step=5.0,
        )
    )
    values["spot_price_per_kwh"] = float(
        col2.number_input(
            "Electricity price (per kWh)",
            min_value=0.0,
            value=float(defaults.spot_price_per_kwh),
            step=0.05,
            format="%.2f",
        )
    )
    values["self_consumption_without_battery_pct"] = float(
        col1.number_input(
            "Self-consumption without battery (%)",
            min_value=0.0,
            max_value=100.0,
            value=float(defaults.self_consumption_without_battery_pct),
            step=1.0,
        )
    )
    values["self_consumption_with_battery_pct"] = float(
        col2.number_input(
            "Self-consumption with battery (%)",
            min_value=0.0,
            max_value=100.0,
            value=float(defaults.self_consumption_with_battery_pct),
            step=1.0,
        )
    )
    return values


def _render_investment_inputs(container: DeltaGenerator, config: ValuationConfig, defaults: ParameterSet) -> dict:
    container.subheader("Estimates and investment")
    include_estimates = container.toggle(
        "Include peak shaving and spot arbitrage (estimates)",
        value=defaults.include_estimates,
    )
    if include_estimates:
        container.caption(
            f"Peak shaving {config.peak_shaving_rate_per_kw} per kW/year and spot arbitrage"
            f" {config.spot_arbitrage_rate_per_kwh} per unit/year are unverified typical values."
        )
    investment = container.number_input(
        "Investment",
        min_value=0.0,
        value=float(defaults.investment_amount),
        step=50_000.0,
        format="%.0f",
    )
    return {"include_estimates": bool(include_estimates), "investment_amount": float(investment)}


def render_parameter_form(
    config: ValuationConfig,
    defaults: Optional[ParameterSet] = None,
    container: Optional[DeltaGenerator] = None,
) -> ValuationFormResult:
    """Render every input widget and return the resulting parameter set.

    Fields whose widgets are hidden (solar switched off, reference-scaled
    flexibility) keep their default values so the parameter set is always full.
    """

    defaults = defaults or ParameterSet()
    target = container or st.sidebar
    values: dict = {}
    values.update(_render_battery_inputs(target, config, defaults))
    values.update(_render_flexibility_inputs(target, config, defaults))
    values.update(_render_solar_inputs(target, defaults))
    values.update(_render_investment_inputs(target, config, defaults))

    params = ParameterSet(**{**defaults.__dict__, **values})
    check = check_parameters(params, config)
    return ValuationFormResult(
        params=params,
        validation_errors=list(check.errors),
        validation_warnings=list(check.warnings),
    )
