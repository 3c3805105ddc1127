"""Input checks applied by the form and API layers before evaluation.

The valuation engine assumes finite numeric inputs and never rejects a
parameter set itself. These checks sit in front of it: ``errors`` block an
evaluation, ``warnings`` are shown next to the results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import List

from services.valuation_core import ENERGY_BASIS_CAPACITY, ParameterSet, ValuationConfig

_PERCENT_FIELDS = (
    "summer_factor_pct",
    "self_consumption_without_battery_pct",
    "self_consumption_with_battery_pct",
)

_NON_NEGATIVE_FIELDS = (
    "battery_power_kw",
    "activation_price_per_mwh",
    "availability_price_per_mwh_per_hour",
    "hours_per_day",
    "activations_per_winter",
    "solar_capacity_kwp",
    "spot_price_per_kwh",
    "solar_production_per_kwp",
    "investment_amount",
)


@dataclass
class ParameterCheck:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def check_parameters(params: ParameterSet, config: ValuationConfig) -> ParameterCheck:
    """Validate a parameter set for the given deployment configuration."""

    check = ParameterCheck()

    for f in fields(params):
        value = getattr(params, f.name)
        if isinstance(value, bool) or value is None:
            continue
        if not math.isfinite(float(value)):
            check.errors.append(f"{f.name} must be a finite number")
    if check.errors:
        return check

    for name in _NON_NEGATIVE_FIELDS:
        if getattr(params, name) < 0:
            check.errors.append(f"{name} must be non-negative")
    for name in _PERCENT_FIELDS:
        value = getattr(params, name)
        if value < 0 or value > 100:
            check.errors.append(f"{name} must be between 0 and 100")

    if config.energy_basis == ENERGY_BASIS_CAPACITY:
        if params.battery_capacity_kwh is None:
            check.errors.append("battery_capacity_kwh is required when sizing estimates by capacity")
        elif params.battery_capacity_kwh < 0:
            check.errors.append("battery_capacity_kwh must be non-negative")

    if params.battery_power_kw == 0:
        check.warnings.append("Battery power is zero; flexibility and peak-shaving income will be zero.")
    if params.include_solar and params.self_consumption_delta_pct < 0:
        check.warnings.append(
            "Self-consumption with battery is below self-consumption without battery; "
            "the solar utilization value will be negative."
        )
    if params.investment_amount == 0:
        check.warnings.append("No investment entered; payback and ROI are not applicable.")

    return check
