import pytest

from services.valuation_core import ParameterSet, ValuationConfig
from utils.sweeps import SWEEP_COLUMNS, generate_values, sweep_parameter, sweepable_fields


def test_generate_values_inclusive_and_midpoint() -> None:
    assert generate_values(0.0, 10.0, 3) == [0.0, 5.0, 10.0]
    assert generate_values(0.0, 10.0, 1) == [5.0]
    assert generate_values(4.0, 4.0, 5) == [4.0]


def test_boolean_switches_are_not_sweepable() -> None:
    fields = sweepable_fields()

    assert "battery_power_kw" in fields
    assert "battery_capacity_kwh" in fields
    assert "include_solar" not in fields
    assert "include_estimates" not in fields


def test_sweep_battery_power_reevaluates_each_row() -> None:
    df = sweep_parameter(ParameterSet(), "battery_power_kw", [100.0, 250.0, 400.0], ValuationConfig())

    assert list(df.columns) == ["battery_power_kw"] + SWEEP_COLUMNS
    assert len(df) == 3
    assert df["net_value"].is_monotonic_increasing
    assert df.loc[df["battery_power_kw"] == 250.0, "flexibility_income"].iloc[0] == pytest.approx(35_500.0)


def test_sweep_investment_moves_payback_only() -> None:
    df = sweep_parameter(ParameterSet(), "investment_amount", [0.0, 1_000_000.0])

    assert df["net_value"].nunique() == 1
    assert df["payback_status"].tolist() == ["not_applicable", "years"]


def test_unknown_field_raises() -> None:
    with pytest.raises(ValueError):
        sweep_parameter(ParameterSet(), "include_solar", [1.0])
    with pytest.raises(ValueError):
        sweep_parameter(ParameterSet(), "not_a_field", [1.0])


def test_invalid_swept_values_are_rejected_before_evaluation() -> None:
    with pytest.raises(ValueError, match="summer_factor_pct=150.0"):
        sweep_parameter(ParameterSet(), "summer_factor_pct", [50.0, 150.0])
    with pytest.raises(ValueError, match="must be a finite number"):
        sweep_parameter(ParameterSet(), "battery_power_kw", [float("nan")])
