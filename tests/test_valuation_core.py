import math
import unittest
from dataclasses import FrozenInstanceError, replace

import pytest

from services.valuation_core import (
    ENERGY_BASIS_CAPACITY,
    REFERENCE_INSTALLATION,
    STREAM_KEYS,
    ParameterSet,
    ParametricFlexibility,
    ReferenceScaledDetail,
    ReferenceScaledFlexibility,
    SeasonalBreakdown,
    SeasonSchedule,
    ValuationConfig,
    ValuationEngine,
    compute_estimate_streams,
    compute_solar_utilization_value,
    evaluate,
)
from utils.economics import PAYBACK_NEVER, PAYBACK_NOT_APPLICABLE, PAYBACK_YEARS


class ParametricFlexibilityTests(unittest.TestCase):
    def test_default_chain_matches_seasonal_accrual(self) -> None:
        detail = ParametricFlexibility().compute(ParameterSet())

        self.assertIsInstance(detail, SeasonalBreakdown)
        self.assertAlmostEqual(detail.power_mw, 0.25)
        self.assertAlmostEqual(detail.price_per_hour, 50.0)
        self.assertAlmostEqual(detail.price_per_day, 100.0)
        self.assertAlmostEqual(detail.price_per_week, 500.0)
        self.assertAlmostEqual(detail.price_per_month, 2_000.0)
        self.assertAlmostEqual(detail.price_per_winter, 12_000.0)
        self.assertAlmostEqual(detail.price_per_summer, 6_000.0)
        self.assertAlmostEqual(detail.availability_per_year, 18_000.0)
        self.assertAlmostEqual(detail.activation_sum, 17_500.0)
        self.assertAlmostEqual(detail.total, 35_500.0)

    def test_zero_summer_factor_keeps_winter_only(self) -> None:
        detail = ParametricFlexibility().compute(ParameterSet(summer_factor_pct=0.0))

        self.assertEqual(detail.price_per_summer, 0.0)
        self.assertAlmostEqual(detail.availability_per_year, detail.price_per_winter)

    def test_custom_schedule_scales_winter(self) -> None:
        schedule = SeasonSchedule(days_per_week=7.0, weeks_per_month=4.0, winter_months=5.0)
        detail = ParametricFlexibility(schedule=schedule).compute(ParameterSet())

        self.assertAlmostEqual(detail.price_per_winter, 100.0 * 7 * 4 * 5)

    def test_total_scales_linearly_with_power(self) -> None:
        model = ParametricFlexibility()
        base = model.compute(ParameterSet(battery_power_kw=250.0)).total
        doubled = model.compute(ParameterSet(battery_power_kw=500.0)).total

        self.assertAlmostEqual(doubled, 2 * base)


class ReferenceScaledFlexibilityTests(unittest.TestCase):
    def test_default_reference_matches_rate(self) -> None:
        self.assertAlmostEqual(REFERENCE_INSTALLATION.total_income, 222_750.0)
        self.assertAlmostEqual(REFERENCE_INSTALLATION.rate_per_kw_year, 891.0)

    def test_scales_power_by_rate(self) -> None:
        detail = ReferenceScaledFlexibility().compute(ParameterSet(battery_power_kw=400.0))

        self.assertIsInstance(detail, ReferenceScaledDetail)
        self.assertAlmostEqual(detail.total, 400.0 * 891.0)
        self.assertIs(detail.reference, REFERENCE_INSTALLATION)

    def test_market_prices_do_not_affect_reference_variant(self) -> None:
        model = ReferenceScaledFlexibility()
        base = model.compute(ParameterSet()).total
        changed = model.compute(ParameterSet(activation_price_per_mwh=0.0, availability_price_per_mwh_per_hour=999.0))

        self.assertEqual(base, changed.total)


class SolarAndEstimateTests(unittest.TestCase):
    def test_solar_value_uses_self_consumption_delta(self) -> None:
        value = compute_solar_utilization_value(ParameterSet())

        self.assertAlmostEqual(value, 355.0 * 895.0 * 0.13 * 1.10)

    def test_solar_switched_off_is_zero(self) -> None:
        self.assertEqual(compute_solar_utilization_value(ParameterSet(include_solar=False)), 0.0)

    def test_zero_solar_capacity_is_zero(self) -> None:
        self.assertEqual(compute_solar_utilization_value(ParameterSet(solar_capacity_kwp=0.0)), 0.0)

    def test_equal_self_consumption_yields_zero(self) -> None:
        for production, price in ((895.0, 1.10), (1_200.0, 3.5), (0.0, 0.0)):
            params = ParameterSet(
                solar_production_per_kwp=production,
                spot_price_per_kwh=price,
                self_consumption_without_battery_pct=37.0,
                self_consumption_with_battery_pct=37.0,
            )
            self.assertEqual(compute_solar_utilization_value(params), 0.0)

    def test_negative_delta_is_not_clamped(self) -> None:
        params = ParameterSet(self_consumption_without_battery_pct=50.0, self_consumption_with_battery_pct=40.0)

        self.assertLess(compute_solar_utilization_value(params), 0.0)

    def test_estimates_follow_power_basis(self) -> None:
        peak, arbitrage = compute_estimate_streams(ParameterSet(), ValuationConfig())

        self.assertAlmostEqual(peak, 250.0 * 42.4)
        self.assertAlmostEqual(arbitrage, 250.0 * 23.7)

    def test_estimates_follow_capacity_basis(self) -> None:
        config = ValuationConfig(energy_basis=ENERGY_BASIS_CAPACITY)
        peak, arbitrage = compute_estimate_streams(ParameterSet(battery_capacity_kwh=500.0), config)

        self.assertAlmostEqual(peak, 250.0 * 42.4)
        self.assertAlmostEqual(arbitrage, 500.0 * 0.8 * 23.7)

    def test_capacity_basis_without_capacity_yields_zero_arbitrage(self) -> None:
        config = ValuationConfig(energy_basis=ENERGY_BASIS_CAPACITY)
        _, arbitrage = compute_estimate_streams(ParameterSet(), config)

        self.assertEqual(arbitrage, 0.0)

    def test_estimates_gated_off(self) -> None:
        self.assertEqual(compute_estimate_streams(ParameterSet(include_estimates=False), ValuationConfig()), (0.0, 0.0))


class ValuationEngineTests(unittest.TestCase):
    def test_default_evaluation(self) -> None:
        result = evaluate(ParameterSet())

        solar = 355.0 * 895.0 * 0.13 * 1.10
        gross = 35_500.0 + solar + 10_600.0 + 5_925.0
        self.assertAlmostEqual(result.gross_value, gross)
        self.assertAlmostEqual(result.acron_fee, gross * 0.15)
        self.assertAlmostEqual(result.net_value, gross * 0.85)
        self.assertAlmostEqual(result.payback_years, 1_200_000.0 / (gross * 0.85))
        self.assertAlmostEqual(result.roi, gross * 0.85 / 1_200_000.0)
        self.assertEqual(result.payback_status, PAYBACK_YEARS)

    def test_gross_is_sum_of_streams_and_fee_split_is_exact(self) -> None:
        for params in (
            ParameterSet(),
            ParameterSet(include_solar=False),
            ParameterSet(include_estimates=False, battery_power_kw=730.0),
            ParameterSet(self_consumption_with_battery_pct=10.0),
        ):
            result = evaluate(params)
            self.assertAlmostEqual(result.gross_value, sum(result.stream_values.values()))
            self.assertAlmostEqual(result.acron_fee + result.net_value, result.gross_value)

    def test_zero_investment_uses_sentinels(self) -> None:
        result = evaluate(ParameterSet(investment_amount=0.0))

        self.assertEqual(result.payback_years, 0.0)
        self.assertEqual(result.roi, 0.0)
        self.assertEqual(result.payback_status, PAYBACK_NOT_APPLICABLE)

    def test_non_positive_net_never_pays_back(self) -> None:
        params = ParameterSet(
            battery_power_kw=0.0,
            include_estimates=False,
            self_consumption_without_battery_pct=60.0,
            self_consumption_with_battery_pct=40.0,
        )
        result = evaluate(params)

        self.assertLess(result.net_value, 0.0)
        self.assertEqual(result.payback_years, 0.0)
        self.assertLess(result.roi, 0.0)
        self.assertEqual(result.payback_status, PAYBACK_NEVER)

    def test_zero_gross_has_no_shares(self) -> None:
        params = ParameterSet(battery_power_kw=0.0, include_solar=False, include_estimates=False)
        result = evaluate(params)

        self.assertEqual(result.gross_value, 0.0)
        self.assertIsNone(result.stream_shares())
        self.assertGreater(params.investment_amount, 0.0)
        self.assertEqual(result.net_value, 0.0)
        self.assertEqual(result.payback_years, 0.0)
        self.assertEqual(result.payback_status, PAYBACK_NEVER)

    def test_shares_sum_to_one(self) -> None:
        shares = evaluate(ParameterSet()).stream_shares()

        self.assertIsNotNone(shares)
        self.assertEqual(set(shares), set(STREAM_KEYS))
        self.assertTrue(math.isclose(sum(shares.values()), 1.0))

    def test_streams_carry_gates_and_estimate_tags(self) -> None:
        result = evaluate(ParameterSet(include_solar=False, include_estimates=False))
        streams = {stream.key: stream for stream in result.streams()}

        self.assertTrue(streams["flexibility"].included)
        self.assertFalse(streams["solar"].included)
        self.assertFalse(streams["peak_shaving"].included)
        self.assertTrue(streams["peak_shaving"].is_estimate)
        self.assertTrue(streams["spot_arbitrage"].is_estimate)
        self.assertFalse(streams["flexibility"].is_estimate)
        self.assertEqual(streams["solar"].value, 0.0)

    def test_reference_engine_replaces_flexibility_only(self) -> None:
        params = ParameterSet()
        parametric = evaluate(params)
        reference = ValuationEngine(ValuationConfig(flexibility_model=ReferenceScaledFlexibility())).evaluate(params)

        self.assertAlmostEqual(reference.flexibility_income, 222_750.0)
        self.assertAlmostEqual(reference.solar_utilization_value, parametric.solar_utilization_value)
        self.assertAlmostEqual(reference.peak_shaving_value, parametric.peak_shaving_value)
        self.assertIsNone(reference.seasonal_breakdown)
        self.assertIsNotNone(parametric.seasonal_breakdown)

    def test_evaluation_is_deterministic(self) -> None:
        params = ParameterSet(battery_power_kw=410.0, investment_amount=2_000_000.0)

        self.assertEqual(evaluate(params), evaluate(params))

    def test_fee_rate_from_config(self) -> None:
        result = evaluate(ParameterSet(), ValuationConfig(fee_rate=0.2))

        self.assertAlmostEqual(result.acron_fee, result.gross_value * 0.2)


def test_parameter_set_is_frozen() -> None:
    params = ParameterSet()
    with pytest.raises(FrozenInstanceError):
        params.battery_power_kw = 300.0  # type: ignore[misc]


def test_replace_returns_new_instance() -> None:
    params = ParameterSet()
    changed = replace(params, battery_power_kw=300.0)

    assert params.battery_power_kw == 250.0
    assert changed.battery_power_kw == 300.0


def test_unknown_energy_basis_is_rejected() -> None:
    with pytest.raises(ValueError):
        ValuationConfig(energy_basis="volume")


if __name__ == "__main__":
    unittest.main()
