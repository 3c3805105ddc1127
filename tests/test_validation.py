import unittest

from services.valuation_core import ENERGY_BASIS_CAPACITY, ParameterSet, ValuationConfig
from utils.validation import check_parameters


class CheckParametersTests(unittest.TestCase):
    def test_defaults_are_valid_without_warnings(self) -> None:
        check = check_parameters(ParameterSet(), ValuationConfig())

        self.assertTrue(check.is_valid)
        self.assertEqual(check.warnings, [])

    def test_non_finite_values_are_errors(self) -> None:
        check = check_parameters(ParameterSet(spot_price_per_kwh=float("nan")), ValuationConfig())

        self.assertFalse(check.is_valid)
        self.assertIn("spot_price_per_kwh must be a finite number", check.errors)

    def test_negative_and_out_of_range_values(self) -> None:
        params = ParameterSet(battery_power_kw=-10.0, summer_factor_pct=120.0)
        check = check_parameters(params, ValuationConfig())

        self.assertIn("battery_power_kw must be non-negative", check.errors)
        self.assertIn("summer_factor_pct must be between 0 and 100", check.errors)

    def test_capacity_basis_requires_capacity(self) -> None:
        config = ValuationConfig(energy_basis=ENERGY_BASIS_CAPACITY)

        self.assertFalse(check_parameters(ParameterSet(), config).is_valid)
        self.assertTrue(check_parameters(ParameterSet(battery_capacity_kwh=500.0), config).is_valid)
        self.assertFalse(check_parameters(ParameterSet(battery_capacity_kwh=-1.0), config).is_valid)

    def test_capacity_not_required_on_power_basis(self) -> None:
        self.assertTrue(check_parameters(ParameterSet(battery_capacity_kwh=None), ValuationConfig()).is_valid)

    def test_warnings_do_not_block(self) -> None:
        params = ParameterSet(
            battery_power_kw=0.0,
            investment_amount=0.0,
            self_consumption_without_battery_pct=50.0,
            self_consumption_with_battery_pct=40.0,
        )
        check = check_parameters(params, ValuationConfig())

        self.assertTrue(check.is_valid)
        self.assertEqual(len(check.warnings), 3)

    def test_negative_solar_delta_ignored_when_solar_off(self) -> None:
        params = ParameterSet(
            include_solar=False,
            self_consumption_without_battery_pct=50.0,
            self_consumption_with_battery_pct=40.0,
        )

        self.assertEqual(check_parameters(params, ValuationConfig()).warnings, [])


if __name__ == "__main__":
    unittest.main()
