import unittest

from utils.economics import (
    PAYBACK_NEVER,
    PAYBACK_NOT_APPLICABLE,
    PAYBACK_STATUSES,
    PAYBACK_YEARS,
    compute_fee,
    compute_payback_years,
    compute_roi,
    pct_to_fraction,
    resolve_payback_status,
    share_of_gross,
    shares_of_gross,
)


class EconomicHelperTests(unittest.TestCase):
    def test_pct_to_fraction(self) -> None:
        self.assertEqual(pct_to_fraction(50.0), 0.5)
        self.assertEqual(pct_to_fraction(0.0), 0.0)

    def test_fee_is_rate_of_gross(self) -> None:
        self.assertAlmostEqual(compute_fee(100_000.0, 0.15), 15_000.0)
        self.assertAlmostEqual(compute_fee(-1_000.0, 0.15), -150.0)

    def test_payback_years_when_defined(self) -> None:
        self.assertAlmostEqual(compute_payback_years(1_200_000.0, 100_000.0), 12.0)

    def test_payback_sentinel_without_investment_or_net(self) -> None:
        self.assertEqual(compute_payback_years(0.0, 100_000.0), 0.0)
        self.assertEqual(compute_payback_years(1_000_000.0, 0.0), 0.0)
        self.assertEqual(compute_payback_years(1_000_000.0, -5_000.0), 0.0)

    def test_roi_keeps_sign_of_net(self) -> None:
        self.assertAlmostEqual(compute_roi(100_000.0, 1_000_000.0), 0.1)
        self.assertAlmostEqual(compute_roi(-50_000.0, 1_000_000.0), -0.05)
        self.assertEqual(compute_roi(100_000.0, 0.0), 0.0)

    def test_payback_status_distinguishes_sentinels(self) -> None:
        self.assertEqual(resolve_payback_status(1_000_000.0, 50_000.0), PAYBACK_YEARS)
        self.assertEqual(resolve_payback_status(0.0, 50_000.0), PAYBACK_NOT_APPLICABLE)
        self.assertEqual(resolve_payback_status(0.0, -50_000.0), PAYBACK_NOT_APPLICABLE)
        self.assertEqual(resolve_payback_status(1_000_000.0, 0.0), PAYBACK_NEVER)

    def test_payback_status_is_always_a_known_value(self) -> None:
        for investment in (0.0, 1.0, 1_000_000.0):
            for net in (-1.0, 0.0, 1.0, 1e9):
                self.assertIn(resolve_payback_status(investment, net), PAYBACK_STATUSES)
        self.assertEqual(len(set(PAYBACK_STATUSES)), 3)

    def test_share_of_gross_undefined_for_zero_gross(self) -> None:
        self.assertIsNone(share_of_gross(10.0, 0.0))
        self.assertIsNone(share_of_gross(10.0, float("nan")))
        self.assertAlmostEqual(share_of_gross(25.0, 100.0), 0.25)

    def test_shares_of_gross(self) -> None:
        shares = shares_of_gross({"a": 30.0, "b": 70.0}, 100.0)

        self.assertEqual(shares, {"a": 0.3, "b": 0.7})
        self.assertIsNone(shares_of_gross({"a": 0.0}, 0.0))


if __name__ == "__main__":
    unittest.main()
