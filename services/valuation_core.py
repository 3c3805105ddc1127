"""Valuation engine for battery storage installations.

The engine maps a :class:`ParameterSet` to a :class:`ValuationResult` in a single
synchronous pass. It holds no state between calls; a deployment selects the
flexibility-income strategy and the usable-energy basis once, through
:class:`ValuationConfig`, and every evaluation re-derives all figures from the
current parameters.

Four revenue streams feed the gross annual value:

* flexibility market income (parametric seasonal accrual or reference scaling),
* increased solar self-consumption,
* peak shaving (estimate),
* spot-price arbitrage (estimate).

An operator fee is deducted from the gross value and the remaining net value
drives payback and ROI. Percentages travel as ``[0, 100]`` values and are only
converted to fractions where they are multiplied.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from utils.economics import (
    DEFAULT_FEE_RATE,
    DEFAULT_PEAK_SHAVING_RATE_PER_KW,
    DEFAULT_SPOT_ARBITRAGE_RATE_PER_KWH,
    DEFAULT_USABLE_CAPACITY_FRACTION,
    compute_fee,
    compute_payback_years,
    compute_roi,
    pct_to_fraction,
    resolve_payback_status,
    shares_of_gross,
)

# Defaults mirror the published calculator page.
FLEX_DEFAULTS: Dict[str, float] = {
    "activation_price_per_mwh": 10_000.0,
    "availability_price_per_mwh_per_hour": 200.0,
    "hours_per_day": 2.0,
    "activations_per_winter": 7.0,
    "summer_factor_pct": 50.0,
}

SOLAR_REFERENCE: Dict[str, Union[str, float]] = {
    "source": "Holskogveien 76 project example",
    "kwh_per_kwp": 895.0,
    "self_consumption_without_battery_pct": 30.0,
    "self_consumption_with_battery_pct": 43.0,
    "spot_price_per_kwh": 1.10,
}

STREAM_FLEXIBILITY = "flexibility"
STREAM_SOLAR = "solar"
STREAM_PEAK_SHAVING = "peak_shaving"
STREAM_SPOT_ARBITRAGE = "spot_arbitrage"
STREAM_KEYS = (STREAM_FLEXIBILITY, STREAM_SOLAR, STREAM_PEAK_SHAVING, STREAM_SPOT_ARBITRAGE)

STREAM_LABELS: Dict[str, str] = {
    STREAM_FLEXIBILITY: "Flexibility market",
    STREAM_SOLAR: "Increased solar utilization",
    STREAM_PEAK_SHAVING: "Peak shaving",
    STREAM_SPOT_ARBITRAGE: "Spot arbitrage",
}

ENERGY_BASIS_POWER = "power"
ENERGY_BASIS_CAPACITY = "capacity"
ENERGY_BASES = (ENERGY_BASIS_POWER, ENERGY_BASIS_CAPACITY)


@dataclass(frozen=True)
class ParameterSet:
    """User-adjustable inputs for one evaluation.

    Sizes are in kW / kWh / kWp, prices in the deployment currency, and every
    ``*_pct`` field is a ``[0, 100]`` percentage.
    """

    battery_power_kw: float = 250.0
    battery_capacity_kwh: Optional[float] = None
    activation_price_per_mwh: float = FLEX_DEFAULTS["activation_price_per_mwh"]
    availability_price_per_mwh_per_hour: float = FLEX_DEFAULTS["availability_price_per_mwh_per_hour"]
    hours_per_day: float = FLEX_DEFAULTS["hours_per_day"]
    activations_per_winter: float = FLEX_DEFAULTS["activations_per_winter"]
    summer_factor_pct: float = FLEX_DEFAULTS["summer_factor_pct"]
    include_solar: bool = True
    solar_capacity_kwp: float = 355.0
    spot_price_per_kwh: float = float(SOLAR_REFERENCE["spot_price_per_kwh"])
    solar_production_per_kwp: float = float(SOLAR_REFERENCE["kwh_per_kwp"])
    self_consumption_without_battery_pct: float = float(
        SOLAR_REFERENCE["self_consumption_without_battery_pct"]
    )
    self_consumption_with_battery_pct: float = float(SOLAR_REFERENCE["self_consumption_with_battery_pct"])
    include_estimates: bool = True
    investment_amount: float = 1_200_000.0

    @property
    def battery_power_mw(self) -> float:
        return self.battery_power_kw / 1000.0

    @property
    def annual_solar_production_kwh(self) -> float:
        return self.solar_capacity_kwp * self.solar_production_per_kwp

    @property
    def self_consumption_delta_pct(self) -> float:
        return self.self_consumption_with_battery_pct - self.self_consumption_without_battery_pct


@dataclass(frozen=True)
class SeasonSchedule:
    """Time multipliers used to scale an hourly availability price to a season."""

    days_per_week: float = 5.0
    weeks_per_month: float = 4.0
    winter_months: float = 6.0


@dataclass(frozen=True)
class SeasonalBreakdown:
    """Every intermediate amount of the parametric flexibility chain."""

    power_mw: float
    price_per_hour: float
    price_per_day: float
    price_per_week: float
    price_per_month: float
    price_per_winter: float
    price_per_summer: float
    availability_per_year: float
    activation_sum: float
    total: float
    schedule: SeasonSchedule = field(default_factory=SeasonSchedule)


@dataclass(frozen=True)
class ReferenceInstallation:
    """Yearly flexibility income of a reference installation.

    ``documented`` is only true for figures a deployment supplies from an
    audited installation; the built-in record is illustrative.
    """

    name: str
    battery_power_kw: float
    availability_income: float
    activation_income: float
    documented: bool = False

    @property
    def total_income(self) -> float:
        return self.availability_income + self.activation_income

    @property
    def rate_per_kw_year(self) -> float:
        if self.battery_power_kw <= 0:
            return 0.0
        return self.total_income / self.battery_power_kw


# Illustrative split of a 250 kW installation at 891 per kW per year.
REFERENCE_INSTALLATION = ReferenceInstallation(
    name="Illustrative 250 kW installation",
    battery_power_kw=250.0,
    availability_income=105_250.0,
    activation_income=117_500.0,
)
DEFAULT_REFERENCE_RATE_PER_KW = REFERENCE_INSTALLATION.rate_per_kw_year


@dataclass(frozen=True)
class ReferenceScaledDetail:
    """Flexibility detail for the reference-scaled model.

    The reference figures are informational passthrough; only ``rate_per_kw_year``
    and ``battery_power_kw`` produce ``total``.
    """

    battery_power_kw: float
    rate_per_kw_year: float
    total: float
    reference: ReferenceInstallation


FlexibilityDetail = Union[SeasonalBreakdown, ReferenceScaledDetail]


@dataclass(frozen=True)
class ParametricFlexibility:
    """Bottom-up seasonal accrual from user supplied market prices."""

    schedule: SeasonSchedule = field(default_factory=SeasonSchedule)
    kind: str = "parametric"

    def compute(self, params: ParameterSet) -> SeasonalBreakdown:
        power_mw = params.battery_power_mw
        price_per_hour = params.availability_price_per_mwh_per_hour * power_mw
        price_per_day = price_per_hour * params.hours_per_day
        price_per_week = price_per_day * self.schedule.days_per_week
        price_per_month = price_per_week * self.schedule.weeks_per_month
        price_per_winter = price_per_month * self.schedule.winter_months
        price_per_summer = price_per_winter * pct_to_fraction(params.summer_factor_pct)
        availability_per_year = price_per_winter + price_per_summer
        activation_sum = params.activation_price_per_mwh * power_mw * params.activations_per_winter
        return SeasonalBreakdown(
            power_mw=power_mw,
            price_per_hour=price_per_hour,
            price_per_day=price_per_day,
            price_per_week=price_per_week,
            price_per_month=price_per_month,
            price_per_winter=price_per_winter,
            price_per_summer=price_per_summer,
            availability_per_year=availability_per_year,
            activation_sum=activation_sum,
            total=availability_per_year + activation_sum,
            schedule=self.schedule,
        )


@dataclass(frozen=True)
class ReferenceScaledFlexibility:
    """Scale a per-kW yearly yield taken from a reference installation."""

    rate_per_kw_year: float = DEFAULT_REFERENCE_RATE_PER_KW
    reference: ReferenceInstallation = REFERENCE_INSTALLATION
    kind: str = "reference"

    def compute(self, params: ParameterSet) -> ReferenceScaledDetail:
        return ReferenceScaledDetail(
            battery_power_kw=params.battery_power_kw,
            rate_per_kw_year=self.rate_per_kw_year,
            total=params.battery_power_kw * self.rate_per_kw_year,
            reference=self.reference,
        )


FlexibilityModel = Union[ParametricFlexibility, ReferenceScaledFlexibility]


@dataclass(frozen=True)
class ValuationConfig:
    """Fixed constants and strategy choices for a deployment."""

    fee_rate: float = DEFAULT_FEE_RATE
    peak_shaving_rate_per_kw: float = DEFAULT_PEAK_SHAVING_RATE_PER_KW
    spot_arbitrage_rate_per_kwh: float = DEFAULT_SPOT_ARBITRAGE_RATE_PER_KWH
    usable_capacity_fraction: float = DEFAULT_USABLE_CAPACITY_FRACTION
    flexibility_model: FlexibilityModel = field(default_factory=ParametricFlexibility)
    energy_basis: str = ENERGY_BASIS_POWER

    def __post_init__(self) -> None:
        if self.energy_basis not in ENERGY_BASES:
            raise ValueError(f"energy_basis must be one of {ENERGY_BASES}")

    def usable_energy_kwh(self, params: ParameterSet) -> float:
        """Return the energy figure that sizes the spot-arbitrage estimate."""

        if self.energy_basis == ENERGY_BASIS_CAPACITY:
            if params.battery_capacity_kwh is None:
                return 0.0
            return params.battery_capacity_kwh * self.usable_capacity_fraction
        return params.battery_power_kw


@dataclass(frozen=True)
class RevenueStream:
    """One revenue line as consumed by the report and display layers."""

    key: str
    label: str
    value: float
    is_estimate: bool
    included: bool


@dataclass(frozen=True)
class ValuationResult:
    flexibility_income: float
    solar_utilization_value: float
    peak_shaving_value: float
    spot_arbitrage_value: float
    gross_value: float
    acron_fee: float
    net_value: float
    payback_years: float
    roi: float
    payback_status: str
    flexibility_detail: FlexibilityDetail
    include_solar: bool
    include_estimates: bool

    @property
    def stream_values(self) -> Dict[str, float]:
        return {
            STREAM_FLEXIBILITY: self.flexibility_income,
            STREAM_SOLAR: self.solar_utilization_value,
            STREAM_PEAK_SHAVING: self.peak_shaving_value,
            STREAM_SPOT_ARBITRAGE: self.spot_arbitrage_value,
        }

    @property
    def seasonal_breakdown(self) -> Optional[SeasonalBreakdown]:
        if isinstance(self.flexibility_detail, SeasonalBreakdown):
            return self.flexibility_detail
        return None

    def streams(self) -> Tuple[RevenueStream, ...]:
        """Return all four streams with their estimate tags and gate state."""

        included = {
            STREAM_FLEXIBILITY: True,
            STREAM_SOLAR: self.include_solar,
            STREAM_PEAK_SHAVING: self.include_estimates,
            STREAM_SPOT_ARBITRAGE: self.include_estimates,
        }
        return tuple(
            RevenueStream(
                key=key,
                label=STREAM_LABELS[key],
                value=value,
                is_estimate=key in (STREAM_PEAK_SHAVING, STREAM_SPOT_ARBITRAGE),
                included=included[key],
            )
            for key, value in self.stream_values.items()
        )

    def stream_shares(self) -> Optional[Dict[str, float]]:
        """Return each stream's share of gross value, or ``None`` when gross is zero."""

        return shares_of_gross(self.stream_values, self.gross_value)


def compute_solar_utilization_value(params: ParameterSet) -> float:
    """Value of the extra self-consumed solar energy enabled by the battery.

    A negative self-consumption delta yields a negative value; it is not clamped.
    """

    if not params.include_solar or params.solar_capacity_kwp <= 0:
        return 0.0
    additional_kwh = params.annual_solar_production_kwh * pct_to_fraction(params.self_consumption_delta_pct)
    return additional_kwh * params.spot_price_per_kwh


def compute_estimate_streams(params: ParameterSet, config: ValuationConfig) -> Tuple[float, float]:
    """Return ``(peak_shaving_value, spot_arbitrage_value)``; both zero when gated off."""

    if not params.include_estimates:
        return 0.0, 0.0
    peak_shaving_value = params.battery_power_kw * config.peak_shaving_rate_per_kw
    spot_arbitrage_value = config.usable_energy_kwh(params) * config.spot_arbitrage_rate_per_kwh
    return peak_shaving_value, spot_arbitrage_value


class ValuationEngine:
    """Pure evaluator bound to one :class:`ValuationConfig`."""

    def __init__(self, config: Optional[ValuationConfig] = None) -> None:
        self.config = config or ValuationConfig()

    def evaluate(self, params: ParameterSet) -> ValuationResult:
        cfg = self.config
        flexibility_detail = cfg.flexibility_model.compute(params)
        flexibility_income = flexibility_detail.total
        solar_utilization_value = compute_solar_utilization_value(params)
        peak_shaving_value, spot_arbitrage_value = compute_estimate_streams(params, cfg)

        gross_value = flexibility_income + solar_utilization_value + peak_shaving_value + spot_arbitrage_value
        acron_fee = compute_fee(gross_value, cfg.fee_rate)
        net_value = gross_value - acron_fee

        return ValuationResult(
            flexibility_income=flexibility_income,
            solar_utilization_value=solar_utilization_value,
            peak_shaving_value=peak_shaving_value,
            spot_arbitrage_value=spot_arbitrage_value,
            gross_value=gross_value,
            acron_fee=acron_fee,
            net_value=net_value,
            payback_years=compute_payback_years(params.investment_amount, net_value),
            roi=compute_roi(net_value, params.investment_amount),
            payback_status=resolve_payback_status(params.investment_amount, net_value),
            flexibility_detail=flexibility_detail,
            include_solar=params.include_solar,
            include_estimates=params.include_estimates,
        )


def evaluate(params: ParameterSet, config: Optional[ValuationConfig] = None) -> ValuationResult:
    """Convenience wrapper around :meth:`ValuationEngine.evaluate`."""

    return ValuationEngine(config).evaluate(params)
