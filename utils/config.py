"""Deployment configuration for the valuation engine and its front ends.

Each setting is read from an environment variable and falls back to the
built-in default. Invalid values are logged and ignored so a typo in a
deployment never takes the calculator down.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from services.valuation_core import (
    ENERGY_BASES,
    ENERGY_BASIS_POWER,
    REFERENCE_INSTALLATION,
    ParametricFlexibility,
    ReferenceInstallation,
    ReferenceScaledFlexibility,
    ValuationConfig,
)
from utils.economics import (
    DEFAULT_FEE_RATE,
    DEFAULT_PEAK_SHAVING_RATE_PER_KW,
    DEFAULT_SPOT_ARBITRAGE_RATE_PER_KWH,
)

FLEX_MODEL_PARAMETRIC = "parametric"
FLEX_MODEL_REFERENCE = "reference"
FLEX_MODELS = (FLEX_MODEL_PARAMETRIC, FLEX_MODEL_REFERENCE)

DEFAULT_LOCALE = "nb-NO"
DEFAULT_CURRENCY = "NOK"


@dataclass(frozen=True)
class DisplaySettings:
    """Presentation settings handed to the UI and report layers."""

    locale: str = DEFAULT_LOCALE
    currency: str = DEFAULT_CURRENCY
    logo_path: Optional[Path] = None


def _read_choice(environ: Mapping[str, str], name: str, choices: tuple, default: str) -> str:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value not in choices:
        logging.getLogger(__name__).warning(
            "Ignoring %s=%r; expected one of %s. Using %r.", name, raw, choices, default
        )
        return default
    return value


def _read_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip().replace(",", "."))
    except ValueError:
        value = float("nan")
    if not math.isfinite(value) or value < 0:
        logging.getLogger(__name__).warning(
            "Ignoring %s=%r; expected a non-negative number. Using %s.", name, raw, default
        )
        return default
    return value


def _read_reference(environ: Mapping[str, str]) -> ReferenceInstallation:
    name = (environ.get("ACRON_REFERENCE_NAME") or "").strip()
    if not name:
        return REFERENCE_INSTALLATION
    power_kw = _read_float(environ, "ACRON_REFERENCE_POWER_KW", 0.0)
    if power_kw <= 0:
        logging.getLogger(__name__).warning(
            "Ignoring ACRON_REFERENCE_NAME=%r without a positive ACRON_REFERENCE_POWER_KW; "
            "using the illustrative reference installation.",
            name,
        )
        return REFERENCE_INSTALLATION
    return ReferenceInstallation(
        name=name,
        battery_power_kw=power_kw,
        availability_income=_read_float(environ, "ACRON_REFERENCE_AVAILABILITY_INCOME", 0.0),
        activation_income=_read_float(environ, "ACRON_REFERENCE_ACTIVATION_INCOME", 0.0),
        documented=True,
    )


def load_valuation_config(environ: Optional[Mapping[str, str]] = None) -> ValuationConfig:
    """Build the :class:`ValuationConfig` for this deployment.

    Recognized variables: ``ACRON_FLEX_MODEL`` (``parametric`` | ``reference``),
    ``ACRON_ENERGY_BASIS`` (``power`` | ``capacity``), ``ACRON_FEE_RATE``,
    ``ACRON_PEAK_SHAVING_RATE``, ``ACRON_SPOT_ARBITRAGE_RATE`` and
    ``ACRON_REFERENCE_RATE``. A documented reference installation is read from
    ``ACRON_REFERENCE_NAME``, ``ACRON_REFERENCE_POWER_KW``,
    ``ACRON_REFERENCE_AVAILABILITY_INCOME`` and ``ACRON_REFERENCE_ACTIVATION_INCOME``;
    its yield becomes the default rate.
    """

    env = os.environ if environ is None else environ
    flex_kind = _read_choice(env, "ACRON_FLEX_MODEL", FLEX_MODELS, FLEX_MODEL_PARAMETRIC)
    if flex_kind == FLEX_MODEL_REFERENCE:
        reference = _read_reference(env)
        flexibility_model = ReferenceScaledFlexibility(
            rate_per_kw_year=_read_float(env, "ACRON_REFERENCE_RATE", reference.rate_per_kw_year),
            reference=reference,
        )
    else:
        flexibility_model = ParametricFlexibility()

    return ValuationConfig(
        fee_rate=_read_float(env, "ACRON_FEE_RATE", DEFAULT_FEE_RATE),
        peak_shaving_rate_per_kw=_read_float(env, "ACRON_PEAK_SHAVING_RATE", DEFAULT_PEAK_SHAVING_RATE_PER_KW),
        spot_arbitrage_rate_per_kwh=_read_float(
            env, "ACRON_SPOT_ARBITRAGE_RATE", DEFAULT_SPOT_ARBITRAGE_RATE_PER_KWH
        ),
        flexibility_model=flexibility_model,
        energy_basis=_read_choice(env, "ACRON_ENERGY_BASIS", ENERGY_BASES, ENERGY_BASIS_POWER),
    )


def load_display_settings(environ: Optional[Mapping[str, str]] = None) -> DisplaySettings:
    """Return locale, currency and logo settings (``ACRON_LOCALE``, ``ACRON_CURRENCY``, ``ACRON_LOGO_PATH``)."""

    env = os.environ if environ is None else environ
    logo_raw = (env.get("ACRON_LOGO_PATH") or "").strip()
    return DisplaySettings(
        locale=(env.get("ACRON_LOCALE") or "").strip() or DEFAULT_LOCALE,
        currency=(env.get("ACRON_CURRENCY") or "").strip().upper() or DEFAULT_CURRENCY,
        logo_path=Path(logo_raw) if logo_raw else None,
    )


def describe_config(config: ValuationConfig) -> dict:
    """Return a JSON-friendly summary of the active configuration."""

    model = config.flexibility_model
    summary = {
        "flexibility_model": model.kind,
        "energy_basis": config.energy_basis,
        "fee_rate": config.fee_rate,
        "peak_shaving_rate_per_kw": config.peak_shaving_rate_per_kw,
        "spot_arbitrage_rate_per_kwh": config.spot_arbitrage_rate_per_kwh,
        "usable_capacity_fraction": config.usable_capacity_fraction,
    }
    if isinstance(model, ReferenceScaledFlexibility):
        summary["reference_rate_per_kw_year"] = model.rate_per_kw_year
        summary["reference_installation"] = {
            "name": model.reference.name,
            "battery_power_kw": model.reference.battery_power_kw,
            "availability_income": model.reference.availability_income,
            "activation_income": model.reference.activation_income,
            "total_income": model.reference.total_income,
            "documented": model.reference.documented,
        }
    else:
        summary["season_schedule"] = {
            "days_per_week": model.schedule.days_per_week,
            "weeks_per_month": model.schedule.weeks_per_month,
            "winter_months": model.schedule.winter_months,
        }
    return summary
