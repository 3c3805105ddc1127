"""Sweep utilities used by both the Streamlit app, the API and tests."""
from __future__ import annotations

from dataclasses import fields, replace
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from services.valuation_core import ParameterSet, ValuationConfig, ValuationEngine
from utils.validation import check_parameters

SWEEP_COLUMNS = [
    "flexibility_income",
    "solar_utilization_value",
    "peak_shaving_value",
    "spot_arbitrage_value",
    "gross_value",
    "acron_fee",
    "net_value",
    "payback_years",
    "roi",
    "payback_status",
]


def sweepable_fields() -> List[str]:
    """Return the numeric :class:`ParameterSet` fields a sweep may vary."""

    return [f.name for f in fields(ParameterSet) if f.type not in ("bool", bool)]


def generate_values(min_value: float, max_value: float, steps: int) -> List[float]:
    """Return an inclusive list of evenly spaced values.

    When ``steps`` is ``1``, the midpoint is returned to keep the sweep centered.
    """

    steps = max(1, int(steps))
    if steps == 1:
        return [float((min_value + max_value) / 2.0)]
    if max_value <= min_value:
        return [float(min_value)]
    return [float(v) for v in np.linspace(min_value, max_value, steps)]


def sweep_parameter(
    base: ParameterSet,
    field_name: str,
    values: Iterable[float],
    config: Optional[ValuationConfig] = None,
) -> pd.DataFrame:
    """Evaluate ``base`` once per value of ``field_name``.

    Every row is a full re-evaluation; the other parameters stay as in ``base``.
    Each swept parameter set passes through :func:`check_parameters` first and
    a ``ValueError`` lists every rejected value before anything is evaluated.
    """

    if field_name not in sweepable_fields():
        raise ValueError(f"Cannot sweep '{field_name}'; choose one of {sweepable_fields()}")

    config = config or ValuationConfig()
    candidates = [(float(value), replace(base, **{field_name: float(value)})) for value in values]
    problems = []
    for value, params in candidates:
        check = check_parameters(params, config)
        if not check.is_valid:
            problems.append(f"{field_name}={value}: " + "; ".join(check.errors))
    if problems:
        raise ValueError("Invalid sweep values: " + " | ".join(problems))

    engine = ValuationEngine(config)
    rows = []
    for value, params in candidates:
        result = engine.evaluate(params)
        row = {field_name: float(value)}
        row.update({col: getattr(result, col) for col in SWEEP_COLUMNS})
        rows.append(row)

    return pd.DataFrame(rows, columns=[field_name] + SWEEP_COLUMNS)
