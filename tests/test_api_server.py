from __future__ import annotations

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from api.server import (
    ParameterSetPayload,
    ReportRequest,
    SweepRequest,
    config_summary,
    health,
    report,
    sweep,
    valuation,
)
from services.valuation_core import ENERGY_BASIS_CAPACITY, ReferenceScaledFlexibility, ValuationConfig
from utils.config import DisplaySettings

_CONFIG = ValuationConfig()


def test_health() -> None:
    assert health() == {"status": "ok"}


def test_config_summary_lists_defaults_and_tags() -> None:
    response = config_summary(config=_CONFIG)

    assert response["config"]["flexibility_model"] == "parametric"
    assert response["defaults"]["battery_power_kw"] == 250.0
    assert set(response["tags"]) == {"verified", "user_supplied", "estimate"}


def test_valuation_with_defaults() -> None:
    response = valuation(ParameterSetPayload(), config=_CONFIG)

    assert response["warnings"] == []
    assert response["result"]["flexibility_income"] == pytest.approx(35_500.0)
    assert response["payback_status"] == "years"
    assert response["flexibility_detail"]["kind"] == "parametric"
    assert [s["key"] for s in response["streams"]] == ["flexibility", "solar", "peak_shaving", "spot_arbitrage"]
    assert sum(s["share"] for s in response["streams"]) == pytest.approx(1.0)
    assert response["limitations"][-1].startswith("Contact Acron")


def test_valuation_zero_gross_returns_null_shares() -> None:
    payload = ParameterSetPayload(battery_power_kw=0.0, include_solar=False, include_estimates=False)
    response = valuation(payload, config=_CONFIG)

    assert response["result"]["gross_value"] == 0.0
    assert all(s["share"] is None for s in response["streams"])
    assert response["warnings"]


def test_valuation_reference_model_detail() -> None:
    config = ValuationConfig(flexibility_model=ReferenceScaledFlexibility())
    response = valuation(ParameterSetPayload(), config=config)

    assert response["flexibility_detail"]["kind"] == "reference"
    assert response["flexibility_detail"]["reference"]["name"] == "Illustrative 250 kW installation"
    assert response["flexibility_detail"]["reference"]["documented"] is False
    assert any("illustrative" in note for note in response["limitations"])
    assert response["streams"][0]["tag"] == "verified"


def test_capacity_basis_without_capacity_is_rejected() -> None:
    config = ValuationConfig(energy_basis=ENERGY_BASIS_CAPACITY)

    with pytest.raises(HTTPException) as excinfo:
        valuation(ParameterSetPayload(), config=config)

    assert excinfo.value.status_code == 400


def test_payload_rejects_out_of_range_percent() -> None:
    with pytest.raises(ValidationError):
        ParameterSetPayload(summer_factor_pct=150.0)
    with pytest.raises(ValidationError):
        ParameterSetPayload(unknown_field=1.0)


def test_report_returns_pdf_attachment() -> None:
    response = report(ReportRequest(locale="en-US"), config=_CONFIG, settings=DisplaySettings())

    assert response.media_type == "application/pdf"
    assert response.body.startswith(b"%PDF")
    assert "acron-profitability-250kW-" in response.headers["content-disposition"]


def test_sweep_with_range() -> None:
    request = SweepRequest(parameter="battery_power_kw", min_value=100.0, max_value=300.0, steps=3)
    response = sweep(request, config=_CONFIG)

    assert [row["battery_power_kw"] for row in response["rows"]] == [100.0, 200.0, 300.0]


def test_sweep_with_explicit_values_and_unknown_field() -> None:
    response = sweep(SweepRequest(parameter="spot_price_per_kwh", values=[0.5, 1.5]), config=_CONFIG)
    assert len(response["rows"]) == 2

    with pytest.raises(HTTPException) as excinfo:
        sweep(SweepRequest(parameter="include_solar", values=[1.0]), config=_CONFIG)
    assert excinfo.value.status_code == 400


def test_sweep_requires_values_or_range() -> None:
    with pytest.raises(ValidationError):
        SweepRequest(parameter="battery_power_kw")


def test_sweep_rejects_out_of_range_values() -> None:
    request = SweepRequest(parameter="summer_factor_pct", values=[500.0, -40.0])

    with pytest.raises(HTTPException) as excinfo:
        sweep(request, config=_CONFIG)

    assert excinfo.value.status_code == 400
    assert "summer_factor_pct=500.0" in excinfo.value.detail
    assert "summer_factor_pct=-40.0" in excinfo.value.detail


def test_sweep_rejects_negative_range_bound() -> None:
    request = SweepRequest(parameter="battery_power_kw", min_value=-100.0, max_value=100.0, steps=3)

    with pytest.raises(HTTPException) as excinfo:
        sweep(request, config=_CONFIG)

    assert excinfo.value.status_code == 400


@pytest.mark.parametrize("bad", [float("nan"), float("inf")])
def test_sweep_request_rejects_non_finite_numbers(bad: float) -> None:
    with pytest.raises(ValidationError):
        SweepRequest(parameter="battery_power_kw", values=[bad])
    with pytest.raises(ValidationError):
        SweepRequest(parameter="battery_power_kw", min_value=0.0, max_value=bad)
