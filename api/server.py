from __future__ import annotations

import os
from dataclasses import asdict
from datetime import date
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field, model_validator

from frontend.ui.pdf import build_valuation_report, report_filename
from services.valuation_core import (
    ParameterSet,
    ReferenceScaledDetail,
    ValuationConfig,
    ValuationEngine,
    ValuationResult,
)
from utils.config import DisplaySettings, describe_config, load_display_settings, load_valuation_config
from utils.flags import TAG_DEFINITIONS, build_limitation_notes, stream_tag
from utils.sweeps import generate_values, sweep_parameter
from utils.validation import check_parameters

_DEFAULT_PARAMS = ParameterSet()


class ParameterSetPayload(BaseModel):
    """Pydantic mirror of :class:`ParameterSet` for FastAPI requests."""

    model_config = ConfigDict(allow_inf_nan=False, extra="forbid")

    battery_power_kw: float = Field(_DEFAULT_PARAMS.battery_power_kw, ge=0)
    battery_capacity_kwh: Optional[float] = Field(_DEFAULT_PARAMS.battery_capacity_kwh, ge=0)
    activation_price_per_mwh: float = Field(_DEFAULT_PARAMS.activation_price_per_mwh, ge=0)
    availability_price_per_mwh_per_hour: float = Field(_DEFAULT_PARAMS.availability_price_per_mwh_per_hour, ge=0)
    hours_per_day: float = Field(_DEFAULT_PARAMS.hours_per_day, ge=0)
    activations_per_winter: float = Field(_DEFAULT_PARAMS.activations_per_winter, ge=0)
    summer_factor_pct: float = Field(_DEFAULT_PARAMS.summer_factor_pct, ge=0, le=100)
    include_solar: bool = _DEFAULT_PARAMS.include_solar
    solar_capacity_kwp: float = Field(_DEFAULT_PARAMS.solar_capacity_kwp, ge=0)
    spot_price_per_kwh: float = Field(_DEFAULT_PARAMS.spot_price_per_kwh, ge=0)
    solar_production_per_kwp: float = Field(_DEFAULT_PARAMS.solar_production_per_kwp, ge=0)
    self_consumption_without_battery_pct: float = Field(
        _DEFAULT_PARAMS.self_consumption_without_battery_pct, ge=0, le=100
    )
    self_consumption_with_battery_pct: float = Field(_DEFAULT_PARAMS.self_consumption_with_battery_pct, ge=0, le=100)
    include_estimates: bool = _DEFAULT_PARAMS.include_estimates
    investment_amount: float = Field(_DEFAULT_PARAMS.investment_amount, ge=0)

    def to_params(self) -> ParameterSet:
        return ParameterSet(**self.model_dump())


class ReportRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    parameters: ParameterSetPayload = Field(default_factory=ParameterSetPayload)
    locale: Optional[str] = None
    currency: Optional[str] = None


class SweepRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    parameters: ParameterSetPayload = Field(default_factory=ParameterSetPayload)
    parameter: str = "battery_power_kw"
    values: Optional[List[float]] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    steps: int = Field(5, ge=1, le=100)

    @model_validator(mode="after")
    def _require_values_or_range(self) -> "SweepRequest":
        if not self.values and (self.min_value is None or self.max_value is None):
            raise ValueError("Provide either 'values' or both 'min_value' and 'max_value'.")
        return self


@lru_cache(maxsize=1)
def get_valuation_config() -> ValuationConfig:
    return load_valuation_config()


@lru_cache(maxsize=1)
def get_display_settings() -> DisplaySettings:
    return load_display_settings()


def _checked_params(payload: ParameterSetPayload, config: ValuationConfig) -> tuple[ParameterSet, List[str]]:
    params = payload.to_params()
    check = check_parameters(params, config)
    if not check.is_valid:
        raise HTTPException(status_code=400, detail=check.errors)
    return params, list(check.warnings)


def _serialize_result(result: ValuationResult) -> Dict[str, Any]:
    return {
        "flexibility_income": result.flexibility_income,
        "solar_utilization_value": result.solar_utilization_value,
        "peak_shaving_value": result.peak_shaving_value,
        "spot_arbitrage_value": result.spot_arbitrage_value,
        "gross_value": result.gross_value,
        "acron_fee": result.acron_fee,
        "net_value": result.net_value,
        "payback_years": result.payback_years,
        "roi": result.roi,
        "payback_status": result.payback_status,
    }


def _serialize_streams(result: ValuationResult) -> List[Dict[str, Any]]:
    shares = result.stream_shares()
    return [
        {
            "key": stream.key,
            "label": stream.label,
            "value": stream.value,
            "share": shares[stream.key] if shares is not None else None,
            "is_estimate": stream.is_estimate,
            "included": stream.included,
            "tag": stream_tag(stream.key, result),
        }
        for stream in result.streams()
    ]


def _serialize_detail(result: ValuationResult) -> Dict[str, Any]:
    detail = result.flexibility_detail
    data = asdict(detail)
    data["kind"] = "reference" if isinstance(detail, ReferenceScaledDetail) else "parametric"
    return data


app = FastAPI(
    title="Acron Valuation API",
    description="REST API for battery storage profitability calculations outside Streamlit.",
    version="0.1.0",
)


_default_cors_origins = [
    # Vite dev/preview servers
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
]
_allowed_origins_env = os.getenv("ACRON_CORS_ORIGINS", "")
_allowed_origins = [
    origin.strip()
    for origin in _allowed_origins_env.split(",")
    if origin.strip()
] or _default_cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, str]:
    """Liveness check for container orchestrators."""
    return {"status": "ok"}


@app.get("/config")
def config_summary(config: ValuationConfig = Depends(get_valuation_config)) -> Dict[str, Any]:
    """Return the active deployment configuration, default inputs and tag meanings."""

    return {
        "config": describe_config(config),
        "defaults": ParameterSetPayload().model_dump(),
        "tags": TAG_DEFINITIONS,
    }


@app.post("/valuation")
def valuation(
    payload: ParameterSetPayload,
    config: ValuationConfig = Depends(get_valuation_config),
) -> Dict[str, Any]:
    """Evaluate one parameter set and return every figure the calculator shows."""

    params, warnings = _checked_params(payload, config)
    result = ValuationEngine(config).evaluate(params)
    return {
        "warnings": warnings,
        "result": _serialize_result(result),
        "streams": _serialize_streams(result),
        "flexibility_detail": _serialize_detail(result),
        "payback_status": result.payback_status,
        "limitations": build_limitation_notes(params, result),
    }


@app.post("/report")
def report(
    request: ReportRequest,
    config: ValuationConfig = Depends(get_valuation_config),
    settings: DisplaySettings = Depends(get_display_settings),
) -> Response:
    """Render the PDF report for one parameter set."""

    params, _ = _checked_params(request.parameters, config)
    result = ValuationEngine(config).evaluate(params)
    today = date.today()
    pdf_bytes = build_valuation_report(
        params,
        result,
        config,
        locale=request.locale or settings.locale,
        currency=request.currency or settings.currency,
        logo_path=settings.logo_path,
        generated_on=today,
    )
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(params, today)}"'},
    )


@app.post("/sweep")
def sweep(
    request: SweepRequest,
    config: ValuationConfig = Depends(get_valuation_config),
) -> Dict[str, Any]:
    """Re-evaluate the parameter set across values of one numeric field."""

    params, warnings = _checked_params(request.parameters, config)
    values = request.values or generate_values(request.min_value, request.max_value, request.steps)
    try:
        results_df = sweep_parameter(params, request.parameter, values, config)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "warnings": warnings,
        "parameter": request.parameter,
        "rows": results_df.to_dict(orient="records"),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=False)
