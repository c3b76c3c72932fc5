"""FastAPI server — HTTP access to the fare engine.

Run with:
    uvicorn fare_engine.api.server:app --reload --port 8000

Or:
    python -m fare_engine.api.server

Endpoints:
    GET  /context              — self-describing manifest (formulas + input schemas)
    GET  /schema               — full JSON Schema for Scenario inputs
    GET  /scenario/defaults    — complete default scenario as JSON
    POST /fare/quote           — breakdown + quoted total for one rate and ride
    POST /fare/compare         — quote every rate for one ride
    POST /payout/split         — split one realized fare
    POST /analyze              — full analysis of a partial or full Scenario
    POST /analyze/narrative    — analysis as plain-English text
    POST /sensitivity          — rate tornado for one rate and ride
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Literal

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from fare_engine import __version__
from fare_engine.api.context import build_context, get_default_scenario, get_scenario_schema
from fare_engine.api.narrative import generate_narrative
from fare_engine.config import PolicyConfig, RateConfig, RideParameters, Scenario
from fare_engine.engine.orchestrator import compare_vehicles, quote_vehicle, run_analysis
from fare_engine.engine.payout import split_payout
from fare_engine.finance.sensitivity import run_rate_sensitivity
from fare_engine.logging_setup import setup_logging
from fare_engine.models.results import AnalysisResult
from fare_engine.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

app = FastAPI(
    title="Ride-hailing Fare Engine API",
    version=__version__,
    description=(
        "Fare computation, payout split, target projection and rate suggestions "
        "for the operations dashboard. Start with GET /context."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════════════════════
# Request / response models
# ═══════════════════════════════════════════════════════════════════════════

class QuoteRequest(BaseModel):
    """Request body for /fare/quote."""
    rate: RateConfig
    ride: RideParameters = Field(default_factory=RideParameters)
    policy: PolicyConfig | None = None


class CompareRequest(BaseModel):
    """Request body for /fare/compare."""
    rates: list[RateConfig]
    ride: RideParameters = Field(default_factory=RideParameters)
    policy: PolicyConfig | None = None


class SplitRequest(BaseModel):
    """Request body for /payout/split."""
    total_fare: float = Field(ge=0, description="Realized fare (₹)")
    rate: RateConfig
    policy: PolicyConfig | None = None


class AnalyzeRequest(BaseModel):
    """Request body for /analyze. All fields optional — defaults used for missing."""
    scenario: dict[str, Any] = Field(
        default_factory=dict,
        description="Partial or full Scenario JSON. Missing sections use defaults. "
                    "Example: {'target': {'monthlyProfitTarget': 80000}, 'period': '7d'}",
    )
    now: datetime | None = Field(
        default=None,
        description="Pin 'today' for reproducible period windows. Defaults to server time.",
    )


class SensitivityRequest(BaseModel):
    """Request body for /sensitivity."""
    rate: RateConfig
    ride: RideParameters = Field(default_factory=RideParameters)
    policy: PolicyConfig | None = None
    sweep_params: list[dict[str, Any]] | None = Field(
        default=None,
        description="Optional override of sweep parameters. "
                    "Format: [{'name': 'Per km', 'path': 'per_km', 'low_pct': -0.2, 'high_pct': 0.2}]",
    )


class AnalyzeResponse(BaseModel):
    """Response from /analyze."""
    result: dict[str, Any]
    narrative: str = ""


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def _policy(policy: PolicyConfig | None) -> PolicyConfig:
    return policy if policy is not None else settings.default_policy()


def _build_scenario(overrides: dict[str, Any]) -> Scenario:
    """Build a Scenario from partial overrides; missing sections use defaults."""
    data = dict(overrides)
    data.setdefault("policy", settings.default_policy())
    try:
        return Scenario.model_validate(data)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=json.loads(exc.json(include_url=False))) from exc


def _analyze(req: AnalyzeRequest) -> AnalysisResult:
    scenario = _build_scenario(req.scenario)
    logger.info(
        "Analysis: %d trips, %d rates, period=%s",
        len(scenario.trips), len(scenario.rates), scenario.period,
    )
    return run_analysis(scenario, now=req.now)


# ═══════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
def health_check():
    """Health check for deployment platforms."""
    return {"status": "ok"}


@app.get("/")
def root():
    """API root — returns a welcome message and pointer to /context."""
    return {
        "name": "Ride-hailing Fare Engine API",
        "version": __version__,
        "start_here": "GET /context?detail_level=full",
        "docs": "GET /docs (interactive Swagger UI)",
    }


@app.get("/context")
def get_context(
    detail_level: Literal["compact", "full"] = Query(
        default="full",
        description="'compact' for schemas only, 'full' adds key formulas",
    ),
):
    """Self-describing manifest: input sections, constraints, formulas, endpoints."""
    return build_context(detail_level)


@app.get("/schema")
def get_schema():
    """Full JSON Schema for Scenario."""
    return get_scenario_schema()


@app.get("/scenario/defaults")
def get_defaults():
    """Complete default Scenario as JSON. Use as a starting point for modifications."""
    return get_default_scenario()


@app.post("/fare/quote")
def fare_quote(req: QuoteRequest):
    """Price one ride: itemised breakdown, quoted total and payout split."""
    return quote_vehicle(req.rate, req.ride, _policy(req.policy)).model_dump(mode="json")


@app.post("/fare/compare")
def fare_compare(req: CompareRequest):
    """Quote every rate for the same ride."""
    rows = compare_vehicles(req.rates, req.ride, _policy(req.policy))
    return {"quotes": [row.model_dump(mode="json") for row in rows]}


@app.post("/payout/split")
def payout_split(req: SplitRequest):
    """Split one realized fare between platform, driver and processor."""
    return split_payout(req.total_fare, req.rate, _policy(req.policy)).model_dump(mode="json")


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(req: AnalyzeRequest):
    """Run aggregation, target projection, suggestions and levers.

    Example minimal request:
    ```json
    {"scenario": {"target": {"monthlyProfitTarget": 80000}, "period": "7d"}}
    ```
    """
    result = _analyze(req)
    return AnalyzeResponse(
        result=result.model_dump(mode="json"),
        narrative=generate_narrative(result),
    )


@app.post("/analyze/narrative")
def analyze_narrative(req: AnalyzeRequest):
    """Same as /analyze but returns the narrative and headline metrics only."""
    result = _analyze(req)
    gap = result.gap
    return {
        "narrative": generate_narrative(result),
        "headline_metrics": {
            "trips": result.report.overall.trip_count,
            "platform_net": round(result.report.overall.platform_net, 2),
            "progress_percent": gap.progress_percent,
            "trips_needed_per_day": gap.trips_needed_per_day,
            "deficit": round(gap.deficit, 2),
        },
    }


@app.post("/sensitivity")
def sensitivity(req: SensitivityRequest):
    """Sweep rate fields and rank them by their effect on per-trip platform net."""
    sweeps = None
    if req.sweep_params:
        try:
            sweeps = [
                (sp.get("name", sp["path"]), sp["path"], sp.get("low_pct", -0.10), sp.get("high_pct", 0.10))
                for sp in req.sweep_params
            ]
        except KeyError as exc:
            raise HTTPException(status_code=422, detail=f"sweep_params entry missing {exc}") from exc

    result = run_rate_sensitivity(req.rate, req.ride, _policy(req.policy), sweeps)
    return {
        **result.model_dump(mode="json"),
        "interpretation": (
            "Sorted by absolute per-trip net impact (largest first). "
            "Fields at the top move platform earnings the most."
        ),
    }


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn

    setup_logging(settings.log_level, settings.json_logs)
    uvicorn.run(
        "fare_engine.api.server:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
    )


if __name__ == "__main__":
    main()
