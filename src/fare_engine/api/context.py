"""Context manifest — makes the fare engine API self-describing.

``GET /context`` returns the input sections with their constraints, the
key formulas and the endpoint list, so a dashboard or script can discover
what to send without reading the code.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from fare_engine import __version__
from fare_engine.config import (
    PolicyConfig,
    RateConfig,
    RevenueTarget,
    RideParameters,
    Scenario,
    TripRecord,
)


class ParameterInfo(BaseModel):
    """One configurable parameter, machine-readable."""
    name: str
    type: str
    default: Any
    description: str
    constraints: dict[str, Any] = Field(default_factory=dict)


class SectionSchema(BaseModel):
    """Schema for one input section (e.g. rates, target)."""
    section: str
    description: str
    parameters: list[ParameterInfo]


class EndpointInfo(BaseModel):
    """Description of one API endpoint."""
    method: str
    path: str
    description: str


class EngineContext(BaseModel):
    """Self-describing manifest."""
    name: str
    version: str
    description: str
    key_formulas: list[dict[str, str]]
    input_sections: list[SectionSchema]
    endpoints: list[EndpointInfo]


def _get_field_metadata(field_info: Any, attr: str) -> Any:
    """Extract constraint metadata from Pydantic field info."""
    for m in getattr(field_info, "metadata", []):
        if hasattr(m, attr):
            return getattr(m, attr)
    return None


def _extract_params(model_cls: type[BaseModel]) -> list[ParameterInfo]:
    """Extract parameter info from a Pydantic model class."""
    params: list[ParameterInfo] = []
    for name, field_info in model_cls.model_fields.items():
        constraints: dict[str, Any] = {}
        for attr in ("ge", "gt", "le", "lt"):
            meta_val = _get_field_metadata(field_info, attr)
            if meta_val is not None:
                constraints[attr] = meta_val

        default = field_info.default
        default_val = default if default is not None and not callable(default) else None
        if not isinstance(default_val, (str, int, float, bool, type(None))):
            default_val = None

        type_str = str(field_info.annotation) if field_info.annotation else "Any"
        type_str = type_str.replace("typing.", "").replace("<class '", "").replace("'>", "")

        params.append(ParameterInfo(
            name=name,
            type=type_str,
            default=default_val,
            description=field_info.description or "",
            constraints=constraints,
        ))
    return params


_KEY_FORMULAS = [
    {"name": "subtotal", "formula": "base_fare + per_km × distance_km + per_min × duration_min"},
    {"name": "surge", "formula": "max(manual_surge, peak or night multiplier of the ride's band) — never the product"},
    {"name": "total", "formula": "max(subtotal × surge × (1 + gst% / 100), min_fare)"},
    {"name": "quoted_total", "formula": "max(round_half_up(total / 5) × 5, min_fare)"},
    {"name": "commission", "formula": "fare × platform_fee% / 100; driver base = fare − commission"},
    {"name": "platform_net", "formula": "commission − commission × processor_fee% / 100"},
    {"name": "trips_needed_per_month", "formula": "ceil(monthly_profit_target / average cut per trip)"},
    {"name": "break_even_commission", "formula": "clamp(5, 25, need / (avg fare × monthly trips) × 100)"},
]

_ENDPOINTS = [
    EndpointInfo(method="GET", path="/context", description="This manifest"),
    EndpointInfo(method="GET", path="/schema", description="JSON Schema of Scenario"),
    EndpointInfo(method="GET", path="/scenario/defaults", description="Default Scenario as JSON"),
    EndpointInfo(method="POST", path="/fare/quote", description="Fare breakdown + quoted total for one rate and ride"),
    EndpointInfo(method="POST", path="/fare/compare", description="Quote every rate for one ride"),
    EndpointInfo(method="POST", path="/payout/split", description="Split one fare between platform, driver, processor"),
    EndpointInfo(method="POST", path="/analyze", description="Full analysis of a (partial) scenario"),
    EndpointInfo(method="POST", path="/analyze/narrative", description="Analysis as plain-English text"),
    EndpointInfo(method="POST", path="/sensitivity", description="Tornado of rate fields vs. per-trip platform net"),
]

_INPUT_SECTIONS = [
    ("rates", RateConfig, "One rate config per vehicle type — fare build-up, surge, commission, incentives"),
    ("trips", TripRecord, "Trip records from the backend; only completed trips are aggregated"),
    ("target", RevenueTarget, "Monthly profit target and operating cost"),
    ("ride", RideParameters, "What-if ride for the simulator"),
    ("policy", PolicyConfig, "Processor fee, rounding units, guardrails and calendar"),
]


def build_context(detail_level: Literal["compact", "full"] = "full") -> EngineContext:
    """Build the manifest.  ``compact`` omits the formulas."""
    sections = [
        SectionSchema(section=name, description=desc, parameters=_extract_params(model_cls))
        for name, model_cls, desc in _INPUT_SECTIONS
    ]
    return EngineContext(
        name="Ride-hailing Fare Engine",
        version=__version__,
        description=(
            "Prices rides from rate configs, splits fares between platform, driver and "
            "payment processor, projects trips needed for a profit target and suggests "
            "commission or fare changes per vehicle type."
        ),
        key_formulas=_KEY_FORMULAS if detail_level == "full" else [],
        input_sections=sections,
        endpoints=_ENDPOINTS,
    )


def get_scenario_schema() -> dict:
    """Return the full JSON Schema for Scenario."""
    return Scenario.model_json_schema()


def get_default_scenario() -> dict:
    """Return default Scenario as a JSON-serializable dict."""
    return Scenario().model_dump(mode="json")
