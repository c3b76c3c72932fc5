"""Top-level scenario — bundles every input of one analysis run."""

from typing import Literal

from pydantic import BaseModel, Field

from fare_engine.config.rate import RateConfig
from fare_engine.config.ride import RideParameters
from fare_engine.config.target import RevenueTarget
from fare_engine.config.trip import TripRecord
from fare_engine.config.policy import PolicyConfig

Period = Literal["today", "7d", "30d", "all"]


def _default_rates() -> list[RateConfig]:
    return [
        RateConfig(vehicle_type="bike", base_fare=20, per_km=5, per_min=0.5, min_fare=25),
        RateConfig(vehicle_type="auto", base_fare=25, per_km=7, per_min=0.75, min_fare=35),
        RateConfig(vehicle_type="car", base_fare=30, per_km=8, per_min=1, min_fare=40),
    ]


class Scenario(BaseModel):
    """Complete input bundle for one money-flow analysis.

    ``rates`` and ``trips`` are whatever snapshot the data layer delivered;
    the engine recomputes deterministically from them.
    """

    rates: list[RateConfig] = Field(default_factory=_default_rates)
    trips: list[TripRecord] = Field(default_factory=list)
    target: RevenueTarget = Field(default_factory=RevenueTarget)
    ride: RideParameters = Field(default_factory=RideParameters, description="What-if ride for the simulator")
    selected_vehicle_type: str | None = Field(
        default=None,
        description="Rate used by the what-if simulator. None = first rate.",
    )
    period: Period = Field(default="30d", description="Window of completed trips to aggregate")
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
