"""Configuration models — every engine input type."""

from fare_engine.config.rate import RateConfig
from fare_engine.config.ride import RideParameters, TimeOfDay
from fare_engine.config.target import RevenueTarget
from fare_engine.config.trip import PaymentInfo, TripRecord
from fare_engine.config.policy import PolicyConfig
from fare_engine.config.scenario import Period, Scenario

__all__ = [
    "RateConfig",
    "RideParameters",
    "TimeOfDay",
    "RevenueTarget",
    "PaymentInfo",
    "TripRecord",
    "PolicyConfig",
    "Period",
    "Scenario",
]
