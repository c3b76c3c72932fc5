"""Shared test fixtures — rate configs, trips and a pinned clock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from fare_engine.config import (
    PaymentInfo,
    PolicyConfig,
    RateConfig,
    RevenueTarget,
    RideParameters,
    TripRecord,
)

# 17:30 IST on 15 March 2025, "today" for every aggregation test.
NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


def make_trip(
    vehicle_type: str = "car",
    fare: float = 100.0,
    *,
    days_ago: float = 0,
    status: str = "completed",
    collected: bool = True,
    final_fare: float | None = None,
    created_at: datetime | None = None,
) -> TripRecord:
    """Trip record dated ``days_ago`` days before NOW."""
    return TripRecord(
        status=status,
        vehicle_type=vehicle_type,
        fare=fare,
        final_fare=final_fare,
        payment=PaymentInfo(collected=collected, method="upi" if collected else None),
        created_at=created_at or NOW - timedelta(days=days_ago),
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def policy() -> PolicyConfig:
    return PolicyConfig()


@pytest.fixture
def car_rate() -> RateConfig:
    return RateConfig(
        vehicle_type="car",
        base_fare=30,
        per_km=8,
        per_min=1,
        min_fare=40,
        platform_fee_percent=10,
    )


@pytest.fixture
def bike_rate() -> RateConfig:
    return RateConfig(
        vehicle_type="Bike",
        base_fare=20,
        per_km=5,
        per_min=0.5,
        min_fare=25,
        platform_fee_percent=20,
    )


@pytest.fixture
def auto_rate() -> RateConfig:
    return RateConfig(
        vehicle_type="auto",
        base_fare=25,
        per_km=7,
        per_min=0.75,
        min_fare=35,
        platform_fee_percent=15,
    )


@pytest.fixture
def rates(car_rate, bike_rate, auto_rate) -> list[RateConfig]:
    return [car_rate, bike_rate, auto_rate]


@pytest.fixture
def standard_ride() -> RideParameters:
    """5 km / 15 min, normal band → car fare of exactly ₹85."""
    return RideParameters(distance_km=5, duration_min=15, time_of_day="normal")


@pytest.fixture
def target() -> RevenueTarget:
    return RevenueTarget(monthly_profit_target=50_000, monthly_operating_cost=2_000)


@pytest.fixture
def trips() -> list[TripRecord]:
    """Mixed history around NOW.

    today:        car 100 (paid), truck 100 (paid, no rate), car 999 (cancelled)
    3 days ago:   car 200 (unpaid)
    10 days ago:  BIKE 50
    40 days ago:  car 80
    """
    return [
        make_trip("car", 100),
        make_trip("truck", 100),
        make_trip("car", 999, status="cancelled"),
        make_trip("car", 200, days_ago=3, collected=False),
        make_trip("BIKE", 50, days_ago=10),
        make_trip("car", 80, days_ago=40),
    ]
