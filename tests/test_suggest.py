"""Tests for the rate suggester (finance/suggest.py)."""

from __future__ import annotations

import pytest

from conftest import NOW, make_trip
from fare_engine.config import PolicyConfig, RateConfig, RevenueTarget
from fare_engine.engine.aggregate import aggregate_trips
from fare_engine.finance.suggest import suggest_rate_change, suggest_rates, vehicle_volume_shares
from fare_engine.finance.target import project_target
from fare_engine.models.results import AggregateReport, PeriodAggregate


@pytest.fixture
def car_volume() -> PeriodAggregate:
    """300 trips a month at ₹100 average."""
    return PeriodAggregate(trip_count=300, average_fare_per_trip=100, period_days=30, monthly_trips=300)


@pytest.fixture
def gap(target):
    """Monthly requirement of ₹52,000 (50,000 target + 2,000 operating cost)."""
    return project_target(PeriodAggregate(), target)


def _report(by_vehicle: dict[str, int]) -> AggregateReport:
    total = sum(by_vehicle.values())
    return AggregateReport(
        period="30d",
        overall=PeriodAggregate(trip_count=total),
        by_vehicle={k: PeriodAggregate(trip_count=n) for k, n in by_vehicle.items()},
        today=PeriodAggregate(),
        daily=[],
    )


# ═══════════════════════════════════════════════════════════════════════════
# Volume shares
# ═══════════════════════════════════════════════════════════════════════════

class TestVolumeShares:

    def test_by_trip_count(self, rates):
        shares = vehicle_volume_shares(_report({"car": 3, "bike": 1}), rates)
        assert shares["car"] == pytest.approx(0.75)
        assert shares["bike"] == pytest.approx(0.25)

    def test_zero_volume_type_gets_equal_share(self, rates):
        shares = vehicle_volume_shares(_report({"car": 3, "bike": 1}), rates)
        assert shares["auto"] == pytest.approx(1 / 3)

    def test_no_trips_at_all(self, rates):
        shares = vehicle_volume_shares(_report({}), rates)
        assert all(share == pytest.approx(1 / 3) for share in shares.values())

    def test_no_rates(self):
        assert vehicle_volume_shares(_report({"car": 1}), []) == {}


# ═══════════════════════════════════════════════════════════════════════════
# Single suggestion
# ═══════════════════════════════════════════════════════════════════════════

class TestSuggestRateChange:

    def test_allocation_and_current(self, car_volume, car_rate, gap):
        sug = suggest_rate_change(car_volume, car_rate, gap, 0.5)
        assert sug.has_volume_data is True
        assert sug.allocated_need == pytest.approx(26_000)
        assert sug.current_monthly_commission == pytest.approx(3_000)
        assert sug.gap == pytest.approx(23_000)
        assert sug.progress_percent == 12
        assert sug.status == "low"

    def test_commission_clamped_to_bands(self, car_volume, car_rate, gap):
        # 26,000 / 30,000 = 86.7%, far outside the guardrails
        sug = suggest_rate_change(car_volume, car_rate, gap, 0.5)
        assert sug.break_even_commission_percent == 25
        assert sug.profit_commission_percent == 30
        assert sug.projected_monthly_earnings == pytest.approx(7_500)

    def test_commission_clamped_below(self, car_volume, car_rate, gap):
        share = 600 / 52_000  # need ₹600 on ₹30,000 of volume = 2%
        sug = suggest_rate_change(car_volume, car_rate, gap, share)
        assert sug.break_even_commission_percent == 5
        assert sug.profit_commission_percent == 5
        assert sug.status == "good"

    def test_commission_inside_band(self, car_volume, car_rate, gap):
        share = 4_500 / 52_000  # 15% break-even, 18% with buffer
        sug = suggest_rate_change(car_volume, car_rate, gap, share)
        assert sug.break_even_commission_percent == pytest.approx(15)
        assert sug.profit_commission_percent == pytest.approx(18)

    def test_fare_route(self, car_volume, car_rate, gap):
        sug = suggest_rate_change(car_volume, car_rate, gap, 0.5, reference_distance_km=5)
        # extra per trip = 23,000 / 300 / 10% = ₹766.67
        assert sug.suggested_base_fare == 795
        assert sug.suggested_per_km == 161.5

    def test_short_reference_distance_floored(self, car_volume, car_rate, gap):
        share = 3_600 / 52_000  # shortfall 600 → ₹20 extra per trip
        sug = suggest_rate_change(car_volume, car_rate, gap, share, reference_distance_km=1)
        # 20 / max(1, 3) = 6.67 → 8 + 6.67 = 14.67 → ₹14.5
        assert sug.suggested_per_km == 14.5
        assert sug.suggested_base_fare == 50

    def test_ok_status(self, car_volume, car_rate, gap):
        share = 3_200 / 52_000
        assert suggest_rate_change(car_volume, car_rate, gap, share).status == "ok"

    def test_no_volume_keeps_current_rate(self, car_rate, gap):
        sug = suggest_rate_change(PeriodAggregate(), car_rate, gap, 1 / 3)
        assert sug.has_volume_data is False
        assert sug.break_even_commission_percent == 10
        assert sug.profit_commission_percent == 10
        assert sug.suggested_base_fare == car_rate.base_fare
        assert sug.suggested_per_km == car_rate.per_km
        assert sug.projected_monthly_earnings == 0
        assert sug.status == "low"

    def test_zero_fee_fare_route_unchanged(self, car_volume, gap):
        rate = RateConfig(vehicle_type="car", base_fare=30, per_km=8, platform_fee_percent=0)
        sug = suggest_rate_change(car_volume, rate, gap, 0.5)
        assert sug.suggested_base_fare == 30
        assert sug.suggested_per_km == 8

    def test_custom_guardrails(self, car_volume, car_rate, gap):
        policy = PolicyConfig(break_even_commission_max=40, profit_commission_max=50)
        sug = suggest_rate_change(car_volume, car_rate, gap, 0.5, policy=policy)
        assert sug.break_even_commission_percent == 40
        assert sug.profit_commission_percent == 50


# ═══════════════════════════════════════════════════════════════════════════
# All vehicles
# ═══════════════════════════════════════════════════════════════════════════

class TestSuggestRates:

    def test_one_per_rate_in_order(self, rates, trips):
        report = aggregate_trips(trips, rates, "30d", now=NOW)
        gap = project_target(report.overall, RevenueTarget())
        suggestions = suggest_rates(report, rates, gap)
        assert [s.vehicle_type for s in suggestions] == ["car", "Bike", "auto"]
        assert suggestions[0].has_volume_data is True
        assert suggestions[1].has_volume_data is True
        assert suggestions[2].has_volume_data is False

    def test_empty_history(self, rates):
        report = aggregate_trips([], rates, "30d", now=NOW)
        gap = project_target(report.overall, RevenueTarget(), fallback_cut_per_trip=5)
        suggestions = suggest_rates(report, rates, gap)
        assert len(suggestions) == 3
        assert all(not s.has_volume_data for s in suggestions)
        assert all(s.volume_share == pytest.approx(1 / 3) for s in suggestions)

    def test_duplicate_rate_types_collapse(self, car_rate):
        report = aggregate_trips([make_trip("car", 100)], [car_rate], "today", now=NOW)
        gap = project_target(report.overall, RevenueTarget())
        duplicate = car_rate.model_copy(update={"platform_fee_percent": 30})
        suggestions = suggest_rates(report, [car_rate, duplicate], gap)
        assert len(suggestions) == 1
        assert suggestions[0].current_commission_percent == 10
