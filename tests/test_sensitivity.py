"""Tests for levers, the rate tornado and the fare curve (finance/sensitivity.py)."""

from __future__ import annotations

import numpy as np
import pytest

from fare_engine.finance.sensitivity import (
    DEFAULT_SWEEPS,
    compute_lever_impacts,
    fare_curve,
    run_rate_sensitivity,
)
from fare_engine.models.results import AggregateReport, PeriodAggregate


def _report(avg_cut: float = 10.0) -> AggregateReport:
    car = PeriodAggregate(
        trip_count=300,
        average_fare_per_trip=100,
        average_cut_per_trip=avg_cut,
        monthly_trips=300,
    )
    return AggregateReport(
        period="30d",
        overall=car,
        by_vehicle={"car": car},
        today=PeriodAggregate(),
        daily=[],
    )


def _impacts(levers) -> dict[str, float]:
    return {lever.key: lever.monthly_impact for lever in levers}


# ═══════════════════════════════════════════════════════════════════════════
# Levers
# ═══════════════════════════════════════════════════════════════════════════

class TestLevers:

    def test_four_levers(self, car_rate):
        levers = compute_lever_impacts(_report(), [car_rate])
        assert [lever.key for lever in levers] == ["commission", "base_fare", "volume", "incentives"]

    def test_values(self, car_rate):
        rate = car_rate.model_copy(update={"per_ride_incentive": 5})
        impacts = _impacts(compute_lever_impacts(_report(), [rate]))
        assert impacts["commission"] == pytest.approx(300)   # 100 × 1% × 300
        assert impacts["base_fare"] == pytest.approx(300)    # 10 × 10% × 300
        assert impacts["volume"] == pytest.approx(3_000)     # 10 × 30 × 10
        assert impacts["incentives"] == pytest.approx(1_500)  # 5 × 300

    def test_base_fare_lever_includes_gst(self, car_rate):
        rate = car_rate.model_copy(update={"gst_percent": 5})
        impacts = _impacts(compute_lever_impacts(_report(), [rate]))
        assert impacts["base_fare"] == pytest.approx(315)

    def test_custom_steps(self, car_rate):
        levers = compute_lever_impacts(
            _report(), [car_rate],
            commission_step_percent=2, base_fare_step=5, extra_trips_per_day=20,
        )
        impacts = _impacts(levers)
        assert impacts["commission"] == pytest.approx(600)
        assert impacts["base_fare"] == pytest.approx(150)
        assert impacts["volume"] == pytest.approx(6_000)
        assert levers[0].label == "+2% commission"

    def test_volume_without_history(self, car_rate):
        empty = AggregateReport(period="30d", overall=PeriodAggregate(), by_vehicle={},
                                today=PeriodAggregate(), daily=[])
        assert _impacts(compute_lever_impacts(empty, [car_rate], fallback_cut_per_trip=8))["volume"] == pytest.approx(2_400)
        assert _impacts(compute_lever_impacts(empty, [car_rate]))["volume"] == pytest.approx(6_000)

    def test_types_without_trips_contribute_nothing(self, car_rate, bike_rate):
        with_bike = _impacts(compute_lever_impacts(_report(), [car_rate, bike_rate]))
        car_only = _impacts(compute_lever_impacts(_report(), [car_rate]))
        assert with_bike == car_only


# ═══════════════════════════════════════════════════════════════════════════
# Tornado
# ═══════════════════════════════════════════════════════════════════════════

class TestRateSensitivity:

    def test_default_sweep(self, car_rate, standard_ride):
        result = run_rate_sensitivity(car_rate, standard_ride)
        assert len(result.bars) == len(DEFAULT_SWEEPS)
        assert result.vehicle_type == "car"
        assert result.base_net_per_trip == pytest.approx(8.33)

    def test_sorted_by_swing(self, car_rate, standard_ride):
        bars = run_rate_sensitivity(car_rate, standard_ride).bars
        deltas = [bar.delta_net for bar in bars]
        assert deltas == sorted(deltas, reverse=True)
        # commission and surge each swing the whole fare by ±10%
        assert {bars[0].param_path, bars[1].param_path} == {"platform_fee_percent", "manual_surge"}
        assert bars[-1].param_path == "per_min"

    def test_values_move_in_expected_direction(self, car_rate, standard_ride):
        for bar in run_rate_sensitivity(car_rate, standard_ride).bars:
            assert bar.low_value < bar.base_value < bar.high_value
            assert bar.net_at_low < bar.net_at_high

    def test_percent_capped(self, car_rate, standard_ride):
        rate = car_rate.model_copy(update={"platform_fee_percent": 95})
        bars = run_rate_sensitivity(rate, standard_ride, sweeps=[("Fee", "platform_fee_percent", -0.1, 0.1)]).bars
        assert bars[0].high_value == 100

    def test_unknown_field_skipped(self, car_rate, standard_ride):
        result = run_rate_sensitivity(car_rate, standard_ride, sweeps=[("Nope", "not_a_field", -0.1, 0.1)])
        assert result.bars == []

    def test_input_rate_untouched(self, car_rate, standard_ride):
        before = car_rate.model_copy()
        run_rate_sensitivity(car_rate, standard_ride)
        assert car_rate == before


# ═══════════════════════════════════════════════════════════════════════════
# Fare curve
# ═══════════════════════════════════════════════════════════════════════════

class TestFareCurve:

    def test_default_grid(self, car_rate):
        xs, ys = fare_curve(car_rate)
        assert len(xs) == 30
        assert xs[0] == 1 and xs[-1] == 30
        assert np.all(np.diff(ys) >= 0)

    def test_custom_distances(self, car_rate):
        xs, ys = fare_curve(car_rate, [-1, 0, 2, 4], minutes_per_km=3)
        assert list(xs) == [2, 4]
        # 30 + 8×2 + 1×6
        assert ys[0] == pytest.approx(52)
        assert ys[1] == pytest.approx(74)

    def test_min_fare_flattens_short_end(self, car_rate):
        _, ys = fare_curve(car_rate, [0.1, 0.2], minutes_per_km=0)
        assert list(ys) == [40, 40]

    def test_peak_band(self, car_rate):
        rate = car_rate.model_copy(update={"peak_multiplier": 2})
        _, normal = fare_curve(rate, [10])
        _, peak = fare_curve(rate, [10], time_of_day="peak")
        assert peak[0] == pytest.approx(normal[0] * 2)
