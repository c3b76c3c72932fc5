"""Tests for period aggregation (engine/aggregate.py).

All windows are computed against NOW = 2025-03-15 17:30 IST (see conftest).
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

import pytest

from conftest import NOW, make_trip
from fare_engine.config import PolicyConfig, RateConfig
from fare_engine.engine.aggregate import aggregate_trips, build_rate_index, summarise
from fare_engine.engine.payout import split_payout


# ═══════════════════════════════════════════════════════════════════════════
# Rate index
# ═══════════════════════════════════════════════════════════════════════════

class TestRateIndex:

    def test_lowercase_keys(self, rates):
        assert set(build_rate_index(rates)) == {"car", "bike", "auto"}

    def test_first_rate_wins(self):
        first = RateConfig(vehicle_type="Car", platform_fee_percent=10)
        second = RateConfig(vehicle_type="car", platform_fee_percent=25)
        assert build_rate_index([first, second])["car"] is first


# ═══════════════════════════════════════════════════════════════════════════
# Period windows
# ═══════════════════════════════════════════════════════════════════════════

class TestPeriods:

    def test_seven_days(self, trips, rates):
        report = aggregate_trips(trips, rates, "7d", now=NOW)
        agg = report.overall
        # car 100 + truck 100 today, car 200 three days ago
        assert agg.trip_count == 3
        assert agg.gross_revenue == pytest.approx(400)
        # car 10% of 300, truck falls back to the default 10% of 100
        assert agg.platform_earnings == pytest.approx(40)
        assert agg.driver_payouts == pytest.approx(360)
        assert agg.processor_fees == pytest.approx(0.8)
        assert agg.platform_net == pytest.approx(39.2)
        assert agg.average_fare_per_trip == pytest.approx(400 / 3)
        assert agg.average_cut_per_trip == pytest.approx(40 / 3)
        assert agg.period_days == 7
        assert agg.monthly_trips == 13  # 3 / 7 × 30 = 12.86

    def test_thirty_days_includes_older_trips(self, trips, rates):
        report = aggregate_trips(trips, rates, "30d", now=NOW)
        assert report.overall.trip_count == 4
        assert report.overall.period_days == 30
        assert report.overall.monthly_trips == 4

    def test_today(self, trips, rates):
        report = aggregate_trips(trips, rates, "today", now=NOW)
        assert report.overall.trip_count == 2
        assert report.overall.period_days == 1
        assert report.overall.monthly_trips == 60

    def test_all_spans_from_earliest_trip(self, trips, rates):
        report = aggregate_trips(trips, rates, "all", now=NOW)
        assert report.overall.trip_count == 5
        assert report.overall.period_days == 41
        assert report.overall.monthly_trips == 4  # 5 / 41 × 30 = 3.66

    def test_cancelled_trips_ignored(self, rates):
        report = aggregate_trips(
            [make_trip("car", 500, status="cancelled"), make_trip("car", 500, status="requested")],
            rates, "all", now=NOW,
        )
        assert report.overall.trip_count == 0
        assert report.overall.gross_revenue == 0

    def test_empty_history(self, rates):
        report = aggregate_trips([], rates, "all", now=NOW)
        assert report.overall.trip_count == 0
        assert report.overall.average_cut_per_trip == 0
        assert report.overall.period_days == 30
        assert report.by_vehicle == {}
        assert len(report.daily) == 14
        assert all(p.trips == 0 for p in report.daily)


# ═══════════════════════════════════════════════════════════════════════════
# Day boundaries
# ═══════════════════════════════════════════════════════════════════════════

class TestDayBoundaries:

    def test_local_midnight(self, rates):
        # 18:29 UTC = 23:59 IST on the 14th; 18:31 UTC = 00:01 IST on the 15th
        before = make_trip("car", 100, created_at=datetime(2025, 3, 14, 18, 29, tzinfo=timezone.utc))
        after = make_trip("car", 100, created_at=datetime(2025, 3, 14, 18, 31, tzinfo=timezone.utc))
        report = aggregate_trips([before, after], rates, "today", now=NOW)
        assert report.overall.trip_count == 1

    def test_naive_timestamps_are_utc(self, rates):
        naive = make_trip("car", 100, created_at=datetime(2025, 3, 15, 12, 0))
        report = aggregate_trips([naive], rates, "today", now=NOW)
        assert report.overall.trip_count == 1

    def test_offset_from_policy(self, rates):
        # At UTC+0 the 18:31 UTC trip belongs to the 14th, not "today"
        trip = make_trip("car", 100, created_at=datetime(2025, 3, 14, 18, 31, tzinfo=timezone.utc))
        report = aggregate_trips([trip], rates, "today", now=NOW, policy=PolicyConfig(utc_offset_minutes=0))
        assert report.overall.trip_count == 0


# ═══════════════════════════════════════════════════════════════════════════
# Breakdown by vehicle, payment, today and the daily series
# ═══════════════════════════════════════════════════════════════════════════

class TestBreakdowns:

    def test_vehicle_match_is_case_insensitive(self, trips, rates):
        report = aggregate_trips(trips, rates, "30d", now=NOW)
        # "BIKE" trip matched to the "Bike" rate at 20%
        assert report.by_vehicle["bike"].platform_earnings == pytest.approx(10)

    def test_unmatched_types_reported(self, trips, rates):
        report = aggregate_trips(trips, rates, "7d", now=NOW)
        assert report.unmatched_vehicle_types == ["truck"]
        assert report.by_vehicle["truck"].platform_earnings == pytest.approx(10)

    def test_default_fee_for_unmatched_from_policy(self, rates):
        policy = PolicyConfig(default_platform_fee_percent=25)
        report = aggregate_trips([make_trip("truck", 100)], rates, "today", now=NOW, policy=policy)
        assert report.overall.platform_earnings == pytest.approx(25)

    def test_by_vehicle_sums_to_overall(self, trips, rates):
        report = aggregate_trips(trips, rates, "all", now=NOW)
        assert sum(v.trip_count for v in report.by_vehicle.values()) == report.overall.trip_count
        assert sum(v.platform_net for v in report.by_vehicle.values()) == pytest.approx(report.overall.platform_net)

    def test_paid_and_unpaid(self, trips, rates):
        agg = aggregate_trips(trips, rates, "7d", now=NOW).overall
        assert agg.paid_trips == 2
        assert agg.unpaid_trips == 1
        assert agg.paid_revenue == pytest.approx(200)
        assert agg.unpaid_revenue == pytest.approx(200)

    def test_final_fare_preferred(self, rates):
        trip = make_trip("car", 100, final_fare=120)
        report = aggregate_trips([trip], rates, "today", now=NOW)
        assert report.overall.gross_revenue == 120

    def test_today_independent_of_period(self, trips, rates):
        report = aggregate_trips(trips, rates, "30d", now=NOW)
        assert report.today.trip_count == 2
        assert report.today.gross_revenue == pytest.approx(200)

    def test_daily_series(self, trips, rates):
        report = aggregate_trips(trips, rates, "30d", now=NOW)
        assert len(report.daily) == 14
        assert report.daily[-1].day == date(2025, 3, 15)
        assert report.daily[-1].trips == 2
        assert report.daily[0].day == date(2025, 3, 2)
        # 40-day-old trip is outside the series
        assert sum(p.trips for p in report.daily) == 4

    def test_consistent_with_single_split(self, car_rate):
        trips = [make_trip("car", fare) for fare in (85, 120.5, 47)]
        report = aggregate_trips(trips, [car_rate], "today", now=NOW)
        expected = sum(split_payout(t.fare, car_rate).platform_net for t in trips)
        assert report.overall.platform_net == pytest.approx(expected)

    def test_logs_unmatched_count(self, trips, rates, caplog):
        with caplog.at_level(logging.DEBUG, logger="fare_engine.engine.aggregate"):
            aggregate_trips(trips, rates, "7d", now=NOW)
        assert "1 unmatched vehicle types" in caplog.text


class TestSummarise:

    def test_empty(self):
        agg = summarise([], period_days=7)
        assert agg.trip_count == 0
        assert agg.average_fare_per_trip == 0
        assert agg.monthly_trips == 0

    def test_period_days_floor_of_one(self, car_rate):
        trip = make_trip("car", 100)
        agg = summarise([(trip, split_payout(100, car_rate))], period_days=0)
        assert agg.period_days == 1
        assert agg.monthly_trips == 30
