"""Period aggregation — completed trips → revenue / commission / payout totals.

Every trip is priced through ``split_payout`` with the rate of its vehicle
type (matched case-insensitively), so aggregates and single-ride splits
can never drift apart.  Day boundaries are local midnights at
``policy.utc_offset_minutes``; naive timestamps are read as UTC.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

from fare_engine.config.policy import PolicyConfig
from fare_engine.config.rate import RateConfig
from fare_engine.config.scenario import Period
from fare_engine.config.trip import TripRecord
from fare_engine.engine.payout import split_payout
from fare_engine.models.results import (
    AggregateReport,
    DailyPoint,
    PayoutSplit,
    PeriodAggregate,
)

logger = logging.getLogger(__name__)

_WINDOW_DAYS: dict[str, int] = {"today": 1, "7d": 7, "30d": 30}


def _to_local(moment: datetime, tz: timezone) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def build_rate_index(rates: Iterable[RateConfig]) -> dict[str, RateConfig]:
    """Map lowercase vehicle type → rate.  The first rate for a type wins."""
    index: dict[str, RateConfig] = {}
    for rate in rates:
        index.setdefault(rate.key, rate)
    return index


def summarise(
    entries: list[tuple[TripRecord, PayoutSplit]],
    period_days: int,
    days_per_month: int = 30,
) -> PeriodAggregate:
    """Fold priced trips into one ``PeriodAggregate``."""
    trip_count = len(entries)
    gross = sum(split.gross_fare for _, split in entries)
    commission = sum(split.platform_commission for _, split in entries)
    driver_base = sum(split.driver_base_payout for _, split in entries)
    incentives = sum(split.driver_incentive for _, split in entries)
    processor = sum(split.processor_fee for _, split in entries)
    net = sum(split.platform_net for _, split in entries)

    paid = [split.gross_fare for trip, split in entries if trip.payment.collected]
    unpaid = [split.gross_fare for trip, split in entries if not trip.payment.collected]

    period_days = max(period_days, 1)
    monthly_trips = math.floor(trip_count / period_days * days_per_month + 0.5)

    return PeriodAggregate(
        trip_count=trip_count,
        gross_revenue=gross,
        platform_earnings=commission,
        driver_payouts=driver_base,
        driver_incentives=incentives,
        processor_fees=processor,
        platform_net=net,
        average_fare_per_trip=gross / trip_count if trip_count > 0 else 0.0,
        average_cut_per_trip=commission / trip_count if trip_count > 0 else 0.0,
        paid_trips=len(paid),
        unpaid_trips=len(unpaid),
        paid_revenue=sum(paid),
        unpaid_revenue=sum(unpaid),
        period_days=period_days,
        monthly_trips=monthly_trips,
    )


def aggregate_trips(
    trips: Iterable[TripRecord],
    rates: Iterable[RateConfig],
    period: Period = "30d",
    now: datetime | None = None,
    policy: PolicyConfig | None = None,
) -> AggregateReport:
    """Aggregate completed trips over ``period`` ending today.

    ``now`` pins "today" for reproducible runs; it defaults to the current
    time.  Trips dated after today are ignored by the windowed periods and
    counted by ``"all"``.
    """
    policy = policy or PolicyConfig()
    tz = timezone(timedelta(minutes=policy.utc_offset_minutes))
    now_local = _to_local(now or datetime.now(timezone.utc), tz)
    today_start = now_local.replace(hour=0, minute=0, second=0, microsecond=0)
    today_end = today_start + timedelta(days=1)

    rate_index = build_rate_index(rates)
    unmatched: set[str] = set()

    # Price every completed trip once.
    priced: list[tuple[TripRecord, PayoutSplit, datetime]] = []
    skipped = 0
    for trip in trips:
        if not trip.is_completed:
            skipped += 1
            continue
        rate = rate_index.get(trip.vehicle_key)
        if rate is None:
            unmatched.add(trip.vehicle_key)
            rate = RateConfig(
                vehicle_type=trip.vehicle_key,
                platform_fee_percent=policy.default_platform_fee_percent,
            )
        split = split_payout(trip.realized_fare, rate, policy)
        priced.append((trip, split, _to_local(trip.created_at, tz)))

    logger.debug(
        "Aggregating %d completed trips (%d skipped, %d unmatched vehicle types)",
        len(priced), skipped, len(unmatched),
    )

    # ── Period window ───────────────────────────────────────────────────
    if period == "all":
        in_period = priced
        if priced:
            earliest = min(local for _, _, local in priced).date()
            period_days = max((today_start.date() - earliest).days + 1, 1)
        else:
            period_days = policy.days_per_month
    else:
        window_days = _WINDOW_DAYS[period]
        start = today_start - timedelta(days=window_days - 1)
        in_period = [p for p in priced if start <= p[2] < today_end]
        period_days = window_days

    entries = [(trip, split) for trip, split, _ in in_period]
    overall = summarise(entries, period_days, policy.days_per_month)

    grouped: dict[str, list[tuple[TripRecord, PayoutSplit]]] = defaultdict(list)
    for trip, split in entries:
        grouped[trip.vehicle_key].append((trip, split))
    by_vehicle = {
        key: summarise(group, period_days, policy.days_per_month)
        for key, group in sorted(grouped.items())
    }

    # ── Today (independent of the chosen period) ────────────────────────
    today_entries = [(t, s) for t, s, local in priced if today_start <= local < today_end]
    today = summarise(today_entries, 1, policy.days_per_month)

    # ── Recent daily series ─────────────────────────────────────────────
    series_start = today_start - timedelta(days=policy.daily_series_days - 1)
    buckets: dict[date, list[PayoutSplit]] = {
        (series_start + timedelta(days=i)).date(): []
        for i in range(policy.daily_series_days)
    }
    for _, split, local in priced:
        if series_start <= local < today_end:
            buckets[local.date()].append(split)
    daily = [
        DailyPoint(
            day=day,
            trips=len(splits),
            revenue=sum(s.gross_fare for s in splits),
            commission=sum(s.platform_commission for s in splits),
            platform_net=sum(s.platform_net for s in splits),
        )
        for day, splits in buckets.items()
    ]

    return AggregateReport(
        period=period,
        overall=overall,
        by_vehicle=by_vehicle,
        today=today,
        daily=daily,
        unmatched_vehicle_types=sorted(unmatched),
    )
