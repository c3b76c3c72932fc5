"""Rate suggester — how each vehicle type could close its share of the gap.

The monthly requirement (profit target + operating cost) is allocated to
vehicle types by their share of completed-trip volume.  For each type two
alternatives are proposed:

  commission route  break-even % = need / (avg fare × monthly trips) × 100
                    profit %     = same with need × profit_buffer
  fare route        extra/trip   = (need − current commission) / trips / fee%
                    base fare    = base + extra            → nearest ₹5
                    per km       = per_km + extra / max(reference km, 3) → nearest ₹0.5

Percentages are clamped to the policy bands.  A type with no volume keeps
its current rate unchanged.
"""

from __future__ import annotations

from typing import Iterable

from fare_engine.config.policy import PolicyConfig
from fare_engine.config.rate import RateConfig
from fare_engine.engine.aggregate import build_rate_index
from fare_engine.engine.fare import round_to_unit
from fare_engine.finance.target import progress_percent
from fare_engine.models.results import (
    AggregateReport,
    PeriodAggregate,
    RateSuggestion,
    RevenueGap,
)


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def vehicle_volume_shares(report: AggregateReport, rates: Iterable[RateConfig]) -> dict[str, float]:
    """Share of completed-trip volume per rate, keyed by lowercase vehicle type.

    Types without trips (or every type, when there are no trips at all)
    get an equal default share of ``1 / number of rate configs``.
    """
    keys = list(build_rate_index(rates))
    if not keys:
        return {}
    total = report.overall.trip_count
    default_share = 1 / len(keys)
    shares: dict[str, float] = {}
    for key in keys:
        trips = report.by_vehicle[key].trip_count if key in report.by_vehicle else 0
        shares[key] = trips / total if total > 0 and trips > 0 else default_share
    return shares


def suggest_rate_change(
    vehicle_aggregate: PeriodAggregate,
    rate: RateConfig,
    gap: RevenueGap,
    vehicle_share_of_volume: float,
    *,
    reference_distance_km: float = 5.0,
    policy: PolicyConfig | None = None,
) -> RateSuggestion:
    """Suggest a commission or fare change for one vehicle type."""
    policy = policy or PolicyConfig()

    monthly_trips = vehicle_aggregate.monthly_trips
    average_fare = vehicle_aggregate.average_fare_per_trip
    fee_percent = rate.platform_fee_percent

    current_commission = average_fare * (fee_percent / 100) * monthly_trips
    allocated_need = gap.monthly_requirement * vehicle_share_of_volume
    shortfall = allocated_need - current_commission

    has_volume = monthly_trips > 0 and average_fare > 0

    if has_volume:
        monthly_volume_value = average_fare * monthly_trips
        break_even = _clamp(
            allocated_need / monthly_volume_value * 100,
            policy.break_even_commission_min,
            policy.break_even_commission_max,
        )
        profit = _clamp(
            allocated_need * policy.profit_buffer / monthly_volume_value * 100,
            policy.profit_commission_min,
            policy.profit_commission_max,
        )
        projected = monthly_volume_value * break_even / 100
    else:
        break_even = fee_percent
        profit = fee_percent
        projected = current_commission

    if has_volume:
        extra_per_trip = (
            max(0.0, shortfall / monthly_trips / (fee_percent / 100))
            if fee_percent > 0
            else 0.0
        )
        reference_km = max(reference_distance_km, policy.min_reference_distance_km)
        suggested_base = round_to_unit(rate.base_fare + extra_per_trip, policy.base_fare_rounding_unit)
        suggested_per_km = round_to_unit(
            rate.per_km + extra_per_trip / reference_km, policy.per_km_rounding_unit,
        )
    else:
        suggested_base = rate.base_fare
        suggested_per_km = rate.per_km

    if current_commission >= allocated_need * policy.good_status_ratio:
        status = "good"
    elif current_commission >= allocated_need * policy.ok_status_ratio:
        status = "ok"
    else:
        status = "low"

    return RateSuggestion(
        vehicle_type=rate.vehicle_type,
        has_volume_data=has_volume,
        monthly_trips=monthly_trips,
        average_fare=average_fare,
        volume_share=vehicle_share_of_volume,
        current_commission_percent=fee_percent,
        current_monthly_commission=current_commission,
        allocated_need=allocated_need,
        gap=shortfall,
        progress_percent=progress_percent(current_commission, allocated_need),
        break_even_commission_percent=break_even,
        profit_commission_percent=profit,
        suggested_base_fare=suggested_base,
        suggested_per_km=suggested_per_km,
        projected_monthly_earnings=projected,
        status=status,
    )


def suggest_rates(
    report: AggregateReport,
    rates: Iterable[RateConfig],
    gap: RevenueGap,
    *,
    reference_distance_km: float = 5.0,
    policy: PolicyConfig | None = None,
) -> list[RateSuggestion]:
    """One suggestion per rate config, in rate order."""
    rate_index = build_rate_index(rates)
    shares = vehicle_volume_shares(report, rate_index.values())
    empty = PeriodAggregate(period_days=report.overall.period_days)
    return [
        suggest_rate_change(
            report.by_vehicle.get(key, empty),
            rate,
            gap,
            shares[key],
            reference_distance_km=reference_distance_km,
            policy=policy,
        )
        for key, rate in rate_index.items()
    ]
