"""Sensitivity — "change one thing" levers, rate tornado, fare curve.

Levers project the monthly effect of one isolated change at current volume
(per vehicle type: monthly trips × per-trip effect):
  - +1% commission        avg fare × 1% × trips
  - +₹10 base fare        10 × (1 + GST%) × commission% × trips
  - +10 trips/day         10 × 30 × average cut per trip
  - remove incentives     per-ride incentive × trips (a saving)

Default tornado sweep (one rate, the what-if ride, per-trip platform net):
  - base_fare ± 10%
  - per_km ± 10%
  - per_min ± 10%
  - platform_fee_percent ± 10%
  - manual_surge ± 10%
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from fare_engine.config.policy import PolicyConfig
from fare_engine.config.rate import RateConfig
from fare_engine.config.ride import RideParameters, TimeOfDay
from fare_engine.engine.aggregate import build_rate_index
from fare_engine.engine.fare import compute_fare_breakdown
from fare_engine.engine.payout import split_payout
from fare_engine.finance.target import resolve_cut_per_trip
from fare_engine.models.results import (
    AggregateReport,
    LeverImpact,
    SensitivityResult,
    TornadoBar,
)


# Default sweep parameters
DEFAULT_SWEEPS: list[tuple[str, str, float, float]] = [
    ("Base fare", "base_fare", -0.10, 0.10),
    ("Per km", "per_km", -0.10, 0.10),
    ("Per minute", "per_min", -0.10, 0.10),
    ("Commission %", "platform_fee_percent", -0.10, 0.10),
    ("Manual surge", "manual_surge", -0.10, 0.10),
]

_PERCENT_FIELDS = {"platform_fee_percent"}


# ═══════════════════════════════════════════════════════════════════════════
# Levers
# ═══════════════════════════════════════════════════════════════════════════

def compute_lever_impacts(
    report: AggregateReport,
    rates: Iterable[RateConfig],
    policy: PolicyConfig | None = None,
    *,
    fallback_cut_per_trip: float | None = None,
    commission_step_percent: float = 1.0,
    base_fare_step: float = 10.0,
    extra_trips_per_day: float = 10.0,
) -> list[LeverImpact]:
    """Monthly platform-earnings impact of four single changes."""
    policy = policy or PolicyConfig()
    rate_index = build_rate_index(rates)

    commission_gain = 0.0
    base_fare_gain = 0.0
    incentive_saving = 0.0
    for key, rate in rate_index.items():
        agg = report.by_vehicle.get(key)
        if agg is None:
            continue
        trips = agg.monthly_trips
        commission_gain += agg.average_fare_per_trip * (commission_step_percent / 100) * trips
        base_fare_gain += (
            base_fare_step * (1 + rate.gst_percent / 100)
            * (rate.platform_fee_percent / 100) * trips
        )
        incentive_saving += rate.per_ride_incentive * trips

    cut, _ = resolve_cut_per_trip(report.overall, fallback_cut_per_trip, policy)
    volume_gain = extra_trips_per_day * policy.days_per_month * cut

    return [
        LeverImpact(
            key="commission",
            label=f"+{commission_step_percent:g}% commission",
            description="on all vehicles",
            monthly_impact=commission_gain,
        ),
        LeverImpact(
            key="base_fare",
            label=f"+₹{base_fare_step:g} base fare",
            description="on all vehicles",
            monthly_impact=base_fare_gain,
        ),
        LeverImpact(
            key="volume",
            label=f"+{extra_trips_per_day:g} trips/day",
            description="more completed rides",
            monthly_impact=volume_gain,
        ),
        LeverImpact(
            key="incentives",
            label="Remove incentives",
            description="stop per-ride bonus",
            monthly_impact=incentive_saving,
        ),
    ]


# ═══════════════════════════════════════════════════════════════════════════
# Tornado
# ═══════════════════════════════════════════════════════════════════════════

def _net_per_trip(rate: RateConfig, ride: RideParameters, policy: PolicyConfig) -> float:
    fare = compute_fare_breakdown(rate, ride).total_customer_pays
    return split_payout(fare, rate, policy).platform_net


def run_rate_sensitivity(
    rate: RateConfig,
    ride: RideParameters,
    policy: PolicyConfig | None = None,
    sweeps: list[tuple[str, str, float, float]] | None = None,
) -> SensitivityResult:
    """Sweep rate fields one at a time and measure per-trip platform net.

    Parameters
    ----------
    rate : RateConfig
        Rate to perturb.
    ride : RideParameters
        Ride priced at every sweep point.
    sweeps : list[tuple[name, field, low_pct, high_pct]] | None
        None = use DEFAULT_SWEEPS.  Unknown fields are skipped.

    Returns
    -------
    SensitivityResult
        Bars sorted by swing, largest first.
    """
    policy = policy or PolicyConfig()
    if sweeps is None:
        sweeps = DEFAULT_SWEEPS

    base_net = _net_per_trip(rate, ride, policy)
    bars: list[TornadoBar] = []

    for name, path, low_pct, high_pct in sweeps:
        if path not in RateConfig.model_fields:
            continue
        base_val = float(getattr(rate, path))
        low_val = max(base_val * (1 + low_pct), 0.0)
        high_val = max(base_val * (1 + high_pct), 0.0)
        if path in _PERCENT_FIELDS:
            low_val = min(low_val, 100.0)
            high_val = min(high_val, 100.0)

        net_low = _net_per_trip(rate.model_copy(update={path: low_val}), ride, policy)
        net_high = _net_per_trip(rate.model_copy(update={path: high_val}), ride, policy)

        bars.append(TornadoBar(
            param_name=name,
            param_path=path,
            base_value=round(base_val, 4),
            low_value=round(low_val, 4),
            high_value=round(high_val, 4),
            net_at_low=round(net_low, 4),
            net_at_high=round(net_high, 4),
            delta_net=round(abs(net_high - net_low), 4),
        ))

    bars.sort(key=lambda b: b.delta_net, reverse=True)

    return SensitivityResult(
        vehicle_type=rate.vehicle_type,
        base_net_per_trip=round(base_net, 4),
        bars=bars,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Fare curve
# ═══════════════════════════════════════════════════════════════════════════

def fare_curve(
    rate: RateConfig,
    distances_km: Iterable[float] | None = None,
    minutes_per_km: float = 3.0,
    time_of_day: TimeOfDay = "normal",
) -> tuple[np.ndarray, np.ndarray]:
    """Precise customer totals across a distance grid.

    Duration scales with distance (``minutes_per_km``).  Non-positive
    distances are dropped.  Returns ``(distances, totals)``.
    """
    if distances_km is None:
        distances = np.linspace(1.0, 30.0, 30)
    else:
        distances = np.asarray(list(distances_km), dtype=float)
    distances = distances[distances > 0]

    totals = np.array([
        compute_fare_breakdown(
            rate,
            RideParameters(
                distance_km=float(d),
                duration_min=float(d) * max(minutes_per_km, 0.0),
                time_of_day=time_of_day,
            ),
        ).total_customer_pays
        for d in distances
    ], dtype=float)
    return distances, totals
