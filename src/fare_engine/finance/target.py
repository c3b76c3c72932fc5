"""Target projector — observed platform net vs. a monthly profit target.

Trip counts divide by the average commission per trip.  When there is no
history that average is undefined, so the projector falls back, in order,
to the simulated ride's per-trip net and then to
``policy.fallback_cut_per_trip``.  It never divides by zero and never
returns NaN or infinity.
"""

from __future__ import annotations

import math

from fare_engine.config.policy import PolicyConfig
from fare_engine.config.target import RevenueTarget
from fare_engine.models.results import CadenceRow, PeriodAggregate, RevenueGap


def _usable(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def resolve_cut_per_trip(
    aggregate: PeriodAggregate,
    fallback_cut_per_trip: float | None,
    policy: PolicyConfig,
) -> tuple[float, str]:
    """Pick the per-trip figure for trip counts and say where it came from."""
    if _usable(aggregate.average_cut_per_trip):
        return aggregate.average_cut_per_trip, "history"
    if _usable(fallback_cut_per_trip):
        return fallback_cut_per_trip, "simulated"
    return policy.fallback_cut_per_trip, "default"


def progress_percent(achieved: float, required: float) -> float:
    """Half-up rounded percentage clamped to [0, 100]; 100 when nothing is required."""
    if required <= 0:
        return 100.0
    return float(min(100, max(0, math.floor(achieved / required * 100 + 0.5))))


def project_target(
    aggregate: PeriodAggregate,
    target: RevenueTarget,
    *,
    today: PeriodAggregate | None = None,
    fallback_cut_per_trip: float | None = None,
    policy: PolicyConfig | None = None,
) -> RevenueGap:
    """Compute trips needed, deficit / surplus, progress and cadence rows.

    Parameters
    ----------
    aggregate : PeriodAggregate
        Completed trips of the selected period.
    target : RevenueTarget
        Monthly profit target and operating cost.
    today : PeriodAggregate | None
        Today's trips, for the daily cadence row.  When omitted the daily
        row uses a 1/30 share of the period's net.
    fallback_cut_per_trip : float | None
        Per-trip net of the simulated ride, used when history is empty.
    """
    policy = policy or PolicyConfig()
    days = policy.days_per_month
    profit_target = target.monthly_profit_target
    operating_cost = target.monthly_operating_cost
    net = aggregate.platform_net

    cut, source = resolve_cut_per_trip(aggregate, fallback_cut_per_trip, policy)

    daily_share = profit_target / days

    cadences: list[CadenceRow] = []
    for label, factor in (("daily", 1 / days), ("weekly", 7 / days), ("monthly", 1.0)):
        need = profit_target * factor
        if label == "daily" and today is not None:
            earned = today.platform_net
        else:
            earned = net * factor
        cost_share = operating_cost * factor
        net_after_cost = earned - cost_share
        cadences.append(CadenceRow(
            label=label,
            factor=factor,
            target_share=need,
            trips_needed=math.ceil(need / cut),
            earned=earned,
            operating_cost_share=cost_share,
            net_after_cost=net_after_cost,
            status="on-track" if net_after_cost >= need else "behind",
        ))

    return RevenueGap(
        monthly_profit_target=profit_target,
        monthly_operating_cost=operating_cost,
        monthly_requirement=profit_target + operating_cost,
        average_cut_per_trip=cut,
        cut_source=source,
        daily_target_share=daily_share,
        trips_needed_per_day=math.ceil(daily_share / cut),
        trips_needed_per_month=math.ceil(profit_target / cut),
        trips_to_cover_operating_cost=math.ceil(operating_cost / cut) if operating_cost > 0 else 0,
        deficit=max(0.0, profit_target - net),
        surplus=max(0.0, net - profit_target),
        progress_percent=progress_percent(net, profit_target),
        cadences=cadences,
    )
