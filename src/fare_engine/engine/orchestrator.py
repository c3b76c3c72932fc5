"""Orchestrator — one pass over the whole money-flow pipeline.

  trips + rates ─▶ aggregate_trips ─▶ AggregateReport
  selected rate + what-if ride ─▶ quote_fare / split_payout ─▶ simulated per-trip net
  report.overall + target (+ simulated net as fallback) ─▶ project_target ─▶ RevenueGap
  report + rates + gap ─▶ suggest_rates ─▶ RateSuggestion per vehicle
  report + rates ─▶ compute_lever_impacts

Entry point: ``run_analysis(scenario)``.  Nothing is cached between calls;
``compare_vehicles`` accepts a caller-owned cache for repeated quoting.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from fare_engine.config.policy import PolicyConfig
from fare_engine.config.rate import RateConfig
from fare_engine.config.ride import RideParameters
from fare_engine.config.scenario import Scenario
from fare_engine.engine.aggregate import aggregate_trips
from fare_engine.engine.fare import quote_fare
from fare_engine.engine.payout import split_payout
from fare_engine.finance.sensitivity import compute_lever_impacts
from fare_engine.finance.suggest import suggest_rates
from fare_engine.finance.target import project_target
from fare_engine.models.results import AnalysisResult, VehicleQuote

QuoteCache = dict[tuple[RateConfig, RideParameters, PolicyConfig], VehicleQuote]


def quote_vehicle(
    rate: RateConfig,
    ride: RideParameters,
    policy: PolicyConfig | None = None,
) -> VehicleQuote:
    """Quote one rate for a ride and split the precise total."""
    policy = policy or PolicyConfig()
    quote = quote_fare(rate, ride, policy)
    total = quote.breakdown.total_customer_pays
    split = split_payout(total, rate, policy)
    return VehicleQuote(
        vehicle_type=rate.vehicle_type,
        commission_percent=rate.platform_fee_percent,
        quote=quote,
        split=split,
        driver_share_percent=split.driver_base_payout / total * 100 if total > 0 else 0.0,
    )


def compare_vehicles(
    rates: Iterable[RateConfig],
    ride: RideParameters,
    policy: PolicyConfig | None = None,
    cache: QuoteCache | None = None,
) -> list[VehicleQuote]:
    """Quote every rate for the same ride, in rate order.

    ``cache`` is keyed by the (frozen, hashable) rate, ride and policy, so an
    edited rate or policy never hits a stale entry.  Pass the same dict across
    calls to reuse quotes; omit it for a fresh computation.
    """
    policy = policy or PolicyConfig()
    rows: list[VehicleQuote] = []
    for rate in rates:
        if cache is None:
            rows.append(quote_vehicle(rate, ride, policy))
            continue
        key = (rate, ride, policy)
        if key not in cache:
            cache[key] = quote_vehicle(rate, ride, policy)
        rows.append(cache[key])
    return rows


def select_rate(rates: list[RateConfig], vehicle_type: str | None) -> RateConfig | None:
    """Rate matching ``vehicle_type`` (case-insensitive), else the first rate."""
    if not rates:
        return None
    if vehicle_type:
        wanted = vehicle_type.strip().lower()
        for rate in rates:
            if rate.key == wanted:
                return rate
    return rates[0]


def run_analysis(scenario: Scenario, now: datetime | None = None) -> AnalysisResult:
    """Run aggregation, simulation, projection, suggestion and levers.

    ``now`` pins "today" for the period windows; defaults to the current time.
    """
    policy = scenario.policy
    rates = scenario.rates

    report = aggregate_trips(scenario.trips, rates, scenario.period, now, policy)

    active = select_rate(rates, scenario.selected_vehicle_type)
    simulated = quote_vehicle(active, scenario.ride, policy) if active else None
    simulated_net = simulated.split.platform_net if simulated else None

    gap = project_target(
        report.overall,
        scenario.target,
        today=report.today,
        fallback_cut_per_trip=simulated_net,
        policy=policy,
    )

    suggestions = suggest_rates(
        report, rates, gap,
        reference_distance_km=scenario.ride.distance_km,
        policy=policy,
    )

    levers = compute_lever_impacts(
        report, rates, policy,
        fallback_cut_per_trip=simulated_net,
    )

    return AnalysisResult(
        report=report,
        simulated_vehicle_type=active.vehicle_type if active else None,
        simulated_quote=simulated.quote if simulated else None,
        simulated_split=simulated.split if simulated else None,
        vehicle_quotes=compare_vehicles(rates, scenario.ride, policy),
        gap=gap,
        suggestions=suggestions,
        levers=levers,
    )
