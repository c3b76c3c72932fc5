"""Result types — the contract between engine, finance, API and dashboard.

Every monetary field is a precise (unrounded) float.  Presentation layers
round and format; the only rounding the engine itself performs is in
``FareQuote.quoted_total`` and in the suggested fare pair, both of which are
explicitly presentation values.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ═══════════════════════════════════════════════════════════════════════════
# Per-ride results
# ═══════════════════════════════════════════════════════════════════════════

class FareBreakdown(_Frozen):
    """Itemised fare for one (rate, ride) pair."""

    base_fare: float
    distance_fare: float
    """per_km × distance_km."""
    time_fare: float
    """per_min × duration_min."""
    subtotal: float
    """base_fare + distance_fare + time_fare."""
    applied_surge_multiplier: float
    """max(manual_surge, scheduled multiplier of the ride's band) — never their product."""
    surge_amount: float
    """after_surge − subtotal."""
    after_surge: float
    gst_amount: float
    """after_surge × gst_percent / 100."""
    total_customer_pays: float
    """max(after_surge + gst_amount, min_fare) — floor applied after tax."""
    min_fare_applied: bool
    """True when the floor lifted the total."""


class FareQuote(_Frozen):
    """Precise breakdown plus the rounded figure shown to customers."""

    vehicle_type: str
    breakdown: FareBreakdown
    quoted_total: float
    """Half-up rounded to ``quote_rounding_unit``, never below min_fare."""


class PayoutSplit(_Frozen):
    """Who gets what out of one realized fare."""

    gross_fare: float
    platform_commission: float
    driver_base_payout: float
    """gross_fare − platform_commission."""
    driver_incentive: float
    """Flat per-ride bonus, funded on top of the split."""
    driver_total_payout: float
    processor_fee: float
    """processor_fee_percent of the commission."""
    platform_net: float
    """platform_commission − processor_fee."""


class VehicleQuote(_Frozen):
    """One row of the all-vehicles comparison for a what-if ride."""

    vehicle_type: str
    commission_percent: float
    quote: FareQuote
    split: PayoutSplit
    """Split of the precise total."""
    driver_share_percent: float
    """driver_base_payout / total × 100 (0 when the total is 0)."""


# ═══════════════════════════════════════════════════════════════════════════
# Aggregates
# ═══════════════════════════════════════════════════════════════════════════

class PeriodAggregate(_Frozen):
    """Summary of completed trips over a date window."""

    trip_count: int = 0
    gross_revenue: float = 0.0
    platform_earnings: float = 0.0
    """Sum of commissions."""
    driver_payouts: float = 0.0
    """Sum of driver base payouts (gross − commission)."""
    driver_incentives: float = 0.0
    processor_fees: float = 0.0
    platform_net: float = 0.0
    average_fare_per_trip: float = 0.0
    average_cut_per_trip: float = 0.0
    """platform_earnings / trip_count (0 when no trips)."""
    paid_trips: int = 0
    unpaid_trips: int = 0
    paid_revenue: float = 0.0
    unpaid_revenue: float = 0.0
    period_days: int = 30
    monthly_trips: int = 0
    """trip_count normalised to a 30-day month, half-up rounded."""


class DailyPoint(_Frozen):
    """One day of the recent-earnings series."""

    day: date
    trips: int
    revenue: float
    commission: float
    platform_net: float


class AggregateReport(_Frozen):
    """Aggregation output consumed by projection and suggestion."""

    period: str
    overall: PeriodAggregate
    by_vehicle: dict[str, PeriodAggregate]
    """Keyed by lowercase vehicle type."""
    today: PeriodAggregate
    daily: list[DailyPoint]
    unmatched_vehicle_types: list[str] = []
    """Vehicle types seen on trips with no rate config (default commission used)."""


# ═══════════════════════════════════════════════════════════════════════════
# Target projection
# ═══════════════════════════════════════════════════════════════════════════

class CadenceRow(_Frozen):
    """Daily / weekly / monthly comparison of target vs. actual."""

    label: Literal["daily", "weekly", "monthly"]
    factor: float
    target_share: float
    trips_needed: int
    earned: float
    operating_cost_share: float
    net_after_cost: float
    status: Literal["on-track", "behind"]


class RevenueGap(_Frozen):
    """Distance between the observed platform net and the profit target."""

    monthly_profit_target: float
    monthly_operating_cost: float
    monthly_requirement: float
    """Target + operating cost — what rate suggestions must cover."""
    average_cut_per_trip: float
    """Per-trip figure used for trip counts (after fallback)."""
    cut_source: Literal["history", "simulated", "default"]
    daily_target_share: float
    trips_needed_per_day: int
    trips_needed_per_month: int
    trips_to_cover_operating_cost: int
    deficit: float
    surplus: float
    progress_percent: float
    cadences: list[CadenceRow] = []


# ═══════════════════════════════════════════════════════════════════════════
# Suggestions & levers
# ═══════════════════════════════════════════════════════════════════════════

class RateSuggestion(_Frozen):
    """Advisory rate change for one vehicle type."""

    vehicle_type: str
    has_volume_data: bool
    monthly_trips: int
    average_fare: float
    volume_share: float
    current_commission_percent: float
    current_monthly_commission: float
    allocated_need: float
    gap: float
    """allocated_need − current_monthly_commission (negative = ahead)."""
    progress_percent: float
    break_even_commission_percent: float
    profit_commission_percent: float
    suggested_base_fare: float
    suggested_per_km: float
    projected_monthly_earnings: float
    """Monthly commission at the break-even percent and current volume."""
    status: Literal["good", "ok", "low"]


class LeverImpact(_Frozen):
    """Monthly extra platform earnings from one isolated change."""

    key: str
    label: str
    description: str
    monthly_impact: float


class TornadoBar(_Frozen):
    """One bar of a rate sensitivity chart."""

    param_name: str
    param_path: str
    base_value: float
    low_value: float
    high_value: float
    net_at_low: float
    net_at_high: float
    delta_net: float
    """abs(net_at_high − net_at_low)."""


class SensitivityResult(_Frozen):
    vehicle_type: str
    base_net_per_trip: float
    bars: list[TornadoBar] = []


# ═══════════════════════════════════════════════════════════════════════════
# Full analysis
# ═══════════════════════════════════════════════════════════════════════════

class AnalysisResult(_Frozen):
    """Everything one money-flow screen renders."""

    report: AggregateReport
    simulated_vehicle_type: str | None
    simulated_quote: FareQuote | None
    simulated_split: PayoutSplit | None
    vehicle_quotes: list[VehicleQuote]
    gap: RevenueGap
    suggestions: list[RateSuggestion]
    levers: list[LeverImpact]
