"""Fare calculator — rate config + ride parameters → itemised fare.

Pipeline (all values kept unrounded):
  subtotal     = base + per_km × km + per_min × min
  multiplier   = max(manual_surge, band multiplier)   # band = peak / night
  after_surge  = subtotal × multiplier
  gst          = after_surge × gst% / 100
  total        = max(after_surge + gst, min_fare)      # floor after tax

Manual and scheduled surge never stack: an operator who sets a manual
surge during a peak band gets the larger of the two, not their product.

Rounding happens only at the quoting boundary (``quote_fare``).
"""

from __future__ import annotations

import math

from fare_engine.config.policy import PolicyConfig
from fare_engine.config.rate import RateConfig
from fare_engine.config.ride import RideParameters
from fare_engine.models.results import FareBreakdown, FareQuote


def round_to_unit(value: float, unit: float) -> float:
    """Round half-up to the nearest multiple of ``unit`` (5 → ₹5 steps, 0.5 → 50 paise)."""
    if unit <= 0:
        return value
    return math.floor(value / unit + 0.5) * unit


def select_surge_multiplier(rate: RateConfig, ride: RideParameters) -> float:
    """Larger of the manual surge and the multiplier of the ride's time band."""
    multiplier = rate.manual_surge
    if ride.time_of_day == "peak" and rate.peak_multiplier > multiplier:
        multiplier = rate.peak_multiplier
    if ride.time_of_day == "night" and rate.night_multiplier > multiplier:
        multiplier = rate.night_multiplier
    return multiplier


def compute_fare_breakdown(rate: RateConfig, ride: RideParameters) -> FareBreakdown:
    """Compute the precise fare breakdown.

    Distance and duration are expected to be non-negative; anything below
    zero is treated as zero.
    """
    distance_km = max(ride.distance_km, 0.0)
    duration_min = max(ride.duration_min, 0.0)

    base_fare = rate.base_fare
    distance_fare = rate.per_km * distance_km
    time_fare = rate.per_min * duration_min
    subtotal = base_fare + distance_fare + time_fare

    multiplier = select_surge_multiplier(rate, ride)
    after_surge = subtotal * multiplier
    surge_amount = after_surge - subtotal

    gst_amount = after_surge * (rate.gst_percent / 100)

    taxed_total = after_surge + gst_amount
    total = max(taxed_total, rate.min_fare, 0.0)

    return FareBreakdown(
        base_fare=base_fare,
        distance_fare=distance_fare,
        time_fare=time_fare,
        subtotal=subtotal,
        applied_surge_multiplier=multiplier,
        surge_amount=surge_amount,
        after_surge=after_surge,
        gst_amount=gst_amount,
        total_customer_pays=total,
        min_fare_applied=rate.min_fare > taxed_total,
    )


def quote_fare(
    rate: RateConfig,
    ride: RideParameters,
    policy: PolicyConfig | None = None,
) -> FareQuote:
    """Breakdown plus the customer-facing total rounded to the quoting unit.

    The rounded figure is floored at ``min_fare`` again so that rounding down
    can never quote below the minimum.  The floor wins over the rounding unit:
    a ₹42 minimum quotes ₹42, not a multiple of 5.
    """
    policy = policy or PolicyConfig()
    breakdown = compute_fare_breakdown(rate, ride)
    quoted = max(
        round_to_unit(breakdown.total_customer_pays, policy.quote_rounding_unit),
        rate.min_fare,
    )
    return FareQuote(vehicle_type=rate.vehicle_type, breakdown=breakdown, quoted_total=quoted)
