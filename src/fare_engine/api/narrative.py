"""Narrative generator — plain-English reading of an analysis result.

Converts a raw ``AnalysisResult`` into structured text covering money flow,
target progress, the what-if ride, per-vehicle suggestions and levers.
"""

from __future__ import annotations

import math

from fare_engine.models.results import AnalysisResult


def format_inr(value: float) -> str:
    """₹ + half-up rounded integer with Indian digit grouping (₹1,23,456)."""
    rounded = math.floor(abs(value) + 0.5)
    digits = str(rounded)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    sign = "-" if value < 0 and rounded > 0 else ""
    return f"{sign}₹{digits}"


_STATUS_TEXT = {
    "good": "Profitable",
    "ok": "Roughly break-even",
    "low": "Needs a fix",
}


def generate_narrative(result: AnalysisResult) -> str:
    """Generate a plain-English narrative from an analysis result.

    Returns a text block covering:
      1. Money flow summary
      2. Target progress
      3. What-if ride
      4. Rate suggestions
      5. Levers
    """
    agg = result.report.overall
    gap = result.gap

    sections: list[str] = []

    # ── 1. Money flow ──
    sections.append("=" * 60)
    sections.append(f"MONEY FLOW ({result.report.period})")
    sections.append("=" * 60)
    sections.append(
        f"Completed trips: {agg.trip_count} (~{agg.monthly_trips}/month)\n"
        f"Customers paid: {format_inr(agg.gross_revenue)}\n"
        f"Platform commission: {format_inr(agg.platform_earnings)}\n"
        f"Drivers received: {format_inr(agg.driver_payouts)}"
        f" + {format_inr(agg.driver_incentives)} incentives\n"
        f"Payment processor: {format_inr(agg.processor_fees)}\n"
        f"Platform net: {format_inr(agg.platform_net)}\n"
        f"Average fare: {format_inr(agg.average_fare_per_trip)}, "
        f"average cut: {format_inr(agg.average_cut_per_trip)}\n"
        f"Collected: {agg.paid_trips} trips / {format_inr(agg.paid_revenue)}; "
        f"pending: {agg.unpaid_trips} trips / {format_inr(agg.unpaid_revenue)}"
    )
    if result.report.unmatched_vehicle_types:
        sections.append(
            "Trips without a rate config (default commission applied): "
            + ", ".join(result.report.unmatched_vehicle_types)
        )

    # ── 2. Target ──
    sections.append("")
    sections.append("=" * 60)
    sections.append("TARGET PROGRESS")
    sections.append("=" * 60)
    cut_note = {
        "history": "from completed trips",
        "simulated": "from the simulated ride (no trip history)",
        "default": "default estimate (no history, no usable simulation)",
    }[gap.cut_source]
    sections.append(
        f"Monthly profit target: {format_inr(gap.monthly_profit_target)}\n"
        f"Progress: {gap.progress_percent:.0f}%\n"
        + (f"Deficit: {format_inr(gap.deficit)}\n" if gap.deficit > 0 else f"Surplus: {format_inr(gap.surplus)}\n")
        + f"Cut per trip used: {format_inr(gap.average_cut_per_trip)} ({cut_note})\n"
        f"Trips needed: {gap.trips_needed_per_day}/day, {gap.trips_needed_per_month}/month\n"
        f"Trips to cover operating cost: {gap.trips_to_cover_operating_cost}"
    )
    for row in gap.cadences:
        sections.append(
            f"  {row.label:8s} target {format_inr(row.target_share):>10s}  "
            f"earned {format_inr(row.earned):>10s}  "
            f"after cost {format_inr(row.net_after_cost):>10s}  {row.status}"
        )

    # ── 3. What-if ride ──
    if result.simulated_quote is not None and result.simulated_split is not None:
        q = result.simulated_quote
        b = q.breakdown
        s = result.simulated_split
        sections.append("")
        sections.append("=" * 60)
        sections.append(f"WHAT-IF RIDE ({q.vehicle_type})")
        sections.append("=" * 60)
        lines = [
            f"Base fare: {format_inr(b.base_fare)}",
            f"Distance: {format_inr(b.distance_fare)}",
            f"Time: {format_inr(b.time_fare)}",
        ]
        if b.applied_surge_multiplier != 1:
            lines.append(f"Surge x{b.applied_surge_multiplier:g}: {format_inr(b.surge_amount)}")
        if b.gst_amount > 0:
            lines.append(f"GST: {format_inr(b.gst_amount)}")
        lines.append(f"Customer pays: {format_inr(q.quoted_total)}"
                     + (" (minimum fare)" if b.min_fare_applied else ""))
        lines.append(f"Platform keeps: {format_inr(s.platform_commission)}, "
                     f"net {format_inr(s.platform_net)} after processor fee")
        lines.append(f"Driver gets: {format_inr(s.driver_total_payout)}")
        sections.append("\n".join(lines))

    # ── 4. Suggestions ──
    if result.suggestions:
        sections.append("")
        sections.append("=" * 60)
        sections.append("RATE SUGGESTIONS")
        sections.append("=" * 60)
        for sug in result.suggestions:
            if not sug.has_volume_data:
                sections.append(f"- {sug.vehicle_type}: no trips yet, keep {sug.current_commission_percent:g}% commission")
                continue
            sections.append(
                f"- {sug.vehicle_type}: {_STATUS_TEXT[sug.status]} "
                f"({sug.progress_percent:.0f}% of its {format_inr(sug.allocated_need)} share). "
                f"Break-even commission {sug.break_even_commission_percent:.1f}%, "
                f"with buffer {sug.profit_commission_percent:.1f}%; "
                f"or base fare {format_inr(sug.suggested_base_fare)} and ₹{sug.suggested_per_km:g}/km."
            )

    # ── 5. Levers ──
    if result.levers:
        sections.append("")
        sections.append("=" * 60)
        sections.append("IF YOU CHANGE JUST ONE THING (per month)")
        sections.append("=" * 60)
        for lever in sorted(result.levers, key=lambda x: x.monthly_impact, reverse=True):
            sections.append(f"  {lever.label:24s} {format_inr(lever.monthly_impact):>10s}  ({lever.description})")

    return "\n".join(sections)
