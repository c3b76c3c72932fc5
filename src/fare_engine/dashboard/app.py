"""Ride-hailing Fare Engine — Streamlit operations dashboard.

Layout: sidebar inputs → main area with three tabs (Money Flow | Simulator | Rates).
Design: metric cards for headlines, tables for breakdowns, formulas in
expanders, one chart per question.

Run with:
    streamlit run src/fare_engine/dashboard/app.py
"""

from __future__ import annotations

import json

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from pydantic import ValidationError

from fare_engine.api.narrative import format_inr
from fare_engine.config import (
    PolicyConfig,
    RateConfig,
    RevenueTarget,
    RideParameters,
    Scenario,
    TripRecord,
)
from fare_engine.engine.orchestrator import run_analysis
from fare_engine.finance.sensitivity import fare_curve, run_rate_sensitivity
from fare_engine.models.results import AnalysisResult
from fare_engine.settings import get_settings

# ---------------------------------------------------------------------------
# Default instances — single source of truth for sidebar defaults
# ---------------------------------------------------------------------------
_DEF_SCENARIO = Scenario()
_DEF_T = RevenueTarget()
_DEF_RIDE = RideParameters()
_DEF_POLICY: PolicyConfig = get_settings().default_policy()

_PERIODS = ["today", "7d", "30d", "all"]
_BANDS = ["normal", "peak", "night"]
_STATUS_ICON = {"good": "🟢", "ok": "🟡", "low": "🔴"}

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Fare Engine", page_icon="🚕", layout="wide")

st.markdown("""
<style>
div[data-testid="stMetric"] {
    background: linear-gradient(135deg, rgba(30,34,44,0.95), rgba(22,26,35,0.98));
    border: 1px solid rgba(255,255,255,0.06);
    border-radius: 10px;
    padding: 14px 16px 12px;
}
h2 {
    border-left: 3px solid #00b894;
    padding-left: 12px !important;
}
</style>
""", unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _load_json_upload(uploaded, label: str) -> list[dict] | None:
    """Parse an uploaded JSON array (or {"data": [...]}) of records."""
    if uploaded is None:
        return None
    try:
        payload = json.loads(uploaded.getvalue().decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        st.sidebar.error(f"{label}: not valid JSON ({exc})")
        return None
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    if not isinstance(payload, list):
        st.sidebar.error(f"{label}: expected a JSON array")
        return None
    return payload


def _suggestion_rows(result: AnalysisResult) -> list[dict]:
    rows = []
    for sug in result.suggestions:
        rows.append({
            "Vehicle": sug.vehicle_type,
            "Status": f"{_STATUS_ICON[sug.status]} {sug.status}",
            "Trips / month": sug.monthly_trips,
            "Avg fare": format_inr(sug.average_fare),
            "Share": f"{sug.volume_share:.0%}",
            "Current %": f"{sug.current_commission_percent:g}%",
            "Earning / month": format_inr(sug.current_monthly_commission),
            "Need / month": format_inr(sug.allocated_need),
            "Break-even %": f"{sug.break_even_commission_percent:.1f}%",
            "With buffer %": f"{sug.profit_commission_percent:.1f}%",
            "Or base fare": format_inr(sug.suggested_base_fare),
            "Or per km": f"₹{sug.suggested_per_km:g}",
        })
    return rows


# ---------------------------------------------------------------------------
# SIDEBAR — Inputs
# ---------------------------------------------------------------------------
st.sidebar.header("Scenario Inputs")

with st.sidebar.expander("Data", expanded=True):
    rates_file = st.file_uploader("Rate configs (JSON)", type=["json"], key="rates_upload")
    trips_file = st.file_uploader("Trips (JSON)", type=["json"], key="trips_upload")
    period = st.selectbox("Period", _PERIODS, index=_PERIODS.index(_DEF_SCENARIO.period))

raw_rates = _load_json_upload(rates_file, "Rates")
raw_trips = _load_json_upload(trips_file, "Trips")

try:
    rates = [RateConfig.model_validate(r) for r in raw_rates] if raw_rates else list(_DEF_SCENARIO.rates)
    trips = [TripRecord.model_validate(t) for t in raw_trips] if raw_trips else []
except ValidationError as exc:
    st.error(f"Uploaded data failed validation:\n\n{exc}")
    st.stop()

with st.sidebar.expander("Target", expanded=True):
    c1, c2 = st.columns(2)
    t_profit = c1.number_input("Profit ₹/month", 0, 10_000_000, int(_DEF_T.monthly_profit_target), 5000)
    t_cost = c2.number_input("Op. cost ₹/month", 0, 1_000_000, int(_DEF_T.monthly_operating_cost), 500)

with st.sidebar.expander("What-if Ride", expanded=True):
    vehicle_names = [r.vehicle_type for r in rates]
    selected_vehicle = st.selectbox("Vehicle", vehicle_names)
    c1, c2 = st.columns(2)
    r_km = c1.number_input("Distance km", 0.5, 200.0, _DEF_RIDE.distance_km, 0.5)
    r_min = c2.number_input("Duration min", 0.0, 600.0, _DEF_RIDE.duration_min, 1.0)
    r_band = st.selectbox("Time of day", _BANDS, index=_BANDS.index(_DEF_RIDE.time_of_day))

with st.sidebar.expander("Policy"):
    c1, c2 = st.columns(2)
    p_proc = c1.number_input("Processor fee %", 0.0, 100.0, _DEF_POLICY.processor_fee_percent, 0.5,
                             help="Payment-gateway cost as % of commission")
    p_fallback = c2.number_input("Fallback cut ₹", 1.0, 1000.0, _DEF_POLICY.fallback_cut_per_trip, 1.0,
                                 help="Per-trip net used when there is no history")

scenario = Scenario(
    rates=rates,
    trips=trips,
    target=RevenueTarget(monthly_profit_target=t_profit, monthly_operating_cost=t_cost),
    ride=RideParameters(distance_km=r_km, duration_min=r_min, time_of_day=r_band),
    selected_vehicle_type=selected_vehicle,
    period=period,
    policy=_DEF_POLICY.model_copy(update={
        "processor_fee_percent": p_proc,
        "fallback_cut_per_trip": p_fallback,
    }),
)

result = run_analysis(scenario)
report = result.report
agg = report.overall
gap = result.gap

# ---------------------------------------------------------------------------
# MAIN
# ---------------------------------------------------------------------------
st.title("Fare Engine")
st.caption(f"{len(trips)} trips loaded · {len(rates)} rate configs · period: {period}")

money_tab, sim_tab, rates_tab = st.tabs(["Money Flow", "Simulator", "Rates"])

# ═══ Money Flow ═══════════════════════════════════════════════════════════
with money_tab:
    st.header("Where the money goes")
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Customers paid", format_inr(agg.gross_revenue), f"{agg.trip_count} trips")
    c2.metric("Platform commission", format_inr(agg.platform_earnings))
    c3.metric("Drivers received", format_inr(agg.driver_payouts + agg.driver_incentives))
    c4.metric("Processor", format_inr(agg.processor_fees))
    c5.metric("Platform net", format_inr(agg.platform_net))

    if report.unmatched_vehicle_types:
        st.warning("Trips without a rate config (default commission applied): "
                   + ", ".join(report.unmatched_vehicle_types))

    st.header("Target")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Progress", f"{gap.progress_percent:.0f}%")
    c2.metric("Deficit" if gap.deficit > 0 else "Surplus",
              format_inr(gap.deficit if gap.deficit > 0 else gap.surplus))
    c3.metric("Trips needed / day", gap.trips_needed_per_day)
    c4.metric("Cut per trip", format_inr(gap.average_cut_per_trip), gap.cut_source)
    st.progress(int(gap.progress_percent))

    cadence_df = pd.DataFrame([
        {
            "Cadence": row.label,
            "Target": format_inr(row.target_share),
            "Trips needed": row.trips_needed,
            "Earned": format_inr(row.earned),
            "Operating cost": format_inr(row.operating_cost_share),
            "After cost": format_inr(row.net_after_cost),
            "Status": row.status,
        }
        for row in gap.cadences
    ])
    st.dataframe(cadence_df, use_container_width=True, hide_index=True)

    st.header(f"Last {len(report.daily)} days")
    daily_df = pd.DataFrame([p.model_dump() for p in report.daily])
    fig_daily = go.Figure()
    fig_daily.add_trace(go.Bar(x=daily_df["day"], y=daily_df["revenue"], name="Revenue",
                               marker_color="rgba(116,185,255,0.6)"))
    fig_daily.add_trace(go.Scatter(x=daily_df["day"], y=daily_df["platform_net"], name="Platform net",
                                   mode="lines+markers", line=dict(color="#00b894", width=2)))
    fig_daily.add_hline(y=gap.daily_target_share, line_dash="dash", line_color="#e17055",
                        annotation_text="Daily target")
    fig_daily.update_layout(height=320, margin=dict(l=10, r=10, t=30, b=10), yaxis_title="₹",
                            template="plotly_dark")
    st.plotly_chart(fig_daily, use_container_width=True)

    if report.by_vehicle:
        st.subheader("By vehicle")
        by_vehicle_df = pd.DataFrame([
            {
                "Vehicle": key,
                "Trips": v.trip_count,
                "Revenue": format_inr(v.gross_revenue),
                "Commission": format_inr(v.platform_earnings),
                "Net": format_inr(v.platform_net),
                "Avg fare": format_inr(v.average_fare_per_trip),
                "Paid / unpaid": f"{v.paid_trips} / {v.unpaid_trips}",
            }
            for key, v in report.by_vehicle.items()
        ])
        st.dataframe(by_vehicle_df, use_container_width=True, hide_index=True)

# ═══ Simulator ════════════════════════════════════════════════════════════
with sim_tab:
    if result.simulated_quote is None:
        st.info("Add at least one rate config to simulate a ride.")
    else:
        q = result.simulated_quote
        b = q.breakdown
        s = result.simulated_split
        st.header(f"What-if ride · {q.vehicle_type}")
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Customer pays", format_inr(q.quoted_total),
                  "minimum fare" if b.min_fare_applied else None)
        c2.metric("Platform keeps", format_inr(s.platform_commission))
        c3.metric("Driver gets", format_inr(s.driver_total_payout))
        c4.metric("Platform net", format_inr(s.platform_net))

        with st.expander("Fare breakdown", expanded=True):
            st.dataframe(pd.DataFrame([
                {"Item": "Base fare", "₹": b.base_fare},
                {"Item": "Distance", "₹": b.distance_fare},
                {"Item": "Time", "₹": b.time_fare},
                {"Item": f"Surge ×{b.applied_surge_multiplier:g}", "₹": b.surge_amount},
                {"Item": "GST", "₹": b.gst_amount},
                {"Item": "Total (precise)", "₹": b.total_customer_pays},
            ]).round(2), use_container_width=True, hide_index=True)
            st.caption("Manual and scheduled surge never stack: the larger multiplier applies.")

        st.subheader("All vehicles, same ride")
        st.dataframe(pd.DataFrame([
            {
                "Vehicle": vq.vehicle_type,
                "Quoted": format_inr(vq.quote.quoted_total),
                "Commission %": f"{vq.commission_percent:g}%",
                "Platform": format_inr(vq.split.platform_commission),
                "Driver": format_inr(vq.split.driver_total_payout),
                "Driver share": f"{vq.driver_share_percent:.0f}%",
            }
            for vq in result.vehicle_quotes
        ]), use_container_width=True, hide_index=True)

        active_rate = next(r for r in rates if r.vehicle_type == result.simulated_vehicle_type)
        minutes_per_km = r_min / r_km if r_km > 0 else 3.0

        st.subheader("Fare vs distance")
        fig_curve = go.Figure()
        for rate in rates:
            xs, ys = fare_curve(rate, minutes_per_km=minutes_per_km, time_of_day=r_band)
            fig_curve.add_trace(go.Scatter(x=xs, y=ys, mode="lines", name=rate.vehicle_type))
        fig_curve.update_layout(height=320, margin=dict(l=10, r=10, t=30, b=10),
                                xaxis_title="km", yaxis_title="₹", template="plotly_dark")
        st.plotly_chart(fig_curve, use_container_width=True)

        st.subheader("What moves per-trip net (±10%)")
        sens = run_rate_sensitivity(active_rate, scenario.ride, scenario.policy)
        bars = list(reversed(sens.bars))
        fig_tornado = go.Figure()
        fig_tornado.add_trace(go.Bar(
            y=[bar.param_name for bar in bars],
            x=[bar.net_at_low - sens.base_net_per_trip for bar in bars],
            orientation="h", name="-10%", marker_color="#e17055",
        ))
        fig_tornado.add_trace(go.Bar(
            y=[bar.param_name for bar in bars],
            x=[bar.net_at_high - sens.base_net_per_trip for bar in bars],
            orientation="h", name="+10%", marker_color="#00b894",
        ))
        fig_tornado.update_layout(barmode="overlay", height=300, margin=dict(l=10, r=10, t=30, b=10),
                                  xaxis_title="Δ ₹ per trip", template="plotly_dark")
        st.plotly_chart(fig_tornado, use_container_width=True)

# ═══ Rates ════════════════════════════════════════════════════════════════
with rates_tab:
    st.header("Suggested rates")
    st.dataframe(pd.DataFrame(_suggestion_rows(result)), use_container_width=True, hide_index=True)
    with st.expander("How suggestions are computed"):
        st.markdown(
            "- Need per vehicle = (profit target + operating cost) × its share of trips\n"
            "- Break-even % = need / (avg fare × monthly trips), clamped to 5–25%\n"
            "- With buffer % = same with need × 1.2, clamped to 5–30%\n"
            "- Fare route spreads the missing commission over base fare (₹5 steps) "
            "or per km (₹0.5 steps)"
        )

    st.header("If you change just one thing")
    cols = st.columns(len(result.levers))
    for col, lever in zip(cols, result.levers):
        col.metric(lever.label, format_inr(lever.monthly_impact), lever.description)
