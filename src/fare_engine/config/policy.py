"""Engine policy — the tunable constants behind fares, splits and suggestions.

Nothing here is fetched from the backend; these are operator knobs with
defaults matching the live dashboard's behaviour.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PolicyConfig(BaseModel):
    """Guardrails and constants used across the engine."""

    model_config = ConfigDict(frozen=True)

    # --- Payment processor ---
    processor_fee_percent: float = Field(
        default=2.0, ge=0, le=100,
        description="Payment-gateway cost as % of the platform commission. "
                    "Real fees vary by payment method; 2% models UPI.",
    )

    # --- Rounding at the presentation boundary ---
    quote_rounding_unit: float = Field(default=5.0, gt=0, description="Quoted totals round to this unit (₹)")
    base_fare_rounding_unit: float = Field(default=5.0, gt=0, description="Suggested base fares round to this unit (₹)")
    per_km_rounding_unit: float = Field(default=0.5, gt=0, description="Suggested per-km rates round to this unit (₹)")

    # --- Fallbacks ---
    default_platform_fee_percent: float = Field(
        default=10.0, ge=0, le=100,
        description="Commission applied to trips whose vehicle type has no rate config",
    )
    fallback_cut_per_trip: float = Field(
        default=20.0, gt=0,
        description="Per-trip platform net used when neither trip history nor the "
                    "simulated ride give a positive figure (₹)",
    )

    # --- Suggestion guardrails ---
    break_even_commission_min: float = Field(default=5.0, ge=0, le=100)
    break_even_commission_max: float = Field(default=25.0, ge=0, le=100)
    profit_commission_min: float = Field(default=5.0, ge=0, le=100)
    profit_commission_max: float = Field(default=30.0, ge=0, le=100)
    profit_buffer: float = Field(
        default=1.2, ge=1.0,
        description="Multiplier on the allocated need for the profit commission (1.2 = 20% above break-even)",
    )
    min_reference_distance_km: float = Field(
        default=3.0, gt=0,
        description="Lower bound on the trip length used to spread a fare increase over per-km",
    )
    good_status_ratio: float = Field(default=1.05, gt=0, description="Commission / need at or above → 'good'")
    ok_status_ratio: float = Field(default=0.85, gt=0, description="Commission / need at or above → 'ok'")

    # --- Calendar ---
    days_per_month: int = Field(default=30, ge=1, description="Month length used to scale targets and volumes")
    daily_series_days: int = Field(default=14, ge=1, description="Days shown in the daily earnings series")
    utc_offset_minutes: int = Field(
        default=330, ge=-720, le=840,
        description="Local offset for day boundaries (330 = IST, no DST)",
    )

    @model_validator(mode="after")
    def _check_bands(self) -> "PolicyConfig":
        if self.break_even_commission_min > self.break_even_commission_max:
            raise ValueError(
                f"break_even_commission_min ({self.break_even_commission_min}) must be "
                f"<= break_even_commission_max ({self.break_even_commission_max})"
            )
        if self.profit_commission_min > self.profit_commission_max:
            raise ValueError(
                f"profit_commission_min ({self.profit_commission_min}) must be "
                f"<= profit_commission_max ({self.profit_commission_max})"
            )
        if self.ok_status_ratio > self.good_status_ratio:
            raise ValueError("ok_status_ratio must not exceed good_status_ratio")
        return self
