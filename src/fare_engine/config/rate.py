"""Fare rate configuration — one record per vehicle class."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class RateConfig(BaseModel):
    """Pricing and payout rules for one vehicle type.

    Accepts the backend's camelCase keys (``baseFare``, ``perKm`` ...) as well
    as snake_case names.  Optional fields that the backend may omit are
    modelled with explicit defaults, so no call site has to coalesce them;
    an explicit ``null`` for one of them reads as the default too.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str | None = Field(default=None, alias="_id", description="Backend record id")
    vehicle_type: str = Field(default="car", min_length=1, description="Vehicle class identifier (bike, auto, car ...)")
    city: str | None = Field(default=None, description="City the rate applies to (None = all)")
    category: str | None = Field(default=None, description="Optional product category")

    # --- Fare build-up ---
    base_fare: float = Field(default=30.0, ge=0, description="Flat fare charged on every ride (₹)")
    per_km: float = Field(default=8.0, ge=0, description="Distance charge (₹/km)")
    per_min: float = Field(default=0.0, ge=0, description="Time charge (₹/min)")
    min_fare: float = Field(
        default=0.0, ge=0,
        description="Floor on the tax-inclusive total (₹). May exceed the unsurged subtotal.",
    )

    # --- Surge ---
    manual_surge: float = Field(default=1.0, ge=0, description="Operator override multiplier")
    peak_multiplier: float = Field(default=1.0, ge=0, description="Scheduled multiplier for peak hours")
    night_multiplier: float = Field(default=1.0, ge=0, description="Scheduled multiplier for night hours")

    # --- Split & tax ---
    platform_fee_percent: float = Field(
        default=10.0, ge=0, le=100,
        description="Commission retained by the platform (% of the fare). 0 = free plan.",
    )
    gst_percent: float = Field(default=0.0, ge=0, description="Tax applied on the surged subtotal (%)")

    # --- Driver rewards ---
    per_ride_incentive: float = Field(
        default=0.0, ge=0,
        description="Flat driver bonus per ride (₹), funded on top of the split",
    )
    per_ride_coins: float = Field(default=0.0, ge=0, description="Non-monetary reward units per ride")

    is_active: bool = Field(default=True, description="Inactive rates are still priced, the flag is informational")

    @property
    def key(self) -> str:
        """Case-insensitive lookup key for matching trips to this rate."""
        return self.vehicle_type.strip().lower()

    @field_validator(
        "per_min", "min_fare",
        "manual_surge", "peak_multiplier", "night_multiplier",
        "gst_percent", "per_ride_incentive", "per_ride_coins", "is_active",
        mode="before",
    )
    @classmethod
    def _null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return cls.model_fields[info.field_name].default
        return v
