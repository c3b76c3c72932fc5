"""Trip records as delivered by the backend's trip listing."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class PaymentInfo(BaseModel):
    """Payment state attached to a trip."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    collected: bool = False
    method: str | None = None

    @field_validator("collected", mode="before")
    @classmethod
    def _null_collected(cls, v: Any) -> Any:
        return False if v is None else v


class TripRecord(BaseModel):
    """One trip.  Only ``status == "completed"`` trips feed the aggregates.

    The backend sends ``null`` for fields it has not filled in yet; those read
    as their defaults instead of failing the whole snapshot.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str | None = Field(default=None, alias="_id")
    status: str = Field(default="completed", description="Backend trip status")
    trip_type: str | None = Field(default=None, alias="type", description="short / long / parcel")
    vehicle_type: str = Field(default="unknown", description="Vehicle class the trip was served with")
    fare: float = Field(default=0.0, ge=0, description="Quoted fare (₹)")
    final_fare: float | None = Field(default=None, ge=0, description="Realized fare (₹), preferred when present")
    payment: PaymentInfo = Field(default_factory=PaymentInfo)
    created_at: datetime

    @field_validator("status", "vehicle_type", "fare", "payment", mode="before")
    @classmethod
    def _null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return v

    @property
    def realized_fare(self) -> float:
        return self.final_fare if self.final_fare is not None else self.fare

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def vehicle_key(self) -> str:
        return self.vehicle_type.strip().lower() or "unknown"
