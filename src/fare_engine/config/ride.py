"""What-if ride parameters — constructed per calculation, never persisted."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TimeOfDay = Literal["normal", "peak", "night"]


class RideParameters(BaseModel):
    """Distance, duration and time-of-day band of one priced ride."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    distance_km: float = Field(default=5.0, gt=0, description="Trip distance (km)")
    duration_min: float = Field(default=15.0, ge=0, description="Trip duration (minutes)")
    time_of_day: TimeOfDay = Field(
        default="normal",
        description="'normal', 'peak' (peak_multiplier applies) or 'night' (night_multiplier applies)",
    )
