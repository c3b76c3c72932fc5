"""Revenue target — operator-supplied profit goal and running cost."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RevenueTarget(BaseModel):
    """Monthly profit target and monthly operating cost (servers, tooling)."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    monthly_profit_target: float = Field(default=50_000.0, ge=0, description="Platform profit goal per month (₹)")
    monthly_operating_cost: float = Field(
        default=2_000.0, ge=0,
        description="Fixed running cost per month (₹) — hosting, tools. Deducted in cadence rows.",
    )
