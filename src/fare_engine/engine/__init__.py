"""Engine — pure fare, payout and aggregation logic.

The orchestrator (``fare_engine.engine.orchestrator``) also wires in the
finance layer and is imported from its module directly.
"""

from fare_engine.engine.fare import (
    compute_fare_breakdown,
    quote_fare,
    round_to_unit,
    select_surge_multiplier,
)
from fare_engine.engine.payout import split_payout
from fare_engine.engine.aggregate import aggregate_trips, build_rate_index, summarise

__all__ = [
    "compute_fare_breakdown",
    "quote_fare",
    "round_to_unit",
    "select_surge_multiplier",
    "split_payout",
    "aggregate_trips",
    "build_rate_index",
    "summarise",
]
