"""Result models — engine output contracts."""

from fare_engine.models.results import (
    AggregateReport,
    AnalysisResult,
    CadenceRow,
    DailyPoint,
    FareBreakdown,
    FareQuote,
    LeverImpact,
    PayoutSplit,
    PeriodAggregate,
    RateSuggestion,
    RevenueGap,
    SensitivityResult,
    TornadoBar,
    VehicleQuote,
)

__all__ = [
    "AggregateReport",
    "AnalysisResult",
    "CadenceRow",
    "DailyPoint",
    "FareBreakdown",
    "FareQuote",
    "LeverImpact",
    "PayoutSplit",
    "PeriodAggregate",
    "RateSuggestion",
    "RevenueGap",
    "SensitivityResult",
    "TornadoBar",
    "VehicleQuote",
]
