"""Fare computation and revenue projection engine for the ride-hailing ops dashboard."""

__version__ = "1.0.0"
