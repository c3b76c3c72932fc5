"""Finance — target projection, rate suggestion and sensitivity."""
