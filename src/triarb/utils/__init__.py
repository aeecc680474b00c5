"""Utility functions for the arbitrage engine."""

from triarb.utils.math import (
    format_rate,
    precision_places,
    quantize,
    to_decimal,
    truncate,
    truncate_to_step,
)
from triarb.utils.time import (
    LatencyTimer,
    format_duration_us,
    get_monotonic_us,
    get_timestamp_ms,
)


__all__ = [
    "LatencyTimer",
    "format_duration_us",
    "format_rate",
    "get_monotonic_us",
    "get_timestamp_ms",
    "precision_places",
    "quantize",
    "to_decimal",
    "truncate",
    "truncate_to_step",
]
