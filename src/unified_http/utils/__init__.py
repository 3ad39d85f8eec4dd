"""Utility helpers for unified-http."""

from unified_http.utils.timing import (
    HrTime,
    compression_ratio,
    elapsed_ms,
    hrtime,
    round_half_up,
)

__all__ = [
    "HrTime",
    "compression_ratio",
    "elapsed_ms",
    "hrtime",
    "round_half_up",
]
