"""
High-resolution timing and response statistics.

Timestamps are ``(seconds, nanoseconds)`` pairs taken from the monotonic
performance counter.
"""

from __future__ import annotations

import math
import time

from unified_http.config import NANOSECONDS_IN_SECOND

HrTime = tuple[int, int]


def hrtime() -> HrTime:
    """Current high-resolution time as a (seconds, nanoseconds) pair."""
    seconds, nanos = divmod(time.perf_counter_ns(), NANOSECONDS_IN_SECOND)
    return seconds, nanos


def _to_seconds(stamp: HrTime) -> float:
    return stamp[0] + stamp[1] / NANOSECONDS_IN_SECOND


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def elapsed_ms(start: HrTime, end: HrTime) -> int:
    """Milliseconds between two timestamps, rounded to the nearest millisecond."""
    return round_half_up((_to_seconds(end) - _to_seconds(start)) * 1000)


def compression_ratio(raw_bytes: int, decoded_length: int) -> int:
    """Percentage saved on the wire: ``100 * (1 - raw / decoded)``, rounded.

    Zero for uncompressed bodies. An empty body yields 0.
    """
    if decoded_length <= 0:
        return 0
    return round_half_up(100.0 - (raw_bytes / decoded_length) * 100.0)
