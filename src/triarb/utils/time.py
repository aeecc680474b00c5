"""
Time utilities.

Wall-clock millisecond stamps for cycles and trade records, and a
monotonic microsecond timer for scan and simulation latency.
"""

import time


def get_timestamp_ms() -> int:
    """Current Unix time in milliseconds, the unit exchanges stamp data with."""
    return time.time_ns() // 1_000_000


def get_monotonic_us() -> int:
    """Monotonic clock reading in microseconds."""
    return time.perf_counter_ns() // 1000


class LatencyTimer:
    """
    Context manager measuring a block in microseconds.

    Example:
        >>> with LatencyTimer() as timer:
        ...     await ranker.rank(snapshot, candidates, "binance")
        >>> timer.latency_us
    """

    __slots__ = ("_start_us", "latency_us")

    def __init__(self) -> None:
        self._start_us = 0
        self.latency_us = 0

    def __enter__(self) -> "LatencyTimer":
        self._start_us = get_monotonic_us()
        return self

    def __exit__(self, *args: object) -> None:
        self.latency_us = get_monotonic_us() - self._start_us


def format_duration_us(duration_us: int) -> str:
    """
    Format a microsecond duration for logs.

    >>> format_duration_us(1500)
    '1.50ms'
    """
    if duration_us < 1000:
        return f"{duration_us}μs"
    if duration_us < 1_000_000:
        return f"{duration_us / 1000:.2f}ms"
    return f"{duration_us / 1_000_000:.2f}s"
