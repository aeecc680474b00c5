"""
Metrics collection for scan monitoring.

Tracks scan latencies, counters and execution statistics in memory.
"""

import time
from collections import deque
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p99_us: int = 0
    count: int = 0


@dataclass
class ScanStats:
    """Outcome counts across scans."""

    scans: int = 0
    scans_skipped: int = 0
    scans_failed: int = 0
    candidates: int = 0
    ranks: int = 0
    simulations_profitable: int = 0
    executions: int = 0
    best_rate: Decimal = Decimal(0)

    @property
    def rank_ratio(self) -> float:
        """Share of candidates that survived ranking."""
        return self.ranks / self.candidates if self.candidates else 0.0


class MetricsCollector:
    """
    Collects and aggregates scan metrics.

    Features:
    - Rolling window latency tracking
    - Counter-based event tracking
    """

    def __init__(self, latency_window_size: int = 1000) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep for latency stats.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._scan_stats = ScanStats()
        self._start_time = time.time()

    def record_latency(self, name: str, latency_us: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (e.g., "scan", "rank").
            latency_us: Latency in microseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)
        self._latencies[name].append(latency_us)

    def increment_counter(self, name: str, value: int = 1) -> None:
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def record_scan(self, candidates: int, ranks: int, best_rate: Decimal | None = None) -> None:
        """
        Record a completed scan.

        Args:
            candidates: Cycles produced by the candidate source.
            ranks: Cycles that survived ranking.
            best_rate: Rate of the top rank, if any.
        """
        self._scan_stats.scans += 1
        self._scan_stats.candidates += candidates
        self._scan_stats.ranks += ranks
        if best_rate is not None and best_rate > self._scan_stats.best_rate:
            self._scan_stats.best_rate = best_rate

    def record_skipped_scan(self) -> None:
        self._scan_stats.scans_skipped += 1

    def record_failed_scan(self) -> None:
        self._scan_stats.scans_failed += 1

    def record_trade(self, profitable: bool, executed: bool) -> None:
        """Record what the trader did with the top rank."""
        if profitable:
            self._scan_stats.simulations_profitable += 1
        if executed:
            self._scan_stats.executions += 1

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get latency statistics for a metric.

        Args:
            name: Metric name.

        Returns:
            LatencyStats with aggregated values.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_us=sorted_samples[0],
            max_us=sorted_samples[-1],
            avg_us=sum(sorted_samples) / n,
            p50_us=sorted_samples[n // 2],
            p99_us=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    @property
    def scan_stats(self) -> ScanStats:
        return self._scan_stats

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self._start_time

    def to_dict(self) -> dict[str, object]:
        """
        Export all metrics as a dict.

        Returns:
            Dict representation of all metrics.
        """
        stats = self._scan_stats
        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                name: {
                    "min": s.min_us,
                    "max": s.max_us,
                    "avg": s.avg_us,
                    "p50": s.p50_us,
                    "p99": s.p99_us,
                    "count": s.count,
                }
                for name, s in ((n, self.get_latency_stats(n)) for n in self._latencies)
            },
            "scans": {
                "scans": stats.scans,
                "skipped": stats.scans_skipped,
                "failed": stats.scans_failed,
                "candidates": stats.candidates,
                "ranks": stats.ranks,
                "profitable": stats.simulations_profitable,
                "executions": stats.executions,
                "best_rate": str(stats.best_rate),
            },
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._counters.clear()
        self._scan_stats = ScanStats()
        self._start_time = time.time()
