"""Telemetry: logging, metrics and rank sinks."""

from triarb.telemetry.logger import AsyncLogger, setup_logging
from triarb.telemetry.metrics import MetricsCollector, ScanStats
from triarb.telemetry.reporter import JsonlRankWriter, LogRankReporter


__all__ = [
    "AsyncLogger",
    "JsonlRankWriter",
    "LogRankReporter",
    "MetricsCollector",
    "ScanStats",
    "setup_logging",
]
