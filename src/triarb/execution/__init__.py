"""Order execution: balance-checked submission and cycle trading."""

from triarb.execution.driver import ExecutionDriver, RetryPolicy
from triarb.execution.trader import TriangleTrader


__all__ = ["ExecutionDriver", "RetryPolicy", "TriangleTrader"]
